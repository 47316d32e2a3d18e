"""
Security Audit API - account security state machine dan audit pipeline.

Fitur utama:
- Security event log (append-only)
- Automatic lockout setelah beberapa login gagal
- Recovery code workflow via email
- Admin action ledger
- Daily security report dengan deteksi IP mencurigakan

Built with FastAPI, SQLAlchemy, and PostgreSQL.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
]
