"""
API module untuk Security Audit API.
Berisi endpoints dan dependencies untuk API.
"""

from app.api.v1 import auth, admin, health

__all__ = ["auth", "admin", "health"]
