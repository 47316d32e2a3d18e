"""
Core module untuk Security Audit API.
Berisi komponen inti aplikasi seperti konfigurasi, keamanan, exceptions, dan konstanta.
"""

from app.core.config import settings
from app.core.exceptions import (
    SecurityAuditException,
    AuthenticationError,
    AuthorizationError,
    ValidationError,
    NotFoundError,
    ConflictError,
    RateLimitError,
    TokenError,
    DeliveryFailureError,
    StorageError
)

__all__ = [
    "settings",
    "SecurityAuditException",
    "AuthenticationError",
    "AuthorizationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "TokenError",
    "DeliveryFailureError",
    "StorageError"
]
