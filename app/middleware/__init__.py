"""
Middleware package untuk Security Audit API.
Berisi middleware untuk request logging dan error handling.
"""

from app.middleware.logging import LoggingMiddleware
from app.middleware.error_handler import (
    ErrorHandlerMiddleware,
    security_audit_exception_handler
)

__all__ = [
    "LoggingMiddleware",
    "ErrorHandlerMiddleware",
    "security_audit_exception_handler"
]
