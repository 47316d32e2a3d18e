"""
Custom exceptions untuk Security Audit API.
Semua custom exceptions harus inherit dari base exceptions ini.
"""

from typing import Optional, Dict, Any

from app.core.constants import LoginFailureReason, ResponseMessage


class SecurityAuditException(Exception):
    """Base exception untuk semua custom exceptions di Security Audit API."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code
            details: Additional error details
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(SecurityAuditException):
    """Exception untuk error autentikasi."""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=401, details=details)


class AuthorizationError(SecurityAuditException):
    """Exception untuk error otorisasi."""

    def __init__(self, message: str = "Permission denied", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=403, details=details)


class ValidationError(SecurityAuditException):
    """Exception untuk error validasi data."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=422, details=details)


class NotFoundError(SecurityAuditException):
    """Exception untuk resource tidak ditemukan."""

    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=404, details=details)


class ConflictError(SecurityAuditException):
    """Exception untuk konflik data (misal: duplicate entry)."""

    def __init__(self, message: str = "Resource conflict", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=409, details=details)


class RateLimitError(SecurityAuditException):
    """Exception untuk rate limit exceeded."""

    def __init__(self, message: str = "Rate limit exceeded", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=429, details=details)


class TokenError(SecurityAuditException):
    """Exception untuk error terkait token."""

    def __init__(self, message: str = "Invalid token", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=401, details=details)


class LoginFailedException(AuthenticationError):
    """
    Base untuk semua kegagalan login.

    Pesan publik selalu sama supaya client tidak bisa membedakan username
    yang tidak ada, password salah, atau akun terkunci. Cabang internal
    disimpan di `reason` untuk logging.
    """

    reason: LoginFailureReason = LoginFailureReason.INVALID_CREDENTIALS

    def __init__(self, message: str = ResponseMessage.INVALID_CREDENTIALS):
        super().__init__(message)


class InvalidCredentialsException(LoginFailedException):
    """Exception untuk username tidak dikenal atau password salah."""

    def __init__(
        self,
        message: str = ResponseMessage.INVALID_CREDENTIALS,
        reason: LoginFailureReason = LoginFailureReason.INVALID_CREDENTIALS
    ):
        super().__init__(message)
        self.reason = reason


class AccountLockedException(LoginFailedException):
    """Exception untuk akun yang sudah terkunci sebelum percobaan login."""

    reason = LoginFailureReason.ACCOUNT_LOCKED


class AccountAutoLockedException(LoginFailedException):
    """Exception untuk akun yang baru saja dikunci otomatis oleh lockout."""

    reason = LoginFailureReason.ACCOUNT_AUTO_LOCKED

    def __init__(self, message: str = ResponseMessage.INVALID_CREDENTIALS, failed_attempts: int = 0):
        super().__init__(message)
        self.failed_attempts = failed_attempts


class ExpiredTokenException(TokenError):
    """Exception untuk token yang sudah expired."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message, details={"expired": True})


class DeliveryFailureError(SecurityAuditException):
    """Exception untuk kegagalan pengiriman email."""

    def __init__(self, message: str = ResponseMessage.DELIVERY_FAILED, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=502, details=details)


class ServiceUnavailableException(SecurityAuditException):
    """Exception untuk service yang tidak tersedia."""

    def __init__(self, message: str = "Service temporarily unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=503, details=details)


class StorageError(ServiceUnavailableException):
    """Exception untuk kegagalan storage (database)."""

    def __init__(self, message: str = "Storage temporarily unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)
