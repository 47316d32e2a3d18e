"""
Konstanta yang digunakan di seluruh aplikasi Security Audit API.
"""

from enum import Enum


class SecurityEventType(str, Enum):
    """Jenis-jenis event keamanan yang dicatat di security event log."""
    LOGIN_SUCCESSFUL = "LOGIN_SUCCESSFUL"
    LOGIN_FAILED = "LOGIN_FAILED"
    CODE_VERIFICATION_FAILED = "CODE_VERIFICATION_FAILED"
    CODE_VERIFICATION_SUCCESSFUL = "CODE_VERIFICATION_SUCCESSFUL"
    USER_BLOCKED = "USER_BLOCKED"
    USER_UNBLOCKED = "USER_UNBLOCKED"
    PASSWORD_CHANGED = "PASSWORD_CHANGED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    ACCESS_DENIED = "ACCESS_DENIED"
    SUSPICIOUS_ACTIVITY = "SUSPICIOUS_ACTIVITY"
    MULTIPLE_FAILED_ATTEMPTS = "MULTIPLE_FAILED_ATTEMPTS"
    RESET_PASSWORD = "RESET_PASSWORD"


class AdminActionType(str, Enum):
    """Aksi administratif yang dicatat di admin action ledger."""
    BLOCK_USER = "BLOCK_USER"
    UNBLOCK_USER = "UNBLOCK_USER"
    CREATE_USER = "CREATE_USER"
    DELETE_USER = "DELETE_USER"
    MODIFY_USER = "MODIFY_USER"
    SEND_REPORT = "SEND_REPORT"


class AccountRole(str, Enum):
    """Role akun."""
    ADMIN = "admin"
    USER = "user"


class LoginFailureReason(str, Enum):
    """Alasan kegagalan login (internal, tidak dikirim ke client)."""
    UNKNOWN_USER = "UNKNOWN_USER"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
    ACCOUNT_AUTO_LOCKED = "ACCOUNT_AUTO_LOCKED"


# Event yang dihitung sebagai "error" untuk deteksi multiple errors di report
ERROR_EVENT_TYPES = (
    SecurityEventType.LOGIN_FAILED,
    SecurityEventType.CODE_VERIFICATION_FAILED,
)

VERIFICATION_EVENT_TYPES = (
    SecurityEventType.CODE_VERIFICATION_SUCCESSFUL,
    SecurityEventType.CODE_VERIFICATION_FAILED,
)


# Response Messages
class ResponseMessage:
    """Pesan response standar."""
    # Success messages
    LOGIN_SUCCESS = "Login successful"
    RECOVERY_REQUESTED = "If the account exists, a recovery code has been sent"
    CODE_VERIFIED = "Code verified successfully"
    REPORT_SENT = "Daily report sent"
    ACCOUNT_LOCKED = "Account locked"
    ACCOUNT_UNLOCKED = "Account unlocked"
    ACCOUNT_CREATED = "Account created"
    ACCOUNT_DELETED = "Account deleted"

    # Error messages
    INVALID_CREDENTIALS = "Invalid credentials"
    INVALID_CODE = "Invalid code"
    CODE_EXPIRED = "Code expired"
    CODE_WITHOUT_EXPIRY = "Code has no expiry on file"
    ACCOUNT_NOT_FOUND = "Account not found"
    ADMIN_NOT_FOUND = "Admin not found"
    USERNAME_ALREADY_EXISTS = "Username already taken"
    DELIVERY_FAILED = "Mail delivery failed"


# Default Values
class DefaultValue:
    """Nilai default untuk berbagai setting."""
    PAGINATION_PAGE_SIZE = 20
    MAX_PAGINATION_SIZE = 100
    RECENT_EVENTS_LIMIT = 10
    UNKNOWN_USER = "Unknown user"
    UNKNOWN = "unknown"
