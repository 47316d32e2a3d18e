"""
Schemas module untuk Security Audit API.
Berisi semua Pydantic schemas untuk request/response validation.
"""

from app.schemas.auth import (
    LoginResponse,
    RecoveryRequest,
    RecoveryAck,
    VerifyCodeRequest,
    VerificationResult
)
from app.schemas.account import (
    AccountCreate,
    AccountResponse,
    AccountMonitorEntry
)
from app.schemas.security_event import (
    SecurityEventCreate,
    SecurityEventResponse,
    SecurityEventFilter,
    SecurityEventListResponse
)
from app.schemas.admin_action import AdminActionResponse
from app.schemas.report import DailyReport
from app.schemas.response import (
    MessageResponse,
    ErrorResponse,
    HealthCheckResponse
)

__all__ = [
    "LoginResponse",
    "RecoveryRequest",
    "RecoveryAck",
    "VerifyCodeRequest",
    "VerificationResult",
    "AccountCreate",
    "AccountResponse",
    "AccountMonitorEntry",
    "SecurityEventCreate",
    "SecurityEventResponse",
    "SecurityEventFilter",
    "SecurityEventListResponse",
    "AdminActionResponse",
    "DailyReport",
    "MessageResponse",
    "ErrorResponse",
    "HealthCheckResponse"
]
