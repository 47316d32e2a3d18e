"""
Services module untuk Security Audit API.
Berisi business logic layer yang terpisah dari presentation dan data layers.
"""

from app.services.account import AccountService
from app.services.security_event import SecurityEventService
from app.services.auth import AuthService
from app.services.recovery import RecoveryService
from app.services.admin_action import AdminActionService
from app.services.report import ReportService
from app.services.admin import AdminService
from app.services.email import EmailService

__all__ = [
    "AccountService",
    "SecurityEventService",
    "AuthService",
    "RecoveryService",
    "AdminActionService",
    "ReportService",
    "AdminService",
    "EmailService"
]
