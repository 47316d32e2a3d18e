"""
Models module untuk Security Audit API.
Berisi semua SQLAlchemy models untuk database.
"""

from app.models.account import Account
from app.models.security_event import SecurityEvent
from app.models.admin_action import AdminAction

__all__ = [
    "Account",
    "SecurityEvent",
    "AdminAction"
]
