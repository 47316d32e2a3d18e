"""
Daily report schemas untuk Security Audit API.
Report tidak disimpan; dihitung ulang setiap kali diminta.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.security_event import SecurityEventResponse


class SuccessfulLogin(BaseModel):
    username: str
    timestamp: datetime
    ip_address: str
    user_agent: str


class FailedLoginSummary(BaseModel):
    account_id: Optional[UUID]
    username: str
    attempts: int
    is_active: bool = Field(..., description="Snapshot status akun saat report dibuat")


class VerificationOutcome(BaseModel):
    """Event verifikasi terakhir untuk satu akun."""
    account_id: Optional[UUID]
    username: str
    timestamp: datetime
    ip_address: str


class MultipleErrorsAccount(BaseModel):
    account_id: Optional[UUID]
    username: str
    error_count: int


class SuspiciousIP(BaseModel):
    ip_address: str
    attempts: int
    distinct_user_agents: int
    user_agents: List[str]


class DailyReport(BaseModel):
    """
    Statistik keamanan untuk satu hari [window_start, window_end).
    locked_accounts dan active_accounts adalah snapshot global, bukan per hari.
    """
    report_date: str
    window_start: datetime
    window_end: datetime
    generated_at: datetime

    total_events: int
    events: List[SecurityEventResponse]

    successful_logins: List[SuccessfulLogin]
    failed_logins: List[FailedLoginSummary]

    approved_verifications: List[VerificationOutcome]
    failed_verifications: List[VerificationOutcome]

    multiple_errors_accounts: List[MultipleErrorsAccount]
    multiple_errors_count: int

    suspicious_ips: List[SuspiciousIP]

    locked_accounts: int
    active_accounts: int

    accounts_created: int
