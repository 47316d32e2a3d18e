"""
Daily report service untuk Security Audit API.
Agregasi event keamanan satu hari menjadi statistik dan sinyal anomali.
"""

from collections import defaultdict, OrderedDict
from datetime import datetime, timedelta, time, timezone
from typing import Dict, List, Optional, Tuple, Union
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.constants import (
    SecurityEventType,
    AdminActionType,
    DefaultValue
)
from app.models.security_event import SecurityEvent
from app.schemas.report import (
    DailyReport,
    SuccessfulLogin,
    FailedLoginSummary,
    VerificationOutcome,
    MultipleErrorsAccount,
    SuspiciousIP
)
from app.schemas.security_event import SecurityEventResponse
from app.services.account import AccountService
from app.services.admin_action import AdminActionService
from app.services.security_event import SecurityEventService

logger = logging.getLogger(__name__)


def day_window(now: datetime, tz) -> Tuple[datetime, datetime]:
    """
    Window [awal hari ini, awal hari besok) di timezone `tz`, dikembalikan dalam UTC.

    Args:
        now: Waktu referensi (naive dianggap UTC)
        tz: tzinfo untuk batas hari

    Returns:
        Tuple (start, end) timezone-aware UTC
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local_day = now.astimezone(tz).date()
    start = datetime.combine(local_day, time.min, tzinfo=tz)
    end = datetime.combine(local_day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def _username(event: SecurityEvent) -> str:
    return event.username or DefaultValue.UNKNOWN_USER


def _account_key(event: SecurityEvent) -> Union[UUID, int]:
    """
    Kunci grouping per akun. Event tanpa akun (akun dihapus atau event
    manual) tidak digabung satu sama lain, jadi kuncinya se_id.
    """
    return event.se_account_id if event.se_account_id is not None else event.se_id


class ReportService:
    """
    Service class untuk daily security report.
    Read-only: tidak ada yang ditulis ke database.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize report service.

        Args:
            db: Database session
        """
        self.db = db
        self.account_service = AccountService(db)
        self.event_service = SecurityEventService(db)
        self.admin_action_service = AdminActionService(db)

    async def generate_daily_report(self, now: Optional[datetime] = None) -> DailyReport:
        """
        Hitung report untuk hari yang memuat `now`.

        Args:
            now: Waktu referensi (default: sekarang)

        Returns:
            DailyReport
        """
        generated_at = datetime.now(timezone.utc)
        tz = settings.report_tzinfo
        start, end = day_window(now or generated_at, tz)

        events = await self.event_service.events_in_window(start, end)

        failed_logins = await self._failed_logins(events)
        approved, failed_verifications = self._latest_verifications(events)
        multiple_errors = self._multiple_errors(events)

        created = await self.admin_action_service.by_kind_in_window(
            AdminActionType.CREATE_USER, start, end
        )

        report = DailyReport(
            report_date=start.astimezone(tz).date().isoformat(),
            window_start=start,
            window_end=end,
            generated_at=generated_at,
            total_events=len(events),
            events=[SecurityEventResponse.model_validate(e) for e in events],
            successful_logins=self._successful_logins(events),
            failed_logins=failed_logins,
            approved_verifications=approved,
            failed_verifications=failed_verifications,
            multiple_errors_accounts=multiple_errors,
            multiple_errors_count=len(multiple_errors),
            suspicious_ips=self._suspicious_ips(events),
            locked_accounts=await self.account_service.count_by_active(False),
            active_accounts=await self.account_service.count_by_active(True),
            accounts_created=len(created)
        )

        logger.info(
            f"Daily report {report.report_date}: {report.total_events} events, "
            f"{len(report.suspicious_ips)} suspicious IPs, {report.multiple_errors_count} accounts with multiple errors"
        )
        return report

    @staticmethod
    def _successful_logins(events: List[SecurityEvent]) -> List[SuccessfulLogin]:
        return [
            SuccessfulLogin(
                username=_username(e),
                timestamp=e.se_created_at,
                ip_address=e.se_ip_address,
                user_agent=e.se_user_agent
            )
            for e in events
            if e.se_type == SecurityEventType.LOGIN_SUCCESSFUL
        ]

    async def _failed_logins(self, events: List[SecurityEvent]) -> List[FailedLoginSummary]:
        """LOGIN_FAILED per akun, dengan snapshot status active saat ini."""
        attempts: Dict[Union[UUID, int], int] = OrderedDict()
        first: Dict[Union[UUID, int], SecurityEvent] = {}

        for e in events:
            if e.se_type != SecurityEventType.LOGIN_FAILED:
                continue
            key = _account_key(e)
            attempts[key] = attempts.get(key, 0) + 1
            first.setdefault(key, e)

        status = await self.account_service.active_status_map(
            [e.se_account_id for e in first.values() if e.se_account_id is not None]
        )

        return [
            FailedLoginSummary(
                account_id=first[key].se_account_id,
                username=_username(first[key]),
                attempts=count,
                is_active=status.get(first[key].se_account_id, False)
            )
            for key, count in attempts.items()
        ]

    @staticmethod
    def _latest_verifications(
        events: List[SecurityEvent]
    ) -> Tuple[List[VerificationOutcome], List[VerificationOutcome]]:
        """
        Ambil hanya event verifikasi terakhir per akun.
        Events sudah urut naik, jadi event terakhir yang ditemui menang.
        """
        latest: Dict[Union[UUID, int], SecurityEvent] = {}
        for e in events:
            if e.is_verification:
                latest[_account_key(e)] = e

        approved, failed = [], []
        for e in latest.values():
            outcome = VerificationOutcome(
                account_id=e.se_account_id,
                username=_username(e),
                timestamp=e.se_created_at,
                ip_address=e.se_ip_address
            )
            if e.se_type == SecurityEventType.CODE_VERIFICATION_SUCCESSFUL:
                approved.append(outcome)
            else:
                failed.append(outcome)
        return approved, failed

    @staticmethod
    def _multiple_errors(events: List[SecurityEvent]) -> List[MultipleErrorsAccount]:
        """Akun dengan error lebih dari threshold. Event tanpa akun tidak dihitung."""
        errors: Dict[UUID, int] = OrderedDict()
        names: Dict[UUID, str] = {}
        for e in events:
            if e.is_error and e.se_account_id is not None:
                errors[e.se_account_id] = errors.get(e.se_account_id, 0) + 1
                names[e.se_account_id] = _username(e)

        return [
            MultipleErrorsAccount(account_id=account_id, username=names[account_id], error_count=count)
            for account_id, count in errors.items()
            if count > settings.MULTIPLE_ERRORS_THRESHOLD
        ]

    @staticmethod
    def _suspicious_ips(events: List[SecurityEvent]) -> List[SuspiciousIP]:
        attempts: Dict[str, int] = defaultdict(int)
        user_agents: Dict[str, List[str]] = defaultdict(list)

        for e in events:
            attempts[e.se_ip_address] += 1
            if e.se_user_agent not in user_agents[e.se_ip_address]:
                user_agents[e.se_ip_address].append(e.se_user_agent)

        suspicious = []
        for ip, count in attempts.items():
            agents = user_agents[ip]
            if count > settings.SUSPICIOUS_IP_MAX_ATTEMPTS or len(agents) > settings.SUSPICIOUS_IP_MAX_USER_AGENTS:
                suspicious.append(
                    SuspiciousIP(
                        ip_address=ip,
                        attempts=count,
                        distinct_user_agents=len(agents),
                        user_agents=agents
                    )
                )
        return suspicious
