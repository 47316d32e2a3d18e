"""
Tests for the daily report aggregator.
"""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from app.core.config import settings
from app.core.constants import SecurityEventType, AccountRole, DefaultValue
from app.services.account import AccountService
from app.services.admin import AdminService
from app.services.report import ReportService, day_window


DAY = datetime(2024, 3, 1, tzinfo=timezone.utc)
NOON = DAY + timedelta(hours=12)


@pytest.mark.unit
class TestDayWindow:
    """Test day_window boundaries."""

    def test_utc_day(self):
        start, end = day_window(NOON, ZoneInfo("UTC"))

        assert start == DAY
        assert end == DAY + timedelta(days=1)

    def test_local_day_is_converted_to_utc(self):
        """20:00 UTC is already the next day in Jakarta (UTC+7)."""
        start, end = day_window(DAY + timedelta(hours=20), ZoneInfo("Asia/Jakarta"))

        assert start == datetime(2024, 3, 1, 17, tzinfo=timezone.utc)
        assert end == datetime(2024, 3, 2, 17, tzinfo=timezone.utc)

    def test_naive_now_is_treated_as_utc(self):
        start, _ = day_window(datetime(2024, 3, 1, 12), ZoneInfo("UTC"))

        assert start == DAY


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.requires_db
class TestDailyReport:
    """Test ReportService.generate_daily_report."""

    async def _bob(self, db_session):
        return await AccountService(db_session).create(username="bob", password="Password123!")

    async def test_bob_with_five_errors_is_flagged(self, db_session, add_event):
        """3 LOGIN_FAILED + 2 CODE_VERIFICATION_FAILED exceed the threshold of 3."""
        bob = await self._bob(db_session)
        for i in range(3):
            await add_event(SecurityEventType.LOGIN_FAILED, bob.a_id, DAY + timedelta(hours=1, minutes=i))
        for i in range(2):
            await add_event(SecurityEventType.CODE_VERIFICATION_FAILED, bob.a_id, DAY + timedelta(hours=2, minutes=i))

        report = await ReportService(db_session).generate_daily_report(now=NOON)

        assert report.multiple_errors_count == 1
        entry = report.multiple_errors_accounts[0]
        assert entry.username == "bob"
        assert entry.error_count == 5

    async def test_bob_with_three_errors_is_not_flagged(self, db_session, add_event):
        """Exactly three errors do not exceed the threshold."""
        bob = await self._bob(db_session)
        for i in range(3):
            await add_event(SecurityEventType.LOGIN_FAILED, bob.a_id, DAY + timedelta(hours=1, minutes=i))

        report = await ReportService(db_session).generate_daily_report(now=NOON)

        assert report.multiple_errors_accounts == []
        assert report.multiple_errors_count == 0
        assert report.failed_logins[0].username == "bob"
        assert report.failed_logins[0].attempts == 3

    async def test_events_outside_day_are_excluded(self, db_session, test_account, add_event):
        """Only events inside the report day are aggregated, oldest first."""
        await add_event(SecurityEventType.LOGIN_SUCCESSFUL, test_account.a_id, DAY - timedelta(seconds=1))
        second = await add_event(SecurityEventType.LOGIN_SUCCESSFUL, test_account.a_id, DAY + timedelta(hours=3))
        first = await add_event(SecurityEventType.LOGIN_SUCCESSFUL, test_account.a_id, DAY)
        await add_event(SecurityEventType.LOGIN_SUCCESSFUL, test_account.a_id, DAY + timedelta(days=1))

        report = await ReportService(db_session).generate_daily_report(now=NOON)

        assert report.report_date == "2024-03-01"
        assert report.total_events == 2
        assert [e.id for e in report.events] == [first.se_id, second.se_id]
        assert [s.timestamp for s in report.successful_logins] == [DAY, DAY + timedelta(hours=3)]
        assert report.successful_logins[0].username == "alice"

    async def test_failed_logins_include_active_snapshot(self, db_session, test_account, add_event):
        """Failed-login rows report the account's current active flag."""
        await add_event(SecurityEventType.LOGIN_FAILED, test_account.a_id, DAY + timedelta(hours=1))
        await AccountService(db_session).set_active(test_account.a_id, False)

        report = await ReportService(db_session).generate_daily_report(now=NOON)

        assert len(report.failed_logins) == 1
        assert report.failed_logins[0].is_active is False
        assert report.locked_accounts == 1
        assert report.active_accounts == 0

    async def test_only_latest_verification_per_account_counts(self, db_session, test_account, add_event):
        """A later success overrides an earlier failure for the same account."""
        bob = await self._bob(db_session)
        await add_event(SecurityEventType.CODE_VERIFICATION_FAILED, test_account.a_id, DAY + timedelta(hours=1))
        await add_event(SecurityEventType.CODE_VERIFICATION_SUCCESSFUL, test_account.a_id, DAY + timedelta(hours=2))
        await add_event(SecurityEventType.CODE_VERIFICATION_SUCCESSFUL, bob.a_id, DAY + timedelta(hours=1))
        await add_event(SecurityEventType.CODE_VERIFICATION_FAILED, bob.a_id, DAY + timedelta(hours=3))

        report = await ReportService(db_session).generate_daily_report(now=NOON)

        assert [v.username for v in report.approved_verifications] == ["alice"]
        assert [v.username for v in report.failed_verifications] == ["bob"]
        assert report.failed_verifications[0].timestamp == DAY + timedelta(hours=3)

    async def test_suspicious_ip_by_attempts(self, db_session, test_account, add_event):
        """More than ten events from one IP flag it."""
        for i in range(settings.SUSPICIOUS_IP_MAX_ATTEMPTS + 1):
            await add_event(
                SecurityEventType.LOGIN_FAILED, test_account.a_id, DAY + timedelta(minutes=i), ip_address="203.0.113.7"
            )
        for i in range(settings.SUSPICIOUS_IP_MAX_ATTEMPTS):
            await add_event(
                SecurityEventType.LOGIN_SUCCESSFUL, test_account.a_id, DAY + timedelta(minutes=i), ip_address="10.0.0.1"
            )

        report = await ReportService(db_session).generate_daily_report(now=NOON)

        assert [ip.ip_address for ip in report.suspicious_ips] == ["203.0.113.7"]
        assert report.suspicious_ips[0].attempts == settings.SUSPICIOUS_IP_MAX_ATTEMPTS + 1
        assert report.suspicious_ips[0].distinct_user_agents == 1

    async def test_suspicious_ip_by_user_agents(self, db_session, test_account, add_event):
        """More than three distinct user agents from one IP flag it."""
        for i in range(settings.SUSPICIOUS_IP_MAX_USER_AGENTS + 1):
            await add_event(
                SecurityEventType.LOGIN_FAILED, test_account.a_id, DAY + timedelta(minutes=i),
                ip_address="198.51.100.2", user_agent=f"agent-{i}"
            )

        report = await ReportService(db_session).generate_daily_report(now=NOON)

        assert len(report.suspicious_ips) == 1
        flagged = report.suspicious_ips[0]
        assert flagged.attempts == settings.SUSPICIOUS_IP_MAX_USER_AGENTS + 1
        assert flagged.distinct_user_agents == settings.SUSPICIOUS_IP_MAX_USER_AGENTS + 1
        assert flagged.user_agents == [f"agent-{i}" for i in range(settings.SUSPICIOUS_IP_MAX_USER_AGENTS + 1)]

    async def test_missing_account_renders_unknown_user(self, db_session, add_event):
        """Events without an account show the fallback username."""
        await add_event(SecurityEventType.LOGIN_FAILED, None, DAY + timedelta(hours=1))

        report = await ReportService(db_session).generate_daily_report(now=NOON)

        assert report.failed_logins[0].username == DefaultValue.UNKNOWN_USER
        assert report.failed_logins[0].is_active is False

    async def test_deleted_accounts_are_not_merged(self, db_session, add_event):
        """Two deleted accounts with two errors each do not add up to one flagged account."""
        service = AccountService(db_session)
        for username in ("a1", "b1"):
            account = await service.create(username=username, password="Password123!")
            for i in range(2):
                await add_event(SecurityEventType.LOGIN_FAILED, account.a_id, DAY + timedelta(hours=1, minutes=i))
            await service.delete(account.a_id)
        db_session.expire_all()

        report = await ReportService(db_session).generate_daily_report(now=NOON)

        assert report.multiple_errors_count == 0
        assert report.multiple_errors_accounts == []
        assert len(report.failed_logins) == 4
        assert all(row.attempts == 1 for row in report.failed_logins)
        assert all(row.username == DefaultValue.UNKNOWN_USER for row in report.failed_logins)

    async def test_accounts_created_counts_ledger_entries(self, db_session, test_admin):
        """CREATE_USER ledger entries of the current day are counted."""
        admin_service = AdminService(db_session)
        await admin_service.create_account(test_admin.a_id, "dave", "Password123!")
        await admin_service.create_account(test_admin.a_id, "erin", "Password123!", role=AccountRole.ADMIN)

        report = await ReportService(db_session).generate_daily_report()

        assert report.accounts_created == 2
        assert report.active_accounts == 3

    async def test_empty_day(self, db_session):
        """A day without events yields an empty report."""
        report = await ReportService(db_session).generate_daily_report(now=NOON)

        assert report.total_events == 0
        assert report.events == []
        assert report.suspicious_ips == []
        assert report.locked_accounts == 0
