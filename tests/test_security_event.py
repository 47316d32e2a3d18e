"""
Tests for the security event log.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import select, func

from app.core.constants import SecurityEventType, DefaultValue
from app.core.exceptions import ValidationError, NotFoundError
from app.models.security_event import SecurityEvent
from app.schemas.security_event import SecurityEventFilter, SecurityEventResponse
from app.services.account import AccountService
from app.services.security_event import SecurityEventService


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.requires_db
class TestSecurityEventRecord:
    """Test writing events."""

    async def test_record_then_events_in_window_returns_event(self, db_session, test_account):
        """A recorded event is visible in a window covering now, with a call-time timestamp."""
        service = SecurityEventService(db_session)

        before = datetime.now(timezone.utc)
        recorded = await service.record(
            SecurityEventType.SUSPICIOUS_ACTIVITY,
            test_account.a_id,
            "10.0.0.9",
            "Mozilla/5.0",
            "Login from unusual location"
        )
        after = datetime.now(timezone.utc)

        events = await service.events_in_window(before - timedelta(seconds=1), after + timedelta(seconds=1))

        assert [e.se_id for e in events] == [recorded.se_id]
        event = events[0]
        assert event.se_type == SecurityEventType.SUSPICIOUS_ACTIVITY
        assert event.se_account_id == test_account.a_id
        assert event.se_ip_address == "10.0.0.9"
        assert event.se_user_agent == "Mozilla/5.0"
        assert event.se_description == "Login from unusual location"
        assert before <= event.se_created_at <= after

    async def test_record_exposes_username(self, db_session, test_account):
        """The returned event carries the account's username."""
        event = await SecurityEventService(db_session).log_login_successful(
            test_account.a_id, "10.0.0.1", "pytest"
        )

        assert event.username == "alice"
        assert SecurityEventResponse.model_validate(event).username == "alice"

    async def test_record_without_account(self, db_session):
        """Events without an account are allowed."""
        event = await SecurityEventService(db_session).record(
            SecurityEventType.ACCESS_DENIED, None, "10.0.0.1", "pytest", "Anonymous access denied"
        )

        assert event.se_account_id is None
        assert event.username is None

    @pytest.mark.parametrize("field", ["ip_address", "user_agent", "description"])
    async def test_record_rejects_empty_fields(self, db_session, test_account, field):
        """Empty ip, user agent or description raise ValidationError and write nothing."""
        values = {"ip_address": "10.0.0.1", "user_agent": "pytest", "description": "x"}
        values[field] = "  "

        with pytest.raises(ValidationError):
            await SecurityEventService(db_session).record(
                SecurityEventType.LOGIN_FAILED, test_account.a_id, **values
            )

        count = await db_session.scalar(select(func.count(SecurityEvent.se_id)))
        assert count == 0

    async def test_record_rejects_unknown_account(self, db_session):
        """An account id that does not exist raises NotFoundError and writes nothing."""
        with pytest.raises(NotFoundError):
            await SecurityEventService(db_session).record(
                SecurityEventType.SUSPICIOUS_ACTIVITY, uuid4(), "10.0.0.1", "pytest", "x"
            )

        count = await db_session.scalar(select(func.count(SecurityEvent.se_id)))
        assert count == 0

    async def test_record_rejects_unknown_kind(self, db_session, test_account):
        """Free-text kinds are rejected."""
        with pytest.raises(ValidationError):
            await SecurityEventService(db_session).record(
                "SOMETHING_ELSE", test_account.a_id, "10.0.0.1", "pytest", "x"
            )

    async def test_record_accepts_kind_value_string(self, db_session, test_account):
        """Kind given as its string value is coerced to the enum."""
        event = await SecurityEventService(db_session).record(
            "LOGIN_FAILED", test_account.a_id, "10.0.0.1", "pytest", "x"
        )

        assert event.se_type is SecurityEventType.LOGIN_FAILED


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.requires_db
class TestSecurityEventQueries:
    """Test reading events."""

    async def test_events_in_window_is_half_open_and_ordered(self, db_session, test_account, add_event):
        """Window includes start, excludes end, oldest first."""
        start = datetime(2024, 3, 1, tzinfo=timezone.utc)
        end = start + timedelta(days=1)

        await add_event(SecurityEventType.LOGIN_FAILED, test_account.a_id, start - timedelta(microseconds=1))
        at_start = await add_event(SecurityEventType.LOGIN_FAILED, test_account.a_id, start)
        later = await add_event(SecurityEventType.LOGIN_SUCCESSFUL, test_account.a_id, start + timedelta(hours=5))
        middle = await add_event(SecurityEventType.LOGIN_FAILED, test_account.a_id, start + timedelta(hours=2))
        await add_event(SecurityEventType.LOGIN_FAILED, test_account.a_id, end)

        events = await SecurityEventService(db_session).events_in_window(start, end)

        assert [e.se_id for e in events] == [at_start.se_id, middle.se_id, later.se_id]

    async def test_events_for_account_newest_first_with_limit(self, db_session, test_account, add_event):
        """Recent events for one account, newest first, capped by limit."""
        base = datetime(2024, 3, 1, tzinfo=timezone.utc)
        for i in range(DefaultValue.RECENT_EVENTS_LIMIT + 2):
            await add_event(SecurityEventType.LOGIN_FAILED, test_account.a_id, base + timedelta(minutes=i))

        events = await SecurityEventService(db_session).events_for_account(test_account.a_id)

        assert len(events) == DefaultValue.RECENT_EVENTS_LIMIT
        timestamps = [e.se_created_at for e in events]
        assert timestamps == sorted(timestamps, reverse=True)
        assert timestamps[0] == base + timedelta(minutes=DefaultValue.RECENT_EVENTS_LIMIT + 1)

    async def test_count_by_kind_since(self, db_session, test_account, add_event):
        """Only events of the given kind at or after `since` are counted."""
        since = datetime(2024, 3, 1, 12, tzinfo=timezone.utc)
        await add_event(SecurityEventType.LOGIN_FAILED, test_account.a_id, since - timedelta(minutes=1))
        await add_event(SecurityEventType.LOGIN_FAILED, test_account.a_id, since)
        await add_event(SecurityEventType.LOGIN_FAILED, test_account.a_id, since + timedelta(minutes=1))
        await add_event(SecurityEventType.LOGIN_SUCCESSFUL, test_account.a_id, since + timedelta(minutes=2))

        count = await SecurityEventService(db_session).count_by_kind_since(
            test_account.a_id, SecurityEventType.LOGIN_FAILED, since
        )

        assert count == 2

    async def test_count_by_kind_since_with_upper_bound(self, db_session, test_account, add_event):
        """Events after `until` are not counted."""
        since = datetime(2024, 3, 1, 12, tzinfo=timezone.utc)
        until = since + timedelta(minutes=10)
        await add_event(SecurityEventType.LOGIN_FAILED, test_account.a_id, since + timedelta(minutes=1))
        await add_event(SecurityEventType.LOGIN_FAILED, test_account.a_id, until)
        await add_event(SecurityEventType.LOGIN_FAILED, test_account.a_id, until + timedelta(seconds=1))

        count = await SecurityEventService(db_session).count_by_kind_since(
            test_account.a_id, SecurityEventType.LOGIN_FAILED, since, until=until
        )

        assert count == 2

    async def test_list_events_filters_and_paginates(self, db_session, test_account, test_admin, add_event):
        """list_events filters by kind/account and pages newest first."""
        base = datetime(2024, 3, 1, tzinfo=timezone.utc)
        for i in range(5):
            await add_event(SecurityEventType.LOGIN_FAILED, test_account.a_id, base + timedelta(minutes=i))
        await add_event(SecurityEventType.LOGIN_SUCCESSFUL, test_admin.a_id, base)

        service = SecurityEventService(db_session)
        events, total = await service.list_events(
            SecurityEventFilter(kind=SecurityEventType.LOGIN_FAILED, page=2, per_page=2)
        )

        assert total == 5
        assert [e.se_created_at for e in events] == [base + timedelta(minutes=2), base + timedelta(minutes=1)]

        events, total = await service.list_events(SecurityEventFilter(account_id=test_admin.a_id))
        assert total == 1
        assert events[0].se_type == SecurityEventType.LOGIN_SUCCESSFUL

    async def test_events_survive_account_deletion(self, db_session, test_account, add_event):
        """Deleting an account keeps its events with an empty account reference."""
        event = await add_event(
            SecurityEventType.LOGIN_FAILED, test_account.a_id, datetime(2024, 3, 1, tzinfo=timezone.utc)
        )

        await AccountService(db_session).delete(test_account.a_id)
        db_session.expire_all()

        result = await db_session.execute(select(SecurityEvent).where(SecurityEvent.se_id == event.se_id))
        stored = result.scalar_one()
        assert stored.se_account_id is None
        assert stored.username is None
