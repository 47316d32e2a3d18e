"""
Security event service untuk Security Audit API.
Append-only log untuk event keamanan, dipakai oleh lockout dan daily report.
"""

from datetime import datetime
from typing import Optional, List, Tuple
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, func

from app.core.constants import SecurityEventType, DefaultValue
from app.core.exceptions import ValidationError
from app.db.session import storage_guard
from app.models.security_event import SecurityEvent
from app.schemas.security_event import SecurityEventFilter
from app.services.account import AccountService

logger = logging.getLogger(__name__)


class SecurityEventService:
    """
    Service class untuk security event log.
    Setiap event di-commit langsung supaya tetap tersimpan meskipun
    operasi pemanggil gagal sesudahnya.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize security event service.

        Args:
            db: Database session
        """
        self.db = db

    async def record(
        self,
        kind: SecurityEventType,
        account_id: Optional[UUID],
        ip_address: str,
        user_agent: str,
        description: str
    ) -> SecurityEvent:
        """
        Tulis satu event keamanan.

        Args:
            kind: Jenis event
            account_id: Akun terkait (None untuk event tanpa akun)
            ip_address: IP address sumber
            user_agent: User agent sumber
            description: Deskripsi event

        Returns:
            Event yang tersimpan, dengan timestamp dari saat penulisan

        Raises:
            ValidationError: Jika kind tidak dikenal atau field wajib kosong
            NotFoundError: Jika account_id diisi tapi akunnya tidak ada
            StorageError: Jika database gagal
        """
        try:
            kind = SecurityEventType(kind)
        except ValueError:
            raise ValidationError(
                "Unknown security event type",
                details={"kind": str(kind)}
            )

        missing = [
            name for name, value in (
                ("ip_address", ip_address),
                ("user_agent", user_agent),
                ("description", description),
            )
            if not value or not str(value).strip()
        ]
        if missing:
            raise ValidationError(
                "Security event fields must not be empty",
                details={"missing_fields": missing}
            )

        if account_id is not None:
            await AccountService(self.db).get_or_404(account_id)

        event = SecurityEvent(
            se_type=kind,
            se_account_id=account_id,
            se_ip_address=ip_address,
            se_user_agent=user_agent,
            se_description=description
        )

        async with storage_guard(self.db, "record security event"):
            self.db.add(event)
            await self.db.commit()
            await self.db.refresh(event, attribute_names=["account"])

        logger.debug(f"Security event recorded: {kind.value} account={account_id} ip={ip_address}")
        return event

    # Convenience writers dengan deskripsi baku
    async def log_login_failed(self, account_id: UUID, ip_address: str, user_agent: str) -> SecurityEvent:
        return await self.record(
            SecurityEventType.LOGIN_FAILED, account_id, ip_address, user_agent,
            "Failed login attempt: wrong password"
        )

    async def log_login_successful(self, account_id: UUID, ip_address: str, user_agent: str) -> SecurityEvent:
        return await self.record(
            SecurityEventType.LOGIN_SUCCESSFUL, account_id, ip_address, user_agent,
            "Successful login"
        )

    async def log_multiple_failed_attempts(
        self,
        account_id: UUID,
        ip_address: str,
        user_agent: str,
        attempts: int
    ) -> SecurityEvent:
        return await self.record(
            SecurityEventType.MULTIPLE_FAILED_ATTEMPTS, account_id, ip_address, user_agent,
            f"Multiple failed login attempts detected: {attempts} failures in the lockout window"
        )

    async def log_user_blocked(
        self,
        account_id: UUID,
        ip_address: str,
        user_agent: str,
        description: str = "Account is blocked"
    ) -> SecurityEvent:
        return await self.record(
            SecurityEventType.USER_BLOCKED, account_id, ip_address, user_agent, description
        )

    async def log_reset_password(self, account_id: UUID, ip_address: str, user_agent: str) -> SecurityEvent:
        return await self.record(
            SecurityEventType.RESET_PASSWORD, account_id, ip_address, user_agent,
            "Password recovery code requested"
        )

    async def log_code_verification_failed(self, account_id: UUID, ip_address: str, user_agent: str) -> SecurityEvent:
        return await self.record(
            SecurityEventType.CODE_VERIFICATION_FAILED, account_id, ip_address, user_agent,
            "Recovery code verification failed: code mismatch"
        )

    async def log_code_verification_successful(self, account_id: UUID, ip_address: str, user_agent: str) -> SecurityEvent:
        return await self.record(
            SecurityEventType.CODE_VERIFICATION_SUCCESSFUL, account_id, ip_address, user_agent,
            "Recovery code verified"
        )

    # Reads
    async def events_in_window(self, start: datetime, end: datetime) -> List[SecurityEvent]:
        """
        Semua event dengan start <= created_at < end, urut dari yang terlama.

        Args:
            start: Awal window (inclusive)
            end: Akhir window (exclusive)

        Returns:
            List of events
        """
        async with storage_guard(self.db, "read events in window"):
            result = await self.db.execute(
                select(SecurityEvent)
                .where(
                    and_(
                        SecurityEvent.se_created_at >= start,
                        SecurityEvent.se_created_at < end
                    )
                )
                .order_by(SecurityEvent.se_created_at.asc(), SecurityEvent.se_id.asc())
            )
            return list(result.scalars().all())

    async def events_for_account(
        self,
        account_id: UUID,
        limit: int = DefaultValue.RECENT_EVENTS_LIMIT
    ) -> List[SecurityEvent]:
        """
        Event terbaru untuk satu akun, urut dari yang terbaru.

        Args:
            account_id: Account ID
            limit: Jumlah maksimal event

        Returns:
            List of events
        """
        async with storage_guard(self.db, "read events for account"):
            result = await self.db.execute(
                select(SecurityEvent)
                .where(SecurityEvent.se_account_id == account_id)
                .order_by(SecurityEvent.se_created_at.desc(), SecurityEvent.se_id.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

    async def count_by_kind_since(
        self,
        account_id: UUID,
        kind: SecurityEventType,
        since: datetime,
        until: Optional[datetime] = None
    ) -> int:
        """
        Hitung event dengan jenis tertentu untuk satu akun sejak `since` (inclusive),
        sampai `until` (inclusive) jika diisi.

        Args:
            account_id: Account ID
            kind: Jenis event
            since: Batas bawah timestamp
            until: Batas atas timestamp (None: tanpa batas atas)

        Returns:
            Jumlah event
        """
        conditions = [
            SecurityEvent.se_account_id == account_id,
            SecurityEvent.se_type == kind,
            SecurityEvent.se_created_at >= since
        ]
        if until is not None:
            conditions.append(SecurityEvent.se_created_at <= until)

        async with storage_guard(self.db, "count events"):
            result = await self.db.execute(
                select(func.count(SecurityEvent.se_id)).where(and_(*conditions))
            )
            return result.scalar_one()

    async def list_events(self, filters: SecurityEventFilter) -> Tuple[List[SecurityEvent], int]:
        """
        Get security events dengan filtering dan pagination.

        Args:
            filters: Filter dan pagination

        Returns:
            Tuple of (events, total_count)
        """
        query = select(SecurityEvent)
        count_query = select(func.count(SecurityEvent.se_id))

        conditions = []

        if filters.kind:
            conditions.append(SecurityEvent.se_type == filters.kind)

        if filters.account_id:
            conditions.append(SecurityEvent.se_account_id == filters.account_id)

        if filters.ip_address:
            conditions.append(SecurityEvent.se_ip_address == filters.ip_address)

        if filters.start:
            conditions.append(SecurityEvent.se_created_at >= filters.start)

        if filters.end:
            conditions.append(SecurityEvent.se_created_at < filters.end)

        if conditions:
            query = query.where(and_(*conditions))
            count_query = count_query.where(and_(*conditions))

        query = (
            query
            .order_by(SecurityEvent.se_created_at.desc(), SecurityEvent.se_id.desc())
            .offset((filters.page - 1) * filters.per_page)
            .limit(filters.per_page)
        )

        async with storage_guard(self.db, "list security events"):
            total = (await self.db.execute(count_query)).scalar_one()
            result = await self.db.execute(query)
            return list(result.scalars().all()), total
