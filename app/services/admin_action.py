"""
Admin action service untuk Security Audit API.
Ledger append-only untuk aksi administratif.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_

from app.core.constants import AdminActionType, ResponseMessage
from app.core.exceptions import NotFoundError, ValidationError
from app.db.session import storage_guard
from app.models.account import Account
from app.models.admin_action import AdminAction
from app.services.account import AccountService

logger = logging.getLogger(__name__)


class AdminActionService:
    """
    Service class untuk admin action ledger.
    Setiap entry diverifikasi: admin_id harus akun dengan role admin.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize admin action service.

        Args:
            db: Database session
        """
        self.db = db
        self.account_service = AccountService(db)

    async def require_admin(self, admin_id: UUID) -> Account:
        """
        Pastikan admin_id adalah akun dengan role admin.

        Raises:
            NotFoundError: Jika tidak ada admin dengan ID tersebut
        """
        admin = await self.account_service.find_admin(admin_id)
        if admin is None:
            raise NotFoundError(ResponseMessage.ADMIN_NOT_FOUND, details={"admin_id": str(admin_id)})
        return admin

    async def record(
        self,
        admin_id: UUID,
        kind: AdminActionType,
        affected_account_id: Optional[UUID],
        description: str
    ) -> AdminAction:
        """
        Tulis satu entry ledger.

        Args:
            admin_id: Admin yang melakukan aksi
            kind: Jenis aksi
            affected_account_id: Akun terdampak (optional)
            description: Deskripsi aksi

        Returns:
            Entry yang tersimpan

        Raises:
            NotFoundError: Jika admin_id bukan admin (tidak ada yang ditulis)
            ValidationError: Jika kind tidak dikenal atau description kosong
        """
        try:
            kind = AdminActionType(kind)
        except ValueError:
            raise ValidationError("Unknown admin action type", details={"kind": str(kind)})

        if not description or not description.strip():
            raise ValidationError("Admin action description must not be empty")

        await self.require_admin(admin_id)

        action = AdminAction(
            aa_admin_id=admin_id,
            aa_type=kind,
            aa_affected_account_id=affected_account_id,
            aa_description=description
        )

        async with storage_guard(self.db, "record admin action"):
            self.db.add(action)
            await self.db.commit()
            await self.db.refresh(action, attribute_names=["admin", "affected_account"])

        logger.info(f"Admin action {kind.value} by {admin_id} on {affected_account_id}")
        return action

    async def _query(self, *conditions) -> List[AdminAction]:
        query = select(AdminAction)
        if conditions:
            query = query.where(and_(*conditions))
        query = query.order_by(AdminAction.aa_created_at.desc(), AdminAction.aa_id.desc())

        async with storage_guard(self.db, "read admin actions"):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def all(self) -> List[AdminAction]:
        """Semua entry, terbaru dulu."""
        return await self._query()

    async def by_admin(self, admin_id: UUID) -> List[AdminAction]:
        """Entry yang dilakukan oleh admin tertentu, terbaru dulu."""
        return await self._query(AdminAction.aa_admin_id == admin_id)

    async def by_affected_account(self, account_id: UUID) -> List[AdminAction]:
        """Entry yang mengenai akun tertentu, terbaru dulu."""
        return await self._query(AdminAction.aa_affected_account_id == account_id)

    async def by_kind_in_window(
        self,
        kind: AdminActionType,
        start: datetime,
        end: datetime
    ) -> List[AdminAction]:
        """Entry dengan jenis tertentu dalam [start, end), terbaru dulu."""
        return await self._query(
            AdminAction.aa_type == kind,
            AdminAction.aa_created_at >= start,
            AdminAction.aa_created_at < end
        )
