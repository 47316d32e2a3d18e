"""
Account service untuk Security Audit API.
Account store: lookup, provisioning, flip status active, dan recovery code.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError

from app.core.constants import AccountRole, ResponseMessage
from app.core.exceptions import ConflictError, NotFoundError
from app.db.session import storage_guard
from app.models.account import Account

logger = logging.getLogger(__name__)


class AccountService:
    """
    Service class untuk account operations.
    Perubahan status memakai UPDATE tunggal per akun supaya atomic.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize account service.

        Args:
            db: Database session
        """
        self.db = db

    async def find_by_id(self, account_id: UUID) -> Optional[Account]:
        """
        Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account object atau None
        """
        async with storage_guard(self.db, "find account by id"):
            result = await self.db.execute(
                select(Account).where(Account.a_id == account_id)
            )
            return result.scalar_one_or_none()

    async def find_by_username(self, username: str) -> Optional[Account]:
        """
        Get account by username (exact match setelah strip).

        Args:
            username: Username

        Returns:
            Account object atau None
        """
        username = username.strip()
        async with storage_guard(self.db, "find account by username"):
            result = await self.db.execute(
                select(Account).where(Account.a_username == username)
            )
            return result.scalar_one_or_none()

    async def get_or_404(self, account_id: UUID) -> Account:
        account = await self.find_by_id(account_id)
        if account is None:
            raise NotFoundError(ResponseMessage.ACCOUNT_NOT_FOUND, details={"account_id": str(account_id)})
        return account

    async def find_admin(self, admin_id: UUID) -> Optional[Account]:
        """Get account by ID hanya jika role-nya admin."""
        async with storage_guard(self.db, "find admin"):
            result = await self.db.execute(
                select(Account).where(
                    Account.a_id == admin_id,
                    Account.a_role == AccountRole.ADMIN
                )
            )
            return result.scalar_one_or_none()

    async def set_active(self, account_id: UUID, active: bool) -> None:
        """
        Set status active akun dengan satu UPDATE statement.

        Args:
            account_id: Account ID
            active: Status baru

        Raises:
            NotFoundError: Jika akun tidak ada
        """
        async with storage_guard(self.db, "set account active"):
            result = await self.db.execute(
                update(Account)
                .where(Account.a_id == account_id)
                .values(a_is_active=active)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                raise NotFoundError(ResponseMessage.ACCOUNT_NOT_FOUND, details={"account_id": str(account_id)})
            await self.db.commit()

    async def set_recovery_code(self, account_id: UUID, code: str, expires_at: datetime) -> None:
        """
        Simpan recovery code beserta expiry-nya.

        Args:
            account_id: Account ID
            code: Recovery code
            expires_at: Expiry (UTC)
        """
        async with storage_guard(self.db, "set recovery code"):
            result = await self.db.execute(
                update(Account)
                .where(Account.a_id == account_id)
                .values(a_recovery_code=code, a_recovery_code_expires_at=expires_at)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                raise NotFoundError(ResponseMessage.ACCOUNT_NOT_FOUND, details={"account_id": str(account_id)})
            await self.db.commit()

    async def clear_recovery_code(self, account_id: UUID) -> None:
        """Hapus recovery code dan expiry-nya."""
        async with storage_guard(self.db, "clear recovery code"):
            await self.db.execute(
                update(Account)
                .where(Account.a_id == account_id)
                .values(a_recovery_code=None, a_recovery_code_expires_at=None)
            )
            await self.db.commit()

    async def count_by_active(self, active: bool) -> int:
        """
        Hitung akun berdasarkan status active (global, bukan per window).

        Args:
            active: Status yang dihitung

        Returns:
            Jumlah akun
        """
        async with storage_guard(self.db, "count accounts"):
            result = await self.db.execute(
                select(func.count(Account.a_id)).where(Account.a_is_active == active)
            )
            return result.scalar_one()

    async def active_status_map(self, account_ids: List[UUID]) -> dict:
        """
        Map account_id -> status active untuk sekumpulan akun.

        Args:
            account_ids: List of account IDs

        Returns:
            Dict account_id -> bool
        """
        if not account_ids:
            return {}
        async with storage_guard(self.db, "read account status"):
            result = await self.db.execute(
                select(Account.a_id, Account.a_is_active).where(Account.a_id.in_(account_ids))
            )
            return {row.a_id: row.a_is_active for row in result}

    async def list_accounts(self) -> List[Account]:
        """Semua akun, urut berdasarkan username."""
        async with storage_guard(self.db, "list accounts"):
            result = await self.db.execute(
                select(Account).order_by(Account.a_username.asc())
            )
            return list(result.scalars().all())

    async def create(
        self,
        username: str,
        password: str,
        role: AccountRole = AccountRole.USER,
        email: Optional[str] = None
    ) -> Account:
        """
        Create new account.

        Args:
            username: Username
            password: Plain text password
            role: Role akun
            email: Alamat email (optional)

        Returns:
            Created account object

        Raises:
            ConflictError: Jika username sudah ada
        """
        username = username.strip()

        existing = await self.find_by_username(username)
        if existing:
            raise ConflictError(ResponseMessage.USERNAME_ALREADY_EXISTS)

        account = Account(
            a_username=username,
            a_email=email,
            a_role=role,
            a_is_active=True
        )
        account.set_password(password)

        self.db.add(account)

        async with storage_guard(self.db, "create account"):
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                # Race condition dengan create lain untuk username yang sama
                raise ConflictError(ResponseMessage.USERNAME_ALREADY_EXISTS)

        logger.info(f"Account created: {username} ({role.value})")
        return account

    async def delete(self, account_id: UUID) -> None:
        """
        Hard delete akun. Event dan ledger entry tetap ada (FK SET NULL).

        Raises:
            NotFoundError: Jika akun tidak ada
        """
        account = await self.get_or_404(account_id)
        async with storage_guard(self.db, "delete account"):
            await self.db.delete(account)
            await self.db.commit()
        logger.info(f"Account deleted: {account_id}")
