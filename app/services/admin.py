"""
Admin service untuk Security Audit API.
Operasi administratif: lock/unlock akun, provisioning, monitoring, dan pengiriman daily report.
Setiap operasi yang mengubah state dicatat di admin action ledger.
"""

from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.constants import AccountRole, AdminActionType, DefaultValue
from app.core.exceptions import DeliveryFailureError
from app.models.account import Account
from app.models.admin_action import AdminAction
from app.schemas.account import AccountMonitorEntry, AccountResponse
from app.schemas.report import DailyReport
from app.schemas.security_event import SecurityEventResponse
from app.services.account import AccountService
from app.services.admin_action import AdminActionService
from app.services.email import EmailService
from app.services.report import ReportService
from app.services.security_event import SecurityEventService

logger = logging.getLogger(__name__)


class AdminService:
    """
    Service class untuk admin operations.
    """

    def __init__(self, db: AsyncSession, email_service: Optional[EmailService] = None):
        """
        Initialize admin service.

        Args:
            db: Database session
            email_service: Mail dispatcher (default: EmailService SMTP)
        """
        self.db = db
        self.account_service = AccountService(db)
        self.admin_action_service = AdminActionService(db)
        self.event_service = SecurityEventService(db)
        self.report_service = ReportService(db)
        self.email_service = email_service or EmailService()

    async def lock_account(self, account_id: UUID, admin_id: UUID) -> AdminAction:
        """
        Kunci akun secara eksplisit. Idempotent: akun yang sudah terkunci
        tetap mendapat entry BLOCK_USER.

        Args:
            account_id: Akun yang dikunci
            admin_id: Admin yang melakukan aksi

        Returns:
            Entry ledger BLOCK_USER

        Raises:
            NotFoundError: Jika akun tidak ada atau admin_id bukan admin
        """
        await self.admin_action_service.require_admin(admin_id)
        account = await self.account_service.get_or_404(account_id)

        await self.account_service.set_active(account_id, False)
        return await self.admin_action_service.record(
            admin_id,
            AdminActionType.BLOCK_USER,
            account_id,
            f"Account {account.a_username} blocked by admin"
        )

    async def unlock_account(self, account_id: UUID, admin_id: UUID) -> AdminAction:
        """
        Buka kunci akun secara eksplisit. Idempotent.

        LOGIN_FAILED lama yang masih di dalam window tetap dihitung setelah unlock.

        Args:
            account_id: Akun yang dibuka
            admin_id: Admin yang melakukan aksi

        Returns:
            Entry ledger UNBLOCK_USER

        Raises:
            NotFoundError: Jika akun tidak ada atau admin_id bukan admin
        """
        await self.admin_action_service.require_admin(admin_id)
        account = await self.account_service.get_or_404(account_id)

        await self.account_service.set_active(account_id, True)
        return await self.admin_action_service.record(
            admin_id,
            AdminActionType.UNBLOCK_USER,
            account_id,
            f"Account {account.a_username} unblocked by admin"
        )

    async def create_account(
        self,
        admin_id: UUID,
        username: str,
        password: str,
        role: AccountRole = AccountRole.USER,
        email: Optional[str] = None
    ) -> Account:
        """
        Provisioning akun baru dan catat CREATE_USER.

        Raises:
            NotFoundError: Jika admin_id bukan admin
            ConflictError: Jika username sudah dipakai
        """
        await self.admin_action_service.require_admin(admin_id)
        account = await self.account_service.create(
            username=username,
            password=password,
            role=role,
            email=email
        )
        await self.admin_action_service.record(
            admin_id,
            AdminActionType.CREATE_USER,
            account.a_id,
            f"Account {account.a_username} created with role {role.value}"
        )
        return account

    async def delete_account(self, admin_id: UUID, account_id: UUID) -> AdminAction:
        """
        Catat DELETE_USER lalu hapus akun.

        Raises:
            NotFoundError: Jika akun tidak ada atau admin_id bukan admin
        """
        await self.admin_action_service.require_admin(admin_id)
        account = await self.account_service.get_or_404(account_id)

        action = await self.admin_action_service.record(
            admin_id,
            AdminActionType.DELETE_USER,
            account_id,
            f"Account {account.a_username} deleted"
        )
        await self.account_service.delete(account_id)
        return action

    async def monitor_accounts(self) -> List[AccountMonitorEntry]:
        """
        Semua akun beserta status locked dan event terbarunya.

        Returns:
            List of AccountMonitorEntry
        """
        entries = []
        for account in await self.account_service.list_accounts():
            events = await self.event_service.events_for_account(
                account.a_id, limit=DefaultValue.RECENT_EVENTS_LIMIT
            )
            entries.append(
                AccountMonitorEntry(
                    account=AccountResponse.model_validate(account),
                    is_locked=account.is_locked,
                    recent_events=[SecurityEventResponse.model_validate(e) for e in events]
                )
            )
        return entries

    async def send_daily_report(self, admin_id: UUID) -> DailyReport:
        """
        Generate daily report, kirim via email, lalu catat SEND_REPORT.

        Args:
            admin_id: Admin yang meminta pengiriman

        Returns:
            Report yang dikirim

        Raises:
            NotFoundError: Jika admin_id bukan admin
            DeliveryFailureError: Jika email gagal (tidak ada entry ledger)
        """
        admin = await self.admin_action_service.require_admin(admin_id)

        recipient = settings.REPORT_RECIPIENT_EMAIL or admin.a_email
        if not recipient:
            raise DeliveryFailureError(
                "No report recipient configured",
                details={"admin_id": str(admin_id)}
            )

        report = await self.report_service.generate_daily_report()
        await self.email_service.send_daily_report_email(recipient, report)

        await self.admin_action_service.record(
            admin_id,
            AdminActionType.SEND_REPORT,
            None,
            f"Daily report {report.report_date} sent"
        )
        return report
