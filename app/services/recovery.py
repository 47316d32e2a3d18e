"""
Recovery code service untuk Security Audit API.
Menangani permintaan dan verifikasi recovery code 6 digit.
"""

from datetime import datetime, timezone
from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import security
from app.core.constants import ResponseMessage
from app.core.exceptions import DeliveryFailureError
from app.schemas.auth import RecoveryAck, VerificationResult
from app.services.account import AccountService
from app.services.email import EmailService
from app.services.security_event import SecurityEventService

logger = logging.getLogger(__name__)


class RecoveryService:
    """
    Service class untuk recovery code workflow.

    Response request_recovery selalu sama, baik username ada maupun tidak,
    dan baik email terkirim maupun gagal.
    """

    def __init__(self, db: AsyncSession, email_service: Optional[EmailService] = None):
        """
        Initialize recovery service.

        Args:
            db: Database session
            email_service: Mail dispatcher (default: EmailService SMTP)
        """
        self.db = db
        self.account_service = AccountService(db)
        self.event_service = SecurityEventService(db)
        self.email_service = email_service or EmailService()

    async def request_recovery(
        self,
        username: str,
        ip_address: str,
        user_agent: str
    ) -> RecoveryAck:
        """
        Generate recovery code, simpan, catat RESET_PASSWORD, lalu kirim via email.

        Args:
            username: Username
            ip_address: Client IP address
            user_agent: User agent string

        Returns:
            Acknowledgement generik
        """
        account = await self.account_service.find_by_username(username)
        if account is None:
            logger.info(f"Recovery requested for unknown username from {ip_address}")
            return RecoveryAck()

        code = security.generate_numeric_token(settings.RECOVERY_CODE_LENGTH)
        expires_at = datetime.now(timezone.utc) + settings.recovery_code_expire_timedelta

        await self.account_service.set_recovery_code(account.a_id, code, expires_at)
        await self.event_service.log_reset_password(account.a_id, ip_address, user_agent)

        recipient = account.a_email or settings.SECURITY_MAIL_RECIPIENT
        if not recipient:
            logger.warning(f"No recovery mail recipient configured for account {account.a_id}")
            return RecoveryAck()

        try:
            await self.email_service.send_recovery_code_email(
                email=recipient,
                username=account.a_username,
                code=code,
                expires_minutes=settings.RECOVERY_CODE_EXPIRE_MINUTES
            )
        except DeliveryFailureError as e:
            # Ack tetap generik; code sudah tersimpan dan bisa diminta ulang
            logger.warning(f"Recovery code delivery failed for account {account.a_id}: {e.message}")

        return RecoveryAck()

    async def verify_code(
        self,
        username: str,
        code: str,
        ip_address: str,
        user_agent: str,
        now: Optional[datetime] = None
    ) -> VerificationResult:
        """
        Verifikasi recovery code.

        Args:
            username: Username
            code: Code dari user
            ip_address: Client IP address
            user_agent: User agent string
            now: Waktu referensi untuk cek expiry (default: sekarang)

        Returns:
            VerificationResult
        """
        now = now or datetime.now(timezone.utc)

        account = await self.account_service.find_by_username(username)
        if account is None or not account.has_recovery_code:
            return VerificationResult(valid=False, message=ResponseMessage.INVALID_CODE)

        if not security.compare_codes(code, account.a_recovery_code):
            await self.event_service.log_code_verification_failed(account.a_id, ip_address, user_agent)
            return VerificationResult(valid=False, message=ResponseMessage.INVALID_CODE)

        if account.a_recovery_code_expires_at is None:
            logger.error(f"Recovery code without expiry for account {account.a_id}")
            return VerificationResult(valid=False, message=ResponseMessage.CODE_WITHOUT_EXPIRY)

        if account.recovery_code_expired(now):
            logger.info(f"Expired recovery code presented for account {account.a_id} from {ip_address}")
            return VerificationResult(valid=False, message=ResponseMessage.CODE_EXPIRED)

        await self.event_service.log_code_verification_successful(account.a_id, ip_address, user_agent)

        if settings.RECOVERY_CODE_SINGLE_USE:
            await self.account_service.clear_recovery_code(account.a_id)

        return VerificationResult(valid=True, message=ResponseMessage.CODE_VERIFIED)
