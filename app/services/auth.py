"""
Authentication service untuk Security Audit API.
Menangani login dan lockout otomatis berdasarkan security event log.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import security
from app.core.constants import SecurityEventType, LoginFailureReason
from app.core.exceptions import (
    InvalidCredentialsException,
    AccountLockedException,
    AccountAutoLockedException
)
from app.models.account import Account
from app.services.account import AccountService
from app.services.security_event import SecurityEventService

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service class untuk authentication operations.

    Lockout otomatis: setiap password salah dicatat sebagai LOGIN_FAILED
    terlebih dahulu, lalu LOGIN_FAILED dalam window dihitung (termasuk yang
    baru dicatat). Jika jumlahnya mencapai LOCKOUT_THRESHOLD akun dikunci.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize authentication service.

        Args:
            db: Database session
        """
        self.db = db
        self.account_service = AccountService(db)
        self.event_service = SecurityEventService(db)

    async def authenticate(
        self,
        username: str,
        password: str,
        ip_address: str,
        user_agent: str,
        now: Optional[datetime] = None
    ) -> Account:
        """
        Authenticate akun dengan username dan password.

        Proses:
        1. Cari akun berdasarkan username (tidak ada -> gagal tanpa event)
        2. Akun terkunci -> catat USER_BLOCKED, gagal
        3. Password salah -> catat LOGIN_FAILED, hitung kegagalan dalam window,
           kunci akun jika mencapai threshold
        4. Password benar -> return akun

        Args:
            username: Username
            password: Plain text password
            ip_address: Client IP address
            user_agent: User agent string
            now: Waktu referensi untuk window (default: sekarang)

        Returns:
            Account yang berhasil diautentikasi

        Raises:
            InvalidCredentialsException: Username tidak ada atau password salah
            AccountLockedException: Akun sudah terkunci
            AccountAutoLockedException: Akun baru saja dikunci oleh percobaan ini
        """
        account = await self.account_service.find_by_username(username)

        if account is None:
            logger.info(f"Login failed: unknown username from {ip_address}")
            raise InvalidCredentialsException(reason=LoginFailureReason.UNKNOWN_USER)

        if not account.a_is_active:
            await self.event_service.log_user_blocked(
                account.a_id,
                ip_address,
                user_agent,
                description="Login attempt on a blocked account"
            )
            logger.info(f"Login rejected for locked account {account.a_id}")
            raise AccountLockedException()

        if not security.verify_password(password, account.a_password_hash):
            await self._handle_failed_password(account, ip_address, user_agent, now)

        return account

    async def _handle_failed_password(
        self,
        account: Account,
        ip_address: str,
        user_agent: str,
        now: Optional[datetime]
    ) -> None:
        """
        Catat LOGIN_FAILED dan terapkan lockout jika threshold tercapai.
        Selalu raise.
        """
        failed_event = await self.event_service.log_login_failed(account.a_id, ip_address, user_agent)

        # Window berakhir di `now`, tapi failure yang baru dicatat selalu ikut dihitung
        reference = failed_event.se_created_at
        if now is not None:
            if now.tzinfo is None:
                now = now.replace(tzinfo=timezone.utc)
            reference = max(now, reference)

        failed_count = await self.event_service.count_by_kind_since(
            account.a_id,
            SecurityEventType.LOGIN_FAILED,
            reference - settings.lockout_window_timedelta,
            until=reference
        )

        if failed_count < settings.LOCKOUT_THRESHOLD:
            raise InvalidCredentialsException()

        await self.account_service.set_active(account.a_id, False)
        await self.event_service.log_multiple_failed_attempts(
            account.a_id, ip_address, user_agent, failed_count
        )
        await self.event_service.log_user_blocked(
            account.a_id,
            ip_address,
            user_agent,
            description=f"Account blocked automatically after {failed_count} failed login attempts"
        )
        logger.warning(
            f"Account {account.a_id} locked automatically after {failed_count} failed attempts "
            f"(last from {ip_address})"
        )
        raise AccountAutoLockedException(failed_attempts=failed_count)

    async def login(self, account: Account, ip_address: str, user_agent: str) -> Dict[str, Any]:
        """
        Catat LOGIN_SUCCESSFUL dan buat access token untuk akun yang sudah diautentikasi.

        Args:
            account: Account dari authenticate()
            ip_address: Client IP address
            user_agent: User agent string

        Returns:
            Dict dengan access_token, expires_in, dan account
        """
        await self.event_service.log_login_successful(account.a_id, ip_address, user_agent)

        access_token = security.create_access_token(
            subject=str(account.a_id),
            additional_claims={
                "username": account.a_username,
                "role": account.a_role.value
            }
        )

        return {
            "access_token": access_token,
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "account": account
        }
