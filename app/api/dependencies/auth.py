"""
Authentication dependencies untuk FastAPI.
Menyediakan dependency injection untuk autentikasi dan otorisasi admin.
"""

from typing import Optional, Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.database import get_db
from app.core.config import settings
from app.core.security import security
from app.core.exceptions import TokenError, AuthorizationError
from app.models.account import Account
from app.services.account import AccountService

# OAuth2 scheme untuk Bearer token
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login",
    auto_error=False  # Kita handle error sendiri
)


async def get_current_account(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Account:
    """
    Get current account dari JWT token.

    Args:
        token: JWT access token dari Authorization header
        db: Database session

    Returns:
        Current account object

    Raises:
        TokenError: Jika token tidak ada, invalid, atau akun tidak ditemukan
    """
    if not token:
        raise TokenError("Not authenticated")

    payload = security.decode_token(token, expected_type="access")
    subject = payload.get("sub")

    try:
        account_id = UUID(subject)
    except (TypeError, ValueError):
        raise TokenError("Invalid authentication credentials")

    account = await AccountService(db).find_by_id(account_id)
    if account is None:
        raise TokenError("Account not found")

    return account


async def get_current_active_account(
    current_account: Annotated[Account, Depends(get_current_account)]
) -> Account:
    """
    Pastikan akun dari token masih active.

    Raises:
        AuthorizationError: Jika akun sedang terkunci
    """
    if current_account.is_locked:
        raise AuthorizationError("Account is locked")

    return current_account


async def require_admin(
    current_account: Annotated[Account, Depends(get_current_active_account)]
) -> Account:
    """
    Dependency untuk endpoint admin.

    Raises:
        AuthorizationError: Jika akun bukan admin
    """
    if not current_account.is_admin:
        raise AuthorizationError("Admin privileges required")

    return current_account
