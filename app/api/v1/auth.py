"""
Authentication endpoints untuk API v1.
Menangani login dan recovery code workflow.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.database import get_db, get_email_service
from app.api.dependencies.rate_limit import (
    client_ip,
    login_rate_limit,
    recovery_rate_limit,
    verify_rate_limit
)
from app.core.constants import DefaultValue
from app.schemas.auth import (
    LoginResponse,
    RecoveryRequest,
    RecoveryAck,
    VerifyCodeRequest,
    VerificationResult
)
from app.services.auth import AuthService
from app.services.email import EmailService
from app.services.recovery import RecoveryService

router = APIRouter(prefix="/auth", tags=["authentication"])


def _user_agent(request: Request) -> str:
    return request.headers.get("user-agent") or DefaultValue.UNKNOWN


@router.post("/login", response_model=LoginResponse, dependencies=[Depends(login_rate_limit)])
async def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db)
) -> LoginResponse:
    """
    Login endpoint dengan OAuth2 compatible form.

    Setiap kegagalan (username tidak dikenal, password salah, akun terkunci)
    menghasilkan response 401 yang identik.

    Args:
        request: FastAPI request object untuk mendapatkan IP
        form_data: OAuth2 form dengan username dan password
        db: Database session

    Returns:
        LoginResponse dengan access token
    """
    auth_service = AuthService(db)
    ip_address = client_ip(request)
    user_agent = _user_agent(request)

    account = await auth_service.authenticate(
        username=form_data.username,
        password=form_data.password,
        ip_address=ip_address,
        user_agent=user_agent
    )
    result = await auth_service.login(account, ip_address, user_agent)

    return LoginResponse(
        access_token=result["access_token"],
        token_type="bearer",
        expires_in=result["expires_in"],
        account_id=str(account.a_id)
    )


@router.post("/recover-password", response_model=RecoveryAck, dependencies=[Depends(recovery_rate_limit)])
async def recover_password(
    payload: RecoveryRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service)
) -> RecoveryAck:
    """
    Minta recovery code. Response selalu generik.
    """
    service = RecoveryService(db, email_service=email_service)
    return await service.request_recovery(
        username=payload.username,
        ip_address=client_ip(request),
        user_agent=_user_agent(request)
    )


@router.post("/verify-code", response_model=VerificationResult, dependencies=[Depends(verify_rate_limit)])
async def verify_code(
    payload: VerifyCodeRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service)
) -> VerificationResult:
    """
    Verifikasi recovery code.

    Returns:
        VerificationResult dengan valid True/False
    """
    service = RecoveryService(db, email_service=email_service)
    return await service.verify_code(
        username=payload.username,
        code=payload.code,
        ip_address=client_ip(request),
        user_agent=_user_agent(request)
    )
