"""
Admin endpoints untuk API v1.
Semua endpoint memerlukan bearer token dari akun admin yang active.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.auth import require_admin
from app.api.dependencies.database import get_db, get_email_service
from app.api.dependencies.rate_limit import client_ip
from app.core.constants import ResponseMessage, DefaultValue
from app.models.account import Account
from app.schemas.account import AccountCreate, AccountResponse, AccountMonitorEntry
from app.schemas.admin_action import AdminActionResponse
from app.schemas.report import DailyReport
from app.schemas.response import MessageResponse
from app.schemas.security_event import (
    SecurityEventCreate,
    SecurityEventResponse,
    SecurityEventFilter,
    SecurityEventListResponse
)
from app.services.admin import AdminService
from app.services.admin_action import AdminActionService
from app.services.email import EmailService
from app.services.report import ReportService
from app.services.security_event import SecurityEventService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/report", response_model=DailyReport)
async def get_daily_report(
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> DailyReport:
    """
    Daily security report untuk hari ini (timezone REPORT_TIMEZONE).
    """
    return await ReportService(db).generate_daily_report()


@router.post("/report/send", response_model=MessageResponse)
async def send_daily_report(
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service)
) -> MessageResponse:
    """
    Generate daily report dan kirim via email.

    Raises:
        DeliveryFailureError: Jika email gagal terkirim (502)
    """
    service = AdminService(db, email_service=email_service)
    report = await service.send_daily_report(admin.a_id)

    return MessageResponse(
        message=ResponseMessage.REPORT_SENT,
        details={"report_date": report.report_date, "total_events": report.total_events}
    )


@router.get("/accounts/monitor", response_model=List[AccountMonitorEntry])
async def monitor_accounts(
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> List[AccountMonitorEntry]:
    """
    Semua akun dengan status locked dan event terbarunya.
    """
    return await AdminService(db).monitor_accounts()


@router.post("/accounts", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    payload: AccountCreate,
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> AccountResponse:
    """
    Provisioning akun baru.

    Raises:
        ConflictError: Jika username sudah dipakai (409)
    """
    account = await AdminService(db).create_account(
        admin_id=admin.a_id,
        username=payload.username,
        password=payload.password,
        role=payload.role,
        email=payload.email
    )
    return AccountResponse.model_validate(account)


@router.delete("/accounts/{account_id}", response_model=MessageResponse)
async def delete_account(
    account_id: UUID,
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> MessageResponse:
    """
    Hapus akun. Event dan ledger entry lama tetap ada dengan referensi akun kosong.
    """
    action = await AdminService(db).delete_account(admin.a_id, account_id)
    return MessageResponse(
        message=ResponseMessage.ACCOUNT_DELETED,
        details={"account_id": str(account_id), "action_id": action.aa_id}
    )


@router.patch("/accounts/{account_id}/lock", response_model=MessageResponse)
async def lock_account(
    account_id: UUID,
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> MessageResponse:
    """
    Kunci akun secara eksplisit.
    """
    action = await AdminService(db).lock_account(account_id, admin.a_id)
    return MessageResponse(
        message=ResponseMessage.ACCOUNT_LOCKED,
        details={"account_id": str(account_id), "action_id": action.aa_id}
    )


@router.patch("/accounts/{account_id}/unlock", response_model=MessageResponse)
async def unlock_account(
    account_id: UUID,
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> MessageResponse:
    """
    Buka kunci akun.
    """
    action = await AdminService(db).unlock_account(account_id, admin.a_id)
    return MessageResponse(
        message=ResponseMessage.ACCOUNT_UNLOCKED,
        details={"account_id": str(account_id), "action_id": action.aa_id}
    )


@router.get("/actions", response_model=List[AdminActionResponse])
async def list_admin_actions(
    admin_id: Optional[UUID] = None,
    account_id: Optional[UUID] = None,
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> List[AdminActionResponse]:
    """
    Admin action ledger, terbaru dulu.
    Filter by admin_id atau account_id (akun terdampak).
    """
    service = AdminActionService(db)

    if admin_id is not None:
        actions = await service.by_admin(admin_id)
    elif account_id is not None:
        actions = await service.by_affected_account(account_id)
    else:
        actions = await service.all()

    return [AdminActionResponse.model_validate(a) for a in actions]


@router.get("/events", response_model=SecurityEventListResponse)
async def list_security_events(
    filters: SecurityEventFilter = Depends(),
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> SecurityEventListResponse:
    """
    Security events dengan filtering dan pagination, terbaru dulu.
    """
    events, total = await SecurityEventService(db).list_events(filters)

    return SecurityEventListResponse(
        items=[SecurityEventResponse.model_validate(e) for e in events],
        total=total,
        page=filters.page,
        per_page=filters.per_page
    )


@router.post("/events", response_model=SecurityEventResponse, status_code=status.HTTP_201_CREATED)
async def record_security_event(
    payload: SecurityEventCreate,
    request: Request,
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> SecurityEventResponse:
    """
    Catat event keamanan secara manual, misalnya SUSPICIOUS_ACTIVITY.
    IP dan user agent diambil dari request admin.
    """
    event = await SecurityEventService(db).record(
        kind=payload.kind,
        account_id=payload.account_id,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent") or DefaultValue.UNKNOWN,
        description=payload.description
    )
    return SecurityEventResponse.model_validate(event)
