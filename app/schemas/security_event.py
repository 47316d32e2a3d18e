"""
Security event schemas untuk Security Audit API.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.constants import SecurityEventType, DefaultValue


class SecurityEventCreate(BaseModel):
    """
    Request schema untuk mencatat event secara manual (admin endpoint).
    IP dan user agent diambil dari request, bukan dari body.
    """
    kind: SecurityEventType = Field(..., description="Jenis event")
    account_id: Optional[UUID] = Field(None, description="Akun terkait")
    description: str = Field(..., min_length=1, max_length=2000, description="Deskripsi event")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "kind": "SUSPICIOUS_ACTIVITY",
                "account_id": "550e8400-e29b-41d4-a716-446655440000",
                "description": "Login from unusual location"
            }
        }
    )


class SecurityEventResponse(BaseModel):
    """
    Security event response schema.
    """
    id: int = Field(..., validation_alias="se_id")
    kind: SecurityEventType = Field(..., validation_alias="se_type")
    account_id: Optional[UUID] = Field(None, validation_alias="se_account_id")
    username: Optional[str] = None
    ip_address: str = Field(..., validation_alias="se_ip_address")
    user_agent: str = Field(..., validation_alias="se_user_agent")
    description: str = Field(..., validation_alias="se_description")
    created_at: datetime = Field(..., validation_alias="se_created_at")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class SecurityEventFilter(BaseModel):
    """
    Filter dan pagination untuk listing security events.
    """
    kind: Optional[SecurityEventType] = None
    account_id: Optional[UUID] = None
    ip_address: Optional[str] = None
    start: Optional[datetime] = Field(None, description="Batas bawah (inclusive)")
    end: Optional[datetime] = Field(None, description="Batas atas (exclusive)")
    page: int = Field(1, ge=1)
    per_page: int = Field(
        DefaultValue.PAGINATION_PAGE_SIZE,
        ge=1,
        le=DefaultValue.MAX_PAGINATION_SIZE
    )


class SecurityEventListResponse(BaseModel):
    """
    Paginated list of security events.
    """
    items: List[SecurityEventResponse]
    total: int
    page: int
    per_page: int
