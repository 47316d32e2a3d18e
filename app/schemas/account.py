"""
Account schemas untuk Security Audit API.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.core.constants import AccountRole
from app.schemas.security_event import SecurityEventResponse


class AccountCreate(BaseModel):
    """
    Request schema untuk provisioning akun oleh admin.
    """
    username: str = Field(..., min_length=1, max_length=100, description="Username (unique)")
    password: str = Field(..., min_length=1, max_length=128, description="Password awal")
    email: Optional[EmailStr] = Field(None, description="Alamat email untuk recovery code")
    role: AccountRole = Field(AccountRole.USER, description="Role akun")

    @field_validator("username")
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username must not be blank")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "alice",
                "password": "S3cure-pass",
                "email": "alice@example.com",
                "role": "user"
            }
        }
    )


class AccountResponse(BaseModel):
    """
    Account response schema (tanpa password hash dan recovery code).
    """
    id: UUID = Field(..., validation_alias="a_id")
    username: str = Field(..., validation_alias="a_username")
    email: Optional[str] = Field(None, validation_alias="a_email")
    role: AccountRole = Field(..., validation_alias="a_role")
    is_active: bool = Field(..., validation_alias="a_is_active")
    is_locked: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class AccountMonitorEntry(BaseModel):
    """
    Satu akun di view monitoring admin beserta event terbarunya.
    """
    account: AccountResponse
    is_locked: bool
    recent_events: List[SecurityEventResponse]
