"""
Admin action schemas untuk Security Audit API.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.constants import AdminActionType


class AdminActionResponse(BaseModel):
    """
    Admin action response schema.
    """
    id: int = Field(..., validation_alias="aa_id")
    admin_id: Optional[UUID] = Field(None, validation_alias="aa_admin_id")
    admin_username: Optional[str] = None
    kind: AdminActionType = Field(..., validation_alias="aa_type")
    affected_account_id: Optional[UUID] = Field(None, validation_alias="aa_affected_account_id")
    affected_username: Optional[str] = None
    description: str = Field(..., validation_alias="aa_description")
    created_at: datetime = Field(..., validation_alias="aa_created_at")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
