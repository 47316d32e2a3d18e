"""
Generic response schemas untuk Security Audit API.
Menangani response format yang konsisten.
"""

from datetime import datetime
from typing import Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


class MessageResponse(BaseModel):
    """
    Simple message response schema.
    """
    message: str = Field(
        ...,
        description="Response message"
    )
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional details"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Account locked",
                "details": {
                    "account_id": "550e8400-e29b-41d4-a716-446655440000"
                }
            }
        }
    )


class ErrorResponse(BaseModel):
    """
    Error response schema untuk SecurityAuditException.
    """
    detail: str
    error_type: str
    details: Dict[str, Any] = Field(default_factory=dict)
    request_id: Optional[str] = None


class HealthCheckResponse(BaseModel):
    """
    Health check response schema.
    """
    status: str = Field(
        ...,
        description="Health status"
    )
    timestamp: datetime = Field(
        ...,
        description="Check timestamp"
    )
    version: str = Field(
        ...,
        description="API version"
    )
    service: str = Field(
        ...,
        description="Service name"
    )
