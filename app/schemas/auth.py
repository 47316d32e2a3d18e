"""
Authentication schemas untuk Security Audit API.
Menangani validasi untuk login dan recovery code.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.core.constants import ResponseMessage


class LoginResponse(BaseModel):
    """
    Login response schema dengan access token.
    """
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiration time in seconds")
    account_id: str = Field(..., description="Account ID")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "token_type": "bearer",
                "expires_in": 1800,
                "account_id": "550e8400-e29b-41d4-a716-446655440000"
            }
        }
    )


class RecoveryRequest(BaseModel):
    """
    Request schema untuk meminta recovery code.
    """
    username: str = Field(..., min_length=1, max_length=100)


class RecoveryAck(BaseModel):
    """
    Response generik untuk recovery request.
    Sama untuk username yang ada maupun tidak.
    """
    message: str = Field(ResponseMessage.RECOVERY_REQUESTED)


class VerifyCodeRequest(BaseModel):
    """
    Request schema untuk verifikasi recovery code.
    """
    username: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=12, description="Recovery code")


class VerificationResult(BaseModel):
    """
    Hasil verifikasi recovery code.
    """
    valid: bool
    message: Optional[str] = None
