"""
OTP Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from app.modules.otp.service import VerificationOutcome


class RequestOtpRequest(BaseModel):
    """Request body for POST /otp/request."""

    email: EmailStr
    application_id: str = Field(..., min_length=1, max_length=100)
    name: str | None = Field(None, max_length=200)


class RequestOtpResponse(BaseModel):
    """Response after a code has been issued and sent."""

    message: str
    expires_at: datetime
    expires_in_minutes: int


class VerifyOtpRequest(BaseModel):
    """Request body for POST /otp/verify."""

    email: EmailStr
    application_id: str = Field(..., min_length=1, max_length=100)
    otp: str = Field(..., min_length=1, max_length=12)


class VerifyOtpResponse(BaseModel):
    """Result of a verification attempt."""

    valid: bool
    outcome: VerificationOutcome
    message: str
