"""Authentication schemas."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Login request schema. `email` also accepts the admin ID."""

    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)


class TokenResponse(BaseModel):
    """Token response schema."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AdminResponse(BaseModel):
    """Authenticated admin."""

    id: str
    email: str
    role: str


class LoginResponse(TokenResponse):
    """Login response schema."""

    admin: AdminResponse
