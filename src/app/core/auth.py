"""
Authentication and Authorization Module

Provides the admin authentication dependency for FastAPI endpoints.
Validates JWT bearer tokens issued by /auth/login using the helpers
in security.py.

SECURITY NOTE:
- Development mode auth bypass is ONLY enabled when PYTHON_ENV=development
- Production environments MUST set PYTHON_ENV=production to disable test tokens
"""

import logging
import os
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.security import decode_token

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=True,
    description="JWT Bearer token for authentication",
)


@dataclass
class AdminUser:
    """
    Represents an authenticated admin.

    Populated from JWT claims after token validation.
    """

    id: str
    email: str
    role: str

    def __str__(self) -> str:
        return f"AdminUser(id={self.id}, email={self.email}, role={self.role})"


def _is_dev_mode_safe() -> bool:
    """
    Check if development mode is safe to enable.

    Both the settings and the raw PYTHON_ENV variable must agree that this
    is a development environment.
    """
    env_var = os.getenv("PYTHON_ENV", "").lower()

    is_safe = (
        settings.is_development
        and not settings.is_production
        and env_var not in ("production", "staging")
    )

    if is_safe:
        logger.warning(
            "SECURITY: Development auth mode is ENABLED. This MUST NOT be used in production!"
        )

    return is_safe


# Development mode flag - allows test tokens for LOCAL testing ONLY
_DEVELOPMENT_MODE = _is_dev_mode_safe()

_DEV_TOKENS = {"dev-token", "test-token"}


def _invalid_token(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _validate_jwt_token(token: str) -> AdminUser:
    """
    Validate JWT token and extract admin claims.

    Raises:
        HTTPException 401: If token is invalid, expired, or not an access token
    """
    if _DEVELOPMENT_MODE and token in _DEV_TOKENS:
        logger.debug("Development mode: Using test token")
        return AdminUser(id=settings.admin_id, email=settings.admin_email, role=ADMIN_ROLE)

    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _invalid_token("INVALID_TOKEN", "Invalid or expired authentication token.")

    if payload.get("type", "access") != "access":
        logger.warning(f"Invalid token type: {payload.get('type')}")
        raise _invalid_token("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    subject = payload.get("sub")
    if not subject:
        logger.warning("Token missing 'sub' claim")
        raise _invalid_token("INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims.")

    return AdminUser(
        id=str(subject),
        email=payload.get("email", ""),
        role=payload.get("role", ""),
    )


async def get_current_admin_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AdminUser:
    """
    FastAPI dependency that validates the JWT token and returns the admin.

    Usage:
        @router.get("/admin/endpoint")
        async def admin_endpoint(
            admin: AdminUser = Depends(get_current_admin_user)
        ):
            ...

    Raises:
        HTTPException 401: If token is missing, invalid, or expired
        HTTPException 403: If the token does not carry the admin role
    """
    user = _validate_jwt_token(credentials.credentials)

    if user.role != ADMIN_ROLE:
        logger.warning(f"Access denied: {user} lacks the '{ADMIN_ROLE}' role")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "ADMIN_ACCESS_REQUIRED",
                "message": "Admin access is required for this endpoint.",
            },
        )

    logger.debug(f"Authenticated admin: {user.id} ({user.email})")
    return user


__all__ = [
    "ADMIN_ROLE",
    "AdminUser",
    "get_current_admin_user",
]
