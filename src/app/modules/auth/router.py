"""Authentication router."""

import logging
import secrets

from fastapi import APIRouter, HTTPException, Request, status

from app.core.auth import ADMIN_ROLE
from app.core.config import settings
from app.core.rate_limit import rate_limit
from app.core.security import create_access_token, create_refresh_token, verify_password
from app.modules.auth.schemas import AdminResponse, LoginRequest, LoginResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _is_admin_login(login: str) -> bool:
    """Admins may sign in with either the configured email or the admin ID."""
    login = login.strip()
    by_email = secrets.compare_digest(login.lower().encode(), settings.admin_email.lower().encode())
    by_id = secrets.compare_digest(login.encode(), settings.admin_id.encode())
    return by_email or by_id


@router.post("/login", response_model=LoginResponse)
@rate_limit(limit=10, window_seconds=60)
async def login(request: Request, credentials: LoginRequest) -> LoginResponse:
    """
    Authenticate the admin and return JWT tokens.

    Args:
        request: Incoming request (used for rate limiting)
        credentials: Admin email or ID, and password

    Returns:
        Access token, refresh token, and admin info

    Raises:
        HTTPException 401: Invalid credentials
        HTTPException 503: No admin password configured
    """
    if not settings.admin_password_hash:
        logger.error("ADMIN_PASSWORD_HASH is not configured - admin login disabled")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "ADMIN_LOGIN_DISABLED",
                "message": "Admin login is not configured.",
            },
        )

    if not _is_admin_login(credentials.email) or not verify_password(
        credentials.password, settings.admin_password_hash
    ):
        logger.warning("Invalid admin login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "INVALID_CREDENTIALS",
                "message": "Invalid credentials.",
            },
        )

    access_token = create_access_token(
        subject=settings.admin_id,
        additional_claims={"email": settings.admin_email, "role": ADMIN_ROLE},
    )
    refresh_token = create_refresh_token(subject=settings.admin_id)

    logger.info(f"Admin logged in: {settings.admin_email}")

    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        admin=AdminResponse(id=settings.admin_id, email=settings.admin_email, role=ADMIN_ROLE),
    )
