"""
Auth Module

Single configured admin account; login issues JWT access/refresh tokens.
"""

from app.modules.auth.router import router
from app.modules.auth.schemas import AdminResponse, LoginRequest, LoginResponse

__all__ = ["router", "AdminResponse", "LoginRequest", "LoginResponse"]
