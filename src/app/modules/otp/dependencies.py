"""FastAPI wiring for the OTP lifecycle manager."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.modules.otp.notifier import EmailOtpNotifier
from app.modules.otp.repository import SqlAlchemyOtpStore
from app.modules.otp.service import OtpManager


async def get_otp_manager(db: AsyncSession = Depends(get_db)) -> OtpManager:
    """Request-scoped OtpManager over the database store and email notifier."""
    return OtpManager(store=SqlAlchemyOtpStore(db), notifier=EmailOtpNotifier())
