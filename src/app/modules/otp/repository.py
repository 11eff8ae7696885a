"""
OTP Repository

Persistence for OTP records behind the `OtpStore` protocol, so the
lifecycle manager can run against PostgreSQL in production and an
in-memory store in tests.

Design Principles:
- One row per (email, application_id); issuing upserts
- Consuming is a conditional UPDATE (WHERE consumed = false) whose rowcount
  is the only arbiter between concurrent verifiers
- Backend errors (SQLAlchemy errors and driver-level socket errors such as a
  refused connection) surface as StorageFailure, never raw
"""

import logging
import uuid
from datetime import datetime
from typing import Protocol

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import StorageFailure
from .models import OtpRecord

logger = logging.getLogger(__name__)

# asyncpg raises OSError subclasses (ConnectionRefusedError, TimeoutError)
# directly when the server is unreachable; SQLAlchemy does not wrap them
STORE_ERRORS = (SQLAlchemyError, OSError)


class OtpStore(Protocol):
    """Keyed record store for OTPs."""

    async def upsert(
        self,
        email: str,
        application_id: str,
        code: str,
        created_at: datetime,
        expires_at: datetime,
    ) -> None:
        """Write the record for the key, replacing any existing one and resetting `consumed`."""
        ...

    async def find_active(self, email: str, application_id: str) -> OtpRecord | None:
        """Return the unconsumed record for the key, or None."""
        ...

    async def conditional_consume(self, email: str, application_id: str, code: str) -> bool:
        """Set consumed=true only if still false (and the code is unchanged). True if it took effect."""
        ...

    async def delete_expired(self, email: str, application_id: str, now: datetime) -> None:
        """Delete the record for the key if it expired before `now`."""
        ...


class SqlAlchemyOtpStore:
    """OtpStore backed by the `otp_verifications` table."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def _fail(self, operation: str, error: Exception) -> StorageFailure:
        logger.error(f"OTP store {operation} failed: {error!r}")
        try:
            await self._db.rollback()
        except STORE_ERRORS as rollback_error:
            # Connection already gone; the session is discarded with the request
            logger.warning(f"OTP store rollback after {operation} failed: {rollback_error!r}")
        return StorageFailure()

    async def upsert(
        self,
        email: str,
        application_id: str,
        code: str,
        created_at: datetime,
        expires_at: datetime,
    ) -> None:
        stmt = insert(OtpRecord).values(
            id=uuid.uuid4(),
            email=email,
            application_id=application_id,
            code=code,
            consumed=False,
            created_at=created_at,
            expires_at=expires_at,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_otp_verifications_email_application",
            set_={
                "code": stmt.excluded.code,
                "consumed": False,
                "created_at": stmt.excluded.created_at,
                "expires_at": stmt.excluded.expires_at,
            },
        )
        try:
            await self._db.execute(stmt)
            await self._db.commit()
        except STORE_ERRORS as e:
            raise await self._fail("upsert", e) from e

    async def find_active(self, email: str, application_id: str) -> OtpRecord | None:
        try:
            result = await self._db.execute(
                select(OtpRecord).where(
                    OtpRecord.email == email,
                    OtpRecord.application_id == application_id,
                    OtpRecord.consumed.is_(False),
                )
            )
            return result.scalar_one_or_none()
        except STORE_ERRORS as e:
            raise await self._fail("lookup", e) from e

    async def conditional_consume(self, email: str, application_id: str, code: str) -> bool:
        stmt = (
            update(OtpRecord)
            .where(
                OtpRecord.email == email,
                OtpRecord.application_id == application_id,
                OtpRecord.code == code,
                OtpRecord.consumed.is_(False),
            )
            .values(consumed=True)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._db.execute(stmt)
            await self._db.commit()
        except STORE_ERRORS as e:
            raise await self._fail("consume", e) from e

        return result.rowcount == 1

    async def delete_expired(self, email: str, application_id: str, now: datetime) -> None:
        stmt = delete(OtpRecord).where(
            OtpRecord.email == email,
            OtpRecord.application_id == application_id,
            OtpRecord.expires_at < now,
        )
        try:
            await self._db.execute(stmt)
            await self._db.commit()
        except STORE_ERRORS as e:
            raise await self._fail("delete", e) from e
