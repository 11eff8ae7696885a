"""
Fixtures for OTP tests.

The in-memory store mirrors the database store's contract: one record per
(email, application_id), upsert resets `consumed`, and the consume is an
atomic compare-and-set. `find_active` yields to the event loop so concurrent
verifiers interleave the way they would against a real database.
"""

import asyncio
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.modules.otp.exceptions import DeliveryFailure, StorageFailure
from app.modules.otp.notifier import OtpMessage
from app.modules.otp.service import OtpManager


@dataclass
class StoredOtp:
    email: str
    application_id: str
    code: str
    consumed: bool
    created_at: datetime
    expires_at: datetime


class InMemoryOtpStore:
    """OtpStore over a dict. Operations named in `failing` raise StorageFailure."""

    def __init__(self):
        self.records: dict[tuple[str, str], StoredOtp] = {}
        self.failing: set[str] = set()

    def _check(self, operation: str) -> None:
        if operation in self.failing:
            raise StorageFailure()

    async def upsert(self, email, application_id, code, created_at, expires_at):
        self._check("upsert")
        self.records[(email, application_id)] = StoredOtp(
            email=email,
            application_id=application_id,
            code=code,
            consumed=False,
            created_at=created_at,
            expires_at=expires_at,
        )

    async def find_active(self, email, application_id):
        self._check("find_active")
        await asyncio.sleep(0)
        record = self.records.get((email, application_id))
        if record is None or record.consumed:
            return None
        return replace(record)

    async def conditional_consume(self, email, application_id, code):
        self._check("conditional_consume")
        record = self.records.get((email, application_id))
        if record is None or record.consumed or record.code != code:
            return False
        record.consumed = True
        return True

    async def delete_expired(self, email, application_id, now):
        self._check("delete_expired")
        record = self.records.get((email, application_id))
        if record is not None and record.expires_at < now:
            del self.records[(email, application_id)]


class RecordingNotifier:
    """Collects sent messages instead of delivering them."""

    def __init__(self):
        self.sent: list[tuple[str, OtpMessage]] = []
        self.error: Exception | None = None

    async def send(self, recipient_email, template_data):
        if self.error is not None:
            raise self.error
        self.sent.append((recipient_email, template_data))

    @property
    def last_code(self) -> str:
        return self.sent[-1][1].code


class MutableClock:
    """Test clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def store():
    return InMemoryOtpStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return MutableClock(datetime(2026, 1, 15, 9, 0, tzinfo=UTC))


@pytest.fixture
def otp_manager(store, notifier, clock):
    """OtpManager with a 10 minute TTL over in-memory collaborators."""
    return OtpManager(
        store=store,
        notifier=notifier,
        ttl=timedelta(minutes=10),
        clock=clock,
    )


@pytest.fixture
def failing_notifier(notifier):
    notifier.error = DeliveryFailure()
    return notifier


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db
