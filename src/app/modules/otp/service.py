"""
OTP Service Layer

Issues and verifies email one-time passcodes for admissions applicants.

Each code belongs to an (email, application_id) slot:
1. Issue:
   - Generate a 6-digit code from a CSPRNG
   - Upsert the slot's record (older codes for the slot stop working)
2. Request:
   - Issue, then hand the code to the notification sender
   - A failed delivery leaves the issued code valid
3. Verify (each step is terminal):
   - No unconsumed record      -> NOT_FOUND
   - Record past expires_at    -> delete it, EXPIRED
   - Code differs              -> MISMATCH (record kept for retries)
   - Code matches              -> conditional consume, VERIFIED
     (a consume that affects no row lost a race -> NOT_FOUND)

Security considerations:
- NOT_FOUND does not reveal whether the slot never existed or the code was
  already used
- Codes are compared in constant time
- Codes are never logged
"""

import enum
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from app.core.config import settings

from .exceptions import DeliveryFailure, StorageFailure
from .notifier import OtpMessage, OtpNotifier
from .repository import OtpStore

logger = logging.getLogger(__name__)

# Constants
OTP_MIN = 100000
OTP_MAX = 999999
OTP_LENGTH = 6


class VerificationOutcome(str, enum.Enum):
    """Terminal result of a verification attempt."""

    VERIFIED = "verified"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MISMATCH = "mismatch"
    VERIFICATION_ERROR = "verification_error"


OUTCOME_MESSAGES: dict[VerificationOutcome, str] = {
    VerificationOutcome.VERIFIED: "OTP verified successfully",
    VerificationOutcome.NOT_FOUND: "OTP not found or already used",
    VerificationOutcome.EXPIRED: "OTP has expired",
    VerificationOutcome.MISMATCH: "Invalid OTP",
    VerificationOutcome.VERIFICATION_ERROR: "Error verifying OTP",
}

# Distinct HTTP status per outcome at the API boundary
OUTCOME_STATUS_CODES: dict[VerificationOutcome, int] = {
    VerificationOutcome.VERIFIED: 200,
    VerificationOutcome.MISMATCH: 400,
    VerificationOutcome.NOT_FOUND: 404,
    VerificationOutcome.EXPIRED: 410,
    VerificationOutcome.VERIFICATION_ERROR: 500,
}


@dataclass(frozen=True)
class VerificationResult:
    outcome: VerificationOutcome

    @property
    def valid(self) -> bool:
        return self.outcome is VerificationOutcome.VERIFIED

    @property
    def message(self) -> str:
        return OUTCOME_MESSAGES[self.outcome]


@dataclass(frozen=True)
class IssuedOtp:
    """A freshly persisted code. Only ever handed to the notification sender."""

    email: str
    application_id: str
    code: str
    expires_at: datetime


def generate_otp() -> str:
    """
    Generate a 6-digit one-time passcode.

    Uniform over 100000-999999 inclusive, so the code never has a leading zero.
    Uses the `secrets` CSPRNG.

    Returns:
        The code as a 6-character string
    """
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def normalize_email(email: str) -> str:
    """Canonical form of an email for use in a slot key."""
    return email.strip().lower()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class OtpManager:
    """
    Lifecycle manager for admissions OTPs.

    Holds no state of its own; the store is the only shared resource.

    Args:
        store: Record store for OTP state
        notifier: Notification sender used by `request`
        ttl: Validity of an issued code (defaults to OTP_EXPIRY_MINUTES)
        clock: Returns the current aware UTC datetime
    """

    def __init__(
        self,
        store: OtpStore,
        notifier: OtpNotifier,
        ttl: timedelta | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.notifier = notifier
        self.ttl = ttl or timedelta(minutes=settings.otp_expiry_minutes)
        self.clock = clock

    @property
    def expiry_minutes(self) -> int:
        return max(1, int(self.ttl.total_seconds() // 60))

    @staticmethod
    def generate() -> str:
        return generate_otp()

    async def issue(self, email: str, application_id: str) -> IssuedOtp:
        """
        Generate and persist a code for the slot.

        Any code previously issued for the slot stops being verifiable.

        Raises:
            StorageFailure: If the store rejects the write. Do not deliver in that case.
        """
        if not email or not application_id:
            raise ValueError("email and application_id are required")

        email = normalize_email(email)
        code = self.generate()
        now = self.clock()
        expires_at = now + self.ttl

        await self.store.upsert(email, application_id, code, now, expires_at)
        logger.info(f"Issued OTP for application {application_id} (expires {expires_at.isoformat()})")

        return IssuedOtp(
            email=email,
            application_id=application_id,
            code=code,
            expires_at=expires_at,
        )

    async def request(
        self,
        email: str,
        application_id: str,
        recipient_name: str | None = None,
    ) -> IssuedOtp:
        """
        Issue a code and deliver it to the applicant.

        Raises:
            StorageFailure: If the code could not be persisted (nothing is sent)
            DeliveryFailure: If sending failed; the persisted code remains valid
        """
        issued = await self.issue(email, application_id)

        message = OtpMessage(
            code=issued.code,
            application_id=application_id,
            expiry_minutes=self.expiry_minutes,
            recipient_name=recipient_name,
        )
        try:
            await self.notifier.send(issued.email, message)
        except DeliveryFailure:
            raise
        except Exception as e:
            logger.error(f"Exception delivering OTP for application {application_id}: {e}")
            raise DeliveryFailure() from e

        return issued

    async def verify(
        self,
        email: str,
        application_id: str,
        candidate_code: str,
    ) -> VerificationResult:
        """
        Check a candidate code against the slot's active record.

        Never raises for an invalid attempt; store errors become
        VERIFICATION_ERROR.
        """
        email = normalize_email(email)

        try:
            record = await self.store.find_active(email, application_id)

            if record is None:
                logger.warning(f"OTP verification for application {application_id}: not found")
                return VerificationResult(VerificationOutcome.NOT_FOUND)

            now = self.clock()
            if now > record.expires_at:
                await self.store.delete_expired(email, application_id, now)
                logger.warning(f"OTP verification for application {application_id}: expired")
                return VerificationResult(VerificationOutcome.EXPIRED)

            if not secrets.compare_digest(record.code.encode(), candidate_code.encode()):
                logger.warning(f"OTP verification for application {application_id}: mismatch")
                return VerificationResult(VerificationOutcome.MISMATCH)

            consumed = await self.store.conditional_consume(email, application_id, record.code)
        except StorageFailure as e:
            logger.error(f"Error verifying OTP for application {application_id}: {e.message}")
            return VerificationResult(VerificationOutcome.VERIFICATION_ERROR)

        if not consumed:
            # Another verifier consumed it first
            logger.warning(f"OTP verification for application {application_id}: lost consume race")
            return VerificationResult(VerificationOutcome.NOT_FOUND)

        logger.info(f"OTP verified for application {application_id}")
        return VerificationResult(VerificationOutcome.VERIFIED)
