"""
OTP Notification Sender

Delivers an issued code to the applicant. The lifecycle manager only
depends on the `OtpNotifier` protocol; `EmailOtpNotifier` is the
production implementation over the Resend email service.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from app.core.email import send_otp_email

from .exceptions import DeliveryFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OtpMessage:
    """Template data for an OTP message."""

    code: str
    application_id: str
    expiry_minutes: int
    recipient_name: str | None = None


class OtpNotifier(Protocol):
    async def send(self, recipient_email: str, template_data: OtpMessage) -> None:
        """Deliver the code or raise DeliveryFailure."""
        ...


class EmailOtpNotifier:
    """Sends OTPs as transactional email."""

    async def send(self, recipient_email: str, template_data: OtpMessage) -> None:
        sent = await send_otp_email(
            to_email=recipient_email,
            recipient_name=template_data.recipient_name,
            application_id=template_data.application_id,
            otp=template_data.code,
            expiry_minutes=template_data.expiry_minutes,
        )
        if not sent:
            logger.error(f"OTP email was not delivered for application {template_data.application_id}")
            raise DeliveryFailure()
