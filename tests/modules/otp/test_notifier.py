"""
Unit tests for the email OTP notifier.
"""

from unittest.mock import AsyncMock, patch

import pytest

from app.modules.otp.exceptions import DeliveryFailure
from app.modules.otp.notifier import EmailOtpNotifier, OtpMessage


@pytest.fixture
def message():
    return OtpMessage(code="482913", application_id="APP1", expiry_minutes=10, recipient_name="Asha")


class TestEmailOtpNotifier:
    """Tests for EmailOtpNotifier.send."""

    @pytest.mark.asyncio
    async def test_send_passes_template_data(self, message):
        with patch(
            "app.modules.otp.notifier.send_otp_email", new=AsyncMock(return_value=True)
        ) as mock_email:
            await EmailOtpNotifier().send("a@x.com", message)

        mock_email.assert_awaited_once_with(
            to_email="a@x.com",
            recipient_name="Asha",
            application_id="APP1",
            otp="482913",
            expiry_minutes=10,
        )

    @pytest.mark.asyncio
    async def test_unsent_email_raises_delivery_failure(self, message):
        with patch("app.modules.otp.notifier.send_otp_email", new=AsyncMock(return_value=False)):
            with pytest.raises(DeliveryFailure):
                await EmailOtpNotifier().send("a@x.com", message)
