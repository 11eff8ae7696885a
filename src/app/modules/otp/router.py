"""
OTP Router

Public endpoints for email one-time passcodes.

Endpoints:
- POST /otp/request - Issue a code for (email, application_id) and email it
- POST /otp/verify - Verify a candidate code

Security:
- Requests are rate limited per (email, application_id) slot
- A NOT_FOUND response never says whether the slot is unknown or the code
  was already used
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from app.core.config import settings
from app.core.rate_limit import enforce_rate_limit
from app.modules.otp.dependencies import get_otp_manager
from app.modules.otp.exceptions import OtpServiceError
from app.modules.otp.schemas import (
    RequestOtpRequest,
    RequestOtpResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from app.modules.otp.service import OUTCOME_STATUS_CODES, OtpManager, normalize_email

logger = logging.getLogger(__name__)

router = APIRouter()


def otp_request_rate_limit_key(email: str, application_id: str) -> str:
    return f"otp_request:{normalize_email(email)}:{application_id}"


def _handle_service_error(e: OtpServiceError) -> HTTPException:
    return HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    )


@router.post(
    "/request",
    response_model=RequestOtpResponse,
    summary="Request Email OTP",
    description="""
Issue a 6-digit code for the (email, application_id) pair and email it.

Requesting again replaces the previous code, which stops working immediately.
Codes expire after the configured TTL (10 minutes by default).
""",
    responses={
        429: {"description": "Too many requests for this email and application"},
        502: {"description": "Code issued but the email could not be sent"},
        503: {"description": "Code could not be stored"},
    },
)
async def request_otp(
    data: RequestOtpRequest,
    otp_manager: OtpManager = Depends(get_otp_manager),
) -> RequestOtpResponse:
    """Issue and deliver an OTP."""
    await enforce_rate_limit(
        otp_request_rate_limit_key(data.email, data.application_id),
        settings.otp_request_rate_limit,
        settings.otp_request_rate_window_seconds,
    )

    try:
        issued = await otp_manager.request(data.email, data.application_id, data.name)
    except OtpServiceError as e:
        logger.error(f"OTP request failed for application {data.application_id}: {e.message}")
        raise _handle_service_error(e) from e

    return RequestOtpResponse(
        message="OTP sent to your email",
        expires_at=issued.expires_at,
        expires_in_minutes=otp_manager.expiry_minutes,
    )


@router.post(
    "/verify",
    response_model=VerifyOtpResponse,
    summary="Verify Email OTP",
    description="""
Verify a code for the (email, application_id) pair.

| Outcome | Status |
|---|---|
| verified | 200 |
| mismatch | 400 |
| not_found | 404 |
| expired | 410 |
| verification_error | 500 |

A code can be verified once. A wrong code does not use up the current code.
""",
)
async def verify_otp(
    data: VerifyOtpRequest,
    response: Response,
    otp_manager: OtpManager = Depends(get_otp_manager),
) -> VerifyOtpResponse:
    """Verify an OTP and report the outcome."""
    result = await otp_manager.verify(data.email, data.application_id, data.otp)

    response.status_code = OUTCOME_STATUS_CODES[result.outcome]
    return VerifyOtpResponse(
        valid=result.valid,
        outcome=result.outcome,
        message=result.message,
    )
