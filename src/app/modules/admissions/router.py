"""
Admissions Router

Public API endpoints for applicants. No account is needed; access to an
existing application is gated by an email OTP.

Endpoints:
- POST /admissions - Submit a new application
- POST /admissions/otp - Email an OTP for an existing application
- POST /admissions/track - View an application (OTP required)
- POST /admissions/track/payment - Record payment proof (OTP required)

Security:
- OTP requests are rate limited per (email, application_id)
- Each OTP is single-use
- Unknown applications and mismatched emails look the same
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.rate_limit import enforce_rate_limit
from app.modules.admissions import service
from app.modules.admissions.schemas import (
    AdmissionCreate,
    AdmissionResponse,
    AdmissionSubmitResponse,
    ApplicationOtpRequest,
    PaymentProofRequest,
    TrackRequest,
    TrackResponse,
)
from app.modules.admissions.service import AdmissionServiceError
from app.modules.otp.dependencies import get_otp_manager
from app.modules.otp.exceptions import OtpServiceError
from app.modules.otp.router import otp_request_rate_limit_key
from app.modules.otp.schemas import RequestOtpResponse
from app.modules.otp.service import OtpManager

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_http_exception(e: AdmissionServiceError | OtpServiceError) -> HTTPException:
    return HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    )


@router.post(
    "",
    response_model=AdmissionSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Admission Application",
    description="""
Submit a new admission application.

Document fields take URLs of files already uploaded by the client.
If `application_id` is omitted, one is generated (e.g. `APP-3F9A1C7E`).
""",
    responses={
        409: {
            "description": "Application ID already in use",
            "content": {
                "application/json": {
                    "example": {
                        "error": "DUPLICATE_APPLICATION",
                        "message": "An application with ID APP1 already exists.",
                    }
                }
            },
        },
    },
)
async def submit_application(
    data: AdmissionCreate,
    db: AsyncSession = Depends(get_db),
) -> AdmissionSubmitResponse:
    """Submit a new admission application."""
    try:
        return await service.submit_application(db, data)
    except AdmissionServiceError as e:
        logger.warning(f"Application submission rejected: {e.message}")
        raise _to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Unexpected error submitting application: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred. Please try again later.",
            },
        ) from e


@router.post(
    "/otp",
    response_model=RequestOtpResponse,
    summary="Request Tracking OTP",
    description="""
Email a 6-digit code for an existing application.

The email must match the one on the application. A new request replaces
any earlier code.
""",
    responses={
        404: {"description": "Application not found"},
        429: {"description": "Too many requests"},
        502: {"description": "Email could not be sent"},
        503: {"description": "Code could not be stored"},
    },
)
async def request_application_otp(
    data: ApplicationOtpRequest,
    db: AsyncSession = Depends(get_db),
    otp_manager: OtpManager = Depends(get_otp_manager),
) -> RequestOtpResponse:
    """Request an OTP for tracking or payment."""
    await enforce_rate_limit(
        otp_request_rate_limit_key(data.email, data.application_id),
        settings.otp_request_rate_limit,
        settings.otp_request_rate_window_seconds,
    )

    try:
        issued = await service.request_application_otp(
            db, otp_manager, data.application_id, data.email
        )
    except (AdmissionServiceError, OtpServiceError) as e:
        raise _to_http_exception(e) from e

    return RequestOtpResponse(
        message="OTP sent to your email",
        expires_at=issued.expires_at,
        expires_in_minutes=otp_manager.expiry_minutes,
    )


@router.post(
    "/track",
    response_model=TrackResponse,
    summary="Track Application",
    description="""
View an application using the emailed OTP. The OTP is consumed.
""",
    responses={
        400: {"description": "Invalid OTP"},
        404: {"description": "OTP not found or already used, or application not found"},
        410: {"description": "OTP has expired"},
    },
)
async def track_application(
    data: TrackRequest,
    db: AsyncSession = Depends(get_db),
    otp_manager: OtpManager = Depends(get_otp_manager),
) -> TrackResponse:
    """Return the application after OTP verification."""
    try:
        application = await service.track_application(
            db, otp_manager, data.application_id, data.email, data.otp
        )
    except AdmissionServiceError as e:
        raise _to_http_exception(e) from e

    return TrackResponse(application=AdmissionResponse.model_validate(application))


@router.post(
    "/track/payment",
    response_model=TrackResponse,
    summary="Submit Payment Proof",
    description="""
Mark the application's fee as paid and attach the payment screenshot URL.
Requires a fresh OTP, which is consumed.
""",
    responses={
        400: {"description": "Invalid OTP"},
        404: {"description": "OTP not found or already used, or application not found"},
        410: {"description": "OTP has expired"},
    },
)
async def submit_payment_proof(
    data: PaymentProofRequest,
    db: AsyncSession = Depends(get_db),
    otp_manager: OtpManager = Depends(get_otp_manager),
) -> TrackResponse:
    """Record payment proof after OTP verification."""
    try:
        application = await service.submit_payment_proof(
            db,
            otp_manager,
            data.application_id,
            data.email,
            data.otp,
            payment_screenshot_url=data.payment_screenshot_url,
        )
    except AdmissionServiceError as e:
        raise _to_http_exception(e) from e

    return TrackResponse(application=AdmissionResponse.model_validate(application))
