"""
Admissions Service Layer

Business logic for student admission applications.
Orchestrates repository operations, OTP verification and email notifications.

This module implements:
1. Submission:
   - Create the application (status pending, payment pending)
   - Generate a public application ID when the client omits one

2. Applicant access (OTP-gated):
   - Request an OTP for an existing (application_id, email) pair
   - Track an application with a verified OTP
   - Record payment proof with a verified OTP

3. Admin review:
   - List and search applications
   - View one application by UUID or application ID
   - Review (status, remarks, document checks) and notify on decisions

Security considerations:
- An OTP is single-use, so tracking and payment each need a fresh code
- Unknown applications and email mismatches produce the same error
- OTP codes are never logged; emails are masked in logs
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AdminUser
from app.core.email import send_admin_status_email
from app.modules.admissions import repository
from app.modules.admissions.helpers import generate_application_id, mask_email
from app.modules.admissions.models import AdmissionApplication, AdmissionStatus
from app.modules.admissions.schemas import (
    AdmissionCreate,
    AdmissionResponse,
    AdmissionSubmitResponse,
    ReviewRequest,
    ReviewResponse,
)
from app.modules.otp.service import (
    OUTCOME_STATUS_CODES,
    IssuedOtp,
    OtpManager,
    VerificationOutcome,
    normalize_email,
)

logger = logging.getLogger(__name__)

# Constants
DECISION_STATUSES = {AdmissionStatus.APPROVED, AdmissionStatus.REJECTED}
MAX_LIST_LIMIT = 500


class AdmissionServiceError(Exception):
    """Base exception for admission service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class DuplicateApplicationError(AdmissionServiceError):
    """Raised when the application ID is already taken."""

    def __init__(self, application_id: str):
        super().__init__(
            message=f"An application with ID {application_id} already exists.",
            error_code="DUPLICATE_APPLICATION",
            status_code=409,
        )


class ApplicationNotFoundError(AdmissionServiceError):
    """Raised when an application is not found (or the email does not match)."""

    def __init__(self):
        super().__init__(
            message="Application not found",
            error_code="APPLICATION_NOT_FOUND",
            status_code=404,
        )


class OtpVerificationFailedError(AdmissionServiceError):
    """Raised when an OTP-gated operation is attempted without a valid code."""

    def __init__(self, outcome: VerificationOutcome, message: str):
        self.outcome = outcome
        super().__init__(
            message=message,
            error_code=f"OTP_{outcome.name}",
            status_code=OUTCOME_STATUS_CODES[outcome],
        )


def _email_matches(application: AdmissionApplication, email: str) -> bool:
    return normalize_email(application.email) == normalize_email(email)


async def submit_application(
    db: AsyncSession,
    data: AdmissionCreate,
) -> AdmissionSubmitResponse:
    """
    Submit a new admission application.

    Args:
        db: Database session
        data: Application data from the request

    Returns:
        AdmissionSubmitResponse with the stored application

    Raises:
        DuplicateApplicationError: If the application ID is already used
    """
    application_id = data.application_id or generate_application_id()

    existing = await repository.get_by_application_id(db, application_id)
    if existing:
        logger.warning(f"Duplicate application ID submitted: {application_id}")
        raise DuplicateApplicationError(application_id)

    try:
        application = await repository.create(
            db,
            data,
            application_id=application_id,
            email=normalize_email(data.email),
        )
    except IntegrityError as e:
        # Lost a race with a concurrent submission using the same ID
        await db.rollback()
        logger.warning(f"Duplicate application ID on insert: {application_id}")
        raise DuplicateApplicationError(application_id) from e

    logger.info(f"Created application {application.application_id} for {mask_email(application.email)}")

    return AdmissionSubmitResponse(
        message="Application submitted. Request an OTP to track your application.",
        application=AdmissionResponse.model_validate(application),
    )


async def request_application_otp(
    db: AsyncSession,
    otp_manager: OtpManager,
    application_id: str,
    email: str,
) -> IssuedOtp:
    """
    Issue and email an OTP for an existing application.

    Raises:
        ApplicationNotFoundError: If no application matches the ID and email
        StorageFailure: If the code could not be stored
        DeliveryFailure: If the email could not be sent
    """
    application = await repository.get_by_application_id(db, application_id)

    if not application or not _email_matches(application, email):
        logger.warning(f"OTP requested for unknown application/email pair: {application_id}")
        raise ApplicationNotFoundError()

    return await otp_manager.request(
        application.email,
        application.application_id,
        recipient_name=application.student_name,
    )


async def _get_verified_application(
    db: AsyncSession,
    otp_manager: OtpManager,
    application_id: str,
    email: str,
    otp: str,
) -> AdmissionApplication:
    """
    Verify the OTP for (email, application_id) and load the application.

    Raises:
        OtpVerificationFailedError: If the OTP outcome is not VERIFIED
        ApplicationNotFoundError: If the application is missing or its email differs
    """
    result = await otp_manager.verify(email, application_id, otp)

    if not result.valid:
        raise OtpVerificationFailedError(result.outcome, result.message)

    application = await repository.get_by_application_id(db, application_id)

    if not application or not _email_matches(application, email):
        logger.warning(f"Verified OTP does not match an application: {application_id}")
        raise ApplicationNotFoundError()

    return application


async def track_application(
    db: AsyncSession,
    otp_manager: OtpManager,
    application_id: str,
    email: str,
    otp: str,
) -> AdmissionApplication:
    """Return an application to its applicant after OTP verification."""
    application = await _get_verified_application(db, otp_manager, application_id, email, otp)
    logger.info(f"Application {application_id} tracked by applicant")
    return application


async def submit_payment_proof(
    db: AsyncSession,
    otp_manager: OtpManager,
    application_id: str,
    email: str,
    otp: str,
    payment_screenshot_url: str | None = None,
) -> AdmissionApplication:
    """Mark the application's payment as completed after OTP verification."""
    application = await _get_verified_application(db, otp_manager, application_id, email, otp)

    application = await repository.mark_payment_completed(db, application, payment_screenshot_url)
    logger.info(f"Payment recorded for application {application_id}")

    return application


# ============================================
# Admin operations
# ============================================


async def admin_list_applications(
    db: AsyncSession,
    status: AdmissionStatus | None = None,
    class_applied: str | None = None,
    q: str | None = None,
    limit: int = 100,
) -> list[AdmissionApplication]:
    """List applications for the admin dashboard."""
    limit = max(1, min(limit, MAX_LIST_LIMIT))
    return await repository.list_applications(
        db,
        status=status,
        class_applied=class_applied,
        search=q.strip() if q else None,
        limit=limit,
    )


async def admin_get_application(
    db: AsyncSession,
    identifier: str,
) -> AdmissionApplication:
    """
    Get an application by UUID or application ID.

    Raises:
        ApplicationNotFoundError: If nothing matches
    """
    application = await repository.get_by_identifier(db, identifier)

    if not application:
        raise ApplicationNotFoundError()

    return application


async def admin_review_application(
    db: AsyncSession,
    identifier: str,
    data: ReviewRequest,
    admin: AdminUser,
) -> ReviewResponse:
    """
    Apply an admin review.

    When the status changes to approved or rejected the applicant is emailed.
    A failed email is logged and does not fail the review.

    Raises:
        ApplicationNotFoundError: If nothing matches
    """
    application = await admin_get_application(db, identifier)
    previous_status = application.status

    application = await repository.update_review(
        db,
        application,
        status=data.status,
        remarks=data.remarks,
        document_checks=[check.model_dump() for check in data.document_checks],
    )

    logger.info(
        f"Admin {admin.id} reviewed application {application.application_id}: "
        f"{previous_status.value} -> {application.status.value}"
    )

    notification_sent = False
    if application.status in DECISION_STATUSES and application.status != previous_status:
        try:
            notification_sent = await send_admin_status_email(
                to_email=application.email,
                recipient_name=application.student_name,
                application_id=application.application_id,
                status=application.status.value,
                remarks=application.remarks,
            )
        except Exception as e:
            logger.error(f"Failed to send status email for {application.application_id}: {e}")

    return ReviewResponse(
        admission=AdmissionResponse.model_validate(application),
        notification_sent=notification_sent,
    )
