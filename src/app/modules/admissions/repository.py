"""
Admissions Repository

Database operations for admission applications.

Design Principles:
- All queries are parameterized (no SQL injection)
- Single responsibility - only database operations, no business logic
- Timezone-aware datetime handling (UTC)
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import AdmissionApplication, AdmissionStatus, PaymentStatus
from .schemas import AdmissionCreate


async def create(
    db: AsyncSession,
    data: AdmissionCreate,
    application_id: str,
    email: str,
) -> AdmissionApplication:
    """Create a new admission application."""

    new_application = AdmissionApplication(
        application_id=application_id,
        student_name=data.student_name,
        date_of_birth=data.date_of_birth,
        gender=data.gender,
        class_applied=data.class_applied,
        previous_school=data.previous_school,
        address=data.address,
        father_name=data.father_name,
        mother_name=data.mother_name,
        father_mobile=data.father_mobile,
        mother_mobile=data.mother_mobile,
        email=email,
        aadhaar=data.aadhaar,
        category=data.category,
        passport_photo_url=data.passport_photo_url,
        previous_marksheet_url=data.previous_marksheet_url,
        address_proof_url=data.address_proof_url,
        status=AdmissionStatus.PENDING,
        payment_status=PaymentStatus.PENDING,
    )

    db.add(new_application)
    await db.commit()
    await db.refresh(new_application)

    return new_application


async def get_by_application_id(db: AsyncSession, application_id: str) -> AdmissionApplication | None:
    """Get application by its public application ID."""
    result = await db.execute(
        select(AdmissionApplication).where(AdmissionApplication.application_id == application_id)
    )
    return result.scalar_one_or_none()


async def get_by_identifier(db: AsyncSession, identifier: str) -> AdmissionApplication | None:
    """
    Get application by primary key UUID or by public application ID.

    Admin URLs accept either form.
    """
    try:
        application = await db.get(AdmissionApplication, UUID(identifier))
    except ValueError:
        application = None

    if application is not None:
        return application

    return await get_by_application_id(db, identifier)


async def list_applications(
    db: AsyncSession,
    status: AdmissionStatus | None = None,
    class_applied: str | None = None,
    search: str | None = None,
    limit: int = 100,
) -> list[AdmissionApplication]:
    """List applications, newest first, with optional filters."""
    query = select(AdmissionApplication)

    if status:
        query = query.where(AdmissionApplication.status == status)
    if class_applied:
        query = query.where(AdmissionApplication.class_applied == class_applied)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                AdmissionApplication.student_name.ilike(pattern),
                AdmissionApplication.application_id.ilike(pattern),
            )
        )

    query = query.order_by(AdmissionApplication.created_at.desc()).limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())


async def update_review(
    db: AsyncSession,
    application: AdmissionApplication,
    status: AdmissionStatus | None = None,
    remarks: str | None = None,
    document_checks: list[dict] | None = None,
) -> AdmissionApplication:
    """
    Apply an admin review to an application.

    Only provided fields are changed. Any status may be set, including
    correcting an earlier approve or reject decision.
    """
    if status is not None:
        application.status = status

    if remarks:
        application.remarks = remarks
    if document_checks:
        application.document_checks = document_checks

    application.updated_at = datetime.now(UTC)

    await db.commit()
    await db.refresh(application)

    return application


async def mark_payment_completed(
    db: AsyncSession,
    application: AdmissionApplication,
    payment_screenshot_url: str | None = None,
) -> AdmissionApplication:
    """Set payment_status to completed and store the proof URL if given."""
    application.payment_status = PaymentStatus.COMPLETED
    if payment_screenshot_url:
        application.payment_screenshot_url = payment_screenshot_url
    application.updated_at = datetime.now(UTC)

    await db.commit()
    await db.refresh(application)

    return application
