"""
Admissions Admin Router

API endpoints for administrators to review admission applications.
All endpoints require an admin JWT.

Endpoints:
- GET /admin/admissions - List applications with filters
- GET /admin/admissions/{identifier} - Get application details
- PUT /admin/admissions/{identifier}/review - Review (status, remarks, document checks)

`identifier` is either the application's UUID or its public application ID.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AdminUser, get_current_admin_user
from app.core.database import get_db
from app.core.rate_limit import enforce_rate_limit
from app.modules.admissions import service
from app.modules.admissions.models import AdmissionStatus
from app.modules.admissions.schemas import (
    AdmissionListItem,
    AdmissionListResponse,
    AdmissionResponse,
    ReviewRequest,
    ReviewResponse,
)
from app.modules.admissions.service import AdmissionServiceError

logger = logging.getLogger(__name__)

router = APIRouter()

# 30 reviews per minute per admin
RATE_LIMIT_REVIEW = (30, 60)


def _handle_service_error(e: AdmissionServiceError) -> HTTPException:
    """Convert service errors to HTTPExceptions."""
    return HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    )


@router.get(
    "",
    response_model=AdmissionListResponse,
    summary="List Admission Applications",
)
async def list_admissions(
    status: AdmissionStatus | None = Query(None, description="Filter by review status"),
    class_applied: str | None = Query(None, max_length=20, description="Filter by class"),
    q: str | None = Query(None, max_length=200, description="Search student name or application ID"),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin_user),
) -> AdmissionListResponse:
    """List applications, newest first."""
    applications = await service.admin_list_applications(
        db, status=status, class_applied=class_applied, q=q, limit=limit
    )
    logger.debug(f"Admin {admin.id} listed {len(applications)} applications")
    return AdmissionListResponse(
        admissions=[AdmissionListItem.model_validate(app) for app in applications]
    )


@router.get(
    "/{identifier}",
    response_model=AdmissionResponse,
    summary="Get Admission Application",
    responses={404: {"description": "Application not found"}},
)
async def get_admission(
    identifier: str,
    db: AsyncSession = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin_user),
) -> AdmissionResponse:
    """Get one application by UUID or application ID."""
    try:
        application = await service.admin_get_application(db, identifier)
    except AdmissionServiceError as e:
        raise _handle_service_error(e) from e

    return AdmissionResponse.model_validate(application)


@router.put(
    "/{identifier}/review",
    response_model=ReviewResponse,
    summary="Review Admission Application",
    description="""
Update status, remarks and/or document checks.

Any status can be set, including correcting an earlier decision. Moving to
`approved` or `rejected` emails the applicant.
""",
    responses={
        404: {"description": "Application not found"},
        429: {"description": "Too many review actions"},
    },
)
async def review_admission(
    identifier: str,
    data: ReviewRequest,
    db: AsyncSession = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin_user),
) -> ReviewResponse:
    """Apply an admin review."""
    limit, window_seconds = RATE_LIMIT_REVIEW
    await enforce_rate_limit(f"admin:review:{admin.id}", limit, window_seconds)

    try:
        return await service.admin_review_application(db, identifier, data, admin)
    except AdmissionServiceError as e:
        raise _handle_service_error(e) from e
