"""
Admissions Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

# Re-use enums from models
from app.modules.admissions.models import AdmissionStatus, PaymentStatus


class AdmissionCreate(BaseModel):
    """Request body for POST /admissions."""

    application_id: str | None = Field(None, min_length=1, max_length=100)
    student_name: str = Field(..., min_length=1, max_length=200)
    date_of_birth: str | None = Field(None, max_length=20)
    gender: str | None = Field(None, max_length=20)
    class_applied: str = Field(..., min_length=1, max_length=20)
    previous_school: str | None = Field(None, max_length=200)
    address: str | None = Field(None, max_length=500)
    father_name: str | None = Field(None, max_length=200)
    mother_name: str | None = Field(None, max_length=200)
    father_mobile: str | None = Field(None, max_length=20)
    mother_mobile: str | None = Field(None, max_length=20)
    email: EmailStr
    aadhaar: str | None = Field(None, max_length=20)
    category: str | None = Field(None, max_length=50)

    # Documents are uploaded by the client beforehand; only URLs are stored
    passport_photo_url: str | None = Field(None, max_length=1000)
    previous_marksheet_url: str | None = Field(None, max_length=1000)
    address_proof_url: str | None = Field(None, max_length=1000)


class AdmissionResponse(BaseModel):
    """Full application as returned to the applicant or an admin."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    application_id: str
    student_name: str
    date_of_birth: str | None = None
    gender: str | None = None
    class_applied: str
    previous_school: str | None = None
    address: str | None = None
    father_name: str | None = None
    mother_name: str | None = None
    father_mobile: str | None = None
    mother_mobile: str | None = None
    email: str
    aadhaar: str | None = None
    category: str | None = None
    passport_photo_url: str | None = None
    previous_marksheet_url: str | None = None
    address_proof_url: str | None = None
    status: AdmissionStatus
    remarks: str | None = None
    document_checks: list[dict] | None = None
    payment_status: PaymentStatus
    payment_screenshot_url: str | None = None
    created_at: datetime
    updated_at: datetime


class AdmissionSubmitResponse(BaseModel):
    """Response after submitting an application."""

    success: bool = True
    message: str
    application: AdmissionResponse


class ApplicationOtpRequest(BaseModel):
    """Request body for POST /admissions/otp."""

    application_id: str = Field(..., min_length=1, max_length=100)
    email: EmailStr


class TrackRequest(BaseModel):
    """Request body for POST /admissions/track."""

    application_id: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    otp: str = Field(..., min_length=1, max_length=12)


class PaymentProofRequest(TrackRequest):
    """Request body for POST /admissions/track/payment."""

    payment_screenshot_url: str | None = Field(None, max_length=1000)


class TrackResponse(BaseModel):
    application: AdmissionResponse


# ============================================
# Admin schemas
# ============================================


class AdmissionListItem(BaseModel):
    """Row in the admin dashboard list."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    application_id: str
    student_name: str
    father_name: str | None = None
    class_applied: str
    status: AdmissionStatus
    payment_status: PaymentStatus
    email: str
    created_at: datetime


class AdmissionListResponse(BaseModel):
    admissions: list[AdmissionListItem]


class DocumentCheck(BaseModel):
    document: str = Field(..., min_length=1, max_length=100)
    verified: bool
    note: str | None = Field(None, max_length=500)


class ReviewRequest(BaseModel):
    """Request body for PUT /admin/admissions/{identifier}/review."""

    status: AdmissionStatus | None = None
    remarks: str | None = Field(None, max_length=2000)
    document_checks: list[DocumentCheck] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_review(self) -> "ReviewRequest":
        """At least one field must change."""
        if self.status is None and not self.remarks and not self.document_checks:
            raise ValueError("Provide at least one of status, remarks or document_checks")
        return self


class ReviewResponse(BaseModel):
    admission: AdmissionResponse
    notification_sent: bool = False
