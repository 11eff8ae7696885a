"""
Admissions Models

Database model for student admission applications.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, Index, String, Text, func
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class AdmissionStatus(str, enum.Enum):
    """Review status of an admission application."""

    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentStatus(str, enum.Enum):
    """Fee payment status."""

    PENDING = "pending"
    COMPLETED = "completed"


class AdmissionApplication(Base):
    """
    Admission application submitted by a student's family.

    `application_id` is the public identifier shared with the applicant and
    used, together with the email, as the OTP key.
    """

    __tablename__ = "admission_applications"

    # Primary key
    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    application_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    # Student
    student_name: Mapped[str] = mapped_column(String(200), nullable=False)
    date_of_birth: Mapped[str | None] = mapped_column(String(20), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    class_applied: Mapped[str] = mapped_column(String(20), nullable=False)
    previous_school: Mapped[str | None] = mapped_column(String(200), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    aadhaar: Mapped[str | None] = mapped_column(String(20), nullable=True)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Parents
    father_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    mother_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    father_mobile: Mapped[str | None] = mapped_column(String(20), nullable=True)
    mother_mobile: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)

    # Documents (hosted URLs)
    passport_photo_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    previous_marksheet_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    address_proof_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Review
    status: Mapped[AdmissionStatus] = mapped_column(
        Enum(AdmissionStatus, name="admission_status"),
        nullable=False,
        default=AdmissionStatus.PENDING,
    )
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    # [{"document": str, "verified": bool, "note": str | None}, ...]
    document_checks: Mapped[list | None] = mapped_column(JSON, nullable=True)

    # Payment
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="payment_status"),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    payment_screenshot_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_admission_applications_status", "status"),
        Index("ix_admission_applications_email", "email"),
        Index("ix_admission_applications_created_at", "created_at"),
    )
