"""
OTP Models

One row per (email, application_id) verification slot. Issuing a new code
for the same slot overwrites the row rather than appending a new one.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class OtpRecord(Base):
    """
    Email one-time passcode for an admissions applicant.

    Terminal once `consumed` is true. Expiry is checked when the code is
    verified; there is no background cleanup.
    """

    __tablename__ = "otp_verifications"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Composite key
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    application_id: Mapped[str] = mapped_column(String(100), nullable=False)

    code: Mapped[str] = mapped_column(String(6), nullable=False)
    consumed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("email", "application_id", name="uq_otp_verifications_email_application"),
        Index("ix_otp_verifications_expires_at", "expires_at"),
    )
