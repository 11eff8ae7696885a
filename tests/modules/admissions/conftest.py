"""
Fixtures for admissions tests.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.core.auth import ADMIN_ROLE, AdminUser
from app.modules.admissions.models import AdmissionApplication, AdmissionStatus, PaymentStatus
from app.modules.admissions.schemas import AdmissionCreate
from app.modules.otp.service import IssuedOtp, VerificationOutcome, VerificationResult


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.rollback = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def admin_user():
    return AdminUser(id="77075", email="admin@school.local", role=ADMIN_ROLE)


@pytest.fixture
def sample_admission_create():
    """Create a sample application submission."""
    return AdmissionCreate(
        application_id="APP1",
        student_name="Asha Verma",
        date_of_birth="2015-04-12",
        gender="female",
        class_applied="5",
        previous_school="Sunrise Public School",
        address="12 Lake Road",
        father_name="Rakesh Verma",
        mother_name="Meena Verma",
        father_mobile="9876543210",
        mother_mobile="9876501234",
        email="Parent@Example.com",
        category="General",
        passport_photo_url="https://files.example.com/photo.jpg",
    )


@pytest.fixture
def sample_application():
    """Create a stored application (not attached to a session)."""
    now = datetime.now(UTC)
    return AdmissionApplication(
        id=uuid4(),
        application_id="APP1",
        student_name="Asha Verma",
        date_of_birth="2015-04-12",
        gender="female",
        class_applied="5",
        previous_school="Sunrise Public School",
        address="12 Lake Road",
        father_name="Rakesh Verma",
        mother_name="Meena Verma",
        father_mobile="9876543210",
        mother_mobile="9876501234",
        email="parent@example.com",
        aadhaar=None,
        category="General",
        passport_photo_url="https://files.example.com/photo.jpg",
        previous_marksheet_url=None,
        address_proof_url=None,
        status=AdmissionStatus.PENDING,
        remarks=None,
        document_checks=None,
        payment_status=PaymentStatus.PENDING,
        payment_screenshot_url=None,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def mock_otp_manager():
    """OtpManager double whose verify succeeds by default."""
    manager = AsyncMock()
    manager.expiry_minutes = 10
    manager.verify = AsyncMock(return_value=VerificationResult(VerificationOutcome.VERIFIED))
    manager.request = AsyncMock(
        return_value=IssuedOtp(
            email="parent@example.com",
            application_id="APP1",
            code="482913",
            expires_at=datetime.now(UTC) + timedelta(minutes=10),
        )
    )
    return manager
