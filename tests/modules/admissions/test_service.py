"""
Unit tests for admissions service layer.

These tests cover:
- Application submission (generated IDs, duplicates)
- OTP requests for existing applications
- OTP-gated tracking and payment proof
- Admin listing, lookup and review (with decision emails)
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from app.modules.admissions.models import AdmissionStatus
from app.modules.admissions.schemas import DocumentCheck, ReviewRequest
from app.modules.admissions.service import (
    ApplicationNotFoundError,
    DuplicateApplicationError,
    OtpVerificationFailedError,
    admin_get_application,
    admin_list_applications,
    admin_review_application,
    request_application_otp,
    submit_application,
    submit_payment_proof,
    track_application,
)
from app.modules.otp.exceptions import DeliveryFailure
from app.modules.otp.service import VerificationOutcome, VerificationResult

REPO = "app.modules.admissions.service.repository"


class TestSubmitApplication:
    """Tests for submit_application function."""

    @pytest.mark.asyncio
    async def test_submit_success(self, mock_db, sample_admission_create, sample_application):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_application_id = AsyncMock(return_value=None)
            mock_repo.create = AsyncMock(return_value=sample_application)

            result = await submit_application(mock_db, sample_admission_create)

            assert result.success is True
            assert result.application.application_id == "APP1"
            assert result.application.status == AdmissionStatus.PENDING

            # Email stored in normalized form
            kwargs = mock_repo.create.call_args.kwargs
            assert kwargs["email"] == "parent@example.com"
            assert kwargs["application_id"] == "APP1"

    @pytest.mark.asyncio
    async def test_submit_generates_application_id(
        self, mock_db, sample_admission_create, sample_application
    ):
        sample_admission_create.application_id = None

        with patch(REPO) as mock_repo:
            mock_repo.get_by_application_id = AsyncMock(return_value=None)
            mock_repo.create = AsyncMock(return_value=sample_application)

            await submit_application(mock_db, sample_admission_create)

            generated = mock_repo.create.call_args.kwargs["application_id"]
            assert generated.startswith("APP-")
            assert len(generated) == 12

    @pytest.mark.asyncio
    async def test_submit_duplicate_id(self, mock_db, sample_admission_create, sample_application):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_application_id = AsyncMock(return_value=sample_application)
            mock_repo.create = AsyncMock()

            with pytest.raises(DuplicateApplicationError) as exc_info:
                await submit_application(mock_db, sample_admission_create)

            assert exc_info.value.status_code == 409
            mock_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_submit_duplicate_on_insert_race(self, mock_db, sample_admission_create):
        """A unique violation at insert time is reported as a duplicate."""
        with patch(REPO) as mock_repo:
            mock_repo.get_by_application_id = AsyncMock(return_value=None)
            mock_repo.create = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception()))

            with pytest.raises(DuplicateApplicationError):
                await submit_application(mock_db, sample_admission_create)

            mock_db.rollback.assert_awaited_once()


class TestRequestApplicationOtp:
    """Tests for request_application_otp function."""

    @pytest.mark.asyncio
    async def test_request_sends_to_stored_email(self, mock_db, mock_otp_manager, sample_application):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_application_id = AsyncMock(return_value=sample_application)

            issued = await request_application_otp(
                mock_db, mock_otp_manager, "APP1", "PARENT@example.com"
            )

        assert issued.application_id == "APP1"
        mock_otp_manager.request.assert_awaited_once_with(
            "parent@example.com", "APP1", recipient_name="Asha Verma"
        )

    @pytest.mark.asyncio
    async def test_request_unknown_application(self, mock_db, mock_otp_manager):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_application_id = AsyncMock(return_value=None)

            with pytest.raises(ApplicationNotFoundError):
                await request_application_otp(mock_db, mock_otp_manager, "APP9", "a@x.com")

        mock_otp_manager.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_request_email_mismatch_looks_like_not_found(
        self, mock_db, mock_otp_manager, sample_application
    ):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_application_id = AsyncMock(return_value=sample_application)

            with pytest.raises(ApplicationNotFoundError):
                await request_application_otp(mock_db, mock_otp_manager, "APP1", "other@example.com")

        mock_otp_manager.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_request_delivery_failure_propagates(
        self, mock_db, mock_otp_manager, sample_application
    ):
        mock_otp_manager.request.side_effect = DeliveryFailure()

        with patch(REPO) as mock_repo:
            mock_repo.get_by_application_id = AsyncMock(return_value=sample_application)

            with pytest.raises(DeliveryFailure):
                await request_application_otp(
                    mock_db, mock_otp_manager, "APP1", "parent@example.com"
                )


class TestTrackApplication:
    """Tests for track_application function."""

    @pytest.mark.asyncio
    async def test_track_with_verified_otp(self, mock_db, mock_otp_manager, sample_application):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_application_id = AsyncMock(return_value=sample_application)

            result = await track_application(
                mock_db, mock_otp_manager, "APP1", "parent@example.com", "482913"
            )

        assert result is sample_application
        mock_otp_manager.verify.assert_awaited_once_with("parent@example.com", "APP1", "482913")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "outcome,status_code",
        [
            (VerificationOutcome.MISMATCH, 400),
            (VerificationOutcome.NOT_FOUND, 404),
            (VerificationOutcome.EXPIRED, 410),
            (VerificationOutcome.VERIFICATION_ERROR, 500),
        ],
    )
    async def test_track_rejected_otp(self, mock_db, mock_otp_manager, outcome, status_code):
        mock_otp_manager.verify.return_value = VerificationResult(outcome)

        with patch(REPO) as mock_repo:
            mock_repo.get_by_application_id = AsyncMock()

            with pytest.raises(OtpVerificationFailedError) as exc_info:
                await track_application(mock_db, mock_otp_manager, "APP1", "a@x.com", "000000")

            # The application is not loaded without a verified OTP
            mock_repo.get_by_application_id.assert_not_called()

        assert exc_info.value.outcome == outcome
        assert exc_info.value.status_code == status_code
        assert exc_info.value.error_code == f"OTP_{outcome.name}"

    @pytest.mark.asyncio
    async def test_track_verified_but_application_missing(self, mock_db, mock_otp_manager):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_application_id = AsyncMock(return_value=None)

            with pytest.raises(ApplicationNotFoundError):
                await track_application(mock_db, mock_otp_manager, "APP1", "a@x.com", "482913")


class TestSubmitPaymentProof:
    """Tests for submit_payment_proof function."""

    @pytest.mark.asyncio
    async def test_payment_marks_completed(self, mock_db, mock_otp_manager, sample_application):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_application_id = AsyncMock(return_value=sample_application)
            mock_repo.mark_payment_completed = AsyncMock(return_value=sample_application)

            await submit_payment_proof(
                mock_db,
                mock_otp_manager,
                "APP1",
                "parent@example.com",
                "482913",
                payment_screenshot_url="https://files.example.com/receipt.png",
            )

            mock_repo.mark_payment_completed.assert_awaited_once_with(
                mock_db, sample_application, "https://files.example.com/receipt.png"
            )

    @pytest.mark.asyncio
    async def test_payment_requires_valid_otp(self, mock_db, mock_otp_manager):
        mock_otp_manager.verify.return_value = VerificationResult(VerificationOutcome.NOT_FOUND)

        with patch(REPO) as mock_repo:
            mock_repo.mark_payment_completed = AsyncMock()

            with pytest.raises(OtpVerificationFailedError):
                await submit_payment_proof(mock_db, mock_otp_manager, "APP1", "a@x.com", "482913")

            mock_repo.mark_payment_completed.assert_not_called()


class TestAdminListApplications:
    """Tests for admin_list_applications function."""

    @pytest.mark.asyncio
    async def test_list_passes_filters(self, mock_db, sample_application):
        with patch(REPO) as mock_repo:
            mock_repo.list_applications = AsyncMock(return_value=[sample_application])

            result = await admin_list_applications(
                mock_db, status=AdmissionStatus.PENDING, class_applied="5", q="  asha "
            )

            assert result == [sample_application]
            mock_repo.list_applications.assert_awaited_once_with(
                mock_db,
                status=AdmissionStatus.PENDING,
                class_applied="5",
                search="asha",
                limit=100,
            )

    @pytest.mark.asyncio
    async def test_list_clamps_limit(self, mock_db):
        with patch(REPO) as mock_repo:
            mock_repo.list_applications = AsyncMock(return_value=[])

            await admin_list_applications(mock_db, limit=10_000)

            assert mock_repo.list_applications.call_args.kwargs["limit"] == 500


class TestAdminGetApplication:
    """Tests for admin_get_application function."""

    @pytest.mark.asyncio
    async def test_get_found(self, mock_db, sample_application):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_identifier = AsyncMock(return_value=sample_application)

            assert await admin_get_application(mock_db, "APP1") is sample_application

    @pytest.mark.asyncio
    async def test_get_not_found(self, mock_db):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_identifier = AsyncMock(return_value=None)

            with pytest.raises(ApplicationNotFoundError):
                await admin_get_application(mock_db, "APP404")


class TestAdminReviewApplication:
    """Tests for admin_review_application function."""

    @pytest.mark.asyncio
    async def test_approve_sends_decision_email(self, mock_db, sample_application, admin_user):
        async def apply_review(db, application, status, remarks, document_checks):
            application.status = status
            application.remarks = remarks
            return application

        with (
            patch(REPO) as mock_repo,
            patch(
                "app.modules.admissions.service.send_admin_status_email",
                new=AsyncMock(return_value=True),
            ) as mock_email,
        ):
            mock_repo.get_by_identifier = AsyncMock(return_value=sample_application)
            mock_repo.update_review = AsyncMock(side_effect=apply_review)

            result = await admin_review_application(
                mock_db,
                "APP1",
                ReviewRequest(status=AdmissionStatus.APPROVED, remarks="Welcome aboard"),
                admin_user,
            )

            assert result.notification_sent is True
            assert result.admission.status == AdmissionStatus.APPROVED
            mock_email.assert_awaited_once_with(
                to_email="parent@example.com",
                recipient_name="Asha Verma",
                application_id="APP1",
                status="approved",
                remarks="Welcome aboard",
            )

    @pytest.mark.asyncio
    async def test_remarks_only_does_not_email(self, mock_db, sample_application, admin_user):
        with (
            patch(REPO) as mock_repo,
            patch(
                "app.modules.admissions.service.send_admin_status_email", new=AsyncMock()
            ) as mock_email,
        ):
            mock_repo.get_by_identifier = AsyncMock(return_value=sample_application)
            mock_repo.update_review = AsyncMock(return_value=sample_application)

            result = await admin_review_application(
                mock_db,
                "APP1",
                ReviewRequest(
                    remarks="Marksheet unclear",
                    document_checks=[DocumentCheck(document="marksheet", verified=False)],
                ),
                admin_user,
            )

            assert result.notification_sent is False
            mock_email.assert_not_called()
            assert mock_repo.update_review.call_args.kwargs["document_checks"] == [
                {"document": "marksheet", "verified": False, "note": None}
            ]

    @pytest.mark.asyncio
    async def test_email_failure_does_not_fail_review(self, mock_db, sample_application, admin_user):
        async def apply_review(db, application, status, remarks, document_checks):
            application.status = status
            return application

        with (
            patch(REPO) as mock_repo,
            patch(
                "app.modules.admissions.service.send_admin_status_email",
                new=AsyncMock(side_effect=RuntimeError("provider down")),
            ),
        ):
            mock_repo.get_by_identifier = AsyncMock(return_value=sample_application)
            mock_repo.update_review = AsyncMock(side_effect=apply_review)

            result = await admin_review_application(
                mock_db, "APP1", ReviewRequest(status=AdmissionStatus.REJECTED), admin_user
            )

            assert result.admission.status == AdmissionStatus.REJECTED
            assert result.notification_sent is False

    @pytest.mark.asyncio
    async def test_corrected_decision_emails_applicant(
        self, mock_db, sample_application, admin_user
    ):
        """An approved application can be rejected and the applicant is told."""
        sample_application.status = AdmissionStatus.APPROVED

        async def apply_review(db, application, status, remarks, document_checks):
            application.status = status
            return application

        with (
            patch(REPO) as mock_repo,
            patch(
                "app.modules.admissions.service.send_admin_status_email",
                new=AsyncMock(return_value=True),
            ) as mock_email,
        ):
            mock_repo.get_by_identifier = AsyncMock(return_value=sample_application)
            mock_repo.update_review = AsyncMock(side_effect=apply_review)

            result = await admin_review_application(
                mock_db, "APP1", ReviewRequest(status=AdmissionStatus.REJECTED), admin_user
            )

            assert result.admission.status == AdmissionStatus.REJECTED
            assert result.notification_sent is True
            assert mock_email.call_args.kwargs["status"] == "rejected"

    @pytest.mark.asyncio
    async def test_review_unknown_application(self, mock_db, admin_user):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_identifier = AsyncMock(return_value=None)

            with pytest.raises(ApplicationNotFoundError):
                await admin_review_application(
                    mock_db, "APP404", ReviewRequest(remarks="x"), admin_user
                )
