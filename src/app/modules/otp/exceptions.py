"""
OTP Exceptions

Only infrastructure failures are exceptions. Validation results of a
verification attempt are returned as values (see service.VerificationOutcome).
"""


class OtpServiceError(Exception):
    """Base exception for OTP service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class StorageFailure(OtpServiceError):
    """Raised when the OTP store is unreachable or rejects an operation."""

    def __init__(self, message: str = "OTP storage is temporarily unavailable."):
        super().__init__(
            message=message,
            error_code="SERVICE_UNAVAILABLE",
            status_code=503,
        )


class DeliveryFailure(OtpServiceError):
    """Raised when an issued code could not be handed to the notification sender."""

    def __init__(self, message: str = "We could not send the verification code. Please try again."):
        super().__init__(
            message=message,
            error_code="DELIVERY_FAILED",
            status_code=502,
        )
