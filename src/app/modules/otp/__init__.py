"""
OTP Module

Email one-time passcodes for admissions applicants, keyed on
(email, application_id):
- One active code per key; requesting again replaces it
- Codes expire after OTP_EXPIRY_MINUTES (checked lazily on verify)
- A code verifies exactly once (conditional consume at the store)

API Endpoints:
- POST /otp/request - Issue and email a code
- POST /otp/verify - Verify a code
"""

from .router import router
from .service import OtpManager, VerificationOutcome, VerificationResult

__all__ = ["router", "OtpManager", "VerificationOutcome", "VerificationResult"]
