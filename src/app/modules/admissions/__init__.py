"""
Admissions Module

Handles the student admission workflow:
1. Application submission (documents as hosted URLs)
2. OTP-gated tracking and payment proof for applicants
3. Admin listing, review, approval and rejection with email notification

API Endpoints:
- POST /admissions - Submit new application
- POST /admissions/otp - Email a tracking OTP
- POST /admissions/track - Track application (OTP)
- POST /admissions/track/payment - Submit payment proof (OTP)
- GET /admin/admissions - List applications (admin)
- GET /admin/admissions/{identifier} - Application detail (admin)
- PUT /admin/admissions/{identifier}/review - Review application (admin)
"""

from .router import router

__all__ = ["router"]
