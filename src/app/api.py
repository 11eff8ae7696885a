from fastapi import APIRouter

from app.modules.admissions import router as admissions_router
from app.modules.admissions.admin_router import router as admin_admissions_router
from app.modules.auth import router as auth_router
from app.modules.otp import router as otp_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(otp_router, prefix="/otp", tags=["OTP"])

api_router.include_router(admissions_router, prefix="/admissions", tags=["Admissions"])

api_router.include_router(
    admin_admissions_router,
    prefix="/admin/admissions",
    tags=["Admin - Admissions"],
)
