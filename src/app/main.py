"""
Admissions API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Database and Redis connections
- CORS middleware
- API routing
- Health check endpoints
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.api import api_router
from app.core import redis as redis_state
from app.core.config import settings
from app.core.database import async_session_maker, close_db, init_db
from app.core.redis import close_redis, init_redis, is_redis_available


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown of the Redis and database connections.
    Redis is optional outside production (rate limiting falls back to memory).
    """
    # Startup
    print(f"Starting Admissions API in {settings.python_env} mode...")

    try:
        await init_redis()
        print("[OK] Redis connected")
    except Exception as e:
        print(f"[FAIL] Redis connection failed: {e}")
        if settings.is_production:
            raise

    try:
        await init_db()
        print("[OK] Database connected")
    except Exception as e:
        print(f"[FAIL] Database connection failed: {e}")
        if settings.is_production:
            raise

    yield  # Application runs here

    # Shutdown
    print("Shutting down Admissions API...")
    await close_redis()
    await close_db()
    print("[OK] Cleanup complete")


app = FastAPI(
    title="Admissions API",
    description="School admissions backend with email OTP verification",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/api/v1")

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint - API welcome message."""
    return {
        "message": "Admissions backend running",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, str]:
    """Readiness check: database reachable, Redis reported if connected."""
    checks = {"status": "ready", "database": "connected", "redis": "not initialized"}

    try:
        async with async_session_maker() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        checks["status"] = "not ready"
        checks["database"] = f"error: {e}"

    if is_redis_available():
        try:
            await redis_state.redis_client.ping()
            checks["redis"] = "connected"
        except Exception as e:
            checks["redis"] = f"error: {e}"

    return checks
