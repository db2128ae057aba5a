"""
School Registry API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Logging, database and Redis connections
- Session guard and CORS middleware
- Request validation error rendering
- API routing
- Health check and login hint endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from school_registry.api import api_router
from school_registry.core.auth import SessionGuardMiddleware
from school_registry.core.config import settings
from school_registry.core.database import close_db, init_db
from school_registry.core.logging import setup_logging
from school_registry.core.redis import close_redis, get_redis, init_redis

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan manager.

    Redis is optional outside production: the rate limiter falls back to
    process memory when it is not connected.
    """
    setup_logging(settings.log_level)
    logger.info(f"Starting School Registry API in {settings.python_env} mode...")

    try:
        await init_redis()
        logger.info("Redis connected")
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        if settings.is_production:
            raise

    try:
        await init_db()
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        if settings.is_production:
            raise

    yield

    logger.info("Shutting down School Registry API...")
    await close_redis()
    await close_db()
    logger.info("Cleanup complete")


app = FastAPI(
    title="School Registry API",
    description="Administration of school units, their lookups and homologation history",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed bodies, query values and path ids as 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "error": "VALIDATION_ERROR",
                "message": "Request validation failed.",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


app.include_router(api_router, prefix="/api")

# Last added runs first: CORS wraps the session guard so preflights and
# redirects still carry CORS headers.
app.add_middleware(SessionGuardMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/login", tags=["Authentication"])
async def login_page(request: Request) -> dict[str, str]:
    """
    Target of the session guard redirect.

    The query string of the original request is echoed back so the client
    can return there after POST /api/auth/login.
    """
    return {
        "message": "Authentication required. Sign in with POST /api/auth/login.",
        "loginEndpoint": "/api/auth/login",
        "query": request.url.query,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, str]:
    """Readiness check endpoint."""
    return {
        "status": "ready",
        "rateLimitBackend": "redis" if get_redis() is not None else "memory",
    }
