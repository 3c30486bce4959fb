# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the MediaID API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Request pipeline (see app/middleware/pipeline.py):
#   CORS gate -> rate limiter -> route handler -> error classifier -> CORS headers
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, settings as default_settings
from app.exceptions import (
    ApiError,
    api_error_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.middleware import CorsGate, RequestPipelineMiddleware
from app.responses import create_success_response
from app.routers import auth
from lib.rate_limiter import RateLimiter

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if default_settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: start the rate limiter's eviction sweep
    - Shutdown: stop it
    """
    rate_limiter: RateLimiter = app.state.rate_limiter

    logger.info(f"Starting MediaID API in {app.state.settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {sorted(app.state.cors_gate.allowed_origins)}")
    rate_limiter.start()

    yield

    logger.info("Shutting down MediaID API")
    await rate_limiter.stop()


def create_app(
    settings: Settings | None = None,
    rate_limiter: RateLimiter | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (defaults to the global settings)
        rate_limiter: Limiter to use (defaults to one built from settings)

    Returns:
        Configured FastAPI app
    """
    settings = settings or default_settings

    if rate_limiter is None:
        rate_limiter = RateLimiter(
            max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
            sweep_interval=settings.RATE_LIMIT_SWEEP_INTERVAL_SECONDS,
        )
    cors_gate = CorsGate(settings.cors_origins_list)

    app = FastAPI(
        title="MediaID API",
        description="Account and session entry points for the Bucket & MediaID platform.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "Auth",
                "description": "Account creation and sessions",
            },
        ],
    )

    app.state.settings = settings
    app.state.rate_limiter = rate_limiter
    app.state.cors_gate = cors_gate

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    # Anything not matched here is classified by the pipeline middleware

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # -------------------------------------------------------------------------
    # Middleware
    # -------------------------------------------------------------------------

    app.add_middleware(
        RequestPipelineMiddleware,
        cors_gate=cors_gate,
        rate_limiter=rate_limiter,
    )

    # -------------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------------

    # Signup, login, refresh, logout
    app.include_router(
        auth.router,
        prefix="/api/v1/auth",
        tags=["Auth"]
    )

    @app.get("/", tags=["Root"])
    async def root():
        """
        Root endpoint - returns API info and liveness.
        """
        return create_success_response({
            "name": "MediaID API",
            "version": "1.0.0",
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "docs": "/docs",
        })

    return app


app = create_app()
