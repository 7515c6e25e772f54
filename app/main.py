"""
GigFlow Marketplace API Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.core.config import get_settings
from app.core.database import engine, init_db
from app.core.errors import STORAGE_ERRORS, register_error_handlers
from app.core.log_config import configure_logging
from app.core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from app.core.notifications import NotificationHub
from app.api.v1 import router as api_v1_router

settings = get_settings()
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="GigFlow",
        description="Freelance marketplace: post gigs, bid, hire.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Live connection registry, one per application process
    app.state.notifications = NotificationHub(
        send_timeout=settings.notification_send_timeout_seconds
    )

    # Middleware (the last one added runs outermost)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    register_error_handlers(app)

    # API routes
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check endpoint: the database answers a trivial query."""
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except STORAGE_ERRORS as exc:
            log.warning("GigFlow not ready", error=str(exc))
            return JSONResponse(
                status_code=503,
                content={"error": {"code": "NOT_READY", "message": "Database unavailable", "status": 503}},
            )
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("GigFlow starting", debug=settings.debug)
        if settings.debug:
            await init_db()

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("GigFlow shutting down")
        await app.state.notifications.close_all()
        await engine.dispose()

    return app


app = create_app()
