"""
Vehicle Check-in Queue API
Main application file
"""

from datetime import datetime
from typing import Optional
import asyncio
import logging
import uvicorn

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from checkin_queue.core.clock import Clock, make_clock
from checkin_queue.core.config import Settings, settings as default_settings
from checkin_queue.core.exceptions import QueueError
from checkin_queue.core.storage import DailyStore
from checkin_queue.routers import appointment, display, status as status_router
from checkin_queue.services.notification_service import DisplayNotifier
from checkin_queue.services.queue_service import QueueService
from checkin_queue.services.scheduler import QueueScheduler

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL, logging.INFO),
    format=default_settings.log_format
)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> FastAPI:
    """
    Build the application with its own queue state.

    Args:
        settings: Configuration; the environment-derived settings when omitted
        clock: Wall-clock provider; local time in settings.timezone when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings
    clock = clock or make_clock(settings.timezone)

    # Disable docs in production
    docs_url = "/docs" if not settings.is_production else None
    redoc_url = "/redoc" if not settings.is_production else None

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Vehicle check-in desk: appointment intake, now-serving display and daily history",
        docs_url=docs_url,
        redoc_url=redoc_url,
    )

    # ========================================================================
    # Queue State
    # ========================================================================

    notifier = DisplayNotifier()
    queue_service = QueueService(
        store=DailyStore(settings.data_dir),
        notifier=notifier,
        clock=clock,
        display_limit=settings.display_limit,
        active_start=settings.active_start,
        active_end=settings.active_end,
    )
    scheduler = QueueScheduler(queue_service, clock=clock, interval_seconds=settings.scheduler_interval_seconds)

    app.state.settings = settings
    app.state.notifier = notifier
    app.state.queue_service = queue_service
    app.state.scheduler = scheduler

    # ========================================================================
    # CORS Configuration
    # ========================================================================

    origins = settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],  # credentials must be False for wildcard
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ========================================================================
    # Error Handlers
    # ========================================================================

    @app.exception_handler(QueueError)
    async def queue_error_handler(request: Request, exc: QueueError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = []
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
            if loc and loc[-1] not in fields:
                fields.append(loc[-1])
        message = f"Missing or invalid field(s): {', '.join(fields)}" if fields else "Invalid request body"
        logger.warning(f"{request.method} {request.url.path} rejected: {message}")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"{request.method} {request.url.path} crashed: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    # ========================================================================
    # Root & Health Endpoints
    # ========================================================================

    @app.get("/", tags=["Root"])
    def root():
        """Root endpoint - API information"""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "documentation": docs_url,
            "endpoints": {
                "health": "/api/health",
                "appointments": "/api/appointments",
                "outbound": "/api/outbound/{id}",
                "status": "/api/status",
                "history": "/api/history",
                "display": "/ws/display",
            }
        }

    def _health():
        return {
            "status": "ok",
            "timestamp": clock().isoformat(),
            "version": settings.app_version,
            "environment": settings.ENVIRONMENT,
        }

    @app.get("/health", tags=["Health"])
    def health_check():
        """Health check endpoint for API monitoring"""
        return _health()

    @app.get("/api/health", tags=["Health"])
    def api_health():
        """Health check endpoint (alternative path)"""
        return _health()

    # ========================================================================
    # Event Handlers
    # ========================================================================

    @app.on_event("startup")
    async def startup_event():
        """Actions to perform on application startup"""
        logger.info("=" * 60)
        logger.info(f"Starting {settings.app_name}")
        logger.info("=" * 60)
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        logger.info(f"Data directory: {settings.data_dir}")
        logger.info(f"Active hours: {settings.active_start:%H:%M}-{settings.active_end:%H:%M}")
        logger.info(f"CORS Origins: {settings.API_CORS_ORIGINS or 'Default'}")
        logger.info("=" * 60)

        notifier.bind_loop(asyncio.get_running_loop())
        queue_service.load()
        queue_service.refresh_active_status()

        if settings.scheduler_enabled:
            await scheduler.start()
        else:
            logger.info("Scheduler disabled; active status refreshes on request only")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Actions to perform on application shutdown"""
        logger.info("=" * 60)
        logger.info(f"Shutting down {settings.app_name}")
        logger.info("=" * 60)

        await scheduler.stop()
        await notifier.close_all()
        notifier.unbind_loop()

    # ========================================================================
    # Router Registration
    # ========================================================================

    app.include_router(appointment.router)  # Appointment intake and outbound
    app.include_router(status_router.router)  # Status and history
    app.include_router(display.router)  # Display push channel

    return app


app = create_app()


def run():
    uvicorn.run(
        "checkin_queue.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.is_development,
        log_level=default_settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()
