"""Build the school portal FastAPI app: routers, CORS, error envelopes and health checks."""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import schemas
from .config import Settings
from .context import AppContext
from .migrations import run_database_migrations
from .routers import dashboard_router, schools_router, students_router
from .services import MaintenanceScheduler
from .services.scheduler_monitor import JOB_MAINTENANCE

LOGGER = logging.getLogger(__name__)

LOCALHOST_ORIGIN_REGEX = r"https?://(localhost|127\.0\.0\.1|0\.0\.0\.0)(:\d+)?$"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
}


def _error_response(
    status_code: int,
    error: str,
    *,
    message: Optional[str] = None,
    details: object = None,
) -> JSONResponse:
    body = schemas.ErrorResponse(error=error, message=message, details=details)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body, exclude_none=True),
    )


def _cors_options(settings: Settings) -> dict[str, object]:
    options: dict[str, object] = {
        "allow_origins": settings.allowed_origins,
        "allow_methods": ["GET", "OPTIONS"],
        "allow_headers": ["*"],
    }
    if not settings.is_production:
        # Any local dev server may talk to the API outside production.
        options["allow_origin_regex"] = LOCALHOST_ORIGIN_REGEX
    return options


def _register_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        detail = exc.detail
        if exc.status_code == status.HTTP_404_NOT_FOUND and detail == "Not Found":
            detail = "Route not found"
        return _error_response(exc.status_code, str(detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Invalid request parameters",
            details=jsonable_encoder(exc.errors()),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception("Unhandled error: %s", exc)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            message=str(exc) if settings.is_development else "Something went wrong",
        )


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Create the API around ``context``, building one from the environment if omitted."""

    context = context or AppContext.from_settings(Settings.from_env())
    settings = context.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.run_migrations:
            LOGGER.info("Ensuring database schema is up to date before serving requests")
            run_database_migrations(settings.database_url)
        scheduler = _start_maintenance_scheduler(context)
        app.state.maintenance_scheduler = scheduler
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.stop()

    app = FastAPI(title="Odisha School Portal API", lifespan=lifespan)
    app.state.context = context

    app.add_middleware(CORSMiddleware, **_cors_options(settings))

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        LOGGER.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    _register_error_handlers(app, settings)

    app.include_router(schools_router, prefix="/api/schools", tags=["schools"])
    app.include_router(students_router, prefix="/api/students", tags=["students"])
    app.include_router(dashboard_router, prefix="/api/dashboard", tags=["dashboard"])

    @app.get("/health", response_model=schemas.HealthResponse, tags=["health"])
    def read_health(request: Request) -> schemas.HealthResponse:
        """Return process health, uptime and background job status."""
        app_context: AppContext = request.app.state.context
        return schemas.HealthResponse(
            status="OK",
            timestamp=datetime.now(timezone.utc),
            uptime=round(app_context.uptime, 3),
            environment=app_context.settings.environment,
            jobs=app_context.scheduler_monitor.snapshot(),
        )

    return app


def _start_maintenance_scheduler(context: AppContext) -> Optional[MaintenanceScheduler]:
    settings = context.settings
    context.scheduler_monitor.set_job_enabled(JOB_MAINTENANCE, settings.maintenance_scheduler)
    if not settings.maintenance_scheduler:
        LOGGER.info("%s disabled via ENABLE_MAINTENANCE_SCHEDULER", JOB_MAINTENANCE)
        return None
    scheduler = MaintenanceScheduler(
        context.session_factory,
        context.scheduler_monitor,
        interval=timedelta(hours=settings.maintenance_interval_hours),
    )
    scheduler.start()
    return scheduler


app = create_app()
