"""
FastAPI application factory and main app configuration.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api.routers import consultation, decrypt, health
from .api.schemas.common import ServiceInfoResponse
from .api.utils.responses import error_response, fail
from .core.config import Settings, get_settings
from .core.container import Container
from .core.exceptions import InvalidPayloadError, TeleconsultException
from .core.structured_logger import configure_logging
from .middleware.consultation_access_middleware import ConsultationAccessMiddleware
from .middleware.request_id_middleware import RequestIDMiddleware
from .workers.session_sweeper import run_session_sweeper_forever

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings
    logger.info(f"🚀 Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"📊 Environment: {settings.app_env}")
    if not settings.decrypt.key:
        logger.warning("DECRYPT_KEY is not set; link decryption will fail")
    if not settings.crm.is_configured:
        logger.warning("CRM is not fully configured; prechecks will fail")
    if not settings.sms.is_configured:
        logger.warning("SMS gateway is not fully configured; OTP delivery will fail")

    sweeper_task = asyncio.create_task(run_session_sweeper_forever(app.state.container))

    yield

    logger.info(f"🛑 Shutting down {settings.app_name}")
    sweeper_task.cancel()
    try:
        await sweeper_task
    except asyncio.CancelledError:
        pass


def create_app(
    settings: Optional[Settings] = None, container: Optional[Container] = None
) -> FastAPI:
    """Create and configure FastAPI application."""
    if container is not None:
        settings = container.settings
    settings = settings or get_settings()
    container = container or Container(settings)

    configure_logging(settings.logging)

    app = FastAPI(
        title=settings.app_name,
        description="OTP-gated access to teleconsultation links",
        version=settings.app_version,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.container = container

    # Starlette runs the last-added middleware first: CORS, then request id, then the gate.
    app.add_middleware(ConsultationAccessMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allowed_methods,
        allow_headers=settings.cors.allowed_headers,
        expose_headers=["X-Request-ID", "Retry-After"],
        max_age=600,
    )

    app.include_router(health.router)
    app.include_router(consultation.router)
    app.include_router(decrypt.router)

    @app.get("/", response_model=ServiceInfoResponse, tags=["health"])
    async def root():
        return ServiceInfoResponse(
            service=settings.app_name,
            version=settings.app_version,
            environment=settings.app_env,
        )

    @app.exception_handler(TeleconsultException)
    async def teleconsult_error_handler(request: Request, exc: TeleconsultException):
        req_id = getattr(request.state, "request_id", None)
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"{type(exc).__name__}: {exc.error_code} ({exc.http_status}) {exc.message} "
            f"| {request.method} {request.url.path}",
            extra={"request_id": req_id},
        )
        return error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        req_id = getattr(request.state, "request_id", None)
        logger.warning(
            f"ValidationError on {request.method} {request.url.path}: {exc.errors()}",
            extra={"request_id": req_id},
        )
        return error_response(request, InvalidPayloadError("Request body could not be parsed"))

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        req_id = getattr(request.state, "request_id", None)
        logger.error(
            f"Unhandled error: {type(exc).__name__} on {request.method} {request.url.path}",
            exc_info=settings.is_development,
            extra={"request_id": req_id},
        )
        return fail(
            request,
            "internal_error",
            "An unexpected error has occurred. Please try again later.",
            500,
        )

    return app


# Create the app instance
app = create_app()
