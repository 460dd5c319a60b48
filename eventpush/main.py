"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers.
No business logic here. See eventpush.core.lifespan and
eventpush.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and clear
the get_settings cache) before calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from eventpush.api.v1 import api_router
from eventpush.core.config import Settings, get_settings
from eventpush.core.exception_handlers import register_exception_handlers
from eventpush.core.lifespan import create_lifespan
from eventpush.core.limiter import limiter
from eventpush.domain.exceptions import ConfigurationException
from eventpush.middleware import (
    RequestIDMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as e:
        raise ConfigurationException(f"Invalid configuration: {e}") from e


def _cors_origins(settings: Settings) -> list[str]:
    """Configured origins; outside production every origin is allowed."""
    origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
    if not origins and not settings.is_production:
        return ["*"]
    return origins


def _setup_telemetry(app: FastAPI, settings: Settings) -> None:
    from eventpush.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

    telemetry = TelemetryConfig(
        service_name=settings.app_name,
        service_version=settings.app_version,
        enabled=True,
        environment=settings.environment,
    )
    telemetry.setup_telemetry(
        exporter_type=settings.telemetry_exporter,
        otlp_endpoint=settings.telemetry_otlp_endpoint,
        sample_rate=settings.telemetry_sample_rate,
    )
    set_telemetry(telemetry)
    telemetry.instrument_fastapi(app)
    telemetry.instrument_logging()


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = _load_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # Last added = outermost: size limit -> request ID -> security headers -> CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(settings),
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "x-api-key"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_body_bytes)

    app.include_router(api_router, prefix="/api/v1")

    if settings.telemetry_enabled:
        _setup_telemetry(app, settings)

    @app.get("/", include_in_schema=False)
    def root() -> dict:
        """Service banner listing the public routes."""
        return {
            "status": "active",
            "service": settings.app_name,
            "version": settings.app_version,
            "endpoints": [
                "GET  /api/v1/health",
                "GET  /api/v1/health/ready",
                "POST /api/v1/notifications/send-test",
                "POST /api/v1/notifications/send-to-all",
                "POST /api/v1/notifications/send-to-device",
                "GET  /api/v1/notifications/stats",
                "POST /api/v1/events/{event_id}/notify",
            ],
        }

    return app


app = create_app()
