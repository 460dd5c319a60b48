"""Health check endpoints. Unauthenticated; used for liveness and readiness probes."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from eventpush.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)
from eventpush.shared.utils.datetime import utc_now

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check(request: Request) -> HealthResponse:
    """Liveness: always healthy while the process serves requests."""
    now = utc_now()
    started_at = getattr(request.app.state, "started_at", None) or now
    return HealthResponse(
        timestamp=now,
        uptime_seconds=round((now - started_at).total_seconds(), 3),
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Firebase not configured", "model": ReadinessErrorResponse}},
)
def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Ready when the notification service is wired; reports the listener state."""
    service = getattr(request.app.state, "notification_service", None)
    if service is None:
        return JSONResponse(
            status_code=503,
            content=ReadinessErrorResponse(
                message="Firebase credentials not configured"
            ).model_dump(),
        )
    listener = service.listener
    return ReadinessResponse(
        listener_running=listener.is_running,
        listener_phase=listener.phase.value,
        stream_failures=listener.stream_failures,
        failed_changes=listener.failed_changes,
        change_actions={a.value: n for a, n in listener.action_counts.items()},
        last_batch_at=listener.last_batch_at,
    )
