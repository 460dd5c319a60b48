"""Health check API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="healthy", description="Service status")
    timestamp: datetime
    uptime_seconds: float = Field(..., description="Seconds since startup")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready."""

    status: str = Field(default="ready", description="Readiness status")
    listener_running: bool = False
    listener_phase: str | None = Field(
        default=None, description="awaiting_first_batch or live"
    )
    stream_failures: int = 0
    failed_changes: int = 0
    change_actions: dict[str, int] = Field(
        default_factory=dict, description="Processed changes per classification outcome"
    )
    last_batch_at: datetime | None = None


class ReadinessErrorResponse(BaseModel):
    """Response for GET /health/ready when the service cannot send (503)."""

    status: str = Field(default="not_ready", description="Readiness status")
    message: str = Field(..., description="Reason (e.g. Firebase not configured)")
