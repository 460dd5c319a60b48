"""Pydantic request/response schemas for the API."""

from eventpush.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)
from eventpush.schemas.notification import (
    DeviceNotificationRequest,
    NotificationRequest,
    NotificationStatsResponse,
    SendResponse,
    SendTestRequest,
    StatsResponse,
)

__all__ = [
    "DeviceNotificationRequest",
    "HealthResponse",
    "NotificationRequest",
    "NotificationStatsResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "SendResponse",
    "SendTestRequest",
    "StatsResponse",
]
