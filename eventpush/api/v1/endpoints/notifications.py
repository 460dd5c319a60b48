"""Notification send and stats endpoints (x-api-key protected)."""

from fastapi import APIRouter, Request

from eventpush.api.v1.dependencies import NotificationServiceDep
from eventpush.core.limiter import limit_reads, limit_sends
from eventpush.domain.enums import MessageType
from eventpush.schemas.notification import (
    DeviceNotificationRequest,
    NotificationRequest,
    NotificationStatsResponse,
    SendResponse,
    SendTestRequest,
    StatsResponse,
)

router = APIRouter()


@router.post("/send-test", response_model=SendResponse)
@limit_sends
async def send_test(
    request: Request,
    service: NotificationServiceDep,
    body: SendTestRequest | None = None,
) -> SendResponse:
    """Broadcast a test notification (title/body default when omitted)."""
    body = body or SendTestRequest()
    result = await service.send_to_all(
        body.title, body.body, {"type": MessageType.TEST.value, "source": "api"}
    )
    return SendResponse(message_id=result.message_id)


@router.post("/send-to-all", response_model=SendResponse)
@limit_sends
async def send_to_all(
    request: Request,
    body: NotificationRequest,
    service: NotificationServiceDep,
) -> SendResponse:
    """Broadcast to every subscriber of the configured topic."""
    result = await service.send_to_all(body.title, body.body, body.data)
    return SendResponse(message_id=result.message_id)


@router.post("/send-to-device", response_model=SendResponse)
@limit_sends
async def send_to_device(
    request: Request,
    body: DeviceNotificationRequest,
    service: NotificationServiceDep,
) -> SendResponse:
    """Send to one device registration token."""
    result = await service.send_to_device(body.token, body.title, body.body, body.data)
    return SendResponse(message_id=result.message_id)


@router.get("/stats", response_model=StatsResponse)
@limit_reads
async def get_stats(request: Request, service: NotificationServiceDep) -> StatsResponse:
    """Totals and the most recent sent and failed notifications."""
    stats = await service.get_stats()
    return StatsResponse(
        stats=NotificationStatsResponse(
            total_sent=stats.total_sent,
            total_errors=stats.total_errors,
            recent_logs=stats.recent_logs,
            recent_errors=stats.recent_errors,
        )
    )
