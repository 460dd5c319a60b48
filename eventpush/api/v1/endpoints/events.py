"""Manual event notification trigger (x-api-key protected)."""

from fastapi import APIRouter, Request

from eventpush.api.v1.dependencies import NotificationServiceDep
from eventpush.core.limiter import limit_sends
from eventpush.schemas.notification import SendResponse

router = APIRouter()


@router.post("/{event_id}/notify", response_model=SendResponse)
@limit_sends
async def notify_event(
    request: Request,
    event_id: str,
    service: NotificationServiceDep,
) -> SendResponse:
    """Send the new-event notification for an event, even if it was already notified.

    404 if the event does not exist, 400 if it has no title or date.
    """
    result = await service.notify_event(event_id)
    return SendResponse(message_id=result.message_id)
