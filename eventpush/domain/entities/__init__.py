"""Domain entities."""

from eventpush.domain.entities.event import ChangeRecord, Event
from eventpush.domain.entities.notification_record import NotificationRecord

__all__ = [
    "ChangeRecord",
    "Event",
    "NotificationRecord",
]
