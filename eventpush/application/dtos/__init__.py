"""Application DTOs (no dependency on transport or storage)."""

from eventpush.application.dtos.notification import (
    ComposedNotification,
    NotificationStats,
    NotifierMessage,
    SendResult,
)

__all__ = [
    "ComposedNotification",
    "NotificationStats",
    "NotifierMessage",
    "SendResult",
]
