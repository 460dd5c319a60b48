"""DTOs for notification composition, delivery, and stats."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ComposedNotification:
    """Title/body/data produced by the composer, before transport coercion."""

    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NotifierMessage:
    """Outbound message handed to the push transport.

    ``data`` values are always strings: the transport only carries string
    metadata. ``image_url`` is None rather than empty when there is no image.
    """

    title: str
    body: str
    data: dict[str, str]
    target: str
    image_url: str | None = None


@dataclass(frozen=True)
class SendResult:
    """Outcome of a successful send."""

    success: bool
    message_id: str


@dataclass(frozen=True)
class NotificationStats:
    """Recent send/error summary read from the notification log collections."""

    total_sent: int
    total_errors: int
    recent_logs: list[dict[str, Any]]
    recent_errors: list[dict[str, Any]]
