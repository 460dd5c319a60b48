"""Notification text and payload composition.

Builds title/body/data for new-event, rescheduled and daily-digest messages,
and turns a composition into the transport-ready NotifierMessage.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from eventpush.application.dtos.notification import (
    ComposedNotification,
    NotifierMessage,
)
from eventpush.domain.entities import Event
from eventpush.domain.enums import MessageType
from eventpush.shared.utils.datetime import format_event_date, utc_now

LOCATION_PLACEHOLDER = "TBD"
EVENTS_ROUTE = "events"
CLICK_ACTION = "FLUTTER_NOTIFICATION_CLICK"
IMAGE_URL_KEY = "imageUrl"


def _to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def coerce_data(data: Mapping[str, Any]) -> dict[str, str]:
    """String-coerce every value; None values and blank image URLs are dropped."""
    out: dict[str, str] = {}
    for key, value in data.items():
        if value is None:
            continue
        text = _to_str(value)
        if key == IMAGE_URL_KEY and not text.strip():
            continue
        out[str(key)] = text
    return out


def build_message(
    title: str,
    body: str,
    data: Mapping[str, Any] | None,
    target: str,
    *,
    now: datetime | None = None,
) -> NotifierMessage:
    """Wrap a composition in the transport envelope.

    Adds ``timestamp`` and ``click_action``, defaults ``type`` to
    ``announcement``, and lifts a non-empty image URL into ``image_url``.
    """
    fields = coerce_data(data or {})
    fields.setdefault("type", MessageType.ANNOUNCEMENT.value)
    fields["timestamp"] = (now or utc_now()).isoformat()
    fields["click_action"] = CLICK_ACTION
    return NotifierMessage(
        title=title,
        body=body,
        data=fields,
        target=target,
        image_url=fields.get(IMAGE_URL_KEY),
    )


class NotificationComposer:
    """Composes notification content; dates are rendered in one fixed timezone."""

    def __init__(self, tz_name: str, digest_body_max_chars: int = 100) -> None:
        self._tz_name = tz_name
        self._digest_body_max_chars = digest_body_max_chars

    def format_date(self, instant: datetime) -> str:
        return format_event_date(instant, self._tz_name)

    def _event_data(self, message_type: MessageType, event: Event) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": message_type.value,
            "eventId": str(event.id),
            "route": EVENTS_ROUTE,
        }
        if event.image_url and event.image_url.strip():
            data[IMAGE_URL_KEY] = event.image_url
        return data

    def compose_new_event(self, event: Event) -> ComposedNotification:
        """``New Event: {title}`` with ``{date} • {location}``."""
        formatted = self.format_date(event.instant())
        return ComposedNotification(
            title=f"New Event: {event.title}",
            body=f"{formatted} • {event.location or LOCATION_PLACEHOLDER}",
            data=self._event_data(MessageType.NEW_EVENT, event),
        )

    def compose_rescheduled(
        self,
        event: Event,
        old_instant: datetime,
        new_instant: datetime,
    ) -> ComposedNotification:
        """``Event Rescheduled: {title}``; body lists the new date, then the old one."""
        old_formatted = self.format_date(old_instant)
        new_formatted = self.format_date(new_instant)
        data = self._event_data(MessageType.EVENT_RESCHEDULED, event)
        data["oldDate"] = old_formatted
        data["newDate"] = new_formatted
        return ComposedNotification(
            title=f"Event Rescheduled: {event.title}",
            body=f"New: {new_formatted}\nOld: {old_formatted}",
            data=data,
        )

    def _digest_body(self, events: Iterable[Event]) -> str:
        lines = "\n".join(f"• {e.title}" for e in events)
        return lines[: self._digest_body_max_chars]

    def compose_today_digest(self, events: list[Event]) -> ComposedNotification | None:
        """Digest of events happening today; None when there are none."""
        if not events:
            return None
        return ComposedNotification(
            title=f"Events Today ({len(events)})",
            body=self._digest_body(events),
            data={"type": MessageType.DAILY_REMINDER.value, "route": EVENTS_ROUTE},
        )

    def compose_tomorrow_digest(self, events: list[Event]) -> ComposedNotification | None:
        """Digest of events happening tomorrow; None when there are none."""
        if not events:
            return None
        return ComposedNotification(
            title=f"Tomorrow's Events ({len(events)})",
            body=self._digest_body(events),
            data={"type": MessageType.DAILY_REMINDER.value, "route": EVENTS_ROUTE},
        )
