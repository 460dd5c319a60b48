"""Notification record: durable marker of what was last notified for an event.

Existence of a record means a notification was sent for the event's current
or a prior scheduled instant. Absence means never notified, or unknown.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from eventpush.domain.enums import NotificationKind
from eventpush.shared.utils.datetime import ensure_utc, to_instant


@dataclass(frozen=True)
class NotificationRecord:
    """One document in the notification-record collection, keyed by event id."""

    event_id: str
    event_title: str
    kind: NotificationKind
    last_notified_date: datetime
    notified_at: datetime
    old_date: datetime | None = None
    new_date: datetime | None = None

    def to_document(self) -> dict[str, Any]:
        """Firestore field mapping (camelCase, as the mobile clients read it)."""
        doc: dict[str, Any] = {
            "eventId": self.event_id,
            "eventTitle": self.event_title,
            "type": self.kind.value,
            "lastNotifiedDate": ensure_utc(self.last_notified_date),
            "notifiedAt": ensure_utc(self.notified_at),
        }
        if self.old_date is not None:
            doc["oldDate"] = ensure_utc(self.old_date)
        if self.new_date is not None:
            doc["newDate"] = ensure_utc(self.new_date)
        return doc

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "NotificationRecord":
        """Parse a stored record; ``lastNotifiedDate`` may be in any timestamp shape."""
        old_date = data.get("oldDate")
        new_date = data.get("newDate")
        last_notified = to_instant(data.get("lastNotifiedDate"))
        notified_at = data.get("notifiedAt")
        return cls(
            event_id=data.get("eventId") or doc_id,
            event_title=data.get("eventTitle") or "",
            kind=NotificationKind(data.get("type", NotificationKind.NEW_EVENT.value)),
            last_notified_date=last_notified,
            notified_at=to_instant(notified_at) if notified_at else last_notified,
            old_date=to_instant(old_date) if old_date else None,
            new_date=to_instant(new_date) if new_date else None,
        )
