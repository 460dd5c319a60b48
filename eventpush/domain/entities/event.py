"""Event domain entity and change record.

Events are owned by an external collection and are read-only here. The
scheduled time is kept in its raw document representation; callers
normalize it with ``to_instant`` where a comparison is needed.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from eventpush.domain.enums import ChangeKind
from eventpush.shared.utils.datetime import to_instant

# Document field names in the events collection.
FIELD_TITLE = "title"
FIELD_SCHEDULED_AT = "dateTime"
FIELD_IS_ACTIVE = "isActive"
FIELD_LOCATION = "location"
FIELD_IMAGE_URL = "imageUrl"


@dataclass(frozen=True)
class Event:
    """Snapshot of one event document."""

    id: str
    title: str | None = None
    scheduled_at: Any = None
    is_active: bool = False
    location: str | None = None
    image_url: str | None = None

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any] | None) -> "Event":
        """Build from a document id and its field mapping (missing fields stay None)."""
        data = data or {}
        title = data.get(FIELD_TITLE)
        return cls(
            id=doc_id,
            title=title if isinstance(title, str) else None,
            scheduled_at=data.get(FIELD_SCHEDULED_AT),
            is_active=data.get(FIELD_IS_ACTIVE) is True,
            location=data.get(FIELD_LOCATION) or None,
            image_url=data.get(FIELD_IMAGE_URL) or None,
        )

    @property
    def is_valid(self) -> bool:
        """True when the event has a non-empty title and a scheduled time."""
        has_title = bool(self.title and self.title.strip())
        has_time = self.scheduled_at is not None and self.scheduled_at != ""
        return has_title and has_time

    def instant(self) -> datetime:
        """Scheduled time as a UTC instant. Raises ValidationException if unusable."""
        return to_instant(self.scheduled_at)


@dataclass(frozen=True)
class ChangeRecord:
    """One mutation from the change stream (event fields may be empty on removal)."""

    kind: ChangeKind
    event: Event

    @property
    def event_id(self) -> str:
        return self.event.id

