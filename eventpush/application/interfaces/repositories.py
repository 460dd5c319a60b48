"""Repository interfaces (ports) for the application layer.

Protocols define the store contracts; Firestore implementations live in
eventpush.infrastructure.firebase.repositories and tests use in-memory fakes.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any, Protocol

from eventpush.domain.entities import ChangeRecord, Event, NotificationRecord


class IEventStore(Protocol):
    """Read access to the events collection plus its change stream."""

    async def get_active(self) -> list[Event]:
        """Return every event whose isActive flag is true."""

    async def get(self, event_id: str) -> Event | None:
        """Return one event, or None if the id does not resolve."""

    def subscribe(self) -> AsyncGenerator[list[ChangeRecord], None]:
        """Open a change subscription yielding ordered batches.

        The first batch replays existing documents as ``added`` changes.
        Iteration ends with an exception when the stream fails; closing the
        iterator releases the underlying connection.
        """


class INotificationRecordStore(Protocol):
    """Durable per-event record of the last notified state."""

    async def get(self, event_id: str) -> NotificationRecord | None:
        """Return the record for an event, or None if never notified."""

    async def put(self, record: NotificationRecord, merge: bool = False) -> None:
        """Write a record; with merge=True unrelated stored fields are preserved."""


class INotificationLog(Protocol):
    """Append-only audit of sent notifications and delivery failures."""

    async def record_sent(self, entry: dict[str, Any]) -> str:
        """Append a successful-send entry; return its id."""

    async def record_error(self, entry: dict[str, Any]) -> str:
        """Append a delivery-failure entry; return its id."""

    async def recent_sent(self, limit: int) -> list[dict[str, Any]]:
        """Most recent sent entries, newest first."""

    async def recent_errors(self, limit: int) -> list[dict[str, Any]]:
        """Most recent error entries, newest first."""
