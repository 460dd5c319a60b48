"""Firestore-backed event store (implements IEventStore).

The REST API has no snapshot listener, so ``subscribe`` polls the collection
and diffs consecutive snapshots. Like a native listener, the first poll
reports every existing document as ``added``.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from typing import Any

import httpx
from google.auth.exceptions import GoogleAuthError

from eventpush.application.interfaces import Sleeper
from eventpush.domain.entities import ChangeRecord, Event
from eventpush.domain.entities.event import FIELD_IS_ACTIVE
from eventpush.domain.enums import ChangeKind
from eventpush.domain.exceptions import StreamException
from eventpush.infrastructure.firebase._rest_client import FirestoreRESTClient
from eventpush.infrastructure.firebase.collections import COLLECTION_EVENTS
from eventpush.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

Snapshot = dict[str, dict[str, Any]]


def diff_snapshots(previous: Snapshot, current: Snapshot) -> list[ChangeRecord]:
    """Changes turning ``previous`` into ``current``: adds and modifies in
    document order, then removals (carrying the last known data)."""
    changes: list[ChangeRecord] = []
    for doc_id, data in current.items():
        before = previous.get(doc_id)
        if before is None:
            changes.append(ChangeRecord(ChangeKind.ADDED, Event.from_document(doc_id, data)))
        elif before != data:
            changes.append(
                ChangeRecord(ChangeKind.MODIFIED, Event.from_document(doc_id, data))
            )
    for doc_id, data in previous.items():
        if doc_id not in current:
            changes.append(
                ChangeRecord(ChangeKind.REMOVED, Event.from_document(doc_id, data))
            )
    return changes


class FirestoreEventStore:
    """Reads the events collection and streams its changes."""

    def __init__(
        self,
        client: FirestoreRESTClient,
        *,
        collection: str = COLLECTION_EVENTS,
        poll_interval: float = 2.0,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._client = client
        self._coll = client.collection(collection)
        self._poll_interval = poll_interval
        self._sleep = sleep

    async def get_active(self) -> list[Event]:
        """Return active events (server-side isActive == true filter)."""
        q = self._coll.where(FIELD_IS_ACTIVE, "==", True)
        return [Event.from_document(s.id, s.to_dict()) async for s in q.stream()]

    async def get(self, event_id: str) -> Event | None:
        doc = await self._coll.document(event_id).get()
        if not doc:
            return None
        return Event.from_document(doc.id, doc.to_dict())

    async def _load(self) -> Snapshot:
        return {s.id: s.to_dict() async for s in self._coll.stream()}

    async def subscribe(self) -> AsyncGenerator[list[ChangeRecord], None]:
        """Yield non-empty change batches until a poll fails.

        Raises:
            StreamException: a snapshot request or token refresh failed; the
                caller resubscribes.
        """
        previous: Snapshot = {}
        while True:
            try:
                current = await self._load()
            except (httpx.HTTPError, GoogleAuthError) as e:
                raise StreamException(f"Event snapshot failed: {e}") from e
            changes = diff_snapshots(previous, current)
            previous = current
            if changes:
                logger.debug("Event snapshot produced %d change(s)", len(changes))
                yield changes
            await self._sleep(self._poll_interval)
