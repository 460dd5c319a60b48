"""In-process event cache (event id -> last-known scheduled instant).

Implements IEventCache.

Owned by one ReconciliationEngine. Created empty; populated from the first
batch of each subscription and upserted as decisions are finalized. Not
cleared on reconnect: the notification record store is the authority.
"""

from __future__ import annotations

import asyncio
from datetime import datetime

from eventpush.shared.utils.datetime import ensure_utc


class InMemoryEventCache:
    """Event cache backed by a dict and an asyncio lock."""

    def __init__(self) -> None:
        self._entries: dict[str, datetime] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._entries

    async def get(self, event_id: str) -> datetime | None:
        async with self._lock:
            return self._entries.get(event_id)

    async def set(self, event_id: str, instant: datetime) -> None:
        async with self._lock:
            self._entries[event_id] = ensure_utc(instant)

    async def delete(self, event_id: str) -> None:
        async with self._lock:
            self._entries.pop(event_id, None)

    async def snapshot(self) -> dict[str, datetime]:
        """Copy of all entries (for diagnostics and tests)."""
        async with self._lock:
            return dict(self._entries)
