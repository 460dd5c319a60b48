"""Per-change decision logic for the event change listener.

The classifier reads (cache, notification records) but never writes; the
returned ChangeDecision says which mutation the engine should apply.

Order of checks for non-removal changes:
    1. missing title or scheduled time (or an unreadable one) -> IGNORE_INVALID
    2. inactive -> IGNORE_INACTIVE
    3. scheduled at or before now -> IGNORE_PAST
    4. kind-specific classification (added / modified)

Removals skip validation: their snapshot may carry no fields at all, and the
cache entry must be dropped regardless.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from eventpush.application.interfaces import (
    Clock,
    IEventCache,
    INotificationRecordStore,
)
from eventpush.domain.entities import ChangeRecord, Event
from eventpush.domain.enums import ChangeAction, ChangeKind
from eventpush.domain.exceptions import ValidationException
from eventpush.shared.utils.datetime import utc_now


@dataclass(frozen=True)
class ChangeDecision:
    """Action for one change plus the cache mutation it implies.

    Attributes:
        action: What happened to the event.
        change: The change being classified.
        instant: Current scheduled instant (None when invalid or removed).
        previous: Old instant a reschedule/unchanged comparison used.
        cache_instant: Value to upsert into the cache; None means leave it.
        evict: Drop the cache entry.
        reason: Short human-readable explanation for logs.
    """

    action: ChangeAction
    change: ChangeRecord
    instant: datetime | None = None
    previous: datetime | None = None
    cache_instant: datetime | None = None
    evict: bool = False
    reason: str = ""

    @property
    def event(self) -> Event:
        return self.change.event


class ChangeClassifier:
    """Classifies changes against the cache and the notification record store."""

    def __init__(
        self,
        records: INotificationRecordStore,
        clock: Clock = utc_now,
    ) -> None:
        self._records = records
        self._clock = clock

    def baseline(self, change: ChangeRecord) -> ChangeDecision:
        """Treat a change from the first batch of a subscription as existing state.

        Never dispatches. Any readable scheduled time is cached, whatever the
        event's active/past status.
        """
        if change.kind is ChangeKind.REMOVED:
            return ChangeDecision(
                ChangeAction.SUPPRESS_INITIAL_LOAD,
                change,
                evict=True,
                reason="initial load removal",
            )
        try:
            instant: datetime | None = change.event.instant()
        except ValidationException:
            instant = None
        return ChangeDecision(
            ChangeAction.SUPPRESS_INITIAL_LOAD,
            change,
            instant=instant,
            cache_instant=instant,
            reason="initial load",
        )

    def screen(self, change: ChangeRecord) -> ChangeDecision | None:
        """Validation gate; returns an IGNORE_* decision, or None if the event passes."""
        event = change.event
        if not event.is_valid:
            missing = "title" if not (event.title and event.title.strip()) else "dateTime"
            return ChangeDecision(
                ChangeAction.IGNORE_INVALID, change, reason=f"missing {missing}"
            )
        try:
            instant = event.instant()
        except ValidationException as e:
            return ChangeDecision(ChangeAction.IGNORE_INVALID, change, reason=e.message)
        if not event.is_active:
            return ChangeDecision(
                ChangeAction.IGNORE_INACTIVE, change, instant=instant, reason="inactive"
            )
        if instant <= self._clock():
            return ChangeDecision(
                ChangeAction.IGNORE_PAST, change, instant=instant, reason="in the past"
            )
        return None

    async def classify(self, change: ChangeRecord, cache: IEventCache) -> ChangeDecision:
        """Classify one live change. Store/cache read failures propagate."""
        if change.kind is ChangeKind.REMOVED:
            return ChangeDecision(
                ChangeAction.REMOVED, change, evict=True, reason="removed"
            )

        rejected = self.screen(change)
        if rejected is not None:
            return rejected

        instant = change.event.instant()
        if change.kind is ChangeKind.ADDED:
            return await self._classify_added(change, instant)
        return await self._classify_modified(change, instant, cache)

    async def _classify_added(
        self, change: ChangeRecord, instant: datetime
    ) -> ChangeDecision:
        record = await self._records.get(change.event_id)
        if record is not None:
            # Already notified: cache follows the store, not the incoming value.
            return ChangeDecision(
                ChangeAction.UNCHANGED,
                change,
                instant=instant,
                previous=record.last_notified_date,
                cache_instant=record.last_notified_date,
                reason="already notified",
            )
        return ChangeDecision(
            ChangeAction.NEW,
            change,
            instant=instant,
            cache_instant=instant,
            reason="no notification record",
        )

    async def _classify_modified(
        self,
        change: ChangeRecord,
        instant: datetime,
        cache: IEventCache,
    ) -> ChangeDecision:
        previous = await cache.get(change.event_id)
        source = "cache"
        if previous is None:
            record = await self._records.get(change.event_id)
            if record is not None:
                previous = record.last_notified_date
                source = "store"
        if previous is None:
            return ChangeDecision(
                ChangeAction.NEW,
                change,
                instant=instant,
                cache_instant=instant,
                reason="no previous date in cache or store",
            )
        if previous != instant:
            return ChangeDecision(
                ChangeAction.RESCHEDULED,
                change,
                instant=instant,
                previous=previous,
                cache_instant=instant,
                reason=f"date changed (previous from {source})",
            )
        return ChangeDecision(
            ChangeAction.UNCHANGED,
            change,
            instant=instant,
            previous=previous,
            cache_instant=instant,
            reason=f"date unchanged (previous from {source})",
        )
