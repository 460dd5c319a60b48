"""Change-feed reconciliation: consume the events change stream and notify at most once.

Lifecycle per subscription:
    AWAITING_FIRST_BATCH --first non-empty batch (baseline, no dispatch)--> LIVE
    LIVE --stream error or end--> AWAITING_FIRST_BATCH, sleep, resubscribe

Within LIVE, batches and the changes in them are processed strictly one at a
time in arrival order. For a dispatching change the record is persisted, then
the cache is aligned with it, then the notification is sent.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Sequence
from contextlib import aclosing
from datetime import datetime

from eventpush.application.interfaces import (
    IEventCache,
    IEventNotificationDispatcher,
    IEventStore,
    Sleeper,
)
from eventpush.application.services.change_classifier import (
    ChangeClassifier,
    ChangeDecision,
)
from eventpush.domain.entities import ChangeRecord
from eventpush.domain.enums import ChangeAction, SubscriptionPhase
from eventpush.shared.telemetry.logging import get_logger
from eventpush.shared.telemetry.tracing import add_span_attributes, traced
from eventpush.shared.utils.datetime import utc_now

logger = get_logger(__name__)

DEFAULT_RESUBSCRIBE_DELAY_SECONDS = 5.0


class ReconciliationEngine:
    """Owns the subscription phase and the event cache for one listener instance."""

    def __init__(
        self,
        store: IEventStore,
        classifier: ChangeClassifier,
        cache: IEventCache,
        dispatcher: IEventNotificationDispatcher,
        *,
        resubscribe_delay: float = DEFAULT_RESUBSCRIBE_DELAY_SECONDS,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._store = store
        self._classifier = classifier
        self._cache = cache
        self._dispatcher = dispatcher
        self._resubscribe_delay = resubscribe_delay
        self._sleep = sleep

        self._phase = SubscriptionPhase.AWAITING_FIRST_BATCH
        self._task: asyncio.Task[None] | None = None
        self._stop_requested = False
        self._busy = False

        self.action_counts: Counter[ChangeAction] = Counter()
        self.failed_changes = 0
        self.stream_failures = 0
        self.last_batch_at: datetime | None = None

    @property
    def phase(self) -> SubscriptionPhase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        """Start the subscription loop in the background. Idempotent."""
        if self._task is not None and not self._task.done():
            return self._task
        self._stop_requested = False
        self._task = asyncio.create_task(self.run(), name="event-change-listener")
        logger.info("Event change listener started")
        return self._task

    async def stop(self) -> None:
        """Stop consuming the stream and release the subscription.

        A batch being processed is allowed to finish; an idle loop (waiting on
        the stream or on the resubscribe delay) is cancelled.
        """
        self._stop_requested = True
        task = self._task
        if task is None or task.done():
            return
        if not self._busy:
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Event change listener stopped")

    async def run(self) -> None:
        """Subscribe, process batches, and resubscribe after a fixed delay on failure."""
        while not self._stop_requested:
            self._phase = SubscriptionPhase.AWAITING_FIRST_BATCH
            try:
                async with aclosing(self._store.subscribe()) as batches:
                    async for changes in batches:
                        await self.handle_batch(changes)
                        if self._stop_requested:
                            return
                logger.warning("Event change stream ended")
            except Exception as e:
                if self._stop_requested:
                    return
                logger.error("Event change stream failed: %s", e)
            self.stream_failures += 1
            self._phase = SubscriptionPhase.AWAITING_FIRST_BATCH
            logger.info("Resubscribing in %.1fs", self._resubscribe_delay)
            await self._sleep(self._resubscribe_delay)

    @traced("reconciliation.handle_batch")
    async def handle_batch(self, changes: Sequence[ChangeRecord]) -> list[ChangeDecision]:
        """Process one batch; the first non-empty batch of a subscription is a baseline."""
        if not changes:
            return []
        self._busy = True
        try:
            self.last_batch_at = utc_now()
            add_span_attributes(count=len(changes), phase=self._phase.value)
            if self._phase is SubscriptionPhase.AWAITING_FIRST_BATCH:
                decisions = [await self._apply_baseline(c) for c in changes]
                self._phase = SubscriptionPhase.LIVE
                logger.info(
                    "Initial load: %d existing event(s) cached, notifications suppressed",
                    len(changes),
                )
                return decisions

            logger.info("Processing %d event change(s)", len(changes))
            decisions = []
            for change in changes:
                decision = await self.process_change(change)
                if decision is not None:
                    decisions.append(decision)
            return decisions
        finally:
            self._busy = False

    async def process_change(self, change: ChangeRecord) -> ChangeDecision | None:
        """Classify and apply one live change. Errors are logged and the change skipped."""
        try:
            decision = await self._classifier.classify(change, self._cache)
            await self._apply(decision)
        except Exception:
            self.failed_changes += 1
            logger.exception(
                "Failed to process %s change for event %s",
                change.kind.value,
                change.event_id,
            )
            return None
        self.action_counts[decision.action] += 1
        return decision

    async def _apply_baseline(self, change: ChangeRecord) -> ChangeDecision:
        decision = self._classifier.baseline(change)
        if decision.evict:
            await self._cache.delete(change.event_id)
        elif decision.cache_instant is not None:
            await self._cache.set(change.event_id, decision.cache_instant)
        self.action_counts[decision.action] += 1
        return decision

    async def _apply(self, decision: ChangeDecision) -> None:
        event = decision.event
        action = decision.action

        if action is ChangeAction.IGNORE_INVALID:
            logger.warning("Skipping event %s: %s", event.id, decision.reason)
            return
        if action in (ChangeAction.IGNORE_INACTIVE, ChangeAction.IGNORE_PAST):
            logger.info("Skipping event %s: %s", event.id, decision.reason)
            return
        if action is ChangeAction.REMOVED:
            await self._cache.delete(event.id)
            logger.info("Event removed: %s", event.id)
            return
        if action is ChangeAction.UNCHANGED:
            if decision.cache_instant is not None:
                await self._cache.set(event.id, decision.cache_instant)
            logger.debug("No notification for event %s: %s", event.id, decision.reason)
            return

        instant = decision.instant
        assert instant is not None
        if action is ChangeAction.NEW:
            await self._dispatcher.record_new_event(event, instant)
            await self._cache.set(event.id, instant)
            logger.info("New event detected: %s (%s)", event.title, event.id)
            await self._dispatcher.send_new_event(event)
        elif action is ChangeAction.RESCHEDULED:
            previous = decision.previous
            assert previous is not None
            await self._dispatcher.record_reschedule(event, previous, instant)
            await self._cache.set(event.id, instant)
            logger.info(
                "Event rescheduled: %s (%s) %s -> %s",
                event.title,
                event.id,
                previous.isoformat(),
                instant.isoformat(),
            )
            await self._dispatcher.send_rescheduled(event, previous, instant)
