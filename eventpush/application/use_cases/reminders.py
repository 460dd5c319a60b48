"""Daily reminder digests for events happening today and tomorrow."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime, timedelta
from typing import Any

from eventpush.application.dtos.notification import ComposedNotification, SendResult
from eventpush.application.interfaces import Clock, IEventStore
from eventpush.application.services.notification_composer import NotificationComposer
from eventpush.domain.entities import Event
from eventpush.domain.exceptions import DeliveryException, ValidationException
from eventpush.shared.telemetry.logging import get_logger
from eventpush.shared.telemetry.tracing import add_span_attributes, traced
from eventpush.shared.utils.datetime import local_date, utc_now

logger = get_logger(__name__)

Broadcast = Callable[[str, str, dict[str, Any]], Awaitable[SendResult]]


class ReminderScheduler:
    """Selects today's and tomorrow's active events and broadcasts one digest for each.

    Stateless between runs: every trigger recomputes from the store, so a
    repeated run sends the same digests again.
    """

    def __init__(
        self,
        events: IEventStore,
        composer: NotificationComposer,
        broadcast: Broadcast,
        tz_name: str,
        clock: Clock = utc_now,
    ) -> None:
        self._events = events
        self._composer = composer
        self._broadcast = broadcast
        self._tz_name = tz_name
        self._clock = clock

    def partition(
        self, events: Iterable[Event], now: datetime
    ) -> tuple[list[Event], list[Event]]:
        """Split events by calendar day in the target timezone: (today, tomorrow).

        Invalid events and events on other days are left out.
        """
        today = local_date(now, self._tz_name)
        tomorrow = today + timedelta(days=1)
        todays: list[Event] = []
        tomorrows: list[Event] = []
        for event in events:
            if not event.is_valid:
                continue
            try:
                day = local_date(event.instant(), self._tz_name)
            except ValidationException:
                logger.debug("Skipping event %s with unreadable dateTime", event.id)
                continue
            if day == today:
                todays.append(event)
            elif day == tomorrow:
                tomorrows.append(event)
        return todays, tomorrows

    def compose(self, events: Iterable[Event], now: datetime) -> list[ComposedNotification]:
        """Digests to send for this run; empty partitions produce nothing."""
        todays, tomorrows = self.partition(events, now)
        digests = [
            self._composer.compose_today_digest(todays),
            self._composer.compose_tomorrow_digest(tomorrows),
        ]
        return [d for d in digests if d is not None]

    @traced("reminders.run")
    async def run(self) -> list[SendResult]:
        """Load active events and broadcast the digests.

        A failed digest is logged (the broadcast path has already recorded it in
        the error log) and does not prevent the other one from being sent.
        """
        events = await self._events.get_active()
        digests = self.compose(events, self._clock())
        add_span_attributes(count=len(digests))
        if not digests:
            logger.info("No events today or tomorrow; no reminders sent")
            return []

        results: list[SendResult] = []
        for digest in digests:
            try:
                results.append(
                    await self._broadcast(digest.title, digest.body, digest.data)
                )
            except DeliveryException as e:
                logger.error("Reminder %r not delivered: %s", digest.title, e.message)
                continue
            logger.info("Reminder sent: %s", digest.title)
        return results
