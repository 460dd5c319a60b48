"""Service interfaces (ports) for the application layer."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from eventpush.application.dtos.notification import NotifierMessage, SendResult
    from eventpush.domain.entities import Event

# Injected primitives so the listener can be driven without real time passing.
Sleeper = Callable[[float], Awaitable[None]]
Clock = Callable[[], datetime]


class INotifier(Protocol):
    """Push transport: deliver one message to a topic or a single device."""

    async def send_to_topic(self, topic: str, message: NotifierMessage) -> str:
        """Broadcast to every subscriber of ``topic``; return the transport message id.

        Raises DeliveryException on transport or credential failure.
        """

    async def send_to_token(self, token: str, message: NotifierMessage) -> str:
        """Send to one device registration token; return the transport message id.

        Raises DeliveryException on transport or credential failure.
        """


class IEventCache(Protocol):
    """Maps event id to the last-known scheduled instant.

    Volatile and secondary: whenever it disagrees with the notification
    record store, the store wins.
    """

    async def get(self, event_id: str) -> datetime | None:
        """Return the cached instant or None."""

    async def set(self, event_id: str, instant: datetime) -> None:
        """Upsert the cached instant for an event."""

    async def delete(self, event_id: str) -> None:
        """Remove the entry (no-op if absent)."""


class IEventNotificationDispatcher(Protocol):
    """Persists notification records and sends event notifications.

    Recording and sending are separate steps so the listener can persist the
    record (and align its cache) before attempting delivery.
    """

    async def record_new_event(self, event: Event, instant: datetime) -> None:
        """Write a new_event record (full overwrite)."""

    async def record_reschedule(
        self, event: Event, previous: datetime, instant: datetime
    ) -> None:
        """Merge a date_modified record, preserving unrelated fields."""

    async def send_new_event(self, event: Event) -> SendResult:
        """Broadcast the new-event notification."""

    async def send_rescheduled(
        self, event: Event, previous: datetime, instant: datetime
    ) -> SendResult:
        """Broadcast the rescheduled notification."""


class IJobScheduler(Protocol):
    """Wall-clock job trigger (cron-style)."""

    def add_daily_job(
        self,
        job_id: str,
        func: Callable[[], Awaitable[Any]],
        *,
        hour: int,
        minute: int,
        timezone: str,
    ) -> None:
        """Register (or replace) a job running every day at hour:minute in timezone."""
