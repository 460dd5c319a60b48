"""Notification service: send primitives, event notifications, listener and reminder wiring.

Every send goes through ``send_to_all`` or ``send_to_device``: a success is
appended to the notification log, a failure is appended to the error log and
re-raised to the caller.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any

from eventpush.application.dtos.notification import (
    NotificationStats,
    NotifierMessage,
    SendResult,
)
from eventpush.application.interfaces import (
    Clock,
    IEventCache,
    IEventStore,
    IJobScheduler,
    INotificationLog,
    INotificationRecordStore,
    INotifier,
    Sleeper,
)
from eventpush.application.services.change_classifier import ChangeClassifier
from eventpush.application.services.notification_composer import (
    NotificationComposer,
    build_message,
)
from eventpush.application.use_cases.reconciliation import (
    DEFAULT_RESUBSCRIBE_DELAY_SECONDS,
    ReconciliationEngine,
)
from eventpush.application.use_cases.reminders import ReminderScheduler
from eventpush.domain.entities import Event, NotificationRecord
from eventpush.domain.enums import NotificationKind
from eventpush.domain.exceptions import DeliveryException, ResourceNotFoundException
from eventpush.shared.telemetry.logging import get_logger
from eventpush.shared.telemetry.tracing import traced
from eventpush.shared.utils.datetime import utc_now

logger = get_logger(__name__)

DEVICE_TARGET = "device"
REMINDER_JOB_ID = "daily_event_reminders"


class NotificationService:
    """Entry point used by the HTTP layer, the change listener, and the reminder job."""

    def __init__(
        self,
        events: IEventStore,
        records: INotificationRecordStore,
        log: INotificationLog,
        notifier: INotifier,
        composer: NotificationComposer,
        cache: IEventCache,
        *,
        broadcast_topic: str = "all_users",
        target_timezone: str = "Asia/Kathmandu",
        clock: Clock = utc_now,
        sleep: Sleeper = asyncio.sleep,
        resubscribe_delay: float = DEFAULT_RESUBSCRIBE_DELAY_SECONDS,
        job_scheduler: IJobScheduler | None = None,
        reminder_hour: int = 9,
        reminder_minute: int = 0,
        stats_fetch_limit: int = 100,
        stats_recent_limit: int = 10,
    ) -> None:
        self.events = events
        self.records = records
        self.log = log
        self.notifier = notifier
        self.composer = composer
        self.broadcast_topic = broadcast_topic
        self.target_timezone = target_timezone
        self._clock = clock
        self._job_scheduler = job_scheduler
        self._reminder_hour = reminder_hour
        self._reminder_minute = reminder_minute
        self._stats_fetch_limit = stats_fetch_limit
        self._stats_recent_limit = stats_recent_limit
        self._reminders_scheduled = False

        self.listener = ReconciliationEngine(
            events,
            ChangeClassifier(records, clock=clock),
            cache,
            self,
            resubscribe_delay=resubscribe_delay,
            sleep=sleep,
        )
        self.reminders = ReminderScheduler(
            events,
            composer,
            self.send_to_all,
            target_timezone,
            clock=clock,
        )

    # -- send primitives -------------------------------------------------

    @traced("notifications.send_to_all")
    async def send_to_all(
        self,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> SendResult:
        """Broadcast to the configured topic."""
        message = build_message(
            title, body, data, self.broadcast_topic, now=self._clock()
        )
        try:
            message_id = await self.notifier.send_to_topic(self.broadcast_topic, message)
        except DeliveryException as e:
            await self._record_error(message, e)
            raise
        await self._record_sent(message, self.broadcast_topic, message_id)
        logger.info("Notification sent to %s: %s", self.broadcast_topic, title)
        return SendResult(success=True, message_id=message_id)

    @traced("notifications.send_to_device")
    async def send_to_device(
        self,
        token: str,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> SendResult:
        """Send to a single device registration token."""
        message = build_message(title, body, data, token, now=self._clock())
        try:
            message_id = await self.notifier.send_to_token(token, message)
        except DeliveryException as e:
            await self._record_error(message, e)
            raise
        await self._record_sent(message, DEVICE_TARGET, message_id)
        logger.info("Notification sent to device: %s", title)
        return SendResult(success=True, message_id=message_id)

    async def _record_sent(
        self, message: NotifierMessage, target: str, message_id: str
    ) -> None:
        entry = {
            "title": message.title,
            "body": message.body,
            "data": dict(message.data),
            "success": True,
            "sentAt": self._clock(),
            "target": target,
            "messageId": message_id,
        }
        try:
            await self.log.record_sent(entry)
        except Exception:
            # The message is already out; a log write failure must not turn it into an error.
            logger.exception("Failed to write notification log entry")

    async def _record_error(self, message: NotifierMessage, error: DeliveryException) -> None:
        entry = {
            "title": message.title,
            "body": message.body,
            "error": error.message,
            "sentAt": self._clock(),
        }
        try:
            await self.log.record_error(entry)
        except Exception:
            logger.exception("Failed to write notification error entry")

    # -- event notifications (IEventNotificationDispatcher) ---------------

    async def record_new_event(self, event: Event, instant: datetime) -> None:
        now = self._clock()
        await self.records.put(
            NotificationRecord(
                event_id=event.id,
                event_title=event.title or "",
                kind=NotificationKind.NEW_EVENT,
                last_notified_date=instant,
                notified_at=now,
            )
        )

    async def record_reschedule(
        self, event: Event, previous: datetime, instant: datetime
    ) -> None:
        now = self._clock()
        await self.records.put(
            NotificationRecord(
                event_id=event.id,
                event_title=event.title or "",
                kind=NotificationKind.DATE_MODIFIED,
                last_notified_date=instant,
                notified_at=now,
                old_date=previous,
                new_date=instant,
            ),
            merge=True,
        )

    async def send_new_event(self, event: Event) -> SendResult:
        composed = self.composer.compose_new_event(event)
        return await self.send_to_all(composed.title, composed.body, composed.data)

    async def send_rescheduled(
        self, event: Event, previous: datetime, instant: datetime
    ) -> SendResult:
        composed = self.composer.compose_rescheduled(event, previous, instant)
        return await self.send_to_all(composed.title, composed.body, composed.data)

    @traced("notifications.notify_event")
    async def notify_event(self, event_id: str) -> SendResult:
        """Manually notify an event as new, regardless of any existing record.

        Raises:
            ResourceNotFoundException: the event id does not resolve.
            ValidationException: the event has no title or readable dateTime.
            DeliveryException: the transport rejected the message.
        """
        event = await self.events.get(event_id)
        if event is None:
            raise ResourceNotFoundException("event", event_id)
        composed = self.composer.compose_new_event(event)
        await self.record_new_event(event, event.instant())
        logger.info("Manual notification for event %s", event_id)
        return await self.send_to_all(composed.title, composed.body, composed.data)

    # -- stats ------------------------------------------------------------

    @traced("notifications.get_stats")
    async def get_stats(self) -> NotificationStats:
        """Totals over the most recent log window and the newest entries of each."""
        sent, errors = await asyncio.gather(
            self.log.recent_sent(self._stats_fetch_limit),
            self.log.recent_errors(self._stats_fetch_limit),
        )
        return NotificationStats(
            total_sent=len(sent),
            total_errors=len(errors),
            recent_logs=sent[: self._stats_recent_limit],
            recent_errors=errors[: self._stats_recent_limit],
        )

    # -- background lifecycle ---------------------------------------------

    def start_listening(self) -> None:
        """Start the event change listener. Idempotent."""
        self.listener.start()

    def schedule_reminders(self) -> None:
        """Register the daily reminder job. Idempotent."""
        if self._job_scheduler is None:
            logger.warning("No job scheduler configured; daily reminders disabled")
            return
        self._job_scheduler.add_daily_job(
            REMINDER_JOB_ID,
            self.run_daily_reminders,
            hour=self._reminder_hour,
            minute=self._reminder_minute,
            timezone=self.target_timezone,
        )
        if not self._reminders_scheduled:
            logger.info(
                "Daily reminders scheduled at %02d:%02d %s",
                self._reminder_hour,
                self._reminder_minute,
                self.target_timezone,
            )
        self._reminders_scheduled = True

    async def run_daily_reminders(self) -> None:
        """Scheduled job body; failures are logged so the scheduler keeps running."""
        try:
            await self.reminders.run()
        except Exception:
            logger.exception("Daily reminder job failed")

    async def shutdown(self) -> None:
        await self.listener.stop()
