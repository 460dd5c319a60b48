"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (Firestore, FCM, scheduler) into
the NotificationService and starting its background work.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from eventpush.application.interfaces import IJobScheduler
from eventpush.application.services.notification_composer import NotificationComposer
from eventpush.application.use_cases.notifications import NotificationService
from eventpush.core.config import Settings, get_settings
from eventpush.infrastructure.cache import InMemoryEventCache
from eventpush.infrastructure.firebase._rest_client import FirestoreRESTClient
from eventpush.infrastructure.firebase.client import close_firebase, init_firebase
from eventpush.infrastructure.firebase.repositories import (
    FirestoreEventStore,
    FirestoreNotificationLogRepository,
    FirestoreNotificationRecordRepository,
)
from eventpush.infrastructure.messaging import FcmNotifier
from eventpush.infrastructure.scheduling import (
    ApschedulerJobScheduler,
    init_scheduler,
    shutdown_scheduler,
)
from eventpush.shared.telemetry.logging import setup_logging
from eventpush.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


def build_notification_service(
    settings: Settings,
    client: FirestoreRESTClient,
    notifier: FcmNotifier,
    job_scheduler: IJobScheduler | None = None,
) -> NotificationService:
    """Wire the Firestore repositories and FCM transport into a NotificationService."""
    return NotificationService(
        events=FirestoreEventStore(
            client,
            collection=settings.events_collection,
            poll_interval=settings.watch_poll_interval_seconds,
        ),
        records=FirestoreNotificationRecordRepository(client),
        log=FirestoreNotificationLogRepository(client),
        notifier=notifier,
        composer=NotificationComposer(
            settings.target_timezone,
            digest_body_max_chars=settings.reminder_body_max_chars,
        ),
        cache=InMemoryEventCache(),
        broadcast_topic=settings.broadcast_topic,
        target_timezone=settings.target_timezone,
        resubscribe_delay=settings.resubscribe_delay_seconds,
        job_scheduler=job_scheduler,
        reminder_hour=settings.reminder_hour,
        reminder_minute=settings.reminder_minute,
        stats_fetch_limit=settings.stats_fetch_limit,
        stats_recent_limit=settings.stats_recent_limit,
    )


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, config warnings, Firestore client, FCM notifier,
    scheduler, listener and reminder job. Shutdown order: listener (lets the
    current change finish), scheduler, FCM client, Firestore client, telemetry.
    """
    settings = get_settings()
    setup_logging()
    for warning in settings.startup_warnings():
        logger.warning(warning)

    # ---- Startup ----
    app.state.started_at = utc_now()
    app.state.notification_service = None
    app.state.notifier = None

    client = init_firebase()
    if client is not None:
        notifier = FcmNotifier(client.project_id, client.credentials)
        app.state.notifier = notifier

        job_scheduler = None
        if settings.reminders_enabled:
            job_scheduler = ApschedulerJobScheduler(init_scheduler())

        service = build_notification_service(settings, client, notifier, job_scheduler)
        app.state.notification_service = service

        if settings.listener_enabled:
            service.start_listening()
        if settings.reminders_enabled:
            service.schedule_reminders()
        logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    # ---- Shutdown ----
    service = getattr(app.state, "notification_service", None)
    if service is not None:
        await service.shutdown()
        app.state.notification_service = None

    shutdown_scheduler()

    notifier = getattr(app.state, "notifier", None)
    if notifier is not None:
        await notifier.aclose()
        app.state.notifier = None
        logger.info("FCM HTTP client closed")

    await close_firebase()

    from eventpush.shared.telemetry.telemetry import get_telemetry, set_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
