"""APScheduler-based wall-clock job scheduler.

Jobs live in memory; the daily reminder job is re-registered on every
startup, so nothing needs to survive a restart.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from eventpush.shared.telemetry.logging import get_logger
from eventpush.shared.utils.datetime import get_zone

logger = get_logger(__name__)

_scheduler: AsyncIOScheduler | None = None


def init_scheduler() -> AsyncIOScheduler:
    """Create and start the scheduler. Call during app startup; idempotent."""
    global _scheduler

    if _scheduler is not None:
        return _scheduler

    _scheduler = AsyncIOScheduler(
        job_defaults={
            "coalesce": True,  # Combine missed runs into one
            "max_instances": 1,
            "misfire_grace_time": 3600,
        },
    )
    _scheduler.start()
    logger.info("Job scheduler started")
    return _scheduler


def get_scheduler() -> AsyncIOScheduler | None:
    return _scheduler


def shutdown_scheduler() -> None:
    """Shut the scheduler down without waiting for running jobs. Call during app shutdown."""
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Job scheduler stopped")


class ApschedulerJobScheduler:
    """IJobScheduler backed by the module-level AsyncIOScheduler."""

    def __init__(self, scheduler: AsyncIOScheduler | None = None) -> None:
        self._scheduler = scheduler

    def add_daily_job(
        self,
        job_id: str,
        func: Callable[[], Awaitable[Any]],
        *,
        hour: int,
        minute: int,
        timezone: str,
    ) -> None:
        scheduler = self._scheduler or _scheduler
        if scheduler is None:
            logger.warning("Scheduler not initialized, cannot schedule %s", job_id)
            return
        scheduler.add_job(
            func,
            trigger=CronTrigger(hour=hour, minute=minute, timezone=get_zone(timezone)),
            id=job_id,
            replace_existing=True,
        )
        logger.info("Scheduled job %s daily at %02d:%02d %s", job_id, hour, minute, timezone)
