"""APScheduler wiring for the daily reminder job."""

from unittest.mock import AsyncMock, MagicMock

from apscheduler.triggers.cron import CronTrigger

from eventpush.infrastructure.scheduling import (
    ApschedulerJobScheduler,
    get_scheduler,
    init_scheduler,
    shutdown_scheduler,
)


def test_add_daily_job_uses_cron_in_target_zone() -> None:
    scheduler = MagicMock()
    job = AsyncMock()
    ApschedulerJobScheduler(scheduler).add_daily_job(
        "daily_event_reminders", job, hour=9, minute=0, timezone="Asia/Kathmandu"
    )

    scheduler.add_job.assert_called_once()
    args, kwargs = scheduler.add_job.call_args
    assert args == (job,)
    assert kwargs["id"] == "daily_event_reminders"
    assert kwargs["replace_existing"] is True
    trigger = kwargs["trigger"]
    assert isinstance(trigger, CronTrigger)
    assert str(trigger.timezone) == "Asia/Kathmandu"
    fields = {f.name: str(f) for f in trigger.fields}
    assert fields["hour"] == "9"
    assert fields["minute"] == "0"


def test_add_daily_job_without_scheduler_is_noop() -> None:
    assert get_scheduler() is None
    ApschedulerJobScheduler().add_daily_job(
        "daily_event_reminders", AsyncMock(), hour=9, minute=0, timezone="UTC"
    )


async def test_init_scheduler_is_idempotent() -> None:
    scheduler = init_scheduler()
    try:
        assert init_scheduler() is scheduler
        assert get_scheduler() is scheduler
        assert scheduler.running
    finally:
        shutdown_scheduler()
    assert get_scheduler() is None
    shutdown_scheduler()
