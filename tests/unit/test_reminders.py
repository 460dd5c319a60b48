"""ReminderScheduler: today/tomorrow partition and digest broadcast."""

from datetime import UTC, datetime

from conftest import NOW, TOMORROW_10, TOMORROW_14, ScriptedEventStore, make_event

TODAY_EVENING = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)
# 23:59 and 00:00 in Kathmandu
LAST_MINUTE_TODAY = datetime(2026, 10, 18, 18, 14, tzinfo=UTC)
MIDNIGHT_TOMORROW = datetime(2026, 10, 18, 18, 15, tzinfo=UTC)
DAY_AFTER = datetime(2026, 10, 20, 4, 15, tzinfo=UTC)


def test_partition_uses_local_calendar_days(make_service) -> None:
    reminders = make_service().reminders
    events = [
        make_event("T1", scheduled_at=TODAY_EVENING),
        make_event("T2", scheduled_at=LAST_MINUTE_TODAY),
        make_event("M1", scheduled_at=MIDNIGHT_TOMORROW),
        make_event("M2", scheduled_at=TOMORROW_14),
        make_event("X", scheduled_at=DAY_AFTER),
    ]
    today, tomorrow = reminders.partition(events, NOW)
    assert [e.id for e in today] == ["T1", "T2"]
    assert [e.id for e in tomorrow] == ["M1", "M2"]


def test_partition_skips_invalid_and_unreadable(make_service) -> None:
    reminders = make_service().reminders
    events = [
        make_event("NOTITLE", title=None, scheduled_at=TODAY_EVENING),
        make_event("NODATE", scheduled_at=None),
        make_event("BAD", scheduled_at="next tuesday"),
        make_event("OK", scheduled_at=TODAY_EVENING.isoformat()),
    ]
    today, tomorrow = reminders.partition(events, NOW)
    assert [e.id for e in today] == ["OK"]
    assert tomorrow == []


async def test_run_broadcasts_today_then_tomorrow(make_service, notifier) -> None:
    store = ScriptedEventStore(
        events=[
            make_event("T1", title="Standup", scheduled_at=TODAY_EVENING),
            make_event("M1", title="Launch", scheduled_at=TOMORROW_10),
            make_event("M2", title="Retro", scheduled_at=TOMORROW_14),
            make_event("OFF", title="Hidden", scheduled_at=TOMORROW_10, is_active=False),
        ]
    )
    results = await make_service(store).reminders.run()

    assert len(results) == 2
    assert notifier.titles == ["Events Today (1)", "Tomorrow's Events (2)"]
    today_msg = notifier.sent[0][1]
    assert today_msg.body == "• Standup"
    assert today_msg.data["type"] == "daily_reminder"
    assert notifier.sent[1][1].body == "• Launch\n• Retro"
    assert all(target == "all_users" for target, _ in notifier.sent)


async def test_run_with_only_tomorrow_sends_single_digest(make_service, notifier) -> None:
    store = ScriptedEventStore(events=[make_event("M1", scheduled_at=TOMORROW_10)])
    await make_service(store).reminders.run()
    assert notifier.titles == ["Tomorrow's Events (1)"]


async def test_run_with_nothing_upcoming_sends_nothing(make_service, notifier) -> None:
    store = ScriptedEventStore(events=[make_event("X", scheduled_at=DAY_AFTER)])
    assert await make_service(store).reminders.run() == []
    assert notifier.sent == []


async def test_run_is_stateless_between_triggers(make_service, notifier) -> None:
    store = ScriptedEventStore(events=[make_event("M1", scheduled_at=TOMORROW_10)])
    reminders = make_service(store).reminders
    await reminders.run()
    await reminders.run()
    assert notifier.titles == ["Tomorrow's Events (1)"] * 2


async def test_delivery_failure_is_logged_and_run_continues(
    make_service, notifier, notification_log
) -> None:
    store = ScriptedEventStore(
        events=[
            make_event("T1", scheduled_at=TODAY_EVENING),
            make_event("M1", scheduled_at=TOMORROW_10),
        ]
    )
    notifier.fail = "UNAVAILABLE"
    results = await make_service(store).reminders.run()
    assert results == []
    assert [e["title"] for e in notification_log.errors] == [
        "Events Today (1)",
        "Tomorrow's Events (1)",
    ]


async def test_daily_job_swallows_store_errors(make_service) -> None:
    store = ScriptedEventStore()

    async def broken_get_active():
        raise RuntimeError("firestore unavailable")

    store.get_active = broken_get_active
    await make_service(store).run_daily_reminders()
