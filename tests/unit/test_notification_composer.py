"""NotificationComposer texts and build_message envelope coercion."""

from conftest import NOW, TOMORROW_10, TOMORROW_14, make_event

from eventpush.application.services.notification_composer import (
    CLICK_ACTION,
    NotificationComposer,
    build_message,
    coerce_data,
)


def test_new_event_text(composer: NotificationComposer) -> None:
    composed = composer.compose_new_event(make_event(location="Hall A"))
    assert composed.title == "New Event: Launch"
    assert composed.body == "Mon, Oct 19, 2026, 10:00 AM • Hall A"
    assert composed.data == {"type": "new_event", "eventId": "E1", "route": "events"}


def test_new_event_location_placeholder(composer: NotificationComposer) -> None:
    composed = composer.compose_new_event(make_event())
    assert composed.body.endswith("• TBD")


def test_image_url_only_when_present(composer: NotificationComposer) -> None:
    with_image = composer.compose_new_event(make_event(image_url="https://img/x.png"))
    blank_image = composer.compose_new_event(make_event(image_url="  "))
    assert with_image.data["imageUrl"] == "https://img/x.png"
    assert "imageUrl" not in blank_image.data


def test_rescheduled_lists_new_then_old(composer: NotificationComposer) -> None:
    composed = composer.compose_rescheduled(make_event(), TOMORROW_10, TOMORROW_14)
    assert composed.title == "Event Rescheduled: Launch"
    assert composed.body == (
        "New: Mon, Oct 19, 2026, 02:00 PM\nOld: Mon, Oct 19, 2026, 10:00 AM"
    )
    assert composed.data["type"] == "event_rescheduled"
    assert composed.data["oldDate"] == "Mon, Oct 19, 2026, 10:00 AM"
    assert composed.data["newDate"] == "Mon, Oct 19, 2026, 02:00 PM"


def test_digests_none_when_empty(composer: NotificationComposer) -> None:
    assert composer.compose_today_digest([]) is None
    assert composer.compose_tomorrow_digest([]) is None


def test_digest_titles_and_bullets(composer: NotificationComposer) -> None:
    events = [make_event("A", title="Yoga"), make_event("B", title="Chess")]
    today = composer.compose_today_digest(events)
    tomorrow = composer.compose_tomorrow_digest(events)
    assert today.title == "Events Today (2)"
    assert tomorrow.title == "Tomorrow's Events (2)"
    assert today.body == "• Yoga\n• Chess"
    assert today.data == {"type": "daily_reminder", "route": "events"}


def test_digest_body_truncated() -> None:
    composer = NotificationComposer("Asia/Kathmandu", digest_body_max_chars=100)
    events = [make_event(str(i), title="X" * 30) for i in range(5)]
    digest = composer.compose_today_digest(events)
    assert len(digest.body) == 100
    assert digest.title == "Events Today (5)"


def test_coerce_data_stringifies_and_drops_none() -> None:
    assert coerce_data({"a": 1, "b": 2.5, "c": True, "d": False, "e": None, "f": "x"}) == {
        "a": "1",
        "b": "2.5",
        "c": "true",
        "d": "false",
        "f": "x",
    }


def test_build_message_envelope() -> None:
    message = build_message("T", "B", {"eventId": 7}, "all_users", now=NOW)
    assert message.target == "all_users"
    assert message.data == {
        "eventId": "7",
        "type": "announcement",
        "timestamp": NOW.isoformat(),
        "click_action": CLICK_ACTION,
    }
    assert message.image_url is None
    assert all(isinstance(v, str) for v in message.data.values())


def test_build_message_keeps_type_and_lifts_image() -> None:
    message = build_message(
        "T", "B", {"type": "test", "imageUrl": "https://img/y.png"}, "all_users", now=NOW
    )
    assert message.data["type"] == "test"
    assert message.image_url == "https://img/y.png"


def test_build_message_without_data() -> None:
    message = build_message("T", "B", None, "tok", now=NOW)
    assert message.data["type"] == "announcement"
