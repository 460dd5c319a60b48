"""ChangeClassifier: validation gate, added/modified/removed decisions, baseline."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from conftest import (
    NOW,
    TOMORROW_10,
    TOMORROW_14,
    InMemoryRecordStore,
    added,
    fixed_clock,
    make_event,
    modified,
    removed,
)

from eventpush.application.services.change_classifier import ChangeClassifier
from eventpush.domain.entities import NotificationRecord
from eventpush.domain.enums import ChangeAction, NotificationKind
from eventpush.infrastructure.cache import InMemoryEventCache


def _record(event_id: str = "E1", last=TOMORROW_10) -> NotificationRecord:
    return NotificationRecord(
        event_id=event_id,
        event_title="Launch",
        kind=NotificationKind.NEW_EVENT,
        last_notified_date=last,
        notified_at=NOW,
    )


@pytest.fixture
def classifier(records: InMemoryRecordStore) -> ChangeClassifier:
    return ChangeClassifier(records, clock=fixed_clock)


async def test_missing_scheduled_at_is_invalid(classifier, cache) -> None:
    decision = await classifier.classify(added(make_event(scheduled_at=None)), cache)
    assert decision.action is ChangeAction.IGNORE_INVALID
    assert decision.cache_instant is None
    assert "dateTime" in decision.reason


async def test_blank_title_is_invalid(classifier, cache) -> None:
    decision = await classifier.classify(modified(make_event(title="   ")), cache)
    assert decision.action is ChangeAction.IGNORE_INVALID
    assert "title" in decision.reason


async def test_unreadable_scheduled_at_is_invalid(classifier, cache) -> None:
    decision = await classifier.classify(added(make_event(scheduled_at="soon")), cache)
    assert decision.action is ChangeAction.IGNORE_INVALID


async def test_invalid_checked_before_inactive(classifier, cache) -> None:
    event = make_event(scheduled_at=None, is_active=False)
    decision = await classifier.classify(added(event), cache)
    assert decision.action is ChangeAction.IGNORE_INVALID


async def test_inactive_is_ignored(classifier, cache, records) -> None:
    records.get = AsyncMock()
    decision = await classifier.classify(added(make_event(is_active=False)), cache)
    assert decision.action is ChangeAction.IGNORE_INACTIVE
    records.get.assert_not_called()


@pytest.mark.parametrize("offset", [timedelta(0), -timedelta(minutes=1)])
async def test_now_or_past_is_ignored(classifier, cache, offset) -> None:
    decision = await classifier.classify(added(make_event(scheduled_at=NOW + offset)), cache)
    assert decision.action is ChangeAction.IGNORE_PAST


async def test_added_without_record_is_new(classifier, cache) -> None:
    decision = await classifier.classify(added(make_event()), cache)
    assert decision.action is ChangeAction.NEW
    assert decision.action.dispatches
    assert decision.cache_instant == TOMORROW_10


async def test_added_with_record_is_unchanged_and_follows_store(
    classifier, cache, records
) -> None:
    records.records["E1"] = _record(last=TOMORROW_10)
    decision = await classifier.classify(added(make_event(scheduled_at=TOMORROW_14)), cache)
    assert decision.action is ChangeAction.UNCHANGED
    assert not decision.action.dispatches
    assert decision.cache_instant == TOMORROW_10


async def test_modified_uses_cache_first(classifier, cache, records) -> None:
    await cache.set("E1", TOMORROW_10)
    records.records["E1"] = _record(last=TOMORROW_14)
    decision = await classifier.classify(modified(make_event(scheduled_at=TOMORROW_14)), cache)
    assert decision.action is ChangeAction.RESCHEDULED
    assert decision.previous == TOMORROW_10
    assert decision.instant == TOMORROW_14
    assert decision.cache_instant == TOMORROW_14


async def test_modified_falls_back_to_store(classifier, records) -> None:
    cold = InMemoryEventCache()
    records.records["E1"] = _record(last=TOMORROW_10)
    decision = await classifier.classify(modified(make_event(scheduled_at=TOMORROW_14)), cold)
    assert decision.action is ChangeAction.RESCHEDULED
    assert decision.previous == TOMORROW_10
    assert "store" in decision.reason


async def test_modified_without_any_history_is_new(classifier, cache) -> None:
    decision = await classifier.classify(modified(make_event()), cache)
    assert decision.action is ChangeAction.NEW
    assert decision.previous is None


async def test_modified_same_instant_other_representation_is_unchanged(
    classifier, cache
) -> None:
    await cache.set("E1", TOMORROW_10)
    wrapper = {"seconds": int(TOMORROW_10.timestamp()), "nanos": 0}
    decision = await classifier.classify(modified(make_event(scheduled_at=wrapper)), cache)
    assert decision.action is ChangeAction.UNCHANGED
    assert decision.cache_instant == TOMORROW_10


async def test_removed_evicts_without_validation(classifier, cache, records) -> None:
    records.get = AsyncMock()
    decision = await classifier.classify(removed("E1"), cache)
    assert decision.action is ChangeAction.REMOVED
    assert decision.evict
    records.get.assert_not_called()


async def test_store_read_failure_propagates(classifier, cache, records) -> None:
    records.fail_get = RuntimeError("firestore down")
    with pytest.raises(RuntimeError):
        await classifier.classify(added(make_event()), cache)


def test_baseline_caches_readable_instant(classifier) -> None:
    decision = classifier.baseline(added(make_event(is_active=False)))
    assert decision.action is ChangeAction.SUPPRESS_INITIAL_LOAD
    assert decision.cache_instant == TOMORROW_10


def test_baseline_skips_unreadable_instant(classifier) -> None:
    decision = classifier.baseline(added(make_event(scheduled_at=None)))
    assert decision.action is ChangeAction.SUPPRESS_INITIAL_LOAD
    assert decision.cache_instant is None
    assert not decision.evict


def test_baseline_removal_evicts(classifier) -> None:
    decision = classifier.baseline(removed("E1"))
    assert decision.evict
