"""Pytest configuration and fixtures for eventpush.

HTTP tests use eventpush.main:app through ASGITransport (the lifespan does
not run, so no Firebase client is created) and replace the notification
service with app.dependency_overrides. Unit tests use the in-memory fakes
below in place of Firestore and FCM.
"""

import asyncio
import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.pop("API_KEY", None)

from eventpush.api.v1.dependencies import get_notification_service  # noqa: E402
from eventpush.application.dtos.notification import NotifierMessage  # noqa: E402
from eventpush.application.services.notification_composer import (  # noqa: E402
    NotificationComposer,
)
from eventpush.application.use_cases.notifications import (  # noqa: E402
    NotificationService,
)
from eventpush.core.config import get_settings  # noqa: E402
from eventpush.core.limiter import limiter  # noqa: E402
from eventpush.domain.entities import ChangeRecord, Event, NotificationRecord  # noqa: E402
from eventpush.domain.enums import ChangeKind  # noqa: E402
from eventpush.domain.exceptions import DeliveryException  # noqa: E402
from eventpush.infrastructure.cache import InMemoryEventCache  # noqa: E402
from eventpush.main import app  # noqa: E402

TZ = "Asia/Kathmandu"
# 11:45 in Kathmandu (UTC+05:45)
NOW = datetime(2026, 10, 18, 6, 0, tzinfo=UTC)
# Tomorrow 10:00 and 14:00 in Kathmandu
TOMORROW_10 = datetime(2026, 10, 19, 4, 15, tzinfo=UTC)
TOMORROW_14 = datetime(2026, 10, 19, 8, 15, tzinfo=UTC)


def fixed_clock() -> datetime:
    return NOW


def make_event(
    event_id: str = "E1",
    title: str | None = "Launch",
    scheduled_at: Any = TOMORROW_10,
    is_active: bool = True,
    **extra: Any,
) -> Event:
    return Event(
        id=event_id,
        title=title,
        scheduled_at=scheduled_at,
        is_active=is_active,
        location=extra.get("location"),
        image_url=extra.get("image_url"),
    )


def added(event: Event) -> ChangeRecord:
    return ChangeRecord(ChangeKind.ADDED, event)


def modified(event: Event) -> ChangeRecord:
    return ChangeRecord(ChangeKind.MODIFIED, event)


def removed(event_id: str) -> ChangeRecord:
    return ChangeRecord(ChangeKind.REMOVED, Event(id=event_id))


class InMemoryRecordStore:
    """INotificationRecordStore fake; ``puts`` keeps (record, merge) in call order."""

    def __init__(self) -> None:
        self.records: dict[str, NotificationRecord] = {}
        self.puts: list[tuple[NotificationRecord, bool]] = []
        self.fail_get: Exception | None = None

    async def get(self, event_id: str) -> NotificationRecord | None:
        if self.fail_get is not None:
            raise self.fail_get
        return self.records.get(event_id)

    async def put(self, record: NotificationRecord, merge: bool = False) -> None:
        self.puts.append((record, merge))
        self.records[record.event_id] = record


class InMemoryNotificationLog:
    """INotificationLog fake; entries are appended oldest first."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.errors: list[dict[str, Any]] = []
        self.fail_writes = False

    async def record_sent(self, entry: dict[str, Any]) -> str:
        if self.fail_writes:
            raise RuntimeError("log unavailable")
        entry_id = f"log{len(self.sent) + 1}"
        self.sent.append({"id": entry_id, **entry})
        return entry_id

    async def record_error(self, entry: dict[str, Any]) -> str:
        if self.fail_writes:
            raise RuntimeError("log unavailable")
        entry_id = f"err{len(self.errors) + 1}"
        self.errors.append({"id": entry_id, **entry})
        return entry_id

    async def recent_sent(self, limit: int) -> list[dict[str, Any]]:
        return list(reversed(self.sent))[:limit]

    async def recent_errors(self, limit: int) -> list[dict[str, Any]]:
        return list(reversed(self.errors))[:limit]


class FakeNotifier:
    """INotifier fake recording (target, message); set ``fail`` to raise DeliveryException."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, NotifierMessage]] = []
        self.fail: str | None = None

    async def _send(self, target: str, message: NotifierMessage) -> str:
        if self.fail is not None:
            raise DeliveryException(target, self.fail)
        self.sent.append((target, message))
        return f"projects/demo/messages/{len(self.sent)}"

    async def send_to_topic(self, topic: str, message: NotifierMessage) -> str:
        return await self._send(topic, message)

    async def send_to_token(self, token: str, message: NotifierMessage) -> str:
        return await self._send("device", message)

    @property
    def titles(self) -> list[str]:
        return [m.title for _, m in self.sent]


class ScriptedEventStore:
    """IEventStore fake whose subscriptions replay scripted sessions.

    Each session is a list of batches; an Exception in place of a batch is
    raised from the iterator (a stream failure). After the last session the
    iterator blocks until closed, and ``drained`` is set.
    """

    def __init__(
        self,
        sessions: list[list[list[ChangeRecord] | Exception]] | None = None,
        events: list[Event] | None = None,
    ) -> None:
        self.sessions = list(sessions or [])
        self.events = {e.id: e for e in events or []}
        self.subscribe_count = 0
        self.closed_count = 0
        self.drained = asyncio.Event()

    async def get_active(self) -> list[Event]:
        return [e for e in self.events.values() if e.is_active]

    async def get(self, event_id: str) -> Event | None:
        return self.events.get(event_id)

    async def subscribe(self) -> AsyncGenerator[list[ChangeRecord], None]:
        self.subscribe_count += 1
        try:
            if self.sessions:
                for item in self.sessions.pop(0):
                    if isinstance(item, Exception):
                        raise item
                    yield item
            if not self.sessions:
                self.drained.set()
                await asyncio.Event().wait()
        finally:
            self.closed_count += 1


@pytest.fixture(autouse=True)
def _no_rate_limits():
    """Disable slowapi limits so API tests do not depend on call counts."""
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def records() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def notification_log() -> InMemoryNotificationLog:
    return InMemoryNotificationLog()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def cache() -> InMemoryEventCache:
    return InMemoryEventCache()


@pytest.fixture
def composer() -> NotificationComposer:
    return NotificationComposer(TZ)


@pytest.fixture
def make_service(records, notification_log, notifier, cache, composer):
    """Factory: NotificationService over the fakes with a fixed clock and instant sleep."""

    async def _no_sleep(_seconds: float) -> None:
        await asyncio.sleep(0)

    def _make(store: ScriptedEventStore | None = None, **kwargs: Any) -> NotificationService:
        kwargs.setdefault("sleep", _no_sleep)
        return NotificationService(
            store or ScriptedEventStore(),
            records,
            notification_log,
            notifier,
            composer,
            cache,
            target_timezone=TZ,
            clock=fixed_clock,
            **kwargs,
        )

    return _make


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def api_key(monkeypatch) -> str:
    """Enable API key auth for the duration of a test."""
    key = "k" * 40
    monkeypatch.setenv("API_KEY", key)
    get_settings.cache_clear()
    yield key
    monkeypatch.delenv("API_KEY", raising=False)
    get_settings.cache_clear()


@pytest.fixture
def service(make_service):
    """NotificationService over the fakes, installed on the app for HTTP tests."""
    svc = make_service(ScriptedEventStore(events=[make_event("E1", location="Hall A")]))
    app.dependency_overrides[get_notification_service] = lambda: svc
    app.state.notification_service = svc
    yield svc
    app.dependency_overrides.clear()
    app.state.notification_service = None
