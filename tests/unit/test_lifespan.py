"""Startup and shutdown wiring."""

import httpx
from fastapi import FastAPI

from eventpush.core.config import Settings, get_settings
from eventpush.core.lifespan import build_notification_service, create_lifespan
from eventpush.infrastructure.firebase import client as firebase_client
from eventpush.infrastructure.firebase._rest_client import FirestoreRESTClient
from eventpush.infrastructure.messaging import FcmNotifier


class _Credentials:
    valid = True
    token = "t"


async def test_lifespan_without_credentials_serves_without_service(monkeypatch) -> None:
    monkeypatch.delenv("FIREBASE_SERVICE_ACCOUNT_KEY", raising=False)
    monkeypatch.delenv("FIREBASE_SERVICE_ACCOUNT_PATH", raising=False)
    monkeypatch.setattr(firebase_client, "_firestore_client", None)
    get_settings.cache_clear()

    app = FastAPI()
    async with create_lifespan(app):
        assert app.state.notification_service is None
        assert app.state.started_at is not None
    assert app.state.notification_service is None
    get_settings.cache_clear()


async def test_build_notification_service_uses_settings() -> None:
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(404)))
    client = FirestoreRESTClient("demo", _Credentials(), http_client=http)
    notifier = FcmNotifier("demo", _Credentials(), http_client=http)
    settings = Settings(
        _env_file=None,
        broadcast_topic="everyone",
        resubscribe_delay_seconds=1.5,
        reminder_hour=7,
    )

    service = build_notification_service(settings, client, notifier)

    assert service.broadcast_topic == "everyone"
    assert service.listener._resubscribe_delay == 1.5
    assert service._reminder_hour == 7
    assert await service.events.get("missing") is None
    await http.aclose()
