"""Firebase Cloud Messaging transport (HTTP v1 API, no firebase-admin).

Uses the service account credentials from the Firestore client (they carry
the firebase.messaging scope) and an httpx.AsyncClient for the send calls.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
from google.auth.exceptions import GoogleAuthError

from eventpush.application.dtos.notification import NotifierMessage
from eventpush.domain.exceptions import DeliveryException
from eventpush.infrastructure.firebase._rest_client import _get_access_token
from eventpush.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_FCM_BASE = "https://fcm.googleapis.com/v1"
ANDROID_CHANNEL_ID = "events_channel"
DEVICE_TARGET = "device"


def build_fcm_message(message: NotifierMessage, **target: str) -> dict[str, Any]:
    """FCM v1 ``message`` object for a topic or token target.

    The image is set on the notification, Android and APNs blocks only when
    present; FCM rejects an empty image URL.
    """
    notification: dict[str, Any] = {"title": message.title, "body": message.body}
    android_notification: dict[str, Any] = {
        "channel_id": ANDROID_CHANNEL_ID,
        "sound": "default",
    }
    apns: dict[str, Any] = {
        "payload": {"aps": {"sound": "default", "badge": 1, "mutable-content": 1}},
    }
    if message.image_url:
        notification["image"] = message.image_url
        android_notification["image"] = message.image_url
        apns["fcm_options"] = {"image": message.image_url}
    return {
        **target,
        "notification": notification,
        "data": dict(message.data),
        "android": {"priority": "high", "notification": android_notification},
        "apns": apns,
    }


def _error_reason(resp: httpx.Response) -> str:
    try:
        return resp.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return f"HTTP {resp.status_code}"


class FcmNotifier:
    """Implements INotifier over the FCM HTTP v1 ``messages:send`` endpoint."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._credentials = credentials
        self._send_url = f"{_FCM_BASE}/projects/{project_id}/messages:send"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def send_to_topic(self, topic: str, message: NotifierMessage) -> str:
        return await self._send(build_fcm_message(message, topic=topic), topic)

    async def send_to_token(self, token: str, message: NotifierMessage) -> str:
        return await self._send(build_fcm_message(message, token=token), DEVICE_TARGET)

    async def _send(self, fcm_message: dict[str, Any], target: str) -> str:
        try:
            token = await asyncio.to_thread(_get_access_token, self._credentials)
        except GoogleAuthError as e:
            raise DeliveryException(target, f"credential refresh failed: {e}") from e
        try:
            resp = await self._http.post(
                self._send_url,
                headers={"Authorization": f"Bearer {token}"},
                json={"message": fcm_message},
            )
        except httpx.HTTPError as e:
            raise DeliveryException(target, str(e) or type(e).__name__) from e
        if resp.status_code != 200:
            reason = _error_reason(resp)
            logger.warning("FCM rejected message to %s: %s", target, reason)
            raise DeliveryException(target, reason, status_code=resp.status_code)
        try:
            return resp.json().get("name", "")
        except (ValueError, AttributeError) as e:
            raise DeliveryException(target, "malformed FCM response") from e
