"""Firestore-backed notification audit log (implements INotificationLog)."""

from __future__ import annotations

from typing import Any

from eventpush.infrastructure.firebase._rest_client import (
    DESCENDING,
    CollectionReference,
    FirestoreRESTClient,
)
from eventpush.infrastructure.firebase.collections import (
    COLLECTION_NOTIFICATION_ERRORS,
    COLLECTION_NOTIFICATION_LOGS,
)

SENT_AT_FIELD = "sentAt"


async def _recent(coll: CollectionReference, limit: int) -> list[dict[str, Any]]:
    q = coll.order_by(SENT_AT_FIELD, DESCENDING).limit(limit)
    return [{"id": s.id, **s.to_dict()} async for s in q.stream()]


class FirestoreNotificationLogRepository:
    """Sent entries go to ``notification_logs``, failures to ``notification_errors``."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._logs = client.collection(COLLECTION_NOTIFICATION_LOGS)
        self._errors = client.collection(COLLECTION_NOTIFICATION_ERRORS)

    async def record_sent(self, entry: dict[str, Any]) -> str:
        return await self._logs.add(entry)

    async def record_error(self, entry: dict[str, Any]) -> str:
        return await self._errors.add(entry)

    async def recent_sent(self, limit: int) -> list[dict[str, Any]]:
        return await _recent(self._logs, limit)

    async def recent_errors(self, limit: int) -> list[dict[str, Any]]:
        return await _recent(self._errors, limit)
