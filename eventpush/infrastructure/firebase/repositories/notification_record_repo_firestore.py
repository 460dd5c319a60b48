"""Firestore-backed notification record store (implements INotificationRecordStore)."""

from __future__ import annotations

from eventpush.domain.entities import NotificationRecord
from eventpush.infrastructure.firebase._rest_client import FirestoreRESTClient
from eventpush.infrastructure.firebase.collections import (
    COLLECTION_EVENT_NOTIFICATIONS,
)


class FirestoreNotificationRecordRepository:
    """One document per event id in ``event_notifications``."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_EVENT_NOTIFICATIONS)

    async def get(self, event_id: str) -> NotificationRecord | None:
        doc = await self._coll.document(event_id).get()
        if not doc:
            return None
        return NotificationRecord.from_document(doc.id, doc.to_dict())

    async def put(self, record: NotificationRecord, merge: bool = False) -> None:
        """Overwrite the record, or with merge=True update only its own fields."""
        await self._coll.document(record.event_id).set(
            record.to_document(), merge=merge
        )
