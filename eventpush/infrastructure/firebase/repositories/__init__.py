"""Firestore-backed repository implementations."""

from eventpush.infrastructure.firebase.repositories.event_store_firestore import (
    FirestoreEventStore,
)
from eventpush.infrastructure.firebase.repositories.notification_log_repo_firestore import (
    FirestoreNotificationLogRepository,
)
from eventpush.infrastructure.firebase.repositories.notification_record_repo_firestore import (
    FirestoreNotificationRecordRepository,
)

__all__ = [
    "FirestoreEventStore",
    "FirestoreNotificationLogRepository",
    "FirestoreNotificationRecordRepository",
]
