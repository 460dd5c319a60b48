"""Firestore collection names (schema-in-code).

Firestore has no DDL or migrations. Collections are created automatically
when the first document is written; these constants keep the names shared
with the admin dashboard and the mobile app in one place.
"""

# Written by the admin dashboard; watched by the change listener
COLLECTION_EVENTS = "events"

# One record per notified event, keyed by event id
COLLECTION_EVENT_NOTIFICATIONS = "event_notifications"

# Append-only audit of sends and delivery failures
COLLECTION_NOTIFICATION_LOGS = "notification_logs"
COLLECTION_NOTIFICATION_ERRORS = "notification_errors"
