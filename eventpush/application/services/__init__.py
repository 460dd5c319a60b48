"""Application services: change classification and notification composition."""

from eventpush.application.services.change_classifier import (
    ChangeClassifier,
    ChangeDecision,
)
from eventpush.application.services.notification_composer import (
    NotificationComposer,
    build_message,
)

__all__ = [
    "ChangeClassifier",
    "ChangeDecision",
    "NotificationComposer",
    "build_message",
]
