"""Domain enumerations for the event push service."""

from enum import Enum


class ChangeKind(str, Enum):
    """Kind of mutation reported by the event change stream."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


class ChangeAction(str, Enum):
    """Outcome of classifying one change.

    Only NEW and RESCHEDULED dispatch a notification.
    """

    SUPPRESS_INITIAL_LOAD = "suppress_initial_load"
    IGNORE_INVALID = "ignore_invalid"
    IGNORE_INACTIVE = "ignore_inactive"
    IGNORE_PAST = "ignore_past"
    NEW = "new"
    RESCHEDULED = "rescheduled"
    UNCHANGED = "unchanged"
    REMOVED = "removed"

    @property
    def dispatches(self) -> bool:
        return self in (ChangeAction.NEW, ChangeAction.RESCHEDULED)


class NotificationKind(str, Enum):
    """Kind stored on a notification record (what was last sent for an event)."""

    NEW_EVENT = "new_event"
    DATE_MODIFIED = "date_modified"


class MessageType(str, Enum):
    """``type`` discriminator carried in the push data payload."""

    ANNOUNCEMENT = "announcement"
    NEW_EVENT = "new_event"
    EVENT_RESCHEDULED = "event_rescheduled"
    DAILY_REMINDER = "daily_reminder"
    TEST = "test"


class SubscriptionPhase(str, Enum):
    """Lifecycle phase of one change subscription.

    AWAITING_FIRST_BATCH treats the next non-empty batch as a baseline
    snapshot; LIVE processes every change.
    """

    AWAITING_FIRST_BATCH = "awaiting_first_batch"
    LIVE = "live"
