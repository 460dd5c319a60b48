"""Application ports (Protocols) for stores, cache, scheduling, and the push transport.

Define contracts for infrastructure implementations (DIP).
No runtime imports from eventpush.infrastructure.
"""

from eventpush.application.interfaces.repositories import (
    IEventStore,
    INotificationLog,
    INotificationRecordStore,
)
from eventpush.application.interfaces.services import (
    Clock,
    IEventCache,
    IEventNotificationDispatcher,
    IJobScheduler,
    INotifier,
    Sleeper,
)

__all__ = [
    "Clock",
    "IEventCache",
    "IEventNotificationDispatcher",
    "IEventStore",
    "IJobScheduler",
    "INotificationLog",
    "INotificationRecordStore",
    "INotifier",
    "Sleeper",
]
