"""Application layer: ports, services, use cases.

Depends only on domain and protocol definitions. Infrastructure implements
the interfaces (event store, record store, notification log, push transport).
"""

from eventpush.application.interfaces import (
    IEventCache,
    IEventNotificationDispatcher,
    IEventStore,
    IJobScheduler,
    INotificationLog,
    INotificationRecordStore,
    INotifier,
)

__all__ = [
    "IEventCache",
    "IEventNotificationDispatcher",
    "IEventStore",
    "IJobScheduler",
    "INotificationLog",
    "INotificationRecordStore",
    "INotifier",
]
