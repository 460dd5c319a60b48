"""Application use cases: one entry point per workflow."""

from eventpush.application.use_cases.notifications import NotificationService
from eventpush.application.use_cases.reconciliation import ReconciliationEngine
from eventpush.application.use_cases.reminders import ReminderScheduler

__all__ = [
    "NotificationService",
    "ReconciliationEngine",
    "ReminderScheduler",
]
