"""Wall-clock job scheduling."""

from eventpush.infrastructure.scheduling.scheduler import (
    ApschedulerJobScheduler,
    get_scheduler,
    init_scheduler,
    shutdown_scheduler,
)

__all__ = [
    "ApschedulerJobScheduler",
    "get_scheduler",
    "init_scheduler",
    "shutdown_scheduler",
]
