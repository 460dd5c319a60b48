"""Process-wide logging setup."""

import logging
import sys

from eventpush.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# httpx logs every request at INFO, which the change poller would turn into
# a line every poll interval.
_QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logging() -> None:
    """Log to stdout at DEBUG when settings.debug is set, INFO otherwise."""
    level = logging.DEBUG if get_settings().debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
