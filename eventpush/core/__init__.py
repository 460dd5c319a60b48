"""Core: config, exception handlers, lifespan, rate limiting."""

from eventpush.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
