"""Process-local cache used by the change listener."""

from eventpush.infrastructure.cache.event_cache import InMemoryEventCache

__all__ = ["InMemoryEventCache"]
