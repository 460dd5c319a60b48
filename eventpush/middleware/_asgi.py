"""Shared helpers for the raw ASGI middleware."""

from collections.abc import Callable
from typing import Any

ASGIApp = Callable[..., Any]


def get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("latin-1")
    return None


def add_response_headers(message: dict, extra: list[tuple[bytes, bytes]]) -> None:
    """Append headers to an ``http.response.start`` message unless already present."""
    headers = list(message.get("headers", []))
    seen = {k.lower() for k, _ in headers}
    for name, value in extra:
        if name.lower() not in seen:
            headers.append((name, value))
            seen.add(name.lower())
    message["headers"] = headers
