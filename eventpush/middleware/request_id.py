"""Request ID middleware.

Forwards a client X-Request-ID when it is safe to log, otherwise generates
one, and echoes it on the response. Raw ASGI.
"""

import re
import uuid
from typing import Callable

from eventpush.middleware._asgi import ASGIApp, add_response_headers, get_header

REQUEST_ID_MAX_LENGTH = 64
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9_-]{1,%d}$" % REQUEST_ID_MAX_LENGTH)


def resolve_request_id(raw: str | None) -> str:
    """Client value if it is short and log-safe, else a fresh UUID4."""
    candidate = (raw or "").strip()
    if _SAFE_REQUEST_ID.match(candidate):
        return candidate
    return str(uuid.uuid4())


def RequestIDMiddleware(app: ASGIApp, header_name: str = "X-Request-ID") -> ASGIApp:
    """Attach a request id to ``scope["state"]`` and the response headers."""
    header_bytes = header_name.encode()

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = resolve_request_id(get_header(scope, header_name))
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                add_response_headers(message, [(header_bytes, request_id.encode())])
            await send(message)

        await app(scope, receive, send_wrapper)

    return asgi_app
