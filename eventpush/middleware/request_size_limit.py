"""Request body size limit middleware.

Rejects bodies over ``max_bytes`` with 413: up front when Content-Length is
declared, otherwise while reading a chunked body (which is then replayed to
the app). Raw ASGI.
"""

import json
from typing import Callable

from eventpush.middleware._asgi import ASGIApp, get_header


async def _reject(send: Callable, max_bytes: int) -> None:
    body = json.dumps(
        {
            "error": "PAYLOAD_TOO_LARGE",
            "message": f"Request body must be at most {max_bytes} bytes",
            "details": {"max_bytes": max_bytes},
        }
    ).encode()
    await send({
        "type": "http.response.start",
        "status": 413,
        "headers": [
            (b"content-type", b"application/json"),
            (b"content-length", str(len(body)).encode()),
        ],
    })
    await send({"type": "http.response.body", "body": body, "more_body": False})


def RequestSizeLimitMiddleware(app: ASGIApp, max_bytes: int) -> ASGIApp:
    """Enforce ``max_bytes`` on HTTP request bodies."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        declared = get_header(scope, "content-length")
        if declared is not None:
            if declared.isdigit() and int(declared) > max_bytes:
                await _reject(send, max_bytes)
                return
            await app(scope, receive, send)
            return

        # No declared length: buffer until the limit is crossed or the body ends.
        messages: list[dict] = []
        total = 0
        while True:
            message = await receive()
            if message["type"] != "http.request":
                await app(scope, receive, send)
                return
            total += len(message.get("body", b""))
            if total > max_bytes:
                await _reject(send, max_bytes)
                return
            messages.append(message)
            if not message.get("more_body", False):
                break

        pending = iter(messages)

        async def replay() -> dict:
            nxt = next(pending, None)
            if nxt is not None:
                return nxt
            return await receive()

        await app(scope, replay, send)

    return asgi_app
