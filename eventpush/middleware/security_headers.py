"""Security headers middleware (the JSON-API subset of what helmet sets). Raw ASGI."""

from typing import Callable

from eventpush.middleware._asgi import ASGIApp, add_response_headers

DEFAULT_HEADERS = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def SecurityHeadersMiddleware(
    app: ASGIApp, headers: dict[str, str] | None = None
) -> ASGIApp:
    """Add security headers to every HTTP response; handler-set values win."""
    pairs = [
        (k.encode(), v.encode())
        for k, v in (DEFAULT_HEADERS if headers is None else headers).items()
    ]

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                add_response_headers(message, pairs)
            await send(message)

        await app(scope, receive, send_wrapper)

    return asgi_app
