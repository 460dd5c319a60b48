"""Presentation-layer dependencies.

The NotificationService is built once in the lifespan and stored on
app.state; routes reach it only through get_notification_service so tests can
swap it with app.dependency_overrides.
"""

from __future__ import annotations

import hmac
import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request

from eventpush.application.use_cases.notifications import NotificationService
from eventpush.core.config import get_settings
from eventpush.domain.exceptions import ServiceUnavailableException

logger = logging.getLogger(__name__)


def get_notification_service(request: Request) -> NotificationService:
    """Return the running service; 503 when Firebase is not configured."""
    service = getattr(request.app.state, "notification_service", None)
    if service is None:
        raise ServiceUnavailableException()
    return service


async def require_api_key(
    request: Request,
    x_api_key: Annotated[str | None, Header()] = None,
) -> None:
    """Check the x-api-key header against API_KEY in constant time.

    Without API_KEY, development runs unauthenticated and production refuses
    every request.
    """
    settings = get_settings()
    expected = settings.api_key_value
    if not expected:
        if settings.is_production:
            logger.error("API_KEY is not set in production")
            raise HTTPException(status_code=500, detail="Server misconfiguration")
        return
    if not x_api_key:
        raise HTTPException(status_code=401, detail="Missing x-api-key header")
    if not hmac.compare_digest(x_api_key.encode(), expected.encode()):
        client = request.client.host if request.client else "unknown"
        logger.warning("Unauthorized request from %s", client)
        raise HTTPException(status_code=401, detail="Invalid API key")


NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
