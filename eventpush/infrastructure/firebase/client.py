"""Firestore client (REST-based, no firebase-admin).

Initialized at app startup using either FIREBASE_SERVICE_ACCOUNT_KEY (JSON
string) or FIREBASE_SERVICE_ACCOUNT_PATH (file path). The service account's
credentials and project id are also used by the FCM transport.
"""

import json
import logging
from pathlib import Path

from eventpush.core.config import get_settings
from eventpush.domain.exceptions import ConfigurationException
from eventpush.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)

logger = logging.getLogger(__name__)

_firestore_client: FirestoreRESTClient | None = None


def _load_key_dict() -> dict | None:
    """Return service account dict from env key or file path."""
    settings = get_settings()
    key_json = (
        settings.firebase_service_account_key.get_secret_value()
        if settings.firebase_service_account_key
        else None
    )
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ConfigurationException(
                "FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON"
            ) from e
    path = settings.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            raise ConfigurationException(
                f"FIREBASE_SERVICE_ACCOUNT_PATH file not found: {resolved}"
            )
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    return None


def init_firebase() -> FirestoreRESTClient | None:
    """Initialize the Firestore client (REST API + google-auth).

    Returns None when no credentials are configured (the API then answers 503
    for anything that needs Firestore). Idempotent if already initialized.

    Raises:
        ConfigurationException: credentials are configured but unusable.
    """
    global _firestore_client
    if _firestore_client is not None:
        return _firestore_client

    key_dict = _load_key_dict()
    if not key_dict:
        logger.warning("Firebase credentials not configured; notifications disabled")
        return None

    project_id = key_dict.get("project_id")
    if not project_id:
        raise ConfigurationException("Firebase service account JSON missing 'project_id'")

    try:
        cred = _get_credentials(key_dict)
    except ValueError as e:
        raise ConfigurationException(f"Invalid Firebase service account: {e}") from e
    _firestore_client = FirestoreRESTClient(project_id, cred)
    logger.info("Firestore client initialized for project %s", project_id)
    return _firestore_client


def get_firestore_client() -> FirestoreRESTClient | None:
    """Return the Firestore client, or None if not configured."""
    return _firestore_client


async def close_firebase() -> None:
    """Close the Firestore client's HTTP connection pool. Call from app shutdown."""
    global _firestore_client
    if _firestore_client is not None:
        await _firestore_client.aclose()
        _firestore_client = None
        logger.info("Firestore HTTP client closed")
