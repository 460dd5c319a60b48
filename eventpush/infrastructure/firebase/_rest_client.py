"""Thin Firestore REST client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1 over an
httpx.AsyncClient, so no call blocks the event loop. The service account
credentials also carry the FCM scope; the push transport shares them.

Only what the push service needs is implemented: document get/set (with
optional merge), collection add/list, and single-filter ordered queries.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any
from urllib.parse import quote

import httpx

from eventpush.infrastructure.firebase._rest_encoding import (
    _encode_value,
    decode_document,
    encode_document,
)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_MESSAGING_SCOPE = "https://www.googleapis.com/auth/firebase.messaging"
_BASE = "https://firestore.googleapis.com/v1"
_PAGE_SIZE = 300

ASCENDING = "ASCENDING"
DESCENDING = "DESCENDING"

_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
}


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore and FCM."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE, _MESSAGING_SCOPE]
    )


def _get_access_token(credentials) -> str:
    """Refresh if needed and return the bearer token (blocking; run in a thread)."""
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


class DocumentSnapshot:
    """Document id plus its decoded fields."""

    def __init__(self, id_: str, data: dict):
        self.id = id_
        self._data = data

    @classmethod
    def from_rest(cls, doc: dict) -> DocumentSnapshot:
        name = doc.get("name") or ""
        return cls(name.rsplit("/", 1)[-1], decode_document(doc.get("fields")))

    def to_dict(self) -> dict:
        return self._data


class DocumentReference:
    def __init__(self, client: FirestoreRESTClient, path: str):
        self._client = client
        self._path = path

    @property
    def id(self) -> str:
        return self._path.rsplit("/", 1)[-1]

    async def get(self) -> DocumentSnapshot | None:
        """Fetch the document; None if it does not exist."""
        out = await self._client.request("GET", self._path)
        return DocumentSnapshot.from_rest(out) if out else None

    async def set(self, data: dict[str, Any], merge: bool = False) -> None:
        """Create or overwrite the document.

        With merge=True only the given top-level fields are written (PATCH with
        an update mask) and any other stored fields are kept.
        """
        params = [("updateMask.fieldPaths", key) for key in data] if merge else None
        await self._client.request(
            "PATCH", self._path, body=encode_document(data), params=params
        )


class _Query:
    """Single-filter, single-order structured query run through ``:runQuery``."""

    def __init__(self, client: FirestoreRESTClient, parent: str, collection_id: str):
        self._client = client
        self._parent = parent
        self._collection_id = collection_id
        self._filter: dict[str, Any] | None = None
        self._order: list[dict[str, Any]] | None = None
        self._limit: int | None = None

    def where(self, field: str, op: str, value: Any) -> _Query:
        self._filter = {
            "fieldFilter": {
                "field": {"fieldPath": field},
                "op": _OP_MAP.get(op, op),
                "value": _encode_value(value),
            }
        }
        return self

    def order_by(self, field: str, direction: str = ASCENDING) -> _Query:
        self._order = [{"field": {"fieldPath": field}, "direction": direction}]
        return self

    def limit(self, n: int) -> _Query:
        self._limit = n
        return self

    def structured_query(self) -> dict[str, Any]:
        query: dict[str, Any] = {"from": [{"collectionId": self._collection_id}]}
        if self._filter is not None:
            query["where"] = self._filter
        if self._order is not None:
            query["orderBy"] = self._order
        if self._limit:
            query["limit"] = self._limit
        return query

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        rows = await self._client.request(
            "POST",
            f"{self._parent}:runQuery",
            body={"structuredQuery": self.structured_query()},
        )
        # runQuery answers with a list; rows without "document" only carry readTime.
        for row in rows or []:
            if "document" in row:
                yield DocumentSnapshot.from_rest(row["document"])


class CollectionReference:
    def __init__(self, client: FirestoreRESTClient, path: str):
        self._client = client
        self._path = path.rstrip("/")
        self._parent, self._collection_id = self._path.rsplit("/", 1)

    def document(self, document_id: str) -> DocumentReference:
        return DocumentReference(self._client, f"{self._path}/{document_id}")

    def where(self, field: str, op: str, value: Any) -> _Query:
        return self._query().where(field, op, value)

    def order_by(self, field: str, direction: str = ASCENDING) -> _Query:
        return self._query().order_by(field, direction)

    def _query(self) -> _Query:
        return _Query(self._client, self._parent, self._collection_id)

    async def add(self, data: dict[str, Any]) -> str:
        """Create a document with a server-generated id and return that id."""
        out = await self._client.request("POST", self._path, body=encode_document(data))
        return DocumentSnapshot.from_rest(out or {}).id

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Every document in the collection, following page tokens."""
        page_token: str | None = None
        while True:
            params = [("pageSize", str(_PAGE_SIZE))]
            if page_token:
                params.append(("pageToken", page_token))
            out = await self._client.request("GET", self._path, params=params)
            if not out:
                return
            for doc in out.get("documents", []):
                yield DocumentSnapshot.from_rest(doc)
            page_token = out.get("nextPageToken")
            if not page_token:
                return


class FirestoreRESTClient:
    """Firestore client for one project's default database."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.project_id = project_id
        self.credentials = credentials
        self._prefix = f"projects/{quote(project_id, safe='')}/databases/(default)/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str:
        return await asyncio.to_thread(_get_access_token, self.credentials)

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: dict | None = None,
        params: list[tuple[str, str]] | None = None,
    ) -> Any:
        """Authenticated call against ``{_BASE}/{path}``.

        Returns the decoded JSON body, or None on 404. Any other non-2xx status
        raises httpx.HTTPStatusError.
        """
        resp = await self._http.request(
            method,
            f"{_BASE}/{path}",
            headers={"Authorization": f"Bearer {await self.get_token()}"},
            json=body,
            params=params,
        )
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json() if resp.content else {}

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self, f"{self._prefix}/{collection_id}")
