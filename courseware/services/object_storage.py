"""Object storage access with the service key.

Same shape as the repositories: a Protocol, an in-memory backend for dev
and tests, and a network backend selected from settings.

The one behavior callers depend on is that "object not found" is a
distinct exception (StorageObjectNotFound) from every other failure
(StorageError).  Deletion treats the first as success.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol, runtime_checkable
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

_NOT_FOUND_RE = re.compile(r"not.*found", re.IGNORECASE)


class StorageError(Exception):
    """Storage call failed; the object may or may not still exist."""


class StorageObjectNotFound(StorageError):
    """The object is not there, so a removal has nothing to do."""


@runtime_checkable
class ObjectStorage(Protocol):
    async def remove(self, bucket: str, path: str) -> None:
        """Delete one object.  Raises StorageObjectNotFound or StorageError."""
        ...


class InMemoryObjectStorage:
    """Bucket -> set of paths.  No content, only existence."""

    def __init__(self) -> None:
        self._objects: dict[str, set[str]] = {}

    def clear(self) -> None:
        self._objects.clear()

    def put(self, bucket: str, path: str) -> None:
        self._objects.setdefault(bucket, set()).add(path)

    def exists(self, bucket: str, path: str) -> bool:
        return path in self._objects.get(bucket, set())

    async def remove(self, bucket: str, path: str) -> None:
        paths = self._objects.get(bucket, set())
        if path not in paths:
            raise StorageObjectNotFound(f"{bucket}/{path}")
        paths.remove(path)


class HttpObjectStorage:
    """Client for the hosted storage REST API.

    DELETE {base}/storage/v1/object/{bucket}/{path} with the service key.
    The API reports a missing object as 404, or as 400 with a
    "not found" message depending on version; both map to
    StorageObjectNotFound.
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_kwargs: dict = dict(
            base_url=f"{base_url.rstrip('/')}/storage/v1",
            headers={
                "Authorization": f"Bearer {service_key}",
                "apikey": service_key,
            },
            timeout=timeout,
            transport=transport,
        )
        self._client = httpx.AsyncClient(**self._client_kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    def _http(self) -> httpx.AsyncClient:
        # The app lifespan closes the client on shutdown; a later lifespan in
        # the same process (tests, reloads) gets a fresh one.
        if self._client.is_closed:
            self._client = httpx.AsyncClient(**self._client_kwargs)
        return self._client

    async def remove(self, bucket: str, path: str) -> None:
        url = f"/object/{quote(bucket, safe='')}/{quote(path.lstrip('/'), safe='/')}"
        try:
            resp = await self._http().delete(url)
        except httpx.HTTPError as e:
            raise StorageError(f"storage request failed: {e}") from e

        if resp.is_success:
            return
        message = _error_message(resp)
        if resp.status_code == 404 or _NOT_FOUND_RE.search(message):
            raise StorageObjectNotFound(message)
        raise StorageError(f"storage returned {resp.status_code}: {message}")


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)
