"""Clients for the hosted blob store used for question images."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from quizcraft.constants.network_constants import DEFAULT_REQUEST_TIMEOUT_SECONDS
from quizcraft.constants.quiz_constants import IMAGE_CACHE_CONTROL_SECONDS

logger = logging.getLogger(__name__)


class BlobStoreError(Exception):
    """Raised when an upload or removal does not succeed."""


class BlobStore(Protocol):
    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str: ...

    async def remove(self, bucket: str, paths: list[str]) -> None: ...

    def public_url(self, bucket: str, path: str) -> str: ...

    async def aclose(self) -> None: ...


class RestBlobStore:
    """Object storage client for ``/storage/v1`` endpoints."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        headers: dict[str, str] = {}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/storage/v1",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        try:
            response = await self._client.post(
                f"/object/{bucket}/{path}",
                content=data,
                headers={
                    "Content-Type": content_type,
                    "Cache-Control": f"max-age={IMAGE_CACHE_CONTROL_SECONDS}",
                    "x-upsert": "true",
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise BlobStoreError(f"Upload of {bucket}/{path} failed: {exc}") from exc
        return self.public_url(bucket, path)

    async def remove(self, bucket: str, paths: list[str]) -> None:
        try:
            response = await self._client.request(
                "DELETE", f"/object/{bucket}", json={"prefixes": paths}
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise BlobStoreError(f"Removal from {bucket} failed: {exc}") from exc

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{path}"

    async def aclose(self) -> None:
        await self._client.aclose()


class InMemoryBlobStore:
    """Keeps blobs in a dict; URLs point at a fake host."""

    def __init__(self, base_url: str = "memory://blobs") -> None:
        self._base_url = base_url
        self.objects: dict[tuple[str, str], tuple[bytes, str]] = {}

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        self.objects[(bucket, path)] = (data, content_type)
        return self.public_url(bucket, path)

    async def remove(self, bucket: str, paths: list[str]) -> None:
        for path in paths:
            self.objects.pop((bucket, path), None)

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/{bucket}/{path}"

    async def aclose(self) -> None:
        logger.debug("In-memory blob store closed with %d object(s)", len(self.objects))
