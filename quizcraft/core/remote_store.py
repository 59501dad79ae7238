"""Clients for the hosted table store that holds quiz records.

The store is a backend-as-a-service speaking the PostgREST dialect: rows live
under ``/rest/v1/<table>``, filters are query parameters such as
``id=eq.<value>``, and ``Prefer: return=representation`` asks the server to
echo inserted rows back. Only three operations are needed, so the contract is
kept as a small protocol with a REST client and an in-memory stand-in used
when no backend is configured.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Protocol

import httpx

from quizcraft.constants.network_constants import DEFAULT_REQUEST_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class RemoteStoreError(Exception):
    """Raised when the remote store cannot complete an operation."""


class RemoteStore(Protocol):
    persistent: bool

    async def insert(self, table: str, records: list[Record]) -> list[Record]: ...

    async def update(self, table: str, patch: Record, record_id: str) -> None: ...

    async def select_all(self, table: str) -> list[Record]: ...

    async def aclose(self) -> None: ...


class RestRemoteStore:
    """Async PostgREST client backed by ``httpx``."""

    persistent = True

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def insert(self, table: str, records: list[Record]) -> list[Record]:
        response = await self._request(
            "POST",
            f"/{table}",
            json=records,
            headers={"Prefer": "return=representation"},
        )
        return _rows(response)

    async def update(self, table: str, patch: Record, record_id: str) -> None:
        await self._request(
            "PATCH",
            f"/{table}",
            json=patch,
            params={"id": f"eq.{record_id}"},
        )

    async def select_all(self, table: str) -> list[Record]:
        response = await self._request("GET", f"/{table}", params={"select": "*"})
        return _rows(response)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RemoteStoreError(
                f"{method} {url} failed with status {exc.response.status_code}: {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RemoteStoreError(f"{method} {url} failed: {exc}") from exc
        return response


def _rows(response: httpx.Response) -> list[Record]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise RemoteStoreError("Remote store returned a non-JSON body.") from exc
    if not isinstance(payload, list):
        raise RemoteStoreError("Remote store returned an unexpected payload.")
    return payload


class InMemoryRemoteStore:
    """Process-local store with the same contract, for offline mode and tests."""

    persistent = False

    def __init__(self, tables: dict[str, list[Record]] | None = None) -> None:
        self._tables: dict[str, list[Record]] = copy.deepcopy(tables or {})

    async def insert(self, table: str, records: list[Record]) -> list[Record]:
        rows = self._tables.setdefault(table, [])
        stored = copy.deepcopy(records)
        rows.extend(stored)
        return copy.deepcopy(stored)

    async def update(self, table: str, patch: Record, record_id: str) -> None:
        for row in self._tables.get(table, []):
            if row.get("id") == record_id:
                row.update(copy.deepcopy(patch))

    async def select_all(self, table: str) -> list[Record]:
        return copy.deepcopy(self._tables.get(table, []))

    async def aclose(self) -> None:
        logger.debug("In-memory store closed with %d table(s)", len(self._tables))
