"""Async access to the entry store, in-process or over the REST API."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Callable, Protocol, TypeVar
from uuid import UUID

import httpx
from loguru import logger

from backend.journal.errors import (
    InternalStoreError,
    InvalidInputError,
    NotFoundOrUnauthorizedError,
    StoreError,
    UserNotFoundError,
)
from backend.journal.model import DemoUser, JournalEntry, to_iso
from backend.journal.store import EntryStore

T = TypeVar("T")


class EntryGateway(Protocol):
    async def ensure_demo_user(self) -> DemoUser: ...

    async def create_entry(
        self,
        *,
        date: datetime,
        exercise: str,
        content: str,
        user_id: UUID,
    ) -> JournalEntry: ...

    async def list_entries(self, user_id: UUID) -> list[JournalEntry]: ...

    async def delete_entry(self, entry_id: UUID, user_id: UUID) -> None: ...


def _create_payload(date: datetime, exercise: str, content: str, user_id: UUID) -> dict[str, Any]:
    return {
        "date": to_iso(date),
        "exercise": exercise,
        "content": content,
        "userId": str(user_id),
    }


class LocalEntryGateway:
    """Runs the synchronous store in worker threads so the event loop keeps ticking."""

    def __init__(self, store: EntryStore) -> None:
        self._store = store

    async def ensure_demo_user(self) -> DemoUser:
        return await asyncio.to_thread(self._store.ensure_demo_user)

    async def create_entry(
        self,
        *,
        date: datetime,
        exercise: str,
        content: str,
        user_id: UUID,
    ) -> JournalEntry:
        payload = _create_payload(date, exercise, content, user_id)
        return await asyncio.to_thread(self._store.create_entry, payload)

    async def list_entries(self, user_id: UUID) -> list[JournalEntry]:
        return await asyncio.to_thread(self._store.list_entries, user_id)

    async def delete_entry(self, entry_id: UUID, user_id: UUID) -> None:
        await asyncio.to_thread(self._store.delete_entry, entry_id, user_id)


class HttpEntryGateway:
    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def ensure_demo_user(self) -> DemoUser:
        body = await self._request("POST", "/api/setup")
        return _decode(body, DemoUser.from_payload)

    async def create_entry(
        self,
        *,
        date: datetime,
        exercise: str,
        content: str,
        user_id: UUID,
    ) -> JournalEntry:
        body = await self._request(
            "POST",
            "/api/entries",
            json=_create_payload(date, exercise, content, user_id),
        )
        return _decode(body, JournalEntry.from_payload)

    async def list_entries(self, user_id: UUID) -> list[JournalEntry]:
        body = await self._request("GET", "/api/entries", params={"userId": str(user_id)})
        return _decode(body, lambda items: [JournalEntry.from_payload(item) for item in items])

    async def delete_entry(self, entry_id: UUID, user_id: UUID) -> None:
        await self._request(
            "DELETE",
            f"/api/entries/{entry_id}",
            json={"userId": str(user_id)},
            not_found=NotFoundOrUnauthorizedError,
        )

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        not_found: type[StoreError] = UserNotFoundError,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, url, json=json, params=params)
        except httpx.HTTPError as exc:
            logger.warning(f"Journal service unreachable ({method} {url}): {exc}")
            raise InternalStoreError("Unable to reach the journal service") from exc

        if response.is_success:
            try:
                return response.json()
            except ValueError as exc:
                raise InternalStoreError() from exc

        message = _error_message(response)
        if response.status_code == 400:
            raise InvalidInputError(message)
        if response.status_code == 404:
            raise not_found(message)
        logger.warning(f"Journal service error {response.status_code} on {method} {url}")
        raise InternalStoreError()


def _error_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None


def _decode(body: Any, build: Callable[[Any], T]) -> T:
    try:
        return build(body["data"])
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        logger.warning(f"Unexpected journal service response: {exc!r}")
        raise InternalStoreError() from exc
