"""
REST routes for the journal entry store.

Endpoints:
- POST   /api/setup          create or fetch the demo user
- GET    /api/entries        list a user's entries, newest first
- POST   /api/entries        create an entry
- DELETE /api/entries/{id}   delete an entry owned by the given user
- GET    /api/exercises      the exercise catalog served to clients
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from loguru import logger

from backend.journal.errors import InvalidInputError, StoreError
from backend.journal.store import EntryStore
from backend.practice.catalog import exercise_to_payload
from backend.practice.model import Exercise


STATUS_BY_KIND: dict[str, int] = {
    "invalid_input": 400,
    "user_not_found": 404,
    "not_found_or_unauthorized": 404,
    "internal": 500,
}


def build_router(store: EntryStore, exercises: tuple[Exercise, ...]) -> APIRouter:
    router = APIRouter(prefix="/api")

    @router.post("/setup", summary="Create or fetch the demo user")
    async def setup() -> JSONResponse:
        user = await run_in_threadpool(store.ensure_demo_user)
        return JSONResponse({"data": user.to_payload()})

    @router.get("/entries", summary="List entries for a user")
    async def list_entries(userId: str | None = None) -> JSONResponse:  # noqa: N803
        entries = await run_in_threadpool(store.list_entries, userId)
        return JSONResponse({"data": [entry.to_payload() for entry in entries]})

    @router.post("/entries", summary="Create a journal entry")
    async def create_entry(request: Request) -> JSONResponse:
        body = await _json_body(request, InvalidInputError())
        entry = await run_in_threadpool(store.create_entry, body)
        return JSONResponse({"data": entry.to_payload()})

    @router.delete("/entries/{entry_id}", summary="Delete a journal entry")
    async def delete_entry(entry_id: str, request: Request) -> JSONResponse:
        body = await _json_body(request, InvalidInputError("Invalid ID format"))
        if not isinstance(body, dict):
            raise InvalidInputError("Invalid ID format")
        await run_in_threadpool(store.delete_entry, entry_id, body.get("userId"))
        return JSONResponse({"success": True})

    @router.get("/exercises", summary="Exercise catalog")
    async def list_exercise_catalog() -> JSONResponse:
        return JSONResponse({"data": [exercise_to_payload(item) for item in exercises]})

    return router


async def _json_body(request: Request, on_error: StoreError) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise on_error from exc


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    status = STATUS_BY_KIND.get(exc.kind, 500)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    content: dict[str, Any] = {"error": exc.message}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(content, status_code=status)


def register_api(app: FastAPI, store: EntryStore, exercises: tuple[Exercise, ...]) -> None:
    app.include_router(build_router(store, exercises))
    app.add_exception_handler(StoreError, store_error_handler)


def create_api_app(store: EntryStore, exercises: tuple[Exercise, ...]) -> FastAPI:
    app = FastAPI(
        title="MindVision Journal",
        description="Journal entry store for guided visualization practice.",
        version="0.1.0",
    )
    register_api(app, store, exercises)
    return app
