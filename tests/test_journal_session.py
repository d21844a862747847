from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone

from backend.journal.errors import InternalStoreError, NotFoundOrUnauthorizedError, StoreError
from backend.journal.model import DemoUser, JournalEntry
from backend.journal.session import JournalSession
from backend.practice.catalog import list_exercises
from backend.practice.model import PracticeState
from backend.practice.navigator import SessionNavigator


FIXED_NOW = datetime(2024, 6, 1, 7, 30, tzinfo=timezone.utc)


class FakeGateway:
    def __init__(self) -> None:
        self.user = DemoUser(user_id=uuid.uuid4(), email="temp@mindvision.app", name="Temporary User")
        self.rows: list[JournalEntry] = []
        self.calls: list[str] = []
        self.fail_setup: StoreError | None = None
        self.fail_list: StoreError | None = None
        self.fail_create: StoreError | None = None
        self.fail_delete: StoreError | None = None
        self.gate: asyncio.Event | None = None

    async def ensure_demo_user(self) -> DemoUser:
        self.calls.append("setup")
        if self.fail_setup is not None:
            raise self.fail_setup
        return self.user

    async def create_entry(
        self, *, date: datetime, exercise: str, content: str, user_id: uuid.UUID
    ) -> JournalEntry:
        self.calls.append("create")
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_create is not None:
            raise self.fail_create
        entry = JournalEntry(
            id=uuid.uuid4(),
            date=date,
            exercise=exercise,
            content=content,
            user_id=user_id,
            created_at=date,
            updated_at=date,
        )
        self.rows.insert(0, entry)
        return entry

    async def list_entries(self, user_id: uuid.UUID) -> list[JournalEntry]:
        self.calls.append("list")
        if self.fail_list is not None:
            raise self.fail_list
        return [row for row in self.rows if row.user_id == user_id]

    async def delete_entry(self, entry_id: uuid.UUID, user_id: uuid.UUID) -> None:
        self.calls.append("delete")
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_delete is not None:
            raise self.fail_delete
        match = [row for row in self.rows if row.id == entry_id and row.user_id == user_id]
        if not match:
            raise NotFoundOrUnauthorizedError()
        self.rows.remove(match[0])


def _session(gateway: FakeGateway) -> tuple[JournalSession, PracticeState, SessionNavigator]:
    exercises = list_exercises()
    state = PracticeState.for_exercise(exercises[0])
    navigator = SessionNavigator(exercises, state)
    return JournalSession(gateway, navigator, state, clock=lambda: FIXED_NOW), state, navigator


def test_initialize_loads_user_and_entries() -> None:
    async def _run() -> None:
        gateway = FakeGateway()
        session, _, _ = _session(gateway)
        await session.initialize()

        assert session.status == "ready"
        assert session.user == gateway.user
        assert session.entries == []
        assert gateway.calls == ["setup", "list"]

    asyncio.run(_run())


def test_initialize_failure_is_terminal_until_retry() -> None:
    async def _run() -> None:
        gateway = FakeGateway()
        gateway.fail_setup = InternalStoreError()
        session, state, _ = _session(gateway)
        await session.initialize()

        assert session.status == "failed"
        assert session.error == "Internal server error"

        state.draft_text = "should not be sent"
        assert await session.save_draft() is None
        assert "create" not in gateway.calls

        gateway.fail_setup = None
        await session.retry()
        assert session.status == "ready"
        assert session.error is None

    asyncio.run(_run())


def test_list_failure_during_initialize_is_terminal() -> None:
    async def _run() -> None:
        gateway = FakeGateway()
        gateway.fail_list = InternalStoreError()
        session, state, _ = _session(gateway)
        await session.initialize()

        assert session.status == "failed"
        assert session.user is None
        assert session.entries == []
        assert session.error == "Internal server error"

        state.draft_text = "waiting for the journal"
        assert await session.save_draft() is None
        assert await session.delete_entry(uuid.uuid4()) is False
        assert gateway.calls == ["setup", "list"]

        gateway.fail_list = None
        await session.retry()
        assert session.status == "ready"
        assert session.user == gateway.user
        assert await session.save_draft() is not None
        assert gateway.calls == ["setup", "list", "setup", "list", "create"]

    asyncio.run(_run())


def test_blank_draft_is_not_saved() -> None:
    async def _run() -> None:
        gateway = FakeGateway()
        session, state, _ = _session(gateway)
        await session.initialize()

        for draft in ("", "   ", "\n\t"):
            state.draft_text = draft
            assert await session.save_draft() is None

        assert "create" not in gateway.calls
        assert session.entries == []

    asyncio.run(_run())


def test_save_draft_prepends_and_clears() -> None:
    async def _run() -> None:
        gateway = FakeGateway()
        session, state, navigator = _session(gateway)
        await session.initialize()

        state.draft_text = "first"
        await session.save_draft()
        navigator.next()
        state.draft_text = "Felt calm and focused"
        saved = await session.save_draft()

        assert saved is not None
        assert saved.exercise == "Object Visualization"
        assert saved.date == FIXED_NOW
        assert [entry.content for entry in session.entries] == ["Felt calm and focused", "first"]
        assert state.draft_text == ""

    asyncio.run(_run())


def test_failed_save_keeps_draft_and_reports_error() -> None:
    async def _run() -> None:
        gateway = FakeGateway()
        session, state, _ = _session(gateway)
        await session.initialize()
        gateway.fail_create = InternalStoreError()

        state.draft_text = "precious words"
        assert await session.save_draft() is None

        assert state.draft_text == "precious words"
        assert session.error == "Internal server error"
        assert session.entries == []
        assert session.saving is False

    asyncio.run(_run())


def test_only_one_save_in_flight() -> None:
    async def _run() -> None:
        gateway = FakeGateway()
        session, state, _ = _session(gateway)
        await session.initialize()
        gateway.gate = asyncio.Event()

        state.draft_text = "once"
        first = asyncio.create_task(session.save_draft())
        await asyncio.sleep(0)
        assert session.saving is True
        assert await session.save_draft() is None

        gateway.gate.set()
        assert await first is not None
        assert gateway.calls.count("create") == 1
        assert len(session.entries) == 1

    asyncio.run(_run())


def test_text_typed_during_save_is_kept() -> None:
    async def _run() -> None:
        gateway = FakeGateway()
        session, state, _ = _session(gateway)
        await session.initialize()
        gateway.gate = asyncio.Event()

        state.draft_text = "part one"
        pending = asyncio.create_task(session.save_draft())
        await asyncio.sleep(0)
        state.draft_text = "part one and more"
        gateway.gate.set()
        await pending

        assert state.draft_text == "part one and more"
        assert session.entries[0].content == "part one"

    asyncio.run(_run())


def test_delete_entry_removes_locally() -> None:
    async def _run() -> None:
        gateway = FakeGateway()
        session, state, _ = _session(gateway)
        await session.initialize()
        state.draft_text = "to delete"
        entry = await session.save_draft()
        assert entry is not None

        assert await session.delete_entry(entry.id) is True
        assert session.entries == []

    asyncio.run(_run())


def test_delete_unknown_entry_reports_and_keeps_list() -> None:
    async def _run() -> None:
        gateway = FakeGateway()
        session, state, _ = _session(gateway)
        await session.initialize()
        state.draft_text = "keep me"
        await session.save_draft()
        before = list(session.entries)

        assert await session.delete_entry(uuid.uuid4()) is False

        assert session.entries == before
        assert session.error == "Entry not found or unauthorized"

    asyncio.run(_run())


def test_concurrent_delete_of_same_entry_hits_store_once() -> None:
    async def _run() -> None:
        gateway = FakeGateway()
        session, state, _ = _session(gateway)
        await session.initialize()
        state.draft_text = "double tap"
        entry = await session.save_draft()
        assert entry is not None
        gateway.gate = asyncio.Event()

        first = asyncio.create_task(session.delete_entry(entry.id))
        await asyncio.sleep(0)
        assert session.is_deleting(entry.id)
        assert await session.delete_entry(entry.id) is False

        gateway.gate.set()
        assert await first is True
        assert gateway.calls.count("delete") == 1
        assert session.entries == []
        assert not session.is_deleting(entry.id)

    asyncio.run(_run())


def test_delete_without_user_is_noop() -> None:
    async def _run() -> None:
        gateway = FakeGateway()
        session, _, _ = _session(gateway)

        assert await session.delete_entry(uuid.uuid4()) is False
        assert gateway.calls == []

    asyncio.run(_run())
