from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path

import pytest

from backend.journal.errors import (
    InternalStoreError,
    InvalidInputError,
    NotFoundOrUnauthorizedError,
    UserNotFoundError,
)
from backend.journal.store import EntryStore, UserRow


def _store(tmp_path: Path) -> EntryStore:
    store = EntryStore(f"sqlite:///{tmp_path / 'journal.db'}")
    store.init_db()
    return store


def _payload(user_id: uuid.UUID, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "date": "2024-01-01T00:00:00Z",
        "exercise": "Mental Screen Exercise",
        "content": "test",
        "userId": str(user_id),
    }
    payload.update(overrides)
    return payload


def test_ensure_demo_user_is_idempotent(tmp_path: Path) -> None:
    store = _store(tmp_path)

    first = store.ensure_demo_user()
    second = store.ensure_demo_user()

    assert first == second
    assert first.email == "temp@mindvision.app"
    assert first.name == "Temporary User"


def test_create_entry_sets_id_and_timestamps(tmp_path: Path) -> None:
    store = _store(tmp_path)
    user = store.ensure_demo_user()

    entry = store.create_entry(_payload(user.user_id))

    assert isinstance(entry.id, uuid.UUID)
    assert entry.date == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert entry.exercise == "Mental Screen Exercise"
    assert entry.content == "test"
    assert entry.user_id == user.user_id
    assert entry.created_at.tzinfo is not None
    assert entry.updated_at >= entry.created_at


def test_round_trip_new_entry_listed_first(tmp_path: Path) -> None:
    store = _store(tmp_path)
    user = store.ensure_demo_user()
    store.create_entry(_payload(user.user_id, date="2024-01-01T08:00:00Z", content="older"))

    created = store.create_entry(
        _payload(
            user.user_id,
            date=datetime.now(tz=timezone.utc).isoformat(),
            exercise="Object Visualization",
            content="Felt calm and focused",
        )
    )
    entries = store.list_entries(user.user_id)

    assert entries[0].id == created.id
    assert entries[0].content == "Felt calm and focused"
    assert entries[0].exercise == "Object Visualization"


def test_list_entries_descending_by_date(tmp_path: Path) -> None:
    store = _store(tmp_path)
    user = store.ensure_demo_user()
    for day in ("2024-03-02", "2024-01-15", "2024-05-20"):
        store.create_entry(_payload(user.user_id, date=f"{day}T12:00:00Z", content=day))

    entries = store.list_entries(str(user.user_id))

    assert [entry.content for entry in entries] == ["2024-05-20", "2024-03-02", "2024-01-15"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"content": ""},
        {"exercise": ""},
        {"userId": "not-a-uuid"},
        {"date": "yesterday"},
        {"date": 1700000000},
    ],
)
def test_create_entry_rejects_invalid_payload(tmp_path: Path, overrides: dict[str, object]) -> None:
    store = _store(tmp_path)
    user = store.ensure_demo_user()

    with pytest.raises(InvalidInputError) as excinfo:
        store.create_entry(_payload(user.user_id, **overrides))

    assert excinfo.value.message == "Invalid request data"
    assert excinfo.value.details


def test_create_entry_for_unknown_user(tmp_path: Path) -> None:
    store = _store(tmp_path)

    with pytest.raises(UserNotFoundError):
        store.create_entry(_payload(uuid.uuid4()))


def test_list_entries_validates_user_id(tmp_path: Path) -> None:
    store = _store(tmp_path)

    with pytest.raises(InvalidInputError, match="User ID is required"):
        store.list_entries(None)
    with pytest.raises(InvalidInputError, match="Invalid user ID format"):
        store.list_entries("1234")
    with pytest.raises(UserNotFoundError):
        store.list_entries(uuid.uuid4())


def test_delete_entry_checks_ownership(tmp_path: Path) -> None:
    store = _store(tmp_path)
    owner = store.ensure_demo_user()
    with store.session_scope() as session:
        other = UserRow(email="other@mindvision.app", name="Other")
        session.add(other)
        session.flush()
        other_id = other.id
    entry = store.create_entry(_payload(owner.user_id))

    with pytest.raises(NotFoundOrUnauthorizedError):
        store.delete_entry(entry.id, other_id)
    with pytest.raises(NotFoundOrUnauthorizedError):
        store.delete_entry(uuid.uuid4(), owner.user_id)
    assert [item.id for item in store.list_entries(owner.user_id)] == [entry.id]

    store.delete_entry(str(entry.id), str(owner.user_id))
    assert store.list_entries(owner.user_id) == []

    with pytest.raises(NotFoundOrUnauthorizedError):
        store.delete_entry(entry.id, owner.user_id)


def test_delete_entry_rejects_malformed_ids(tmp_path: Path) -> None:
    store = _store(tmp_path)
    user = store.ensure_demo_user()

    with pytest.raises(InvalidInputError, match="Invalid ID format"):
        store.delete_entry("nope", user.user_id)
    with pytest.raises(InvalidInputError, match="Invalid ID format"):
        store.delete_entry(uuid.uuid4(), None)


def test_database_failures_become_internal_errors(tmp_path: Path) -> None:
    store = EntryStore(f"sqlite:///{tmp_path / 'uninitialized.db'}")

    with pytest.raises(InternalStoreError) as excinfo:
        store.ensure_demo_user()

    assert excinfo.value.message == "Internal server error"


def test_in_memory_database() -> None:
    store = EntryStore("sqlite://")
    store.init_db()
    user = store.ensure_demo_user()
    store.create_entry(_payload(user.user_id))

    assert len(store.list_entries(user.user_id)) == 1
