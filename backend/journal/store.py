"""Relational persistence for users and journal entries."""

from __future__ import annotations

import uuid
from collections.abc import Generator, Mapping
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger
from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid, create_engine, delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from backend.journal.errors import (
    InternalStoreError,
    InvalidInputError,
    NotFoundOrUnauthorizedError,
    UserNotFoundError,
)
from backend.journal.model import (
    DEMO_USER_EMAIL,
    DEMO_USER_NAME,
    DemoUser,
    JournalEntry,
    as_utc,
    now_utc,
)
from backend.journal.schemas import parse_create_request, parse_uuid


def default_database_url() -> str:
    path = Path.home() / ".mindvision" / "journal.db"
    return f"sqlite:///{path}"


class Base(DeclarativeBase):
    pass


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now_utc, onupdate=now_utc
    )


class EntryRow(Base):
    __tablename__ = "entries"
    __table_args__ = (Index("ix_entries_user_date", "user_id", "date"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    exercise: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now_utc, onupdate=now_utc
    )


def _entry_from_row(row: EntryRow) -> JournalEntry:
    return JournalEntry(
        id=row.id,
        date=as_utc(row.date),
        exercise=row.exercise,
        content=row.content,
        user_id=row.user_id,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


class EntryStore:
    """Synchronous store; every call opens and closes its own ORM session."""

    def __init__(self, database_url: str | None = None, *, echo: bool = False) -> None:
        self.database_url = database_url or default_database_url()
        engine_kwargs: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
        if self.database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if self.database_url in {"sqlite://", "sqlite:///:memory:"}:
                engine_kwargs["poolclass"] = StaticPool
            else:
                _ensure_sqlite_parent(self.database_url)
        self._engine = create_engine(self.database_url, **engine_kwargs)
        self._sessions = sessionmaker(
            bind=self._engine, autocommit=False, autoflush=False, expire_on_commit=False
        )

    def init_db(self) -> None:
        Base.metadata.create_all(bind=self._engine)
        logger.info(f"Journal tables ready ({self._engine.url.render_as_string(hide_password=True)})")

    def dispose(self) -> None:
        self._engine.dispose()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations."""
        session = self._sessions()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ensure_demo_user(self) -> DemoUser:
        with self._guard("ensure demo user"):
            try:
                return self._upsert_demo_user()
            except IntegrityError:
                # Another caller inserted the same email first; the second pass reads it.
                logger.warning("Demo user inserted concurrently, reloading")
                return self._upsert_demo_user()

    def _upsert_demo_user(self) -> DemoUser:
        with self.session_scope() as session:
            row = session.scalar(select(UserRow).where(UserRow.email == DEMO_USER_EMAIL))
            if row is None:
                row = UserRow(email=DEMO_USER_EMAIL, name=DEMO_USER_NAME)
                session.add(row)
                session.flush()
                logger.info(f"Created demo user {row.id}")
            return DemoUser(user_id=row.id, email=row.email, name=row.name)

    def create_entry(self, payload: Mapping[str, Any] | None) -> JournalEntry:
        request = parse_create_request(payload)
        with self._guard("create entry"), self.session_scope() as session:
            if session.get(UserRow, request.user_id) is None:
                raise UserNotFoundError()
            row = EntryRow(
                date=as_utc(request.date),
                exercise=request.exercise,
                content=request.content,
                user_id=request.user_id,
            )
            session.add(row)
            session.flush()
            entry = _entry_from_row(row)
        logger.info(f"Created journal entry {entry.id} for user {entry.user_id}")
        return entry

    def list_entries(self, user_id: object) -> list[JournalEntry]:
        if user_id is None or (isinstance(user_id, str) and not user_id.strip()):
            raise InvalidInputError("User ID is required")
        uid = parse_uuid(user_id, "Invalid user ID format")
        with self._guard("list entries"), self.session_scope() as session:
            if session.get(UserRow, uid) is None:
                raise UserNotFoundError()
            rows = session.scalars(
                select(EntryRow)
                .where(EntryRow.user_id == uid)
                .order_by(EntryRow.date.desc(), EntryRow.created_at.desc())
            ).all()
            return [_entry_from_row(row) for row in rows]

    def delete_entry(self, entry_id: object, user_id: object) -> None:
        eid = parse_uuid(entry_id, "Invalid ID format")
        uid = parse_uuid(user_id, "Invalid ID format")
        with self._guard("delete entry"), self.session_scope() as session:
            # Single conditional delete: ownership check and removal cannot race.
            result = session.execute(
                delete(EntryRow).where(EntryRow.id == eid, EntryRow.user_id == uid)
            )
            if result.rowcount == 0:
                raise NotFoundOrUnauthorizedError()
        logger.info(f"Deleted journal entry {eid} for user {uid}")

    @contextmanager
    def _guard(self, operation: str) -> Generator[None, None, None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.exception(f"Database failure during {operation}")
            raise InternalStoreError() from exc


def _ensure_sqlite_parent(database_url: str) -> None:
    raw_path = database_url.split("///", 1)[-1]
    if raw_path and raw_path != ":memory:":
        Path(raw_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
