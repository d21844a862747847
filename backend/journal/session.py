"""Journal capture for the active exercise, synchronised with the entry store."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Literal
from uuid import UUID

from loguru import logger

from backend.journal.errors import StoreError
from backend.journal.gateway import EntryGateway
from backend.journal.model import DemoUser, JournalEntry, now_utc
from backend.practice.model import PracticeState
from backend.practice.navigator import SessionNavigator


SessionStatus = Literal["loading", "ready", "failed"]


class JournalSession:
    """Mediates between the local draft and the remote entry list.

    The persisted list returned by the store is the only record of saved
    entries; the draft lives in ``PracticeState.draft_text`` until a save
    succeeds. Failures never discard the draft or the list, they only fill
    the single ``error`` slot with the store's user-safe message.
    """

    def __init__(
        self,
        gateway: EntryGateway,
        navigator: SessionNavigator,
        state: PracticeState,
        *,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._gateway = gateway
        self._navigator = navigator
        self._state = state
        self._clock = clock
        self._deleting: set[UUID] = set()
        self.status: SessionStatus = "loading"
        self.user: DemoUser | None = None
        self.entries: list[JournalEntry] = []
        self.error: str | None = None
        self.saving = False

    @property
    def ready(self) -> bool:
        return self.status == "ready" and self.user is not None

    def is_deleting(self, entry_id: UUID) -> bool:
        return entry_id in self._deleting

    def clear_error(self) -> None:
        self.error = None

    async def initialize(self) -> None:
        self.status = "loading"
        self.user = None
        self.entries = []
        self.error = None
        try:
            user = await self._gateway.ensure_demo_user()
            entries = await self._gateway.list_entries(user.user_id)
        except StoreError as exc:
            logger.warning(f"Journal initialization failed: {exc.message}")
            self.status = "failed"
            self.error = exc.message
            return
        self.user = user
        self.entries = list(entries)
        self.status = "ready"

    async def retry(self) -> None:
        await self.initialize()

    async def save_draft(self) -> JournalEntry | None:
        draft = self._state.draft_text
        user = self.user
        if not draft.strip() or not self.ready or self.saving or user is None:
            return None

        index = self._state.active_index
        self.saving = True
        self.error = None
        try:
            entry = await self._gateway.create_entry(
                date=self._clock(),
                exercise=self._navigator.active_exercise.title,
                content=draft,
                user_id=user.user_id,
            )
        except StoreError as exc:
            self.error = exc.message
            return None
        finally:
            self.saving = False

        self.entries.insert(0, entry)
        # Text typed while the request was outstanding is kept.
        if self._state.active_index == index and self._state.draft_text == draft:
            self._state.draft_text = ""
        return entry

    async def delete_entry(self, entry_id: UUID) -> bool:
        user = self.user
        if not self.ready or entry_id in self._deleting or user is None:
            return False

        self._deleting.add(entry_id)
        self.error = None
        try:
            await self._gateway.delete_entry(entry_id, user.user_id)
        except StoreError as exc:
            self.error = exc.message
            return False
        finally:
            self._deleting.discard(entry_id)

        self.entries = [entry for entry in self.entries if entry.id != entry_id]
        return True
