"""Per-client controller used by the web UI."""

from __future__ import annotations

from uuid import UUID

from backend.journal.gateway import EntryGateway
from backend.journal.model import JournalEntry
from backend.journal.session import JournalSession
from backend.practice.catalog import list_exercises
from backend.practice.model import Exercise, PracticeState
from backend.practice.navigator import SessionNavigator
from backend.practice.timer import ExhaustedCallback, PlaybackTimer, TickCallback


class PracticeController:
    def __init__(
        self,
        gateway: EntryGateway,
        exercises: tuple[Exercise, ...] | None = None,
        *,
        tick_interval_sec: float = 1.0,
        on_tick: TickCallback | None = None,
        on_exhausted: ExhaustedCallback | None = None,
    ) -> None:
        self.exercises = exercises or list_exercises()
        self.state = PracticeState.for_exercise(self.exercises[0])
        self.timer = PlaybackTimer(
            self.exercises,
            self.state,
            tick_interval_sec=tick_interval_sec,
            on_tick=on_tick,
            on_exhausted=on_exhausted,
        )
        self.navigator = SessionNavigator(self.exercises, self.state, self.timer)
        self.journal = JournalSession(gateway, self.navigator, self.state)

    @property
    def active_exercise(self) -> Exercise:
        return self.navigator.active_exercise

    async def load(self) -> None:
        await self.journal.initialize()

    async def retry(self) -> None:
        await self.journal.retry()

    def toggle_play(self) -> bool:
        return self.timer.toggle()

    def next_exercise(self) -> int:
        return self.navigator.next()

    def previous_exercise(self) -> int:
        return self.navigator.previous()

    def select_exercise(self, index: int) -> int:
        return self.navigator.go_to(index)

    def set_draft(self, text: str) -> None:
        self.state.draft_text = text

    async def save_draft(self) -> JournalEntry | None:
        return await self.journal.save_draft()

    async def delete_entry(self, entry_id: UUID) -> bool:
        return await self.journal.delete_entry(entry_id)

    async def close(self) -> None:
        await self.timer.close()
