"""Cooperative countdown driving playback of the active exercise."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Callable, Literal, Optional

from loguru import logger

from backend.practice.model import Exercise, PracticeState


TimerStatus = Literal["idle", "running", "exhausted"]

TickCallback = Callable[[PracticeState], None]
ExhaustedCallback = Callable[[Exercise], None]


def progress_for(duration_sec: int, remaining_sec: int) -> float:
    if duration_sec <= 0:
        return 100.0
    return 100.0 * (duration_sec - remaining_sec) / duration_sec


class PlaybackTimer:
    """One-second ticker for the active exercise.

    The timer owns a single asyncio task at most. Pausing, restarting and
    closing cancel that task synchronously, so once any of those calls returns
    no further tick is delivered for the previous countdown.
    """

    def __init__(
        self,
        exercises: tuple[Exercise, ...],
        state: PracticeState,
        *,
        tick_interval_sec: float = 1.0,
        on_tick: TickCallback | None = None,
        on_exhausted: ExhaustedCallback | None = None,
    ) -> None:
        if not exercises:
            raise ValueError("Catalog must contain at least one exercise")
        self._exercises = exercises
        self._state = state
        self._tick_interval_sec = tick_interval_sec
        self._on_tick = on_tick
        self._on_exhausted = on_exhausted
        self._task: Optional[asyncio.Task[None]] = None
        self._closed = False

    @property
    def status(self) -> TimerStatus:
        if self._state.remaining_sec <= 0:
            return "exhausted"
        if self._state.is_playing:
            return "running"
        return "idle"

    @property
    def is_ticking(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def play(self) -> None:
        if self._closed:
            raise RuntimeError("Timer is closed")
        self._state.is_playing = True
        self._ensure_ticking()

    def pause(self) -> None:
        self._state.is_playing = False
        self._cancel()

    def toggle(self) -> bool:
        if self._state.is_playing:
            self.pause()
        else:
            self.play()
        return self._state.is_playing

    def restart(self) -> None:
        """Drop the pending tick and start a fresh countdown if still playing."""
        self._cancel()
        if self._state.is_playing and not self._closed:
            self._ensure_ticking()

    def tick(self) -> bool:
        if not self._state.is_playing or self._state.remaining_sec <= 0:
            return False

        exercise = self._exercises[self._state.active_index]
        self._state.remaining_sec -= 1
        self._state.progress_pct = progress_for(exercise.duration_sec, self._state.remaining_sec)
        if self._on_tick is not None:
            self._on_tick(self._state)
        if self._state.remaining_sec == 0 and self._on_exhausted is not None:
            self._on_exhausted(exercise)
        return True

    async def close(self) -> None:
        self._closed = True
        task = self._task
        self._cancel()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def _ensure_ticking(self) -> None:
        if self.is_ticking or self._state.remaining_sec <= 0:
            return
        self._task = asyncio.create_task(self._run())

    def _cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self) -> None:
        try:
            while self._state.is_playing and self._state.remaining_sec > 0:
                await asyncio.sleep(self._tick_interval_sec)
                self.tick()
        except Exception:
            logger.exception("Playback tick failed, stopping the timer")
            self._state.is_playing = False
        finally:
            if self._task is asyncio.current_task():
                self._task = None
