"""Cyclic navigation over the exercise catalog."""

from __future__ import annotations

from backend.practice.model import Exercise, PracticeState
from backend.practice.timer import PlaybackTimer


class SessionNavigator:
    def __init__(
        self,
        exercises: tuple[Exercise, ...],
        state: PracticeState,
        timer: PlaybackTimer | None = None,
    ) -> None:
        if not exercises:
            raise ValueError("Catalog must contain at least one exercise")
        self._exercises = exercises
        self._state = state
        self._timer = timer

    @property
    def exercises(self) -> tuple[Exercise, ...]:
        return self._exercises

    @property
    def active_exercise(self) -> Exercise:
        return self._exercises[self._state.active_index]

    def next(self) -> int:
        return self.go_to(self._state.active_index + 1)

    def previous(self) -> int:
        return self.go_to(self._state.active_index - 1)

    def go_to(self, index: int) -> int:
        # Python's modulo is non-negative for a positive divisor.
        self._state.active_index = index % len(self._exercises)
        self._reset()
        return self._state.active_index

    def _reset(self) -> None:
        exercise = self.active_exercise
        self._state.progress_pct = 0.0
        self._state.remaining_sec = exercise.duration_sec
        self._state.draft_text = ""
        if self._timer is not None:
            self._timer.restart()
