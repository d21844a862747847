"""Practice domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


Difficulty = Literal["Beginner", "Intermediate", "Advanced"]
DIFFICULTIES: tuple[Difficulty, ...] = ("Beginner", "Intermediate", "Advanced")


@dataclass(frozen=True)
class Exercise:
    title: str
    description: str
    duration_sec: int
    difficulty: Difficulty
    prompts: tuple[str, ...] = ()


@dataclass
class PracticeState:
    active_index: int = 0
    is_playing: bool = False
    progress_pct: float = 0.0
    remaining_sec: int = 0
    draft_text: str = ""

    @classmethod
    def for_exercise(cls, exercise: Exercise, index: int = 0) -> PracticeState:
        return cls(active_index=index, remaining_sec=exercise.duration_sec)
