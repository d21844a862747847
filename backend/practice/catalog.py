"""Built-in visualization exercises."""

from __future__ import annotations

from backend.practice.model import Exercise


EXERCISES: tuple[Exercise, ...] = (
    Exercise(
        title="Mental Screen Exercise",
        description=(
            "Imagine a blank movie screen in your mind. Practice making it bigger, "
            "smaller, closer, and further away."
        ),
        duration_sec=600,
        difficulty="Beginner",
        prompts=(
            "How clear was your mental screen?",
            "Could you adjust its size easily?",
        ),
    ),
    Exercise(
        title="Object Visualization",
        description=(
            "Visualize a simple object like an apple. Focus on its color, texture, "
            "and try rotating it in your mind."
        ),
        duration_sec=900,
        difficulty="Intermediate",
        prompts=(
            "What details could you see clearly?",
            "How stable was the image?",
        ),
    ),
    Exercise(
        title="Scene Construction",
        description=(
            "Build a peaceful scene piece by piece - start with the sky, add trees, "
            "water, and other elements gradually."
        ),
        duration_sec=1200,
        difficulty="Advanced",
        prompts=(
            "What elements did you include?",
            "How vivid were the colors?",
        ),
    ),
)


def list_exercises() -> tuple[Exercise, ...]:
    return EXERCISES


def format_clock(total_seconds: int) -> str:
    """Format seconds as ``m:ss`` for the playback display."""
    minutes, seconds = divmod(max(0, total_seconds), 60)
    return f"{minutes:d}:{seconds:02d}"


def exercise_to_payload(exercise: Exercise) -> dict[str, object]:
    return {
        "title": exercise.title,
        "description": exercise.description,
        "durationSeconds": exercise.duration_sec,
        "difficulty": exercise.difficulty,
        "prompts": list(exercise.prompts),
    }
