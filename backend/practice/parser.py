"""Exercise catalog file parser (CSV/JSON)."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import cast

from backend.practice.model import DIFFICULTIES, Difficulty, Exercise


PROMPT_SEPARATOR = "|"


class CatalogParseError(ValueError):
    """Raised when a catalog file is invalid."""


def load_catalog(path: str | Path) -> tuple[Exercise, ...]:
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return _load_json(file_path)
    if suffix == ".csv":
        return _load_csv(file_path)
    raise CatalogParseError(
        f"Unsupported catalog format '{file_path.suffix}'. Use .json or .csv"
    )


def _load_json(path: Path) -> tuple[Exercise, ...]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CatalogParseError(f"Invalid JSON: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("exercises")
    if not isinstance(data, list):
        raise CatalogParseError("Catalog field 'exercises' must be an array")

    exercises: list[Exercise] = []
    for i, raw in enumerate(data):
        if not isinstance(raw, dict):
            raise CatalogParseError(f"Exercise {i + 1}: must be an object")
        prompts_obj = raw.get("prompts", [])
        if not isinstance(prompts_obj, list):
            raise CatalogParseError(f"Exercise {i + 1}: prompts must be an array")
        exercises.append(
            _build_exercise(
                title_obj=raw.get("title"),
                description_obj=raw.get("description"),
                duration_obj=raw.get("duration_sec"),
                difficulty_obj=raw.get("difficulty"),
                prompts=[str(item) for item in prompts_obj],
                index=i,
            )
        )

    return _build_catalog(exercises)


def _load_csv(path: Path) -> tuple[Exercise, ...]:
    rows: list[Exercise] = []
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        fields = set(reader.fieldnames or [])
        required = {"title", "description", "duration_sec", "difficulty"}
        if not required.issubset(fields):
            raise CatalogParseError(
                "CSV must contain headers: title,description,duration_sec,difficulty[,prompts]"
            )

        for i, row in enumerate(reader):
            raw_prompts = row.get("prompts") or ""
            rows.append(
                _build_exercise(
                    title_obj=row.get("title"),
                    description_obj=row.get("description"),
                    duration_obj=row.get("duration_sec"),
                    difficulty_obj=row.get("difficulty"),
                    prompts=raw_prompts.split(PROMPT_SEPARATOR),
                    index=i,
                )
            )

    return _build_catalog(rows)


def _build_exercise(
    *,
    title_obj: object,
    description_obj: object,
    duration_obj: object,
    difficulty_obj: object,
    prompts: list[str],
    index: int,
) -> Exercise:
    title = str(title_obj or "").strip()
    if not title:
        raise CatalogParseError(f"Exercise {index + 1}: title is required")

    duration_sec = _parse_int_field(raw=duration_obj, field_name="duration_sec", index=index)
    if duration_sec <= 0:
        raise CatalogParseError(f"Exercise {index + 1}: duration_sec must be > 0")

    difficulty = str(difficulty_obj or "").strip().capitalize()
    if difficulty not in DIFFICULTIES:
        raise CatalogParseError(
            f"Exercise {index + 1}: difficulty must be one of {', '.join(DIFFICULTIES)}"
        )

    return Exercise(
        title=title,
        description=str(description_obj or "").strip(),
        duration_sec=duration_sec,
        difficulty=cast(Difficulty, difficulty),
        prompts=tuple(p.strip() for p in prompts if p.strip()),
    )


def _build_catalog(exercises: list[Exercise]) -> tuple[Exercise, ...]:
    if not exercises:
        raise CatalogParseError("Catalog must contain at least one exercise")
    return tuple(exercises)


def _parse_int_field(*, raw: object, field_name: str, index: int) -> int:
    if raw is None:
        raise CatalogParseError(f"Exercise {index + 1}: invalid {field_name}")
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise CatalogParseError(f"Exercise {index + 1}: invalid {field_name}") from exc
