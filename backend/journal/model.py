"""Journal domain models shared by the store, the API and the session."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import UUID


DEMO_USER_EMAIL = "temp@mindvision.app"
DEMO_USER_NAME = "Temporary User"


@dataclass(frozen=True)
class DemoUser:
    user_id: UUID
    email: str
    name: str | None

    def to_payload(self) -> dict[str, Any]:
        return {"userId": str(self.user_id), "email": self.email, "name": self.name}

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> DemoUser:
        return cls(
            user_id=UUID(str(payload["userId"])),
            email=str(payload["email"]),
            name=payload.get("name"),
        )


@dataclass(frozen=True)
class JournalEntry:
    id: UUID
    date: datetime
    exercise: str
    content: str
    user_id: UUID
    created_at: datetime
    updated_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "date": to_iso(self.date),
            "exercise": self.exercise,
            "content": self.content,
            "userId": str(self.user_id),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> JournalEntry:
        return cls(
            id=UUID(str(payload["id"])),
            date=parse_iso(str(payload["date"])),
            exercise=str(payload["exercise"]),
            content=str(payload["content"]),
            user_id=UUID(str(payload["userId"])),
            created_at=parse_iso(str(payload["createdAt"])),
            updated_at=parse_iso(str(payload["updatedAt"])),
        )


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo; values are always written in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    return as_utc(value).isoformat().replace("+00:00", "Z")


def parse_iso(raw: str) -> datetime:
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(raw))
