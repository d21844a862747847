"""Request validation for the journal store boundary."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from backend.journal.errors import InvalidInputError


class CreateEntryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: datetime
    exercise: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    user_id: UUID = Field(alias="userId")

    @field_validator("date", mode="before")
    @classmethod
    def _date_must_be_iso_string(cls, value: Any) -> Any:
        if not isinstance(value, str):
            raise ValueError("date must be an ISO 8601 datetime string")
        return value


class DeleteEntryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID = Field(alias="userId")


def parse_create_request(payload: Mapping[str, Any] | None) -> CreateEntryRequest:
    if not isinstance(payload, Mapping):
        raise InvalidInputError(details=[{"msg": "Request body must be a JSON object"}])
    try:
        return CreateEntryRequest.model_validate(dict(payload))
    except ValidationError as exc:
        raise InvalidInputError(details=_issues(exc)) from exc


def parse_uuid(raw: object, message: str) -> UUID:
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw))
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(message) from exc


def _issues(exc: ValidationError) -> list[dict[str, Any]]:
    return [
        {"path": [str(part) for part in err["loc"]], "msg": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]
