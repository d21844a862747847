"""Failures reported by the journal entry store."""

from __future__ import annotations

from typing import Literal


ErrorKind = Literal["invalid_input", "user_not_found", "not_found_or_unauthorized", "internal"]


class StoreError(Exception):
    """Base class for store failures; ``message`` is always safe to display."""

    kind: ErrorKind = "internal"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, details: list[dict] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)


class InvalidInputError(StoreError):
    kind: ErrorKind = "invalid_input"
    default_message = "Invalid request data"


class UserNotFoundError(StoreError):
    kind: ErrorKind = "user_not_found"
    default_message = "User not found"


class NotFoundOrUnauthorizedError(StoreError):
    kind: ErrorKind = "not_found_or_unauthorized"
    default_message = "Entry not found or unauthorized"


class InternalStoreError(StoreError):
    kind: ErrorKind = "internal"
    default_message = "Internal server error"
