"""Data models for the activity list.

This module defines the canonical, typed representation of an activity and its
mapping to and from the document shape stored in the remote collection.

Document shape
--------------
{
    "name": "Buy milk",
    "date": 1718000000000,
    "completed": false
}

The record identifier is owned by the store and is never written into the
document body.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, Mapping, Self

from .clock import Clock, SystemClock
from .errors import ValidationError

FIELD_NAME: Final[str] = "name"
FIELD_DATE: Final[str] = "date"
FIELD_COMPLETED: Final[str] = "completed"


def require_name(name: str) -> str:
    """
    Validate a user-supplied activity name.

    Parameters
    ----------
    name:
        Raw name from user input.

    Returns
    -------
    str
        The name unchanged.

    Raises
    ------
    ValidationError
        If the name is empty or whitespace only.
    """
    if not name or not name.strip():
        raise ValidationError("Activity name must not be empty.")
    return name


def is_blank(name: str | None) -> bool:
    """Return True if name is None, empty, or whitespace only."""
    return name is None or not name.strip()


@dataclass(frozen=True, slots=True)
class ActivityRecord:
    """
    A single tracked activity.

    Attributes
    ----------
    record_id:
        Opaque identifier assigned by the store. Empty before first persistence.
    name:
        Display name. Must be non-blank to be persisted.
    created_at:
        Creation time in milliseconds since the Unix epoch. Never changes.
    completed:
        Completion flag. The only field toggled by the UI.
    """

    record_id: str = ""
    name: str = ""
    created_at: int = 0
    completed: bool = False

    @classmethod
    def new(cls, name: str, clock: Clock | None = None) -> Self:
        """
        Build an unsaved record stamped with the current time.

        Parameters
        ----------
        name:
            Display name; validated as non-blank.
        clock:
            Time source. Defaults to the system clock.

        Returns
        -------
        ActivityRecord
            Record with an empty `record_id` and `completed=False`.
        """
        source = clock if clock is not None else SystemClock()
        return cls(record_id="", name=require_name(name), created_at=source.now_millis())

    def to_document(self) -> dict[str, Any]:
        """Return the document body written to the store (id excluded)."""
        return {
            FIELD_NAME: self.name,
            FIELD_DATE: int(self.created_at),
            FIELD_COMPLETED: bool(self.completed),
        }

    @classmethod
    def from_document(cls, record_id: str, doc: Mapping[str, Any] | None) -> Self:
        """
        Decode a stored document.

        Missing fields fall back to the record defaults. Present fields with an
        unexpected type are rejected.

        Parameters
        ----------
        record_id:
            Store-assigned document identifier.
        doc:
            Document body as returned by the store.

        Returns
        -------
        ActivityRecord
            Decoded record.

        Raises
        ------
        ValueError
            If a present field has the wrong type.
        """
        payload: Mapping[str, Any] = doc or {}

        name = payload.get(FIELD_NAME, "")
        if not isinstance(name, str):
            raise ValueError(f"{FIELD_NAME!r} must be a string, got {type(name).__name__}")

        created_at = payload.get(FIELD_DATE, 0)
        if isinstance(created_at, bool) or not isinstance(created_at, int):
            raise ValueError(
                f"{FIELD_DATE!r} must be an integer, got {type(created_at).__name__}"
            )

        completed = payload.get(FIELD_COMPLETED, False)
        if not isinstance(completed, bool):
            raise ValueError(
                f"{FIELD_COMPLETED!r} must be a boolean, got {type(completed).__name__}"
            )

        return cls(record_id=record_id, name=name, created_at=created_at, completed=completed)
