"""
Revezamento — Data Models.

The roster lives in SQLite and is reconciled against the clock on every read.
History records are frozen daily copies of the roster.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Status(str, Enum):
    """Traffic-light status of a roster entry.

    Values are the emoji stored by existing databases.
    """

    PENDING = "🔴"
    ACTIVE = "🟡"
    DONE = "🟢"


@dataclass
class Person:
    """A roster entry rotating through one shift window per day."""

    id: int
    name: str
    location: str = ""
    status: Status = Status.PENDING
    released: str | None = None
    start_time: str | None = None        # "HH:MM"
    end_time: str | None = None          # "HH:MM"
    return_note: str | None = None
    message: str | None = None
    justification: str | None = None
    start_at: str | None = None          # ISO-8601 instant
    end_at: str | None = None            # ISO-8601 instant
    created_at: str | None = None


@dataclass(frozen=True)
class HistoryRecord:
    """An immutable copy of one Person, captured for a civil day."""

    id: int
    person_id: int | None
    day: str                             # YYYY-MM-DD
    name: str | None
    location: str | None
    status: str | None
    start_time: str | None
    end_time: str | None
    message: str | None
    justification: str | None
    recorded_at: str


@dataclass
class SnapshotResult:
    """Outcome of a snapshot attempt. Never raised, always returned."""

    saved: bool
    reason: str = ""
    day: str | None = None
    count: int = 0
    pending: int = 0
    existing: int = 0
    error: str | None = None
