"""
Revezamento — Roster Service.

The operations the outer layer (CLI, web front end) calls. Every operation
reads the time from an injected clock, validates input before writing, and
turns database failures into StorageError.

Note that get_roster() is read-and-reconcile, not a pure query: statuses are
recomputed from the clock and any that changed are written back before the
roster is returned. get_roster_raw() is the pure query.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Iterator

from src.core.errors import InvalidInputError, StorageError
from src.core.interval import (
    at_time_of_day,
    format_time_of_day,
    parse_instant,
    parse_time_of_day,
    resolve_interval,
    roll_past,
)
from src.core.snapshot import SnapshotRecorder
from src.core.status import classify
from src.data.db import EDITABLE_COLUMNS
from src.data.models import HistoryRecord, Person, SnapshotResult, Status

if TYPE_CHECKING:
    from src.data.db import HistoryDB, RosterDB
    from src.ports.clock_port import ClockPort

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass
class DayReport:
    """Roster state for one day: the snapshot if taken, else live rows started that day."""

    day: str
    source: str                   # "historico_dias" | "pessoas"
    records: list[HistoryRecord | Person] = field(default_factory=list)


@contextmanager
def _storage(operation: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        logger.error("Storage failure during %s: %s", operation, exc)
        raise StorageError(f"Storage failure during {operation}") from exc


def _validate_day(day: str | None) -> str:
    if not day or not _ISO_DATE.match(day):
        raise InvalidInputError("Invalid date, use YYYY-MM-DD")
    try:
        date.fromisoformat(day)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid date {day!r}") from exc
    return day


class RosterService:
    """Roster operations over injected storage and clock."""

    def __init__(
        self,
        roster_db: RosterDB,
        history_db: HistoryDB,
        clock: ClockPort,
        shift_minutes: int | None = None,
        history_default_days: int | None = None,
    ) -> None:
        if shift_minutes is None or history_default_days is None:
            from src.config import settings
            shift_minutes = shift_minutes or settings.SHIFT_DURATION_MINUTES
            history_default_days = history_default_days or settings.HISTORY_DEFAULT_DAYS

        self._roster_db = roster_db
        self._history_db = history_db
        self._clock = clock
        self._shift = timedelta(minutes=shift_minutes)
        self._history_default_days = history_default_days
        self._recorder = SnapshotRecorder(history_db, clock)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_roster(self) -> list[Person]:
        """Return the roster with statuses reconciled against the clock.

        Side effect: statuses that changed since the last read are persisted.
        """
        with _storage("get_roster"):
            people = self._roster_db.list_all()
            now = self._clock.now()

            changes: list[tuple[int, Status]] = []
            for person in people:
                status = classify(now, resolve_interval(person, now))
                if status != person.status:
                    changes.append((person.id, status))
                    person.status = status

            self._roster_db.update_statuses(changes)
        return people

    def get_roster_raw(self) -> list[Person]:
        """Return the roster exactly as stored, without recomputation."""
        with _storage("get_roster_raw"):
            return self._roster_db.list_all()

    def count_people(self) -> int:
        with _storage("count_people"):
            return self._roster_db.count()

    # ------------------------------------------------------------------
    # Roster membership
    # ------------------------------------------------------------------

    def add_person(self, name: str, location: str = "") -> Person:
        if not name or not name.strip():
            raise InvalidInputError("Name is required")
        created_at = self._clock.now().isoformat()
        with _storage("add_person"):
            return self._roster_db.add_person(name.strip(), (location or "").strip(), created_at)

    def delete_person(self, person_id: int) -> None:
        """Delete a roster entry. An unknown id is a silent no-op."""
        with _storage("delete_person"):
            self._roster_db.delete_person(person_id)

    # ------------------------------------------------------------------
    # Schedule writes (trigger the daily snapshot)
    # ------------------------------------------------------------------

    def start_person(self, person_id: int) -> SnapshotResult:
        """Start a shift now; it ends one shift length later."""
        start = self._clock.now()
        end = start + self._shift
        with _storage("start_person"):
            self._roster_db.set_schedule(
                person_id,
                format_time_of_day(start),
                format_time_of_day(end),
                start.isoformat(),
                end.isoformat(),
                status=Status.ACTIVE,
            )
        logger.info("Person #%d started at %s", person_id, format_time_of_day(start))
        return self._recorder.record_if_complete()

    def edit_schedule(self, person_id: int, start_time: str) -> SnapshotResult:
        """Move a shift to start today at `start_time` (HH:MM).

        Raises InvalidInputError on a malformed time, before any write.
        """
        hour, minute = parse_time_of_day(start_time)
        start = at_time_of_day(self._clock.now(), hour, minute)
        self._store_shift(person_id, start, "edit_schedule")
        return self._recorder.record_if_complete()

    def update_field(self, person_id: int, column: str, value: str | None) -> SnapshotResult | None:
        """Edit one roster column.

        `hora_inicial` moves the shift (keeping the stored start date) and
        `hora_final` moves only its end; both trigger the daily snapshot and
        return its result. Other columns are stored verbatim and return None.
        """
        if column not in EDITABLE_COLUMNS:
            raise InvalidInputError(f"Field {column!r} cannot be edited")

        if column == "hora_inicial":
            return self._update_start(person_id, value)
        if column == "hora_final":
            return self._update_end(person_id, value)

        if column == "nome" and (value is None or not value.strip()):
            raise InvalidInputError("Name is required")
        if column == "status":
            value = self._parse_status(value).value

        with _storage("update_field"):
            self._roster_db.update_column(person_id, column, value)
        logger.info("Person #%d field %s updated", person_id, column)
        return None

    def _update_start(self, person_id: int, value: str | None) -> SnapshotResult:
        hour, minute = parse_time_of_day(value)
        with _storage("update_field"):
            person = self._roster_db.get_person(person_id)
        now = self._clock.now()
        base = parse_instant(person.start_at, now) if person and person.start_at else now
        self._store_shift(person_id, at_time_of_day(base, hour, minute), "update_field")
        return self._recorder.record_if_complete()

    def _update_end(self, person_id: int, value: str | None) -> SnapshotResult:
        hour, minute = parse_time_of_day(value)
        with _storage("update_field"):
            person = self._roster_db.get_person(person_id)
            now = self._clock.now()
            if person and person.start_at:
                base = parse_instant(person.start_at, now)
                end = roll_past(base, at_time_of_day(base, hour, minute))
            else:
                end = at_time_of_day(now, hour, minute)
            self._roster_db.set_end(person_id, format_time_of_day(end), end.isoformat())
        logger.info("Person #%d end moved to %s", person_id, format_time_of_day(end))
        return self._recorder.record_if_complete()

    def _store_shift(self, person_id: int, start: datetime, operation: str) -> None:
        end = roll_past(start, start + self._shift)
        with _storage(operation):
            self._roster_db.set_schedule(
                person_id,
                format_time_of_day(start),
                format_time_of_day(end),
                start.isoformat(),
                end.isoformat(),
            )
        logger.info(
            "Person #%d scheduled %s-%s",
            person_id, format_time_of_day(start), format_time_of_day(end),
        )

    @staticmethod
    def _parse_status(value: str | None) -> Status:
        if value:
            for status in Status:
                if value in (status.value, status.name, status.name.lower()):
                    return status
        raise InvalidInputError(f"Unknown status {value!r}")

    # ------------------------------------------------------------------
    # Resets (never trigger the snapshot)
    # ------------------------------------------------------------------

    def reset_person(self, person_id: int) -> None:
        with _storage("reset_person"):
            self._roster_db.reset_person(person_id)

    def reset_all(self) -> None:
        with _storage("reset_all"):
            self._roster_db.reset_all()

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def get_history_for_date(self, day: str) -> list[HistoryRecord]:
        day = _validate_day(day)
        with _storage("get_history_for_date"):
            return self._history_db.list_for_day(day)

    def history_window(self, days_back: int | None = None) -> int:
        """Effective window for get_history_since; non-positive or absent means the default."""
        if not days_back or days_back <= 0:
            return self._history_default_days
        return days_back

    def get_history_since(self, days_back: int | None = None) -> list[HistoryRecord]:
        """Snapshots of the last `days_back` days, today included.

        A window reaching before year 1 is clamped to date.min.
        """
        days_back = self.history_window(days_back)
        today = self._clock.now().date()
        span = min(days_back - 1, (today - date.min).days)
        first_day = today - timedelta(days=span)
        with _storage("get_history_since"):
            return self._history_db.list_since(first_day.isoformat())

    def report_for_date(self, day: str) -> DayReport:
        """Snapshot of `day` if one exists, else live rows whose shift started that day."""
        day = _validate_day(day)
        with _storage("report_for_date"):
            history = self._history_db.list_for_day(day)
            if history:
                return DayReport(day=day, source="historico_dias", records=list(history))
            started = self._roster_db.list_started_on(day)
        return DayReport(day=day, source="pessoas", records=list(started))


def create_roster_service(db_path: str | None = None, clock: ClockPort | None = None) -> RosterService:
    """Wire a RosterService to the configured database and the system clock."""
    from src.adapters.system_clock import SystemClock
    from src.data.db import HistoryDB, RosterDB

    return RosterService(
        roster_db=RosterDB(db_path=db_path),
        history_db=HistoryDB(db_path=db_path),
        clock=clock or SystemClock(),
    )
