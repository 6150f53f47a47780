"""Shift interval resolution — pure business logic.

Turns a roster entry's stored schedule into the effective [start, end)
interval for today. Full ISO instants win over the legacy "HH:MM" pair;
a legacy end that is not after its start belongs to the next day.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from src.core.errors import InvalidInputError
from src.data.models import Person

logger = logging.getLogger(__name__)

_TIME_OF_DAY = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass(frozen=True)
class Interval:
    """Resolved shift window. `end` is None for an open-ended shift."""

    start: datetime | None = None
    end: datetime | None = None


def parse_time_of_day(raw: str | None) -> tuple[int, int]:
    """Extract (hour, minute) from an "H:MM" or "HH:MM" string.

    Raises InvalidInputError on malformed or out-of-range input.
    """
    if raw is None:
        raise InvalidInputError("Time of day is required (HH:MM)")
    match = _TIME_OF_DAY.match(raw.strip())
    if match is None:
        raise InvalidInputError(f"Invalid time format {raw!r}, use HH:MM")

    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise InvalidInputError(f"Hour/minute out of range: {hour}:{minute:02d}")
    return hour, minute


def format_time_of_day(dt: datetime) -> str:
    return dt.strftime("%H:%M")


def at_time_of_day(day: datetime, hour: int, minute: int) -> datetime:
    """Same calendar day and zone as `day`, at hour:minute:00."""
    return day.replace(hour=hour, minute=minute, second=0, microsecond=0)


def roll_past(start: datetime, end: datetime) -> datetime:
    """Shift `end` by one day when it does not come after `start`."""
    if end <= start:
        return end + timedelta(days=1)
    return end


def parse_instant(raw: str, now: datetime) -> datetime:
    """Parse a stored ISO instant; naive values are read in now's zone."""
    dt = datetime.fromisoformat(raw)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=now.tzinfo)
    return dt.astimezone(now.tzinfo)


def resolve_interval(person: Person, now: datetime) -> Interval:
    """Effective shift interval of `person` for the day of `now`.

    Stored data is trusted; a row that cannot be parsed is logged and
    treated as unscheduled so one bad row never fails a roster read.
    """
    try:
        if person.start_at and person.end_at:
            return Interval(
                start=parse_instant(person.start_at, now),
                end=parse_instant(person.end_at, now),
            )

        if person.start_time:
            start = at_time_of_day(now, *parse_time_of_day(person.start_time))
            if person.end_time:
                end = at_time_of_day(now, *parse_time_of_day(person.end_time))
                return Interval(start=start, end=roll_past(start, end))
            return Interval(start=start)
    except (ValueError, InvalidInputError) as exc:
        logger.warning("Unreadable schedule on person #%d: %s", person.id, exc)

    return Interval()
