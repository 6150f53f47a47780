"""System clock adapter — wall-clock time in the configured civil zone."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo


class SystemClock:
    """ClockPort backed by the machine clock.

    Returns aware datetimes in a fixed zone, independent of the server's
    locale, truncated to whole seconds.
    """

    def __init__(self, timezone: str | None = None) -> None:
        if timezone is None:
            from src.config import settings
            self._tz = settings.tz
        else:
            self._tz = ZoneInfo(timezone)

    def now(self) -> datetime:
        return datetime.now(self._tz).replace(microsecond=0)
