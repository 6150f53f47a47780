"""
Revezamento — Daily Snapshot Recorder.

Once per civil day, as soon as nobody on the roster is still pending, the
whole roster is copied into the history table. Invoked opportunistically
after every start or time edit; repeated calls on the same day are no-ops.

Best effort: a failure here is logged and reported in the result, never
raised, so the write that triggered it still succeeds.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.data.models import SnapshotResult

if TYPE_CHECKING:
    from src.data.db import HistoryDB
    from src.ports.clock_port import ClockPort

logger = logging.getLogger(__name__)


class SnapshotRecorder:
    """Writes at most one roster snapshot per civil day."""

    def __init__(self, history_db: HistoryDB, clock: ClockPort) -> None:
        self._history_db = history_db
        self._clock = clock

    def record_if_complete(self) -> SnapshotResult:
        """Snapshot the roster for today unless someone is pending or it's done already."""
        now = self._clock.now()
        day = now.date().isoformat()
        try:
            result = self._history_db.save_snapshot(day, now.isoformat())
        except Exception as exc:
            logger.exception("Failed to save daily snapshot for %s", day)
            return SnapshotResult(saved=False, reason="error", day=day, error=str(exc))

        if not result.saved:
            logger.debug("Snapshot for %s skipped: %s", day, result.reason)
        return result
