"""Status classification — pure business logic.

Maps "now" and a resolved shift interval to a traffic-light status.
"""

from __future__ import annotations

from datetime import datetime

from src.core.interval import Interval
from src.data.models import Status


def classify(now: datetime, interval: Interval) -> Status:
    """PENDING before the shift, ACTIVE during it, DONE once it has ended.

    A shift with a start but no end stays ACTIVE indefinitely.
    """
    if interval.start is None or now < interval.start:
        return Status.PENDING
    if interval.end is None or now < interval.end:
        return Status.ACTIVE
    return Status.DONE
