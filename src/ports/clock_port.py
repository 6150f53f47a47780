"""Clock port — abstract time source.

Core modules ask a ClockPort for "now" instead of calling datetime.now(),
so tests can pin or advance time.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class ClockPort(Protocol):
    """Abstract time source used by core modules."""

    def now(self) -> datetime: ...
