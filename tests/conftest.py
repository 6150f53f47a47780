"""Shared test fixtures and configuration.

Pins environment variables before any src import, and provides a temp DB,
a controllable clock and a wired RosterService.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ["TIMEZONE"] = "America/Sao_Paulo"
os.environ["SHIFT_DURATION_MINUTES"] = "75"
os.environ["REVEZAMENTO_ROLE"] = ""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

SP = ZoneInfo("America/Sao_Paulo")


class FakeClock:
    """ClockPort whose time only moves when a test moves it."""

    def __init__(self, current: datetime) -> None:
        self.current = current

    def now(self) -> datetime:
        return self.current

    def set(self, current: datetime) -> None:
        self.current = current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    """A clock pinned to 2026-03-10 14:00:00 in São Paulo."""
    return FakeClock(datetime(2026, 3, 10, 14, 0, 0, tzinfo=SP))


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_revezamento.db")


@pytest.fixture
def roster_db(tmp_db_path):
    """Return a RosterDB instance backed by a temp file."""
    from src.data.db import RosterDB
    return RosterDB(db_path=tmp_db_path)


@pytest.fixture
def history_db(tmp_db_path, roster_db):
    """Return a HistoryDB sharing the roster's temp file."""
    from src.data.db import HistoryDB
    return HistoryDB(db_path=tmp_db_path)


@pytest.fixture
def service(roster_db, history_db, clock):
    """Return a RosterService on the temp DB and the fake clock."""
    from src.core.roster_service import RosterService
    return RosterService(roster_db, history_db, clock, shift_minutes=75, history_default_days=7)
