"""Tests for src.core.snapshot — the best-effort daily snapshot recorder."""

import sqlite3
from datetime import datetime
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

from src.core.snapshot import SnapshotRecorder
from src.data.models import SnapshotResult

SP = ZoneInfo("America/Sao_Paulo")


def _make_recorder(now, history_db=None):
    clock = MagicMock()
    clock.now.return_value = now
    db = history_db or MagicMock()
    return SnapshotRecorder(db, clock), db


class TestSnapshotRecorder:
    def test_uses_civil_date_of_clock(self):
        # 22:30 in São Paulo is already the next day in UTC
        now = datetime(2026, 3, 10, 22, 30, tzinfo=SP)
        recorder, db = _make_recorder(now)
        db.save_snapshot.return_value = SnapshotResult(saved=True, day="2026-03-10", count=2)

        result = recorder.record_if_complete()

        db.save_snapshot.assert_called_once_with("2026-03-10", "2026-03-10T22:30:00-03:00")
        assert result.saved is True

    def test_skip_reason_passed_through(self):
        recorder, db = _make_recorder(datetime(2026, 3, 10, 14, 0, tzinfo=SP))
        db.save_snapshot.return_value = SnapshotResult(
            saved=False, reason="pending entries remain", pending=3,
        )
        result = recorder.record_if_complete()
        assert result.saved is False
        assert result.pending == 3

    def test_storage_error_is_reported_not_raised(self, caplog):
        recorder, db = _make_recorder(datetime(2026, 3, 10, 14, 0, tzinfo=SP))
        db.save_snapshot.side_effect = sqlite3.OperationalError("database is locked")

        result = recorder.record_if_complete()

        assert result.saved is False
        assert result.reason == "error"
        assert result.day == "2026-03-10"
        assert "database is locked" in result.error
        assert "Failed to save daily snapshot" in caplog.text

    def test_unexpected_error_is_reported_not_raised(self):
        recorder, db = _make_recorder(datetime(2026, 3, 10, 14, 0, tzinfo=SP))
        db.save_snapshot.side_effect = RuntimeError("boom")
        result = recorder.record_if_complete()
        assert result.error == "boom"

    def test_against_real_database(self, roster_db, history_db, clock):
        person = roster_db.add_person("Ana", "", "2026-03-10T08:00:00-03:00")
        roster_db.update_column(person.id, "status", "🟡")
        recorder = SnapshotRecorder(history_db, clock)

        first = recorder.record_if_complete()
        second = recorder.record_if_complete()

        assert first.saved is True
        assert first.count == 1
        assert second.reason == "already recorded"
