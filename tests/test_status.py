"""Tests for src.core.status — traffic-light classification."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from src.core.interval import Interval
from src.core.status import classify
from src.data.models import Status

SP = ZoneInfo("America/Sao_Paulo")
START = datetime(2026, 3, 10, 14, 0, tzinfo=SP)
END = START + timedelta(minutes=75)


class TestClassify:
    def test_no_start_is_pending(self):
        assert classify(START, Interval()) is Status.PENDING

    def test_before_start_is_pending(self):
        assert classify(START - timedelta(seconds=1), Interval(START, END)) is Status.PENDING

    def test_at_start_is_active(self):
        assert classify(START, Interval(START, END)) is Status.ACTIVE

    def test_inside_window_is_active(self):
        assert classify(START + timedelta(minutes=10), Interval(START, END)) is Status.ACTIVE

    def test_at_end_is_done(self):
        assert classify(END, Interval(START, END)) is Status.DONE

    def test_after_end_is_done(self):
        assert classify(END + timedelta(hours=5), Interval(START, END)) is Status.DONE

    def test_open_ended_shift_stays_active(self):
        later = START + timedelta(days=2)
        assert classify(later, Interval(START, None)) is Status.ACTIVE

    def test_open_ended_before_start_is_pending(self):
        assert classify(START - timedelta(minutes=1), Interval(START, None)) is Status.PENDING

    def test_deterministic(self):
        now = START + timedelta(minutes=30)
        interval = Interval(START, END)
        assert {classify(now, interval) for _ in range(5)} == {Status.ACTIVE}
