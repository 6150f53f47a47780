"""Tests for src.adapters.system_clock — wall clock in a fixed zone."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfoNotFoundError

import pytest

from src.adapters.system_clock import SystemClock


def test_now_is_aware_in_configured_zone():
    clock = SystemClock("America/Sao_Paulo")
    now = clock.now()
    assert now.tzinfo is not None
    assert now.tzinfo.key == "America/Sao_Paulo"


def test_now_is_truncated_to_seconds():
    assert SystemClock("America/Sao_Paulo").now().microsecond == 0


def test_now_tracks_real_time():
    before = datetime.now(timezone.utc).replace(microsecond=0)
    now = SystemClock("Asia/Tokyo").now()
    after = datetime.now(timezone.utc)
    assert before <= now <= after


def test_defaults_to_settings_timezone():
    assert SystemClock().now().tzinfo.key == "America/Sao_Paulo"


def test_unknown_zone_raises():
    with pytest.raises(ZoneInfoNotFoundError):
        SystemClock("Mars/Olympus_Mons")
