from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from hue_scheduler.domain.errors import SolarComputationError
from hue_scheduler.domain.models import Clock, Solar, SolarEvent, SolarTimes, TimeWindow
from hue_scheduler.domain.schedule import (
    active_window,
    is_active,
    matches,
    minutes_since_start,
    resolve_minutes,
)

TZ = ZoneInfo("Europe/Berlin")
SOLAR = SolarTimes(
    sunrise=datetime(2024, 6, 1, 4, 50, tzinfo=TZ),
    sunset=datetime(2024, 6, 1, 21, 20, tzinfo=TZ),
)


def at(hour, minute=0):
    return datetime(2024, 6, 1, hour, minute, tzinfo=TZ)


SLEEP = TimeWindow(Clock(23), Clock(8))


@pytest.mark.parametrize("hour, minute, expected", [(23, 30, True), (2, 0, True), (12, 0, False), (8, 0, False), (23, 0, True)])
def test_wrapping_window(hour, minute, expected):
    assert is_active(SLEEP, at(hour, minute), None) is expected


def test_non_wrapping_window_is_half_open():
    w = TimeWindow(Clock(10), Clock(20))
    assert is_active(w, at(10), None)
    assert is_active(w, at(19, 59), None)
    assert not is_active(w, at(20), None)
    assert not is_active(w, at(9, 59), None)


def test_degenerate_window_never_active():
    w = TimeWindow(Clock(7), Clock(7))
    assert not any(is_active(w, at(h), None) for h in range(24))
    assert not matches(420, 420, 420)


def test_solar_points_resolve_against_todays_events():
    wake = TimeWindow(Solar(SolarEvent.SUNRISE), Clock(8, 30))
    assert resolve_minutes(wake.start, SOLAR) == 4 * 60 + 50
    assert is_active(wake, at(6), SOLAR)
    assert not is_active(wake, at(4, 49), SOLAR)
    assert not is_active(wake, at(9), SOLAR)


def test_solar_window_inactive_without_solar_events():
    night = TimeWindow(Solar(SolarEvent.SUNSET), Clock(23))
    assert not is_active(night, at(22), None)
    with pytest.raises(SolarComputationError):
        resolve_minutes(night.start, None)


def test_minutes_since_start_wraps_midnight():
    assert minutes_since_start(SLEEP, at(1), None) == 120
    assert minutes_since_start(SLEEP, at(23, 15), None) == 15


def test_active_window_prefers_most_recently_opened():
    evening = TimeWindow(Clock(17), Clock(23))
    late = TimeWindow(Clock(21), Clock(23))
    assert active_window((evening, late), at(22), None) == late
    assert active_window((evening, late), at(18), None) == evening
    assert active_window((evening, late), at(9), None) is None
