from __future__ import annotations
import logging
from datetime import datetime
from typing import Optional

from .errors import SolarComputationError
from .models import Clock, SolarTimes, TimePoint, TimeWindow

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def resolve_minutes(point: TimePoint, solar: Optional[SolarTimes]) -> int:
    """Time of day of ``point`` in minutes since local midnight."""
    if isinstance(point, Clock):
        return point.hour * 60 + point.minute
    if solar is None:
        raise SolarComputationError(f"No {point.event.value} available for today")
    t = solar.time_of(point.event)
    return t.hour * 60 + t.minute


def minute_of_day(now: datetime) -> int:
    return now.hour * 60 + now.minute


def matches(start: int, end: int, t: int) -> bool:
    if start == end:
        return False
    # Overnight windows (e.g., 23:00 -> 08:00)
    if start < end:
        return start <= t < end
    return t >= start or t < end


def is_active(window: TimeWindow, now: datetime, solar: Optional[SolarTimes]) -> bool:
    try:
        start = resolve_minutes(window.start, solar)
        end = resolve_minutes(window.end, solar)
    except SolarComputationError as e:
        logger.debug("Window %s inactive: %s", window.label, e)
        return False
    return matches(start, end, minute_of_day(now))


def minutes_since_start(window: TimeWindow, now: datetime, solar: Optional[SolarTimes]) -> int:
    """Elapsed minutes since the window opened, wrapping past midnight."""
    start = resolve_minutes(window.start, solar)
    return (minute_of_day(now) - start) % MINUTES_PER_DAY


def active_window(
    windows: tuple[TimeWindow, ...], now: datetime, solar: Optional[SolarTimes]
) -> Optional[TimeWindow]:
    """The most recently opened active window, or None when none is active."""
    candidates = [w for w in windows if is_active(w, now, solar)]
    if not candidates:
        return None
    candidates.sort(key=lambda w: minutes_since_start(w, now, solar))
    return candidates[0]
