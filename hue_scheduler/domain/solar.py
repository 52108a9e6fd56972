from __future__ import annotations
import logging
from datetime import date, tzinfo
from typing import Optional

from astral import Observer
from astral.sun import sunrise, sunset

from .errors import ConfigurationError, NoSolarEvent
from .models import SolarTimes

logger = logging.getLogger(__name__)


def sun_events(day: date, latitude: float, longitude: float, tz: tzinfo) -> SolarTimes:
    """Sunrise and sunset for ``day`` at the given location, in ``tz``.

    Raises NoSolarEvent when the sun stays above or below the horizon all day.
    """
    if not -90.0 <= latitude <= 90.0:
        raise ConfigurationError(f"Latitude out of range: {latitude}")
    if not -180.0 <= longitude <= 180.0:
        raise ConfigurationError(f"Longitude out of range: {longitude}")

    observer = Observer(latitude=latitude, longitude=longitude)
    try:
        rise = sunrise(observer, date=day, tzinfo=tz)
        set_ = sunset(observer, date=day, tzinfo=tz)
    except ValueError as e:
        raise NoSolarEvent(f"No sunrise/sunset on {day} at ({latitude}, {longitude}): {e}") from e
    return SolarTimes(sunrise=rise, sunset=set_)


class SolarCalculator:
    """Per-location wrapper around sun_events, memoizing the last computed day."""

    def __init__(self, latitude: float, longitude: float, tz: tzinfo) -> None:
        if not -90.0 <= latitude <= 90.0:
            raise ConfigurationError(f"Latitude out of range: {latitude}")
        if not -180.0 <= longitude <= 180.0:
            raise ConfigurationError(f"Longitude out of range: {longitude}")
        self.latitude = latitude
        self.longitude = longitude
        self.tz = tz
        self._day: Optional[date] = None
        self._events: Optional[SolarTimes] = None

    def for_day(self, day: date) -> SolarTimes:
        if self._day != day or self._events is None:
            self._events = sun_events(day, self.latitude, self.longitude, self.tz)
            self._day = day
            logger.info(
                "Solar events for %s: sunrise=%s sunset=%s",
                day,
                self._events.sunrise.strftime("%H:%M"),
                self._events.sunset.strftime("%H:%M"),
            )
        return self._events

    def try_for_day(self, day: date) -> Optional[SolarTimes]:
        """Like for_day, but returns None (and logs) on polar day/night."""
        try:
            return self.for_day(day)
        except NoSolarEvent as e:
            logger.warning("%s; solar windows inactive today", e)
            return None
