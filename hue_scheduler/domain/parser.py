"""Scene-name mini-language.

A scene name carries its schedule as a trailing parenthesized window list::

    Night light (sunset-11PM)
    Natural light (8AM-10:30h, 17h-sunset)
    Lamp (att)

Time points are ``sunrise``, ``sunset``, a 24h clock (``13:45h``, ``0h``) or a
12h clock (``3AM``, ``11PM``). A ``(att)`` marker anywhere in the name flags
an always-powered (attached) light.
"""
from __future__ import annotations
import logging
import re

from .errors import ParseError
from .models import Clock, ParsedName, Solar, SolarEvent, TimePoint, TimeWindow

logger = logging.getLogger(__name__)

_ATTACHED = re.compile(r"\(\s*att\s*\)", re.IGNORECASE)
_TRAILING_GROUP = re.compile(r"\(([^()]*)\)\s*$")
_CLOCK_24H = re.compile(r"^(\d{1,2})?(?::(\d{2}))?h$", re.IGNORECASE)
_CLOCK_12H = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(am|pm)$", re.IGNORECASE)


def parse_time_point(token: str) -> TimePoint:
    text = token.strip()
    lowered = text.lower()
    if lowered == "sunrise":
        return Solar(SolarEvent.SUNRISE)
    if lowered == "sunset":
        return Solar(SolarEvent.SUNSET)

    m = _CLOCK_24H.match(text)
    if m and (m.group(1) is not None or m.group(2) is not None):
        hour = int(m.group(1) or 0)
        minute = int(m.group(2) or 0)
        if hour > 23 or minute > 59:
            raise ParseError(f"Clock time out of range: {text!r}")
        return Clock(hour, minute)

    m = _CLOCK_12H.match(text)
    if m:
        hour = int(m.group(1))
        minute = int(m.group(2) or 0)
        if not 1 <= hour <= 12 or minute > 59:
            raise ParseError(f"Clock time out of range: {text!r}")
        # 12AM is midnight, 12PM is noon
        hour %= 12
        if m.group(3).lower() == "pm":
            hour += 12
        return Clock(hour, minute)

    raise ParseError(f"Unknown time point: {text!r}")


def parse_window(text: str) -> TimeWindow:
    parts = text.split("-")
    if len(parts) != 2:
        raise ParseError(f"Expected <start>-<end>, got {text.strip()!r}")
    return TimeWindow(start=parse_time_point(parts[0]), end=parse_time_point(parts[1]))


def parse_window_list(text: str) -> tuple[TimeWindow, ...]:
    if not text.strip():
        raise ParseError("Empty window list")
    return tuple(parse_window(chunk) for chunk in text.split(","))


def _squash(text: str) -> str:
    return " ".join(text.split())


def parse(raw_name: str) -> ParsedName:
    """Split a raw scene/light name into display name, windows and attached flag.

    Never raises: a malformed window list leaves the scene unannotated and is
    reported through ``ParsedName.error`` and a warning.
    """
    is_attached = bool(_ATTACHED.search(raw_name))
    text = _ATTACHED.sub(" ", raw_name)

    m = _TRAILING_GROUP.search(text)
    # "(kitchen)" is plain text; only a group with a range in it is a schedule
    if m is None or "-" not in m.group(1):
        return ParsedName(display_name=_squash(text), is_attached=is_attached)

    try:
        windows = parse_window_list(m.group(1))
    except ParseError as e:
        logger.warning("Ignoring schedule of scene %r: %s", raw_name, e)
        return ParsedName(display_name=_squash(text), is_attached=is_attached, error=str(e))

    return ParsedName(
        display_name=_squash(text[: m.start()]),
        windows=windows,
        is_attached=is_attached,
    )


class NameParser:
    """Caches parse results by raw name; a renamed scene is parsed again."""

    def __init__(self) -> None:
        self._cache: dict[str, ParsedName] = {}

    def parse(self, raw_name: str) -> ParsedName:
        parsed = self._cache.get(raw_name)
        if parsed is None:
            parsed = parse(raw_name)
            self._cache[raw_name] = parsed
        return parsed

    def retain(self, raw_names: set[str]) -> None:
        """Drop cache entries for names no longer present on the bridge."""
        for name in list(self._cache):
            if name not in raw_names:
                del self._cache[name]

    def __len__(self) -> int:
        return len(self._cache)
