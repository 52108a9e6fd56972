from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, time
from enum import Enum
from typing import Optional, Union


class SolarEvent(str, Enum):
    SUNRISE = "sunrise"
    SUNSET = "sunset"


@dataclass(frozen=True)
class Clock:
    hour: int
    minute: int = 0

    def __str__(self) -> str:
        return f"{self.hour}:{self.minute:02d}h"


@dataclass(frozen=True)
class Solar:
    event: SolarEvent

    def __str__(self) -> str:
        return self.event.value


TimePoint = Union[Clock, Solar]


@dataclass(frozen=True)
class TimeWindow:
    start: TimePoint
    end: TimePoint

    @property
    def label(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class SolarTimes:
    sunrise: datetime
    sunset: datetime

    def time_of(self, event: SolarEvent) -> time:
        instant = self.sunrise if event is SolarEvent.SUNRISE else self.sunset
        return instant.timetz().replace(tzinfo=None)


@dataclass(frozen=True)
class ParsedName:
    display_name: str
    windows: tuple[TimeWindow, ...] = ()
    is_attached: bool = False
    error: Optional[str] = None


@dataclass
class Light:
    id: str
    reachable: bool
    last_reachable_at: Optional[datetime] = None
    last_unreachable_at: Optional[datetime] = None


@dataclass(frozen=True)
class Scene:
    id: str
    raw_name: str
    display_name: str
    windows: tuple[TimeWindow, ...]
    light_ids: frozenset[str]
    attached_light_ids: frozenset[str] = frozenset()
    group_id: Optional[str] = None
    is_attached: bool = False


@dataclass(frozen=True)
class ReachabilityEvent:
    scene_id: str
    triggered_at: datetime


@dataclass(frozen=True)
class BridgeLight:
    id: str
    name: str
    reachable: bool


@dataclass(frozen=True)
class BridgeScene:
    id: str
    name: str
    light_ids: tuple[str, ...]
    group_id: Optional[str] = None


@dataclass(frozen=True)
class SceneActivation:
    scene_id: str
    display_name: str
    window: TimeWindow
    group_id: Optional[str] = None


@dataclass(frozen=True)
class ActivationDecision:
    action: str  # "ACTIVATE" | "MIRROR_OFF" | "NOOP" | "BLOCKED"
    reason: str
    activations: tuple[SceneActivation, ...] = ()
    lights_on: frozenset[str] = frozenset()
    lights_off: frozenset[str] = frozenset()
    dropped: tuple[str, ...] = ()


@dataclass(frozen=True)
class ActionEvent:
    ts_utc: datetime
    command: str  # "activate_scene" | "light_on" | "light_off"
    target_id: str
    reason: str
    scene_name: Optional[str] = None
