from __future__ import annotations
import logging
from datetime import datetime, timedelta
from typing import Iterable

from .errors import ConfigurationError
from .models import Light, ReachabilityEvent, Scene

logger = logging.getLogger(__name__)


class ReachabilityTracker:
    """Per-light reachability history and "scene came back" detection.

    Owned by the poll loop; feed it once per tick with ``observe_all`` and
    then ask ``detect_triggers`` which scenes just had all of their lights
    return within ``window``. The transitions behind those triggers are only
    consumed by ``commit`` once the commands for them have been sent;
    ``poll_triggers`` does both at once.
    """

    def __init__(self, window: timedelta) -> None:
        if window < timedelta(0):
            raise ConfigurationError(f"Reachability window must not be negative: {window}")
        self.window = window
        self.lights: dict[str, Light] = {}
        # Unconsumed unreachable->reachable transitions
        self._pending: dict[str, datetime] = {}
        self._came_back: set[str] = set()
        self._went_away: set[str] = set()
        self._fired: set[str] = set()
        self._committed = True

    @property
    def came_back(self) -> frozenset[str]:
        return frozenset(self._came_back)

    @property
    def went_away(self) -> frozenset[str]:
        return frozenset(self._went_away)

    def observe(self, light_id: str, reachable: bool, observed_at: datetime) -> None:
        light = self.lights.get(light_id)
        if light is None:
            # First sighting only sets the baseline
            self.lights[light_id] = Light(id=light_id, reachable=reachable)
            logger.debug("Tracking light %s (reachable=%s)", light_id, reachable)
            return

        if light.reachable == reachable:
            return

        light.reachable = reachable
        if reachable:
            light.last_reachable_at = observed_at
            self._pending[light_id] = observed_at
            self._came_back.add(light_id)
            logger.info("Light %s is reachable again", light_id)
        else:
            light.last_unreachable_at = observed_at
            self._pending.pop(light_id, None)
            self._went_away.add(light_id)
            logger.info("Light %s is not reachable anymore", light_id)

    def observe_all(self, observations: Iterable[tuple[str, bool]], observed_at: datetime) -> None:
        """Start a new tick and record one observation per light.

        Transitions of a tick that was never committed are carried over, so
        an abandoned tick is detected again on the next one.
        """
        if self._committed:
            self._came_back.clear()
            self._went_away.clear()
        self._committed = False
        for light_id, reachable in observations:
            self.observe(light_id, reachable, observed_at)

    def _prune(self, now: datetime) -> None:
        for light_id, ts in list(self._pending.items()):
            # Carried-over transitions are kept until their tick commits
            if light_id in self._came_back:
                continue
            if now - ts > self.window:
                del self._pending[light_id]

    def detect_triggers(self, scenes: Iterable[Scene], now: datetime) -> list[ReachabilityEvent]:
        """Find scenes whose lights all came back; nothing is consumed until commit()."""
        self._prune(now)

        events: list[ReachabilityEvent] = []
        fired: set[str] = set()
        for scene in scenes:
            if not scene.light_ids:
                continue
            # Needs at least one fresh transition, otherwise it already fired
            if not scene.light_ids & self._came_back:
                continue
            stamps = [self._pending.get(light_id) for light_id in scene.light_ids]
            if any(ts is None for ts in stamps):
                continue
            if max(stamps) - min(stamps) > self.window:
                continue
            events.append(ReachabilityEvent(scene_id=scene.id, triggered_at=now))
            fired |= scene.light_ids
            logger.info("Scene %r came back online", scene.display_name)

        self._fired = fired
        return events

    def commit(self) -> None:
        """Consume the transitions behind the last detected triggers."""
        # Cleared after the whole pass so scenes sharing lights can all trigger in one tick
        for light_id in self._fired:
            self._pending.pop(light_id, None)
        self._fired = set()
        self._committed = True

    def poll_triggers(self, scenes: Iterable[Scene], now: datetime) -> list[ReachabilityEvent]:
        events = self.detect_triggers(scenes, now)
        self.commit()
        return events
