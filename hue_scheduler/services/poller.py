from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from ..core.timeutil import now_local
from ..domain.controller import ActivationDecider
from ..domain.errors import BridgeCommunicationError
from ..domain.interfaces import Bridge, Repository
from ..domain.models import ActionEvent, ActivationDecision, Scene
from ..domain.parser import NameParser
from ..domain.scenes import build_scenes
from ..domain.solar import SolarCalculator
from ..domain.tracker import ReachabilityTracker

logger = logging.getLogger(__name__)


@dataclass
class LiveState:
    mode: str = "sim"
    last_tick_local: Optional[datetime] = None
    last_error: Optional[str] = None
    ticks_ok: int = 0
    ticks_failed: int = 0
    controller_enabled: bool = True
    last_decision: Optional[str] = None
    last_reason: Optional[str] = None
    last_triggers: list[str] = field(default_factory=list)
    scenes: list[Scene] = field(default_factory=list)


class PollerService:
    def __init__(
        self,
        bridge: Bridge,
        repo: Repository,
        tracker: ReachabilityTracker,
        decider: ActivationDecider,
        solar: SolarCalculator,
        parser: NameParser,
        interval_seconds: float,
        tick_timeout: float,
        mode: str = "sim",
        clock: Callable[[], datetime] = now_local,
    ) -> None:
        self._bridge = bridge
        self._repo = repo
        self._tracker = tracker
        self._decider = decider
        self._solar = solar
        self._parser = parser
        self._interval = interval_seconds
        self._tick_timeout = tick_timeout
        self._clock = clock

        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()

        self.live = LiveState(mode=mode)

    @property
    def tracker(self) -> ReachabilityTracker:
        return self._tracker

    async def start(self) -> None:
        self._stop.clear()
        self._task = asyncio.create_task(self._run(), name="poller_loop")

    async def stop(self) -> None:
        self._stop.set()
        if self._task:
            await self._task
            self._task = None

    async def tick(self, now: datetime) -> ActivationDecision:
        """One poll pass at ``now``. Raises BridgeCommunicationError if the fetch fails."""
        # Fetch before touching the tracker so a failed tick loses nothing
        lights = await self._bridge.list_lights()
        bridge_scenes = await self._bridge.list_scenes()

        scenes = build_scenes(lights, bridge_scenes, self._parser)
        self._tracker.observe_all(((l.id, l.reachable) for l in lights), now)
        triggers = self._tracker.detect_triggers(scenes, now)

        solar = self._solar.try_for_day(now.date()) if triggers else None
        decision = self._decider.decide(now, scenes, triggers, self._tracker.went_away, solar)

        names = {s.id: s.display_name for s in scenes}
        self.live.last_triggers = [names.get(t.scene_id, t.scene_id) for t in triggers]
        self.live.scenes = scenes

        await self._apply(decision, now)
        # Not reached when the tick is cancelled, so the triggers fire again next tick
        self._tracker.commit()
        return decision

    async def _apply(self, decision: ActivationDecision, now: datetime) -> None:
        ts_utc = now.astimezone(timezone.utc)

        for act in decision.activations:
            try:
                await self._bridge.activate_scene(act.scene_id, act.group_id)
            except BridgeCommunicationError as e:
                logger.warning("Failed to activate scene %r (%s): %s", act.display_name, act.scene_id, e)
                continue
            await self._log_action(
                ActionEvent(
                    ts_utc=ts_utc,
                    command="activate_scene",
                    target_id=act.scene_id,
                    reason=f"window {act.window.label}",
                    scene_name=act.display_name,
                )
            )

        for light_id in sorted(decision.lights_on):
            await self._switch_light(light_id, True, ts_utc)
        for light_id in sorted(decision.lights_off):
            await self._switch_light(light_id, False, ts_utc)

    async def _switch_light(self, light_id: str, on: bool, ts_utc: datetime) -> None:
        try:
            await self._bridge.set_light_state(light_id, on)
        except BridgeCommunicationError as e:
            logger.warning("Failed to turn %s attached light %s: %s", "on" if on else "off", light_id, e)
            return
        await self._log_action(
            ActionEvent(
                ts_utc=ts_utc,
                command="light_on" if on else "light_off",
                target_id=light_id,
                reason="attached light follows scene" if on else "attached light follows switch",
            )
        )

    async def _log_action(self, event: ActionEvent) -> None:
        try:
            await self._repo.insert_action(event)
        except Exception as e:
            logger.warning(
                "Failed to record %s for %s: %s", event.command, event.scene_name or event.target_id, e
            )

    async def _run(self) -> None:
        logger.info(
            "Poller loop started (interval=%.3fs tick_timeout=%.1fs)",
            self._interval,
            self._tick_timeout,
        )

        while not self._stop.is_set():
            # One clock read per tick
            now = self._clock()
            try:
                decision = await asyncio.wait_for(self.tick(now), timeout=self._tick_timeout)
                self.live.ticks_ok += 1
                self.live.last_error = None
                self.live.last_decision = decision.action
                self.live.last_reason = decision.reason
            except BridgeCommunicationError as e:
                self.live.ticks_failed += 1
                self.live.last_error = str(e)
                logger.warning("Tick skipped, bridge unavailable: %s", e)
            except asyncio.TimeoutError:
                self.live.ticks_failed += 1
                self.live.last_error = f"Tick exceeded {self._tick_timeout}s"
                logger.warning("Tick skipped, exceeded %.1fs", self._tick_timeout)
            except Exception as e:
                self.live.ticks_failed += 1
                self.live.last_error = str(e)
                logger.exception("Poller loop error: %s", e)

            self.live.last_tick_local = now
            self.live.controller_enabled = self._decider.state.enabled

            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass

        logger.info("Poller loop stopped")
