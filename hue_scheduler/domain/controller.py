from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from .errors import ConfigurationError
from .models import (
    ActivationDecision,
    ReachabilityEvent,
    Scene,
    SceneActivation,
    SolarTimes,
    TimeWindow,
)
from .schedule import active_window, minutes_since_start

logger = logging.getLogger(__name__)

TIE_BREAK_POLICIES = ("most_recent", "all")


@dataclass
class ControllerState:
    enabled: bool = True
    last_decision: Optional[ActivationDecision] = None


@dataclass(frozen=True)
class _Candidate:
    scene: Scene
    window: TimeWindow
    elapsed: int


class ActivationDecider:
    def __init__(self, tie_break: str = "most_recent") -> None:
        if tie_break not in TIE_BREAK_POLICIES:
            raise ConfigurationError(f"Unknown tie-break policy: {tie_break}")
        self.tie_break = tie_break
        self.state = ControllerState()

    def enable(self) -> None:
        self.state.enabled = True

    def disable(self) -> None:
        self.state.enabled = False

    def _resolve_ties(self, candidates: list[_Candidate]) -> tuple[list[_Candidate], list[str]]:
        if self.tie_break == "all":
            return candidates, []

        accepted: list[_Candidate] = []
        dropped: list[str] = []
        # Latest-opened window first; scene id keeps the order stable
        for c in sorted(candidates, key=lambda c: (c.elapsed, c.scene.id)):
            winner = next((a for a in accepted if a.scene.light_ids & c.scene.light_ids), None)
            if winner is not None:
                dropped.append(
                    f"{c.scene.display_name}: superseded by {winner.scene.display_name} "
                    f"({winner.window.label} opened later than {c.window.label})"
                )
                continue
            accepted.append(c)
        return accepted, dropped

    def decide(
        self,
        now: datetime,
        scenes: Iterable[Scene],
        triggers: Iterable[ReachabilityEvent],
        went_away: frozenset[str],
        solar: Optional[SolarTimes],
    ) -> ActivationDecision:
        if not self.state.enabled:
            decision = ActivationDecision("BLOCKED", "Controller disabled")
            self.state.last_decision = decision
            return decision

        scenes = list(scenes)
        by_id = {s.id: s for s in scenes}

        candidates: list[_Candidate] = []
        dropped: list[str] = []
        for event in triggers:
            scene = by_id.get(event.scene_id)
            if scene is None:
                continue
            window = active_window(scene.windows, now, solar)
            if window is None:
                # No retroactive grace: outside the windows right now means no action
                dropped.append(f"{scene.display_name}: outside its time windows")
                logger.info("Scene %r triggered outside its time windows, ignoring", scene.display_name)
                continue
            candidates.append(_Candidate(scene, window, minutes_since_start(window, now, solar)))

        accepted, superseded = self._resolve_ties(candidates)
        dropped.extend(superseded)
        for reason in superseded:
            logger.info("Not activating %s", reason)

        activations = tuple(
            SceneActivation(
                scene_id=c.scene.id,
                display_name=c.scene.display_name,
                window=c.window,
                group_id=c.scene.group_id,
            )
            for c in accepted
        )
        lights_on: set[str] = set()
        for c in accepted:
            lights_on |= c.scene.attached_light_ids

        # Mirror the switch: a scene light went dark, so its attached lights follow
        lights_off: set[str] = set()
        for scene in scenes:
            if scene.attached_light_ids and scene.light_ids & went_away:
                lights_off |= scene.attached_light_ids
        lights_off -= lights_on

        if activations:
            action = "ACTIVATE"
            reason = "Activating " + ", ".join(f"{a.display_name} ({a.window.label})" for a in activations)
        elif lights_off:
            action = "MIRROR_OFF"
            reason = "Switch turned off, mirroring to attached lights"
        else:
            action = "NOOP"
            reason = "; ".join(dropped) if dropped else "No scene triggered"

        decision = ActivationDecision(
            action=action,
            reason=reason,
            activations=activations,
            lights_on=frozenset(lights_on),
            lights_off=frozenset(lights_off),
            dropped=tuple(dropped),
        )
        if action != "NOOP":
            logger.info("decision: %s - %s", decision.action, decision.reason)
        self.state.last_decision = decision
        return decision
