from __future__ import annotations
import logging
from typing import Optional

from ..domain.errors import BridgeCommunicationError
from ..domain.models import BridgeLight, BridgeScene

logger = logging.getLogger(__name__)


class SimulatedBridge:
    """In-memory bridge for development and tests; records issued commands."""

    def __init__(self) -> None:
        self._lights: dict[str, BridgeLight] = {}
        self._scenes: dict[str, BridgeScene] = {}
        self.light_on: dict[str, bool] = {}
        self.commands: list[tuple[str, str, Optional[bool]]] = []
        self.online = True

    def add_light(self, light_id: str, name: str, reachable: bool = True) -> None:
        self._lights[light_id] = BridgeLight(id=light_id, name=name, reachable=reachable)
        self.light_on.setdefault(light_id, False)

    def add_scene(self, scene_id: str, name: str, light_ids: list[str], group_id: Optional[str] = None) -> None:
        self._scenes[scene_id] = BridgeScene(id=scene_id, name=name, light_ids=tuple(light_ids), group_id=group_id)

    def set_reachable(self, light_id: str, reachable: bool) -> None:
        light = self._lights.get(light_id)
        if light is None:
            raise KeyError(light_id)
        self._lights[light_id] = BridgeLight(id=light.id, name=light.name, reachable=reachable)

    def status(self) -> dict:
        return {
            "online": self.online,
            "lights": {
                lid: {"name": l.name, "reachable": l.reachable, "on": self.light_on.get(lid, False)}
                for lid, l in self._lights.items()
            },
            "scenes": {sid: {"name": s.name, "lights": list(s.light_ids)} for sid, s in self._scenes.items()},
        }

    def _check_online(self) -> None:
        if not self.online:
            raise BridgeCommunicationError("Simulated bridge offline")

    async def list_lights(self) -> list[BridgeLight]:
        self._check_online()
        return list(self._lights.values())

    async def list_scenes(self) -> list[BridgeScene]:
        self._check_online()
        return list(self._scenes.values())

    async def activate_scene(self, scene_id: str, group_id: Optional[str] = None) -> None:
        self._check_online()
        scene = self._scenes.get(scene_id)
        if scene is None:
            raise BridgeCommunicationError(f"Unknown scene {scene_id}")
        for light_id in scene.light_ids:
            self.light_on[light_id] = True
        self.commands.append(("activate_scene", scene_id, None))
        logger.info("SCENE activate %s", scene_id)

    async def set_light_state(self, light_id: str, on: bool) -> None:
        self._check_online()
        self.light_on[light_id] = bool(on)
        self.commands.append(("set_light_state", light_id, bool(on)))
        logger.info("LIGHT %s set_state=%s", light_id, on)
