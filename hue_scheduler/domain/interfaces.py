from __future__ import annotations
from typing import Optional, Protocol, runtime_checkable
from .models import ActionEvent, BridgeLight, BridgeScene


@runtime_checkable
class Bridge(Protocol):
    async def list_lights(self) -> list[BridgeLight]:
        ...

    async def list_scenes(self) -> list[BridgeScene]:
        ...

    async def activate_scene(self, scene_id: str, group_id: Optional[str] = None) -> None:
        ...

    async def set_light_state(self, light_id: str, on: bool) -> None:
        ...


@runtime_checkable
class Repository(Protocol):
    async def init(self) -> None:
        ...

    async def insert_action(self, action: ActionEvent) -> None:
        ...

    async def query_actions(self, start_ts: str, end_ts: str, limit: int) -> list[ActionEvent]:
        ...
