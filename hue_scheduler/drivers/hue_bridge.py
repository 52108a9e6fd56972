from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..domain.errors import BridgeAuthError, BridgeCommunicationError
from ..domain.models import BridgeLight, BridgeScene

logger = logging.getLogger(__name__)

# Hue v1 error type for an unknown/unauthorized username
_HUE_UNAUTHORIZED = 1


class HueBridge:
    """Philips Hue bridge over the v1 REST API."""

    def __init__(
        self,
        ip: str,
        username: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = f"http://{ip}/api/{username}"
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _request(self, method: str, path: str, body: Optional[dict] = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            async with self._client() as client:
                resp = await client.request(method, url, json=body)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            raise BridgeCommunicationError(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            raise BridgeCommunicationError(f"{method} {path} returned invalid JSON") from e

        # Hue reports failures as 200 with a list of {"error": {...}}
        if isinstance(data, list):
            for item in data:
                err = item.get("error") if isinstance(item, dict) else None
                if err:
                    description = err.get("description", "unknown error")
                    if err.get("type") == _HUE_UNAUTHORIZED:
                        raise BridgeAuthError(f"{method} {path}: {description}")
                    raise BridgeCommunicationError(f"{method} {path}: {description}")
        return data

    async def _get_mapping(self, path: str) -> dict[str, dict]:
        data = await self._request("GET", path)
        if not isinstance(data, dict):
            raise BridgeCommunicationError(f"GET {path}: expected an object, got {type(data).__name__}")
        return data

    async def list_lights(self) -> list[BridgeLight]:
        data = await self._get_mapping("/lights")
        out: list[BridgeLight] = []
        try:
            for light_id, item in data.items():
                out.append(
                    BridgeLight(
                        id=str(light_id),
                        name=item.get("name", f"Light {light_id}"),
                        reachable=bool(item["state"]["reachable"]),
                    )
                )
        except (KeyError, TypeError, AttributeError) as e:
            raise BridgeCommunicationError(f"Malformed light list: {e!r}") from e
        return out

    async def list_scenes(self) -> list[BridgeScene]:
        data = await self._get_mapping("/scenes")
        out: list[BridgeScene] = []
        try:
            for scene_id, item in data.items():
                out.append(
                    BridgeScene(
                        id=str(scene_id),
                        name=item.get("name", ""),
                        light_ids=tuple(str(l) for l in item.get("lights") or ()),
                        group_id=item.get("group"),
                    )
                )
        except (TypeError, AttributeError) as e:
            raise BridgeCommunicationError(f"Malformed scene list: {e!r}") from e
        return out

    async def activate_scene(self, scene_id: str, group_id: Optional[str] = None) -> None:
        # Group 0 holds every light, which is enough for LightScenes
        group = group_id or "0"
        await self._request("PUT", f"/groups/{group}/action", {"scene": scene_id})
        logger.info("Hue activate scene=%s group=%s", scene_id, group)

    async def set_light_state(self, light_id: str, on: bool) -> None:
        await self._request("PUT", f"/lights/{light_id}/state", {"on": on})
        logger.info("Hue light=%s on=%s", light_id, on)
