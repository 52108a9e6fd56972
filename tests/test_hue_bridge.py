import json

import httpx
import pytest

from hue_scheduler.domain.errors import BridgeAuthError, BridgeCommunicationError
from hue_scheduler.drivers.hue_bridge import HueBridge

LIGHTS = {
    "1": {"name": "Bedroom ceiling", "state": {"on": False, "reachable": False}},
    "2": {"name": "Bedside lamp (att)", "state": {"on": True, "reachable": True}},
}
SCENES = {
    "abc": {"name": "Wake up (sunrise-8:30h)", "type": "GroupScene", "group": "3", "lights": ["1", "2"]},
    "def": {"name": "Relax", "type": "LightScene", "lights": ["1"]},
}


def make_bridge(handler):
    return HueBridge("192.0.2.10", "user", transport=httpx.MockTransport(handler))


class TestReads:
    @pytest.mark.asyncio
    async def test_list_lights(self):
        def handler(request):
            assert request.url.path == "/api/user/lights"
            return httpx.Response(200, json=LIGHTS)

        lights = await make_bridge(handler).list_lights()
        assert [(l.id, l.name, l.reachable) for l in lights] == [
            ("1", "Bedroom ceiling", False),
            ("2", "Bedside lamp (att)", True),
        ]

    @pytest.mark.asyncio
    async def test_list_scenes(self):
        def handler(request):
            assert request.url.path == "/api/user/scenes"
            return httpx.Response(200, json=SCENES)

        scenes = {s.id: s for s in await make_bridge(handler).list_scenes()}
        assert scenes["abc"].light_ids == ("1", "2")
        assert scenes["abc"].group_id == "3"
        assert scenes["def"].group_id is None

    @pytest.mark.asyncio
    async def test_unauthorized_user(self):
        def handler(request):
            return httpx.Response(
                200, json=[{"error": {"type": 1, "address": "/lights", "description": "unauthorized user"}}]
            )

        with pytest.raises(BridgeAuthError):
            await make_bridge(handler).list_lights()

    @pytest.mark.asyncio
    async def test_malformed_light_payload(self):
        def handler(request):
            return httpx.Response(200, json={"1": {"name": "No state"}})

        with pytest.raises(BridgeCommunicationError):
            await make_bridge(handler).list_lights()

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>")

        with pytest.raises(BridgeCommunicationError):
            await make_bridge(handler).list_scenes()

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        def handler(request):
            return httpx.Response(503)

        with pytest.raises(BridgeCommunicationError):
            await make_bridge(handler).list_lights()

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("no route to host", request=request)

        with pytest.raises(BridgeCommunicationError) as exc:
            await make_bridge(handler).list_lights()
        assert not isinstance(exc.value, BridgeAuthError)


class TestCommands:
    @pytest.mark.asyncio
    async def test_activate_group_scene(self):
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path, json.loads(request.content)))
            return httpx.Response(200, json=[{"success": {"/groups/3/action/scene": "abc"}}])

        await make_bridge(handler).activate_scene("abc", "3")
        assert seen == [("PUT", "/api/user/groups/3/action", {"scene": "abc"})]

    @pytest.mark.asyncio
    async def test_activate_light_scene_uses_group_zero(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(200, json=[{"success": {}}])

        await make_bridge(handler).activate_scene("def")
        assert seen == ["/api/user/groups/0/action"]

    @pytest.mark.asyncio
    async def test_set_light_state(self):
        seen = []

        def handler(request):
            seen.append((request.url.path, json.loads(request.content)))
            return httpx.Response(200, json=[{"success": {"/lights/2/state/on": False}}])

        await make_bridge(handler).set_light_state("2", False)
        assert seen == [("/api/user/lights/2/state", {"on": False})]

    @pytest.mark.asyncio
    async def test_command_error_payload(self):
        def handler(request):
            return httpx.Response(
                200, json=[{"error": {"type": 201, "address": "/lights/2/state/on", "description": "device is off"}}]
            )

        with pytest.raises(BridgeCommunicationError, match="device is off"):
            await make_bridge(handler).set_light_state("2", True)
