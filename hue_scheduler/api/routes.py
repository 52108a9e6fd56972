from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException

from ..core.config import settings
from ..core.timeutil import now_utc, now_local
from ..domain.controller import ActivationDecider
from ..domain.parser import parse
from ..domain.schedule import active_window
from ..domain.solar import SolarCalculator
from ..drivers.bridge_sim import SimulatedBridge
from ..services.poller import PollerService
from ..storage.sqlite_repo import SQLiteRepository
from .schemas import ParseRequest, ParseResponse, SimReachableRequest, TimeWindowOut

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependency getters ---
# Placeholders; main.py wires the real ones via app.dependency_overrides.
def get_poller() -> PollerService:  # overridden in main
    raise RuntimeError("Poller dependency not configured")

def get_controller() -> ActivationDecider:  # overridden in main
    raise RuntimeError("Controller dependency not configured")

def get_solar() -> SolarCalculator:  # overridden in main
    raise RuntimeError("Solar dependency not configured")

def get_repo() -> SQLiteRepository:  # overridden in main
    raise RuntimeError("Repo dependency not configured")

def get_sim_bridge() -> SimulatedBridge:  # overridden in main
    raise RuntimeError("Simulated bridge dependency not configured")


@router.get("/live")
async def get_live(svc: PollerService = Depends(get_poller)):
    live = svc.live
    return {
        "app": settings.app_name,
        "mode": live.mode,
        "now_local": now_local().isoformat(),
        "last_tick_local": live.last_tick_local.isoformat() if live.last_tick_local else None,
        "ticks_ok": live.ticks_ok,
        "ticks_failed": live.ticks_failed,
        "last_error": live.last_error,
        "lights_tracked": len(svc.tracker.lights),
        "controller": {
            "enabled": live.controller_enabled,
            "last_decision": live.last_decision,
            "last_reason": live.last_reason,
            "last_triggers": live.last_triggers,
        },
    }


@router.post("/controller/enable")
async def controller_enable(ctrl: ActivationDecider = Depends(get_controller)):
    ctrl.enable()
    return {"ok": True, "enabled": ctrl.state.enabled}


@router.post("/controller/disable")
async def controller_disable(ctrl: ActivationDecider = Depends(get_controller)):
    ctrl.disable()
    return {"ok": True, "enabled": ctrl.state.enabled}


@router.get("/scenes")
async def get_scenes(
    svc: PollerService = Depends(get_poller),
    solar: SolarCalculator = Depends(get_solar),
):
    now = now_local()
    events = solar.try_for_day(now.date())
    out = []
    for s in svc.live.scenes:
        current = active_window(s.windows, now, events)
        out.append({
            "id": s.id,
            "name": s.display_name,
            "raw_name": s.raw_name,
            "windows": [w.label for w in s.windows],
            "active_window": current.label if current else None,
            "lights": sorted(s.light_ids),
            "attached_lights": sorted(s.attached_light_ids),
        })
    return {"now_local": now.isoformat(), "scenes": out}


@router.post("/parse", response_model=ParseResponse)
async def parse_name(req: ParseRequest):
    parsed = parse(req.name)
    return ParseResponse(
        display_name=parsed.display_name,
        windows=[TimeWindowOut(start=str(w.start), end=str(w.end)) for w in parsed.windows],
        is_attached=parsed.is_attached,
        error=parsed.error,
    )


@router.get("/solar")
async def solar_today(solar: SolarCalculator = Depends(get_solar)):
    today = now_local().date()
    events = solar.try_for_day(today)
    return {
        "date": today.isoformat(),
        "sunrise": events.sunrise.isoformat() if events else None,
        "sunset": events.sunset.isoformat() if events else None,
    }


@router.get("/actions")
async def actions(
    minutes: int = 240,
    limit: int = 2000,
    repo: SQLiteRepository = Depends(get_repo),
):
    end = now_utc()
    start = end - timedelta(minutes=max(1, minutes))
    rows = await repo.query_actions(start.isoformat(), end.isoformat(), limit=min(limit, 20000))
    return {
        "start_utc": start.isoformat(),
        "end_utc": end.isoformat(),
        "rows": [
            {
                "ts_utc": a.ts_utc.isoformat(),
                "command": a.command,
                "target_id": a.target_id,
                "reason": a.reason,
                "scene_name": a.scene_name,
            }
            for a in rows
        ],
    }


# --- Simulation endpoints ---
@router.get("/sim/status")
async def sim_status(bridge: SimulatedBridge = Depends(get_sim_bridge)):
    return bridge.status()


@router.post("/sim/lights/{light_id}/reachable")
async def sim_set_reachable(
    light_id: str,
    req: SimReachableRequest,
    bridge: SimulatedBridge = Depends(get_sim_bridge),
):
    try:
        bridge.set_reachable(light_id, req.reachable)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown light: {light_id}")
    return {"ok": True, "light_id": light_id, "reachable": req.reachable}
