from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from zoneinfo import ZoneInfo

from fastapi import FastAPI

from .core.config import settings
from .core.log import configure_logging

from .api.routes import router as api_router
import hue_scheduler.api.routes as routes_module

from .domain.controller import ActivationDecider
from .domain.errors import ConfigurationError
from .domain.interfaces import Bridge
from .domain.parser import NameParser
from .domain.solar import SolarCalculator
from .domain.tracker import ReachabilityTracker
from .drivers.bridge_sim import SimulatedBridge
from .drivers.hue_bridge import HueBridge
from .services.discovery import discover_hue_bridges
from .services.poller import PollerService
from .storage.sqlite_repo import SQLiteRepository


logger = logging.getLogger(__name__)


sim_bridge: SimulatedBridge | None = None


def _seed_sim_bridge(bridge: SimulatedBridge) -> None:
    bridge.add_light("1", "Bedroom ceiling")
    bridge.add_light("2", "Bedside lamp (att)")
    bridge.add_light("3", "Living room")
    bridge.add_scene("s1", "Wake up (sunrise-8:30h)", ["1", "2"])
    bridge.add_scene("s2", "Night light (sunset-11PM)", ["1", "2"])
    bridge.add_scene("s3", "Natural light (8AM-10:30h, 17h-sunset)", ["3"])


async def build_bridge() -> Bridge:
    global sim_bridge

    if settings.mode == "sim":
        sim_bridge = SimulatedBridge()
        _seed_sim_bridge(sim_bridge)
        return sim_bridge

    ip = settings.bridge_ip
    if not ip:
        found = await discover_hue_bridges(timeout=settings.discovery_timeout)
        ip = next((b["ip"] for b in found if b["ip"]), None)
        if ip is None:
            raise ConfigurationError("BRIDGE_IP not set and no Hue bridge found via mDNS")
        logger.info("Using discovered Hue bridge at %s", ip)
    if not settings.bridge_username:
        raise ConfigurationError("BRIDGE_USERNAME missing")
    return HueBridge(ip=ip, username=settings.bridge_username, timeout=settings.request_timeout)


# --- Singletons ---
parser = NameParser()
controller = ActivationDecider(tie_break=settings.tie_break)
tracker = ReachabilityTracker(window=timedelta(milliseconds=settings.reachability_window))
solar = SolarCalculator(
    latitude=settings.home_latitude,
    longitude=settings.home_longitude,
    tz=ZoneInfo(settings.home_timezone),
)

repo = SQLiteRepository(settings.sqlite_path)
poller: PollerService | None = None


def get_poller() -> PollerService:
    assert poller is not None
    return poller


def get_controller() -> ActivationDecider:
    return controller


def get_solar() -> SolarCalculator:
    return solar


def get_repo() -> SQLiteRepository:
    return repo


def get_sim_bridge() -> SimulatedBridge:
    if sim_bridge is None:
        raise RuntimeError("Simulated bridge not available (mode is not 'sim').")
    return sim_bridge


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.debug_file)
    logger.info("Starting %s (mode=%s)", settings.app_name, settings.mode)

    await repo.init()

    global poller
    poller = PollerService(
        bridge=await build_bridge(),
        repo=repo,
        tracker=tracker,
        decider=controller,
        solar=solar,
        parser=parser,
        interval_seconds=settings.ping_interval / 1000.0,
        tick_timeout=settings.tick_timeout,
        mode=settings.mode,
    )
    await poller.start()

    try:
        yield
    finally:
        if poller:
            await poller.stop()

        logger.info("Shutdown complete")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

# Make the dependency functions in routes resolve to the real ones
app.dependency_overrides[routes_module.get_poller] = get_poller
app.dependency_overrides[routes_module.get_controller] = get_controller
app.dependency_overrides[routes_module.get_solar] = get_solar
app.dependency_overrides[routes_module.get_repo] = get_repo
app.dependency_overrides[routes_module.get_sim_bridge] = get_sim_bridge

app.include_router(api_router, prefix="/api")
