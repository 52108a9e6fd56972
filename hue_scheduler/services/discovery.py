from __future__ import annotations

import asyncio
import logging
from typing import Any

from zeroconf import ServiceStateChange
from zeroconf.asyncio import AsyncServiceBrowser, AsyncZeroconf

logger = logging.getLogger(__name__)

HUE_SERVICE = "_hue._tcp.local."


async def discover_hue_bridges(timeout: float = 3.0) -> list[dict[str, Any]]:
    """Browse mDNS for Hue bridges.

    Returns a list of dicts: {id, ip, port, hostname, model}.
    """
    bridges: list[dict[str, Any]] = []
    found_names: set[str] = set()
    zc = AsyncZeroconf()

    def on_state_change(
        zeroconf: Any, service_type: str, name: str, state_change: ServiceStateChange
    ) -> None:
        if state_change is ServiceStateChange.Added:
            found_names.add(name)

    browser = AsyncServiceBrowser(zc.zeroconf, HUE_SERVICE, handlers=[on_state_change])
    try:
        await asyncio.sleep(timeout)

        for name in sorted(found_names):
            info = await zc.zeroconf.async_get_service_info(HUE_SERVICE, name)
            if info is None:
                continue
            addresses = info.parsed_addresses()
            txt: dict[str, str] = {}
            if info.properties:
                for k, v in info.properties.items():
                    key = k.decode() if isinstance(k, bytes) else str(k)
                    val = v.decode() if isinstance(v, bytes) else str(v)
                    txt[key] = val
            bridges.append({
                "id": txt.get("bridgeid", ""),
                "ip": addresses[0] if addresses else None,
                "port": info.port,
                "hostname": info.server,
                "model": txt.get("modelid", ""),
            })
    finally:
        await browser.async_cancel()
        await zc.async_close()

    logger.info("mDNS discovery found %d Hue bridge(s)", len(bridges))
    return bridges
