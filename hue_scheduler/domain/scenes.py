from __future__ import annotations
import logging
from typing import Iterable

from .models import BridgeLight, BridgeScene, Scene
from .parser import NameParser

logger = logging.getLogger(__name__)


def attached_light_ids(lights: Iterable[BridgeLight], parser: NameParser) -> frozenset[str]:
    """Lights whose own name carries the (att) marker."""
    return frozenset(light.id for light in lights if parser.parse(light.name).is_attached)


def build_scenes(
    lights: list[BridgeLight],
    scenes: list[BridgeScene],
    parser: NameParser,
) -> list[Scene]:
    attached = attached_light_ids(lights, parser)

    out: list[Scene] = []
    for bs in scenes:
        parsed = parser.parse(bs.name)
        members = frozenset(bs.light_ids)
        out.append(
            Scene(
                id=bs.id,
                raw_name=bs.name,
                display_name=parsed.display_name,
                windows=parsed.windows,
                light_ids=members - attached,
                attached_light_ids=members & attached,
                group_id=bs.group_id,
                is_attached=parsed.is_attached,
            )
        )

    parser.retain({light.name for light in lights} | {bs.name for bs in scenes})
    return out
