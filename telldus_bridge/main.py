"""Command line entry point listing the accessories the bridge would expose."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

from telldus_bridge.core.config import get_settings
from telldus_bridge.core.errors import TelldusBridgeError
from telldus_bridge.core.host import HostContext
from telldus_bridge.services.platform import TelldusPlatform
from telldus_bridge.services.tdtool import TDTool

logger = logging.getLogger("telldus_bridge")


class _Characteristic:
    def __init__(self, name: str) -> None:
        self.name = name
        self.props: dict[str, Any] = {}
        self.handlers: dict[str, Any] = {}

    def on(self, event: str, handler: Any) -> "_Characteristic":
        self.handlers[event] = handler
        return self

    def set_props(self, props: dict[str, Any]) -> "_Characteristic":
        self.props.update(props)
        return self


class _Service:
    def __init__(self, name: str) -> None:
        self.name = name
        self.characteristics: dict[str, _Characteristic] = {}

    def get_characteristic(self, name: str) -> _Characteristic:
        return self.characteristics.setdefault(name, _Characteristic(name))


async def main() -> int:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    tdtool = TDTool(settings.tdtool_command, tellstick_conf=settings.tellstick_conf)
    platform = TelldusPlatform(
        tdtool,
        HostContext(service_factory=_Service, logger=logger),
        max_sensor_age=settings.sensor_max_age_seconds,
    )
    try:
        accessories = await platform.load_accessories()
    except TelldusBridgeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for accessory in accessories:
        services = ", ".join(service.name for service in accessory.get_services())
        print(
            f"{accessory.id}\t{accessory.kind.value}\t{accessory.name}\t"
            f"{accessory.manufacturer}\t{services}"
        )
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
