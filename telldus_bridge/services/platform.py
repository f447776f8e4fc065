"""Platform that turns tdtool devices and sensors into host accessories."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Iterable, Mapping, Protocol

from telldus_bridge.core.config import PlatformConfig
from telldus_bridge.core.host import HostContext, schedule
from telldus_bridge.logic.accessories import Gateway, TelldusAccessory
from telldus_bridge.logic.accessory_classifier import classify, model_type, supported_models
from telldus_bridge.logic.readings import DEFAULT_MAX_AGE_SECONDS


class ListingGateway(Gateway, Protocol):
    async def list_devices(self) -> list[dict[str, Any]]: ...

    async def list_sensors(self) -> list[dict[str, Any]]: ...


def found_of_type(kind: str, count: int, source: str) -> str:
    return (
        f'Found {count or "no"} item{"" if count == 1 else "s"} '
        f'of type "{kind}" from "{source}".'
    )


class TelldusPlatform:
    """Fetch, classify and build accessories for the host."""

    def __init__(
        self,
        tdtool: ListingGateway,
        host: HostContext,
        config: PlatformConfig | None = None,
        *,
        max_sensor_age: int = DEFAULT_MAX_AGE_SECONDS,
    ) -> None:
        self._tdtool = tdtool
        self._host = host
        self._config = config or PlatformConfig()
        self._max_sensor_age = max_sensor_age
        self.log = host.logger

    async def _devices(self) -> list[dict[str, Any]]:
        candidates = await self._tdtool.list_devices()
        devices = [device for device in candidates if device.get("type") == "device"]
        self.log.info(found_of_type("device", len(devices), "tdtool --list-devices"))
        return devices

    async def _sensors(self) -> list[dict[str, Any]]:
        if self._config.sensors:
            sensors = [sensor.as_record() for sensor in self._config.sensors]
            self.log.info(found_of_type("sensor", len(sensors), "configuration"))
            return sensors

        sensors = await self._tdtool.list_sensors()
        for sensor in sensors:
            sensor["name"] = f"Thermometer {sensor['id']}"
        self.log.info(found_of_type("sensor", len(sensors), "tdtool --list-sensors"))
        return sensors

    def build_accessories(
        self, records: Iterable[Mapping[str, Any]]
    ) -> list[TelldusAccessory]:
        """Create one accessory per supported record, keeping input order."""

        accessories: list[TelldusAccessory] = []
        for record in records:
            kind = classify(record)
            if kind is None:
                self.log.warning(
                    'Model "%s" is not supported, try [%s].',
                    model_type(record),
                    ", ".join(supported_models()),
                )
                continue
            accessories.append(
                TelldusAccessory(
                    kind,
                    record,
                    self._tdtool,
                    self._host,
                    max_sensor_age=self._max_sensor_age,
                )
            )
        return accessories

    async def load_accessories(self) -> list[TelldusAccessory]:
        self.log.info("Loading devices...")
        devices = await self._devices()
        sensors = await self._sensors()
        return self.build_accessories([*devices, *sensors])

    def accessories(self, callback: Callable[[Any], None]) -> asyncio.Task:
        """Host entry point: hand the accessories (or the failure) to ``callback``."""

        async def _load() -> None:
            try:
                accessories = await self.load_accessories()
            except Exception as exc:
                self.log.error("Failed to load accessories: %s", exc)
                callback(exc)
                return
            callback(accessories)

        return schedule(_load())
