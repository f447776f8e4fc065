from __future__ import annotations

import logging
from typing import Any

import pytest

from telldus_bridge.core.host import HostContext


class FakeCharacteristic:
    def __init__(self, name: str) -> None:
        self.name = name
        self.props: dict[str, Any] = {}
        self.handlers: dict[str, Any] = {}

    def on(self, event: str, handler: Any) -> "FakeCharacteristic":
        self.handlers[event] = handler
        return self

    def set_props(self, props: dict[str, Any]) -> "FakeCharacteristic":
        self.props.update(props)
        return self


class FakeService:
    def __init__(self, name: str) -> None:
        self.name = name
        self.characteristics: dict[str, FakeCharacteristic] = {}

    def get_characteristic(self, name: str) -> FakeCharacteristic:
        return self.characteristics.setdefault(name, FakeCharacteristic(name))


class FakeTDTool:
    def __init__(
        self,
        devices: list[dict[str, Any]] | None = None,
        sensors: list[dict[str, Any]] | None = None,
        response: str = "Turning on device 1, Lamp - Success\n",
        error: Exception | None = None,
    ) -> None:
        self.devices = devices or []
        self.sensor_records = sensors or []
        self.response = response
        self.error = error
        self.calls: list[tuple[Any, ...]] = []

    async def list_devices(self) -> list[dict[str, Any]]:
        if self.error:
            raise self.error
        return [dict(device) for device in self.devices]

    async def list_sensors(self) -> list[dict[str, Any]]:
        if self.error:
            raise self.error
        return [dict(sensor) for sensor in self.sensor_records]

    async def device(self, device_id: int) -> dict[str, Any] | None:
        return next((d for d in await self.list_devices() if d["id"] == device_id), None)

    async def sensors(self, sensor_id: int) -> list[dict[str, Any]]:
        return [s for s in await self.list_sensors() if s["id"] == sensor_id]

    async def _control(self, *call: Any) -> str:
        self.calls.append(call)
        if self.error:
            raise self.error
        return self.response

    async def on(self, device_id: int) -> str:
        return await self._control("on", device_id)

    async def off(self, device_id: int) -> str:
        return await self._control("off", device_id)

    async def dim(self, level: int, device_id: int) -> str:
        return await self._control("dim", level, device_id)


@pytest.fixture
def host() -> HostContext:
    return HostContext(
        service_factory=FakeService, logger=logging.getLogger("telldus_bridge.test")
    )


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
