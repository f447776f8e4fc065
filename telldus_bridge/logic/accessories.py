"""Accessories exposed to the host for tdtool devices and sensors."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, MutableMapping, Protocol

from telldus_bridge.core.errors import DeviceNotFound, UnexpectedControlResponse
from telldus_bridge.core.host import HostContext, Service, callback_getter, callback_setter
from telldus_bridge.logic import readings
from telldus_bridge.logic.accessory_classifier import AccessoryKind, split_model

SUCCESS_MARKER = "Success"
MIN_TEMPERATURE = -50
TEMPERATURE_UNIT_CELSIUS = 0

ON_OFF = "on_off"
BRIGHTNESS = "brightness"
TEMPERATURE = "temperature"
HUMIDITY = "humidity"

CAPABILITIES: dict[AccessoryKind, tuple[str, ...]] = {
    AccessoryKind.SWITCH: (ON_OFF,),
    AccessoryKind.DIMMER: (ON_OFF, BRIGHTNESS),
    AccessoryKind.HYGROMETER: (HUMIDITY,),
    AccessoryKind.THERMOMETER: (TEMPERATURE,),
    AccessoryKind.THERMOMETER_HYGROMETER: (TEMPERATURE, HUMIDITY),
}


class Gateway(Protocol):
    async def device(self, device_id: int) -> dict[str, Any] | None: ...

    async def sensors(self, sensor_id: int) -> list[dict[str, Any]]: ...

    async def on(self, device_id: int) -> str: ...

    async def off(self, device_id: int) -> str: ...

    async def dim(self, level: int, device_id: int) -> str: ...


class _NamedAdapter(logging.LoggerAdapter):
    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['name']}]: {msg}", kwargs


def _check_acknowledged(output: str) -> None:
    # tdtool reports the outcome in text only; its exit code stays 0.
    if SUCCESS_MARKER not in output:
        raise UnexpectedControlResponse(output)


class TelldusAccessory:
    """A tdtool device or sensor, with behaviour selected by its kind."""

    def __init__(
        self,
        kind: AccessoryKind,
        data: Mapping[str, Any],
        gateway: Gateway,
        host: HostContext,
        *,
        max_sensor_age: int = readings.DEFAULT_MAX_AGE_SECONDS,
    ) -> None:
        self.kind = kind
        self.data = dict(data)
        self.id: int = data["id"]
        self.name = str(data.get("name") or f"{kind.value} {self.id}")
        self.model, self.manufacturer = split_model(data.get("model"))
        self.capabilities = CAPABILITIES[kind]
        self._gateway = gateway
        self._host = host
        self._max_sensor_age = max_sensor_age
        self.log = _NamedAdapter(host.logger, {"name": self.name})

    def __repr__(self) -> str:
        return f"TelldusAccessory({self.kind.value}, id={self.id}, name={self.name!r})"

    def identify(self, callback: Callable[[BaseException | None], None] | None = None) -> None:
        self.log.info("Identify called.")
        if callback is not None:
            callback(None)

    async def _device(self) -> dict[str, Any]:
        device = await self._gateway.device(self.id)
        if device is None:
            raise DeviceNotFound(self.id)
        return device

    async def get_state(self) -> bool:
        return readings.switch_state(await self._device())

    async def set_state(self, value: Any) -> None:
        self.log.info("Received set state request: [%s]", "on" if value else "off")
        if value:
            output = await self._gateway.on(self.id)
        else:
            output = await self._gateway.off(self.id)
        _check_acknowledged(output)

    async def get_brightness(self) -> int:
        return readings.brightness_percentage(await self._device())

    async def set_brightness(self, value: Any) -> None:
        level = readings.percentage_to_bits(float(value))
        self.log.info("Received set brightness request: [%s%%, level %s]", value, level)
        _check_acknowledged(await self._gateway.dim(level, self.id))

    async def get_temperature(self) -> float:
        self.log.debug("Checking temperature...")
        temperature = readings.read_temperature(
            self.id, await self._gateway.sensors(self.id), self._max_sensor_age
        )
        self.log.debug("Found temperature %s", temperature)
        return temperature

    async def get_humidity(self) -> float:
        self.log.debug("Checking humidity...")
        humidity = readings.read_humidity(
            self.id, await self._gateway.sensors(self.id), self._max_sensor_age
        )
        self.log.debug("Found humidity %s%%", humidity)
        return humidity

    def get_temperature_unit(self) -> int:
        return TEMPERATURE_UNIT_CELSIUS

    def get_services(self) -> list[Service]:
        """Build host services wired to this accessory's handlers."""

        host = self._host
        services: list[Service] = []

        if ON_OFF in self.capabilities:
            lightbulb = host.service(host.lightbulb)
            lightbulb.get_characteristic(host.on).on(
                "get", callback_getter(self.get_state)
            ).on("set", callback_setter(self.set_state))
            if BRIGHTNESS in self.capabilities:
                lightbulb.get_characteristic(host.brightness).on(
                    "get", callback_getter(self.get_brightness)
                ).on("set", callback_setter(self.set_brightness))
            services.append(lightbulb)

        if TEMPERATURE in self.capabilities:
            thermometer = host.service(host.temperature_sensor)
            thermometer.get_characteristic(host.current_temperature).set_props(
                {"minValue": MIN_TEMPERATURE}
            ).on("get", callback_getter(self.get_temperature))
            services.append(thermometer)

        if HUMIDITY in self.capabilities:
            hygrometer = host.service(host.humidity_sensor)
            hygrometer.get_characteristic(host.current_relative_humidity).on(
                "get", callback_getter(self.get_humidity)
            )
            services.append(hygrometer)

        return services
