"""Contract between the bridge and the smart-home host that loads it."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
from typing import Any, Awaitable, Callable, Protocol

HostCallback = Callable[[BaseException | None, Any], None]

_background_tasks: set[asyncio.Task] = set()


class Characteristic(Protocol):
    def on(self, event: str, handler: Callable[..., None]) -> "Characteristic":
        ...

    def set_props(self, props: dict[str, Any]) -> "Characteristic":
        ...


class Service(Protocol):
    def get_characteristic(self, name: str) -> Characteristic:
        ...


@dataclass(slots=True)
class HostContext:
    """Capabilities injected by the host when accessories are created."""

    service_factory: Callable[[str], Service]
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("telldus_bridge")
    )
    lightbulb: str = "Lightbulb"
    humidity_sensor: str = "HumiditySensor"
    temperature_sensor: str = "TemperatureSensor"
    on: str = "On"
    brightness: str = "Brightness"
    current_relative_humidity: str = "CurrentRelativeHumidity"
    current_temperature: str = "CurrentTemperature"

    def service(self, name: str) -> Service:
        return self.service_factory(name)


def schedule(coro: Awaitable[Any]) -> asyncio.Task:
    """Run a coroutine on the current loop, keeping a reference until it is done."""

    task = asyncio.ensure_future(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


async def _deliver(coro: Awaitable[Any], callback: HostCallback) -> None:
    try:
        value = await coro
    except Exception as exc:
        callback(exc, None)
        return
    callback(None, value)


def callback_getter(
    func: Callable[[], Awaitable[Any]],
) -> Callable[..., asyncio.Task]:
    """Adapt a coroutine function to the host's ``handler(callback, context)`` form."""

    def handler(callback: HostCallback, context: Any = None) -> asyncio.Task:
        return schedule(_deliver(func(), callback))

    return handler


def callback_setter(
    func: Callable[[Any], Awaitable[Any]],
) -> Callable[..., asyncio.Task]:
    """Adapt a coroutine function to the host's ``handler(value, callback, context)`` form."""

    def handler(value: Any, callback: HostCallback, context: Any = None) -> asyncio.Task:
        return schedule(_deliver(func(value), callback))

    return handler
