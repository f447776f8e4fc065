"""Helpers deriving accessory values from tdtool device and sensor records."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from telldus_bridge.core.errors import SensorReadingUnavailable

DEFAULT_MAX_AGE_SECONDS = 600


def bits_to_percentage(value: float) -> int:
    """Convert a 0-255 dim level to 0-100."""

    return round(value * 100 / 255)


def percentage_to_bits(value: float) -> int:
    """Convert a 0-100 brightness to the 0-255 dim level tdtool expects."""

    return round(value * 255 / 100)


def switch_state(device: Mapping[str, Any]) -> bool:
    # Dimmed devices report DIMMED, so anything but OFF counts as on.
    return device.get("lastsentcommand") != "OFF"


def brightness_percentage(device: Mapping[str, Any]) -> int:
    dimlevel = device.get("dimlevel")
    if dimlevel not in (None, ""):
        return bits_to_percentage(int(dimlevel))
    return 100 if device.get("lastsentcommand") == "ON" else 0


def sensor_age(sensor: Mapping[str, Any]) -> int | None:
    try:
        return int(sensor.get("age"))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def is_fresh(sensor: Mapping[str, Any], max_age: int = DEFAULT_MAX_AGE_SECONDS) -> bool:
    """Whether a sensor reading is recent enough to report (boundary inclusive)."""

    age = sensor_age(sensor)
    return age is not None and age <= max_age


def freshest_sensor(sensors: Iterable[Mapping[str, Any]]) -> Mapping[str, Any] | None:
    candidates = [sensor for sensor in sensors if sensor_age(sensor) is not None]
    if not candidates:
        return None
    return min(candidates, key=lambda sensor: sensor_age(sensor))


def _read_value(
    sensor_id: int,
    sensors: Iterable[Mapping[str, Any]],
    field: str,
    max_age: int,
) -> float:
    sensors = list(sensors)
    if not sensors:
        raise SensorReadingUnavailable(sensor_id, "not listed by tdtool")
    sensor = freshest_sensor(sensors)
    if sensor is None:
        raise SensorReadingUnavailable(sensor_id, "no age reported")
    if not is_fresh(sensor, max_age):
        raise SensorReadingUnavailable(
            sensor_id, f"last report is {sensor_age(sensor)}s old"
        )
    try:
        return float(sensor[field])
    except (KeyError, TypeError, ValueError) as exc:
        raise SensorReadingUnavailable(sensor_id, f"no {field} reported") from exc


def read_temperature(
    sensor_id: int,
    sensors: Iterable[Mapping[str, Any]],
    max_age: int = DEFAULT_MAX_AGE_SECONDS,
) -> float:
    """Temperature in Celsius from the freshest reading of ``sensor_id``."""

    return _read_value(sensor_id, sensors, "temperature", max_age)


def read_humidity(
    sensor_id: int,
    sensors: Iterable[Mapping[str, Any]],
    max_age: int = DEFAULT_MAX_AGE_SECONDS,
) -> float:
    """Relative humidity in percent from the freshest reading of ``sensor_id``."""

    return _read_value(sensor_id, sensors, "humidity", max_age)
