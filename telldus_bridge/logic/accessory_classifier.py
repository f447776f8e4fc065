"""Accessory classification for tdtool devices and sensors."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Mapping


class AccessoryKind(StrEnum):
    """Accessory behaviours the bridge knows how to expose."""

    SWITCH = "switch"
    DIMMER = "dimmer"
    HYGROMETER = "hygrometer"
    THERMOMETER = "thermometer"
    THERMOMETER_HYGROMETER = "thermometer_hygrometer"


MODEL_TO_KIND: dict[str, AccessoryKind] = {
    "selflearning-switch": AccessoryKind.SWITCH,
    "codeswitch": AccessoryKind.SWITCH,
    "selflearning-dimmer": AccessoryKind.DIMMER,
    "humidity": AccessoryKind.HYGROMETER,
    "temperature": AccessoryKind.THERMOMETER,
    "temperaturehumidity": AccessoryKind.THERMOMETER_HYGROMETER,
}

# Some ESIC thermometers identify themselves as temperaturehumidity while
# reporting 0% humidity forever.
MIN_PLAUSIBLE_HUMIDITY = 1.0

UNKNOWN_MANUFACTURER = "N/A"


def split_model(model: str | None) -> tuple[str, str]:
    """Split ``"<model>:<manufacturer>"`` into its parts."""

    model_type, _, manufacturer = (model or "").partition(":")
    return model_type, manufacturer or UNKNOWN_MANUFACTURER


def model_type(record: Mapping[str, Any]) -> str:
    return split_model(record.get("model"))[0]


def _as_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def classify(record: Mapping[str, Any]) -> AccessoryKind | None:
    """Return the accessory kind for a record, or ``None`` when unsupported."""

    kind = MODEL_TO_KIND.get(model_type(record))
    if kind is AccessoryKind.THERMOMETER_HYGROMETER:
        humidity = _as_float(record.get("humidity"))
        if humidity is not None and humidity < MIN_PLAUSIBLE_HUMIDITY:
            return AccessoryKind.THERMOMETER
    return kind


def supported_models() -> list[str]:
    return list(MODEL_TO_KIND)
