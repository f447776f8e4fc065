"""Bridge configuration utilities."""

from __future__ import annotations

from functools import lru_cache
import os
from typing import Any, Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, model_validator


class Settings(BaseModel):
    """Runtime configuration loaded from environment variables."""

    tdtool_command: str = "tdtool"
    tellstick_conf: str = "/etc/tellstick.conf"
    sensor_max_age_seconds: int = 600
    log_level: str = "INFO"

    class Config:
        extra = "ignore"


class StaticSensor(BaseModel):
    """A sensor declared in the platform configuration instead of discovered."""

    id: int
    name: str | None = None
    model: str = "temperature"

    @model_validator(mode="after")
    def _default_name(self) -> "StaticSensor":
        if not self.name:
            self.name = f"Sensor {self.id}"
        return self

    def as_record(self) -> dict[str, Any]:
        return {"type": "sensor", "id": self.id, "name": self.name, "model": self.model}


class PlatformConfig(BaseModel):
    """Platform configuration handed over by the host."""

    sensors: list[StaticSensor] = []

    class Config:
        extra = "ignore"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load environment variables into a validated settings object."""

    load_dotenv()
    data: dict[str, Any] = {
        "tdtool_command": os.getenv("TDTOOL_COMMAND", "tdtool"),
        "tellstick_conf": os.getenv("TELLSTICK_CONF", "/etc/tellstick.conf"),
        "sensor_max_age_seconds": os.getenv("SENSOR_MAX_AGE_SECONDS", "600"),
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
    }

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise RuntimeError("Invalid environment configuration") from exc


def load_platform_config(raw: Mapping[str, Any] | None) -> PlatformConfig:
    """Validate the host supplied platform configuration."""

    try:
        return PlatformConfig.model_validate(dict(raw or {}))
    except ValidationError as exc:
        raise RuntimeError(f"Invalid platform configuration: {exc}") from exc
