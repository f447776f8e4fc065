"""Error types raised by the bridge."""

from __future__ import annotations


class TelldusBridgeError(RuntimeError):
    """Base class for bridge errors."""


class ToolUnavailable(TelldusBridgeError):
    """Raised when the tdtool executable cannot be found on the system."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(
            f'"{command}" does not seem to be installed, but is required by this plugin.'
        )


class ToolExecutionError(TelldusBridgeError):
    """Raised when a tdtool invocation exits with a non-zero status."""

    def __init__(self, command: str, returncode: int, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(stderr or f'"{command}" exited with code {returncode}')


class UnexpectedControlResponse(TelldusBridgeError):
    """Raised when a control command is not acknowledged with "Success"."""

    def __init__(self, output: str) -> None:
        self.output = output
        super().__init__(output.strip() or "Empty response from tdtool")


class DeviceNotFound(TelldusBridgeError):
    """Raised when a device is no longer listed by tdtool."""

    def __init__(self, device_id: int) -> None:
        self.device_id = device_id
        super().__init__(f"Device {device_id} is not listed by tdtool")


class SensorReadingUnavailable(TelldusBridgeError):
    """Raised when a sensor reading is missing or older than allowed."""

    def __init__(self, sensor_id: int, reason: str) -> None:
        self.sensor_id = sensor_id
        self.reason = reason
        super().__init__(f"No reading available for sensor {sensor_id}: {reason}")


class TellstickConfError(TelldusBridgeError):
    """Raised when the tellstick configuration file cannot be parsed."""
