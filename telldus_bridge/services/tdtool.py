"""Asynchronous wrapper around the telldus-core ``tdtool`` command line tool."""

from __future__ import annotations

import asyncio
import logging
import shutil
from typing import Any, Callable, Iterable, Mapping

from telldus_bridge.core.errors import ToolExecutionError, ToolUnavailable
from telldus_bridge.services.tellstick_conf import TellstickConf, load_tellstick_conf

logger = logging.getLogger(__name__)

LINE_DELIMITER = "\n"
PAIR_DELIMITER = "\t"

Record = dict[str, Any]


def parse_records(output: str) -> list[Record]:
    """Turn tdtool listing output into a list of records.

    Lines are records, tab separated fields are ``key=value`` pairs. Only
    ``id`` is converted to an integer; records without a usable id are
    dropped.
    """

    records: list[Record] = []
    for line in output.split(LINE_DELIMITER):
        line = line.rstrip("\r")
        record: Record = {}
        for pair in line.split(PAIR_DELIMITER):
            key, separator, value = pair.partition("=")
            if not separator or not key:
                continue
            if key == "id":
                try:
                    record[key] = int(value)
                except ValueError:
                    continue
            else:
                record[key] = value
        if "id" in record:
            records.append(record)
    return records


def merge_with_conf(
    records: Iterable[Record], conf_devices: Iterable[Mapping[str, Any]]
) -> list[Record]:
    """Augment tdtool records with matching configuration entries.

    Fields reported by tdtool win over the configuration file.
    """

    by_id: dict[int, Mapping[str, Any]] = {}
    for conf_device in conf_devices:
        by_id.setdefault(conf_device.get("id"), conf_device)
    return [{**by_id.get(record["id"], {}), **record} for record in records]


class TDTool:
    """Run tdtool commands and parse their output.

    Every listing spawns a fresh process; nothing is cached between calls.
    """

    def __init__(
        self,
        command: str = "tdtool",
        *,
        conf_loader: Callable[[], TellstickConf] | None = None,
        tellstick_conf: str = "/etc/tellstick.conf",
    ) -> None:
        self._command = command
        self._conf_loader = conf_loader or (lambda: load_tellstick_conf(tellstick_conf))
        self._executable: str | None = None

    def _require_installed(self) -> str:
        if self._executable is None:
            executable = shutil.which(self._command)
            if not executable:
                logger.error(
                    "[TDtool]: \"%s\" does not seem to be installed, but is required.",
                    self._command,
                )
                raise ToolUnavailable(self._command)
            logger.info('[TDtool]: "%s" is present on system (%s).', self._command, executable)
            self._executable = executable
        return self._executable

    def is_installed(self) -> bool:
        try:
            self._require_installed()
        except ToolUnavailable:
            return False
        return True

    async def _execute(self, *args: str) -> str:
        executable = self._require_installed()
        command_line = " ".join((self._command, *args))
        logger.debug("[TDtool]: Running %s", command_line)

        process = await asyncio.create_subprocess_exec(
            executable,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout_bytes, stderr_bytes = await process.communicate()
        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")

        if process.returncode:
            logger.warning(
                "[TDtool]: %s exited with code %s: %s",
                command_line,
                process.returncode,
                stderr.strip(),
            )
            raise ToolExecutionError(command_line, process.returncode, stderr)
        return stdout

    async def list_devices(self) -> list[Record]:
        """Return devices from ``tdtool --list-devices`` merged with tellstick.conf."""

        output = await self._execute("--list-devices")
        devices = parse_records(output)
        logger.info(
            '[TDtool]: "%s --list-devices" lists %s',
            self._command,
            ", ".join(f'"{device.get("name")}"' for device in devices) or "nothing",
        )
        conf = await asyncio.to_thread(self._conf_loader)
        return merge_with_conf(devices, conf.devices)

    async def list_sensors(self) -> list[Record]:
        """Return sensors from ``tdtool --list-sensors``."""

        output = await self._execute("--list-sensors")
        sensors = parse_records(output)
        logger.info(
            '[TDtool]: "%s --list-sensors" lists %s',
            self._command,
            ", ".join(f'"{sensor["id"]}"' for sensor in sensors) or "nothing",
        )
        return sensors

    async def device(self, device_id: int) -> Record | None:
        devices = await self.list_devices()
        return next((device for device in devices if device["id"] == device_id), None)

    async def sensor(self, sensor_id: int) -> Record | None:
        sensors = await self.list_sensors()
        return next((sensor for sensor in sensors if sensor["id"] == sensor_id), None)

    async def sensors(self, sensor_id: int) -> list[Record]:
        """Return every sensor record reported for ``sensor_id``."""

        return [sensor for sensor in await self.list_sensors() if sensor["id"] == sensor_id]

    async def run(self, command: str, target: Any) -> str:
        """Run ``tdtool <command> <target>`` and return its stdout."""

        return await self._execute(command, str(target))

    async def on(self, device_id: int) -> str:
        return await self.run("--on", device_id)

    async def off(self, device_id: int) -> str:
        return await self.run("--off", device_id)

    async def dim(self, level: int, device_id: int) -> str:
        return await self._execute("--dimlevel", str(level), "--dim", str(device_id))
