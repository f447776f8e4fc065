"""Reader for the telldus-core configuration file (``/etc/tellstick.conf``).

The file is a sequence of ``key = value`` settings and named blocks::

    user = "nobody"
    device {
      id = 1
      name = "Lamp"
      model = "selflearning-switch:nexa"
      parameters {
        house = "A"
        unit = "1"
      }
    }

Values are either quoted strings or bare words; ``#`` starts a comment
that runs to the end of the line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
import re
from typing import Any, Iterator

from telldus_bridge.core.errors import TellstickConfError

logger = logging.getLogger(__name__)

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<comment>\#[^\n]*)
    |(?P<string>"(?:[^"\\]|\\.)*")
    |(?P<punct>[{}=])
    |(?P<word>[^\s{}="\#]+)
    |(?P<space>\s+)
    """,
    re.VERBOSE,
)
_INTEGER_KEYS = {"id", "controller"}


@dataclass(slots=True)
class TellstickConf:
    settings: dict[str, Any] = field(default_factory=dict)
    devices: list[dict[str, Any]] = field(default_factory=list)
    controllers: list[dict[str, Any]] = field(default_factory=list)


def _tokenize(text: str) -> Iterator[str]:
    position = 0
    while position < len(text):
        match = _TOKEN_PATTERN.match(text, position)
        if not match:
            raise TellstickConfError(f"Unexpected character at offset {position}")
        position = match.end()
        kind = match.lastgroup
        if kind in ("comment", "space"):
            continue
        yield match.group()


def _coerce(raw: str) -> Any:
    if raw.startswith('"'):
        return re.sub(r"\\(.)", r"\1", raw[1:-1])
    if re.fullmatch(r"-?\d+", raw):
        return int(raw)
    return raw


class _Parser:
    def __init__(self, text: str) -> None:
        self._tokens = list(_tokenize(text))
        self._index = 0

    def _next(self) -> str:
        if self._index >= len(self._tokens):
            raise TellstickConfError("Unexpected end of file")
        token = self._tokens[self._index]
        self._index += 1
        return token

    def parse_block(self, *, nested: bool) -> list[tuple[str, Any]]:
        entries: list[tuple[str, Any]] = []
        while self._index < len(self._tokens):
            key = self._next()
            if key == "}":
                if not nested:
                    raise TellstickConfError("Unbalanced '}'")
                return entries
            if key in ("{", "="):
                raise TellstickConfError(f"Expected a name, got '{key}'")

            token = self._next()
            if token == "{":
                entries.append((key, dict(self.parse_block(nested=True))))
            elif token == "=":
                value = self._next()
                if value in ("{", "}", "="):
                    raise TellstickConfError(f"Missing value for '{key}'")
                entries.append((key, _coerce(value)))
            else:
                raise TellstickConfError(f"Expected '=' or '{{' after '{key}'")

        if nested:
            raise TellstickConfError("Unterminated block")
        return entries


def _normalize_section(section: dict[str, Any]) -> dict[str, Any]:
    for key in _INTEGER_KEYS & section.keys():
        try:
            section[key] = int(section[key])
        except (TypeError, ValueError) as exc:
            raise TellstickConfError(f"Invalid {key} value {section[key]!r}") from exc
    return section


def parse_tellstick_conf(text: str) -> TellstickConf:
    conf = TellstickConf()
    for key, value in _Parser(text).parse_block(nested=False):
        if key == "device" and isinstance(value, dict):
            conf.devices.append(_normalize_section(value))
        elif key == "controller" and isinstance(value, dict):
            conf.controllers.append(_normalize_section(value))
        else:
            conf.settings[key] = value
    return conf


def load_tellstick_conf(path: str | Path) -> TellstickConf:
    """Read and parse the configuration file, tolerating a missing file."""

    conf_path = Path(path)
    try:
        text = conf_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("%s not found, devices will not be merged with it", conf_path)
        return TellstickConf()

    conf = parse_tellstick_conf(text)
    logger.info(
        '"%s" lists %s',
        conf_path,
        ", ".join(f'"{device.get("name")}"' for device in conf.devices) or "no devices",
    )
    return conf
