"""Command types received by the robot and their JSON wire format.

A system command is a JSON object tagged by ``ct``: ``"i"`` for device
(motion and sensor) commands, tagged by ``ic``, and ``"l"`` for LED commands,
tagged by ``lc``. The inner command's fields sit in the same object.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union


class CommandError(ValueError):
    """A command could not be decoded."""


@dataclass(frozen=True)
class Translate:
    """Omnidirectional translation without rotation."""

    direction: float
    speed: float


@dataclass(frozen=True)
class Rotate:
    """Rotation in place."""

    speed: float
    orientation: Optional[float] = None


@dataclass(frozen=True)
class Omni:
    """Combined translation and rotation."""

    direction: float
    speed: float
    rotation_speed: float
    orientation: Optional[float] = None


@dataclass(frozen=True)
class ReadImu:
    """Read accelerometer, gyroscope and temperature."""


@dataclass(frozen=True)
class EnableDevices:
    """Power up the bus devices."""


@dataclass(frozen=True)
class DisableDevices:
    """Power down the bus devices."""


@dataclass(frozen=True)
class LedOn:
    """Switch the LEDs on with the last colour, or white."""


@dataclass(frozen=True)
class LedOff:
    """Switch all LEDs off."""


@dataclass(frozen=True)
class SetColor:
    """Select a colour; shown at once if the LEDs are on."""

    r: int
    g: int
    b: int


I2CCommand = Union[Translate, Rotate, Omni, ReadImu, EnableDevices, DisableDevices]
LEDCommand = Union[LedOn, LedOff, SetColor]
SystemCommand = Union[I2CCommand, LEDCommand]

_I2C_TAG = "ic"
_LED_TAG = "lc"
_SYSTEM_TAG = "ct"


def _require_mapping(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise CommandError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _tag(data: Mapping[str, Any], key: str) -> str:
    if key not in data:
        raise CommandError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, str):
        raise CommandError(f"field `{key}` must be a string")
    return value


def _number(data: Mapping[str, Any], key: str) -> float:
    if key not in data:
        raise CommandError(f"missing field `{key}`")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CommandError(f"field `{key}` must be a number")
    return float(value)


def _optional_number(data: Mapping[str, Any], key: str) -> Optional[float]:
    if data.get(key) is None:
        return None
    return _number(data, key)


def _byte(data: Mapping[str, Any], key: str) -> int:
    if key not in data:
        raise CommandError(f"missing field `{key}`")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise CommandError(f"field `{key}` must be an integer")
    if not 0 <= value <= 255:
        raise CommandError(f"field `{key}` out of range 0..=255: {value}")
    return value


def parse_i2c_command(data: Any) -> I2CCommand:
    """Build a device command from an object tagged by ``ic``."""
    data = _require_mapping(data)
    match _tag(data, _I2C_TAG):
        case "t":
            return Translate(direction=_number(data, "d"), speed=_number(data, "s"))
        case "y":
            return Rotate(speed=_number(data, "s"), orientation=_optional_number(data, "o"))
        case "o":
            return Omni(
                direction=_number(data, "d"),
                speed=_number(data, "s"),
                rotation_speed=_number(data, "rs"),
                orientation=_optional_number(data, "o"),
            )
        case "read_i_m_u":
            return ReadImu()
        case "enable":
            return EnableDevices()
        case "disable":
            return DisableDevices()
        case other:
            raise CommandError(f"unknown variant `{other}` for `{_I2C_TAG}`")


def parse_led_command(data: Any) -> LEDCommand:
    """Build an LED command from an object tagged by ``lc``."""
    data = _require_mapping(data)
    match _tag(data, _LED_TAG):
        case "on":
            return LedOn()
        case "off":
            return LedOff()
        case "s_c":
            return SetColor(r=_byte(data, "r"), g=_byte(data, "g"), b=_byte(data, "b"))
        case other:
            raise CommandError(f"unknown variant `{other}` for `{_LED_TAG}`")


def _reject_constant(name: str) -> float:
    raise CommandError(f"invalid number `{name}`")


def parse_system_command(payload: Union[str, bytes, bytearray]) -> SystemCommand:
    """Decode a JSON text or UTF-8 bytes into a device or LED command."""
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = bytes(payload).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CommandError("payload is not valid UTF-8") from exc
    try:
        data = json.loads(payload, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise CommandError(f"invalid JSON: {exc}") from exc
    data = _require_mapping(data)
    match _tag(data, _SYSTEM_TAG):
        case "i":
            return parse_i2c_command(data)
        case "l":
            return parse_led_command(data)
        case other:
            raise CommandError(f"unknown variant `{other}` for `{_SYSTEM_TAG}`")


def command_to_dict(command: SystemCommand) -> dict[str, Any]:
    """Return the wire form of a command, including its ``ct`` tag."""
    match command:
        case Translate(direction=d, speed=s):
            return {_SYSTEM_TAG: "i", _I2C_TAG: "t", "d": d, "s": s}
        case Rotate(speed=s, orientation=o):
            return {_SYSTEM_TAG: "i", _I2C_TAG: "y", "s": s, "o": o}
        case Omni(direction=d, speed=s, rotation_speed=rs, orientation=o):
            return {_SYSTEM_TAG: "i", _I2C_TAG: "o", "d": d, "s": s, "rs": rs, "o": o}
        case ReadImu():
            return {_SYSTEM_TAG: "i", _I2C_TAG: "read_i_m_u"}
        case EnableDevices():
            return {_SYSTEM_TAG: "i", _I2C_TAG: "enable"}
        case DisableDevices():
            return {_SYSTEM_TAG: "i", _I2C_TAG: "disable"}
        case LedOn():
            return {_SYSTEM_TAG: "l", _LED_TAG: "on"}
        case LedOff():
            return {_SYSTEM_TAG: "l", _LED_TAG: "off"}
        case SetColor(r=r, g=g, b=b):
            return {_SYSTEM_TAG: "l", _LED_TAG: "s_c", "r": r, "g": g, "b": b}
        case _:
            raise TypeError(f"not a command: {command!r}")