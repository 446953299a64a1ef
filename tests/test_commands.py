import json

import pytest

from omnibot.commands import (
    CommandError,
    DisableDevices,
    EnableDevices,
    LedOff,
    LedOn,
    Omni,
    ReadImu,
    Rotate,
    SetColor,
    Translate,
    command_to_dict,
    parse_i2c_command,
    parse_led_command,
    parse_system_command,
)

ALL_COMMANDS = [
    Translate(direction=90.0, speed=0.5),
    Rotate(speed=30.0),
    Rotate(speed=30.0, orientation=12.5),
    Omni(direction=45.0, speed=0.8, rotation_speed=10.0),
    Omni(direction=45.0, speed=0.8, rotation_speed=10.0, orientation=180.0),
    ReadImu(),
    EnableDevices(),
    DisableDevices(),
    LedOn(),
    LedOff(),
    SetColor(r=10, g=20, b=30),
]


@pytest.mark.parametrize("command", ALL_COMMANDS)
def test_round_trip_text(command):
    assert parse_system_command(json.dumps(command_to_dict(command))) == command


@pytest.mark.parametrize("command", ALL_COMMANDS)
def test_round_trip_bytes(command):
    payload = json.dumps(command_to_dict(command)).encode("utf-8")
    assert parse_system_command(payload) == command


def test_translate_wire_form():
    payload = '{"ct": "i", "ic": "t", "d": 90, "s": 0.5}'
    assert parse_system_command(payload) == Translate(direction=90.0, speed=0.5)


def test_read_imu_tag():
    assert parse_system_command('{"ct": "i", "ic": "read_i_m_u"}') == ReadImu()


def test_set_color_tag():
    payload = '{"ct": "l", "lc": "s_c", "r": 1, "g": 2, "b": 3}'
    assert parse_system_command(payload) == SetColor(r=1, g=2, b=3)


def test_optional_orientation_null_is_none():
    command = parse_i2c_command({"ic": "y", "s": 5, "o": None})
    assert command == Rotate(speed=5.0, orientation=None)


def test_unknown_fields_are_ignored():
    assert parse_led_command({"lc": "on", "extra": 1}) == LedOn()


def test_command_to_dict_carries_tags():
    wire = command_to_dict(LedOff())
    assert parse_led_command(wire) == LedOff()
    assert set(wire) == {"ct", "lc"}


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        "[1, 2, 3]",
        '{"ic": "t", "d": 1, "s": 1}',
        '{"ct": "x"}',
        '{"ct": "i", "ic": "fly"}',
        '{"ct": "i", "ic": "t", "d": 1}',
        '{"ct": "i", "ic": "t", "d": true, "s": 1}',
        '{"ct": "i", "ic": "t", "d": "1", "s": 1}',
        '{"ct": "i", "ic": "t", "d": NaN, "s": 1}',
        '{"ct": "l", "lc": "s_c", "r": 256, "g": 0, "b": 0}',
        '{"ct": "l", "lc": "s_c", "r": -1, "g": 0, "b": 0}',
        '{"ct": "l", "lc": "s_c", "r": 1.0, "g": 0, "b": 0}',
        '{"ct": "l", "lc": "s_c", "r": 1, "g": 0}',
        '{"ct": 5}',
    ],
)
def test_invalid_payloads_raise(payload):
    with pytest.raises(CommandError):
        parse_system_command(payload)


def test_non_utf8_bytes_raise():
    with pytest.raises(CommandError):
        parse_system_command(b"\xff\xfe")


def test_parse_led_rejects_non_mapping():
    with pytest.raises(CommandError):
        parse_led_command(["on"])


def test_command_error_is_value_error():
    with pytest.raises(ValueError):
        parse_i2c_command({"ic": "o", "d": 1, "s": 1})


def test_command_to_dict_rejects_other_objects():
    with pytest.raises(TypeError):
        command_to_dict("on")