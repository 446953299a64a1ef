import logging

import pytest

from omnibot.controller import SystemController
from omnibot.leds import RGB8, LedModule
from omnibot.commands import LedOn
from omnibot.mock_mcu import LoggingLedDriver, NullBus, parse_args


def test_defaults():
    opts = parse_args([])
    assert opts.port == 8000
    assert opts.static_ip is False
    assert opts.host == "0.0.0.0"


def test_static_ip_selects_fixed_address():
    opts = parse_args(["--static-ip", "--port", "9001"])
    assert opts.host == "192.168.69.2"
    assert opts.port == 9001


def test_unknown_option_is_rejected():
    with pytest.raises(SystemExit):
        parse_args(["--bogus"])


def test_null_bus_never_acknowledges():
    bus = NullBus()
    with pytest.raises(OSError):
        bus.write(0x55, b"")
    with pytest.raises(OSError):
        bus.write_read(0x68, b"\x75", 1)


def test_controller_on_null_bus_has_no_devices():
    controller = SystemController(NullBus())
    assert controller.sensors is None
    assert controller.robot_dimensions == (0.148, 0.195)


def test_logging_driver_logs_each_led(caplog):
    caplog.set_level(logging.INFO, logger="omnibot.mock_mcu")
    LedModule(LoggingLedDriver()).ex_command(LedOn())
    messages = [r.getMessage() for r in caplog.records]
    assert messages == [f"LED: {RGB8(255, 255, 255)}"] * 2