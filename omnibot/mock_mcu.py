"""Run the robot's command server against simulated hardware."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from collections.abc import Iterable, Sequence
from typing import Optional

from omnibot.controller import CommandChannels, SystemController, run_leds
from omnibot.leds import RGB8, LedModule
from omnibot.server import DEFAULT_PORT, run

logger = logging.getLogger(__name__)

STATIC_ADDRESS = "192.168.69.2"
ANY_ADDRESS = "0.0.0.0"


class NullBus:
    """An I2C bus on which no device acknowledges."""

    def write(self, address: int, data: bytes) -> None:
        raise OSError(f"no device at {address:#04x}")

    def write_read(self, address: int, data: bytes, read_len: int) -> bytes:
        raise OSError(f"no device at {address:#04x}")


class LoggingLedDriver:
    """LED driver that logs each colour instead of lighting anything."""

    def write(self, colors: Iterable[RGB8]) -> None:
        for color in colors:
            logger.info("LED: %s", color)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line options."""
    parser = argparse.ArgumentParser(
        prog="omnibot-mock", description="Serve robot commands on simulated hardware."
    )
    parser.add_argument(
        "--static-ip",
        action="store_true",
        help=f"bind to the fixed address {STATIC_ADDRESS} instead of all interfaces",
    )
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="TCP port")
    opts = parser.parse_args(argv)
    opts.host = STATIC_ADDRESS if opts.static_ip else ANY_ADDRESS
    return opts


async def _serve(opts: argparse.Namespace) -> None:
    channels = CommandChannels()
    controller = SystemController(NullBus())
    leds = LedModule(LoggingLedDriver())
    tasks = [
        asyncio.create_task(controller.i2c_ch(channels.i2c)),
        asyncio.create_task(run_leds(leds, channels.led)),
    ]
    try:
        logger.info("Starting WebSocket server on port %s", opts.port)
        await run(opts.port, channels, opts.host)
    finally:
        for task in tasks:
            task.cancel()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point; log level comes from the OMNIBOT_LOG environment variable."""
    opts = parse_args(argv)
    logging.basicConfig(level=os.environ.get("OMNIBOT_LOG", "ERROR").upper())
    try:
        asyncio.run(_serve(opts))
    except KeyboardInterrupt:
        pass
    return 0