"""Control of a short chain of addressable RGB LEDs."""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple, Optional, Protocol

from omnibot.commands import LEDCommand, LedOff, LedOn, SetColor

LED_COUNT = 2


class RGB8(NamedTuple):
    """An 8-bit-per-channel colour."""

    r: int
    g: int
    b: int


WHITE = RGB8(255, 255, 255)
BLACK = RGB8(0, 0, 0)


class LedDriver(Protocol):
    """Anything that can push colours to the LED chain."""

    def write(self, colors: Iterable[RGB8]) -> None: ...


class LedModule:
    """Keeps the on/off state and last colour and drives the LED chain."""

    def __init__(self, driver: LedDriver) -> None:
        self.driver = driver
        self.is_on = False
        self.last_color: Optional[RGB8] = None

    def ex_command(self, cmd: LEDCommand) -> None:
        """Apply an LED command; errors from the driver propagate."""
        match cmd:
            case LedOn():
                self.is_on = True
                self._set_all(self.last_color or WHITE)
            case LedOff():
                self.is_on = False
                self._set_all(BLACK)
            case SetColor(r=r, g=g, b=b):
                color = RGB8(r, g, b)
                self.last_color = color
                if self.is_on:
                    self._set_all(color)
            case _:
                raise TypeError(f"not an LED command: {cmd!r}")

    def _set_all(self, color: RGB8) -> None:
        self.driver.write([color] * LED_COUNT)