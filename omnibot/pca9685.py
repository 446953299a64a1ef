"""Driver for the PCA9685 16-channel PWM controller on an I2C bus."""

from __future__ import annotations

from collections.abc import Sequence
from enum import IntEnum
from typing import Protocol

MODE1 = 0x00
PRE_SCALE = 0xFE
LED0_ON_L = 0x06
ALL_LED_ON_L = 0xFA

MAX_VALUE = 4095

_ALLCALL = 0x01
_SLEEP = 0x10
_AUTO_INCREMENT = 0x20
_MODE1_DEFAULT = _SLEEP | _ALLCALL

_MIN_PRESCALE = 3
_MAX_PRESCALE = 255


class I2cBus(Protocol):
    """A blocking I2C bus; transfer failures are raised as ``OSError``."""

    def write(self, address: int, data: bytes) -> None: ...

    def write_read(self, address: int, data: bytes, read_len: int) -> bytes: ...


class Channel(IntEnum):
    """A PWM output channel, or all of them at once."""

    C0 = 0
    C1 = 1
    C2 = 2
    C3 = 3
    C4 = 4
    C5 = 5
    C6 = 6
    C7 = 7
    C8 = 8
    C9 = 9
    C10 = 10
    C11 = 11
    C12 = 12
    C13 = 13
    C14 = 14
    C15 = 15
    ALL = 16

    @property
    def register(self) -> int:
        """First register (ON low byte) of this channel."""
        if self is Channel.ALL:
            return ALL_LED_ON_L
        return LED0_ON_L + 4 * int(self)


class PwmError(Exception):
    """The PWM controller rejected input or the bus transfer failed."""


class Pca9685:
    """PCA9685 PWM controller; starts asleep, as the chip does after reset."""

    def __init__(self, bus: I2cBus, address: int = 0x40) -> None:
        if not 0 <= address <= 0x7F:
            raise ValueError(f"invalid 7-bit I2C address: {address:#x}")
        self.bus = bus
        self.address = address
        self._mode1 = _MODE1_DEFAULT

    @property
    def mode1(self) -> int:
        """The MODE1 register value last written to the chip."""
        return self._mode1

    def enable(self) -> None:
        """Wake the oscillator so the outputs run."""
        self._write_mode1(self._mode1 & ~_SLEEP)

    def disable(self) -> None:
        """Put the chip into sleep mode."""
        self._write_mode1(self._mode1 | _SLEEP)

    def set_prescale(self, prescale: int) -> None:
        """Set the output frequency prescaler (3..=255).

        The chip only accepts a new prescale while asleep, so it is put to
        sleep for the write and its previous mode restored afterwards.
        """
        if not _MIN_PRESCALE <= prescale <= _MAX_PRESCALE:
            raise PwmError(f"invalid prescale value: {prescale}")
        saved = self._mode1
        self._write_mode1(saved | _SLEEP)
        self._write(bytes((PRE_SCALE, prescale)))
        self._write_mode1(saved)

    def set_channel_on_off(self, channel: Channel, on: int, off: int) -> None:
        """Set the counter values at which a channel turns on and off."""
        for name, value in (("on", on), ("off", off)):
            if not 0 <= value <= MAX_VALUE:
                raise PwmError(f"invalid {name} value: {value}")
        if not self._mode1 & _AUTO_INCREMENT:
            self._write_mode1(self._mode1 | _AUTO_INCREMENT)
        register = Channel(channel).register
        self._write(
            bytes((register, on & 0xFF, on >> 8, off & 0xFF, off >> 8))
        )

    def _write_mode1(self, value: int) -> None:
        self._write(bytes((MODE1, value)))
        self._mode1 = value

    def _write(self, data: Sequence[int] | bytes) -> None:
        try:
            self.bus.write(self.address, bytes(data))
        except OSError as exc:
            raise PwmError(f"I2C write to {self.address:#04x} failed") from exc