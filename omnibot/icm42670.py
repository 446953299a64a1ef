"""Driver for the ICM-42670 six-axis IMU on an I2C bus."""

from __future__ import annotations

import struct
from enum import IntEnum

from omnibot.pca9685 import I2cBus

WHO_AM_I = 0x75
CHIP_ID = 0x67

TEMP_DATA1 = 0x09
ACCEL_DATA_X1 = 0x0B
GYRO_DATA_X1 = 0x11
PWR_MGMT0 = 0x1F
GYRO_CONFIG0 = 0x20
ACCEL_CONFIG0 = 0x21

_FS_SEL_MASK = 0b0110_0000
_POWER_MASK = 0b0000_1111

# Full-scale selection 0b00: +/-16 g and +/-2000 dps.
_ACCEL_FS_16G = 0x00
_GYRO_FS_2000DPS = 0x00
_ACCEL_LSB_PER_G = 2048.0
_GYRO_LSB_PER_DPS = 16.4
_TEMP_LSB_PER_C = 128.0
_TEMP_OFFSET_C = 25.0


class ImuAddress(IntEnum):
    """I2C address selected by the AD0 pin."""

    PRIMARY = 0x68
    SECONDARY = 0x69


class PowerMode(IntEnum):
    """Values of the gyro and accelerometer mode bits in PWR_MGMT0."""

    SLEEP = 0b0000
    STANDBY = 0b0100
    ACCEL_LOW_POWER = 0b0010
    ACCEL_LOW_NOISE = 0b0011
    GYRO_LOW_NOISE = 0b1100
    SIX_AXIS_LOW_POWER = 0b1110
    SIX_AXIS_LOW_NOISE = 0b1111


class ImuError(Exception):
    """The IMU did not respond as expected or the bus transfer failed."""


Vector3 = tuple[float, float, float]


class Icm42670:
    """ICM-42670 IMU; construction checks the chip and powers up all sensors."""

    def __init__(self, bus: I2cBus, address: int = ImuAddress.PRIMARY) -> None:
        self.bus = bus
        self.address = int(address)
        chip_id = self._read_register(WHO_AM_I)
        if chip_id != CHIP_ID:
            raise ImuError(f"unexpected chip id {chip_id:#04x}")
        self._update_register(ACCEL_CONFIG0, _FS_SEL_MASK, _ACCEL_FS_16G)
        self._update_register(GYRO_CONFIG0, _FS_SEL_MASK, _GYRO_FS_2000DPS)
        self.set_power_mode(PowerMode.SIX_AXIS_LOW_NOISE)

    def set_power_mode(self, mode: PowerMode) -> None:
        """Select the power mode of the gyroscope and accelerometer."""
        self._update_register(PWR_MGMT0, _POWER_MASK, int(PowerMode(mode)))

    def accel_norm(self) -> Vector3:
        """Acceleration in g along x, y and z."""
        x, y, z = self._read_vector(ACCEL_DATA_X1)
        return (x / _ACCEL_LSB_PER_G, y / _ACCEL_LSB_PER_G, z / _ACCEL_LSB_PER_G)

    def gyro_norm(self) -> Vector3:
        """Angular rate in degrees per second about x, y and z."""
        x, y, z = self._read_vector(GYRO_DATA_X1)
        return (x / _GYRO_LSB_PER_DPS, y / _GYRO_LSB_PER_DPS, z / _GYRO_LSB_PER_DPS)

    def temperature(self) -> float:
        """Die temperature in degrees Celsius."""
        (raw,) = struct.unpack(">h", self._read(TEMP_DATA1, 2))
        return raw / _TEMP_LSB_PER_C + _TEMP_OFFSET_C

    def _read_vector(self, register: int) -> tuple[int, int, int]:
        x, y, z = struct.unpack(">hhh", self._read(register, 6))
        return (x, y, z)

    def _read_register(self, register: int) -> int:
        return self._read(register, 1)[0]

    def _update_register(self, register: int, mask: int, value: int) -> None:
        current = self._read_register(register)
        self._write(bytes((register, (current & ~mask & 0xFF) | (value & mask))))

    def _read(self, register: int, length: int) -> bytes:
        try:
            data = bytes(self.bus.write_read(self.address, bytes((register,)), length))
        except OSError as exc:
            raise ImuError(f"I2C read from {self.address:#04x} failed") from exc
        if len(data) != length:
            raise ImuError(f"short read: expected {length} bytes, got {len(data)}")
        return data

    def _write(self, data: bytes) -> None:
        try:
            self.bus.write(self.address, data)
        except OSError as exc:
            raise ImuError(f"I2C write to {self.address:#04x} failed") from exc