"""Motor PWM driver and IMU sharing one I2C bus."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Optional

from omnibot.commands import (
    DisableDevices,
    EnableDevices,
    I2CCommand,
    Omni,
    ReadImu,
    Rotate,
    Translate,
)
from omnibot.icm42670 import Icm42670, ImuAddress, ImuError, PowerMode
from omnibot.kinematics import EmbodiedKinematics
from omnibot.pca9685 import MAX_VALUE, Channel, I2cBus, Pca9685, PwmError

logger = logging.getLogger(__name__)

PWM_ADDRESS = 0x55
PWM_PRESCALE = 100

ImuReading = tuple[tuple[float, float, float], tuple[float, float, float], float]

# (phase, enable) channel pair for each wheel, in kinematics order.
MOTOR_CHANNELS = (
    (Channel.C6, Channel.C7),
    (Channel.C2, Channel.C3),
    (Channel.C4, Channel.C5),
)

_SCAN_RANGE = range(0x03, 0x78)


class DeviceError(Exception):
    """A bus device failed or is missing; the cause is chained."""


class ImuNotInitialized(DeviceError):
    """The IMU has not been initialised."""


class PwmNotInitialized(DeviceError):
    """The PWM controller has not been initialised."""


@contextmanager
def _device_errors() -> Iterator[None]:
    try:
        yield
    except (PwmError, ImuError) as exc:
        raise DeviceError(str(exc)) from exc


class I2CDevices:
    """Drives the wheel motors and reads the IMU over a shared bus."""

    def __init__(
        self, bus: I2cBus, wheel_radius: float, robot_radius: float
    ) -> None:
        self.bus = bus
        self.pwm: Optional[Pca9685] = None
        self._imu: Optional[Icm42670] = None
        self.motor_channels = MOTOR_CHANNELS
        self.embodied = EmbodiedKinematics(wheel_radius, robot_radius)

    def init_devices(self) -> None:
        """Initialise the IMU and the PWM controller; both or neither are set."""
        with _device_errors():
            imu = Icm42670(self.bus, ImuAddress.PRIMARY)
            pwm = Pca9685(self.bus, PWM_ADDRESS)
        self._imu = imu
        self.pwm = pwm

    def scan_bus(self) -> list[int]:
        """Probe every 7-bit address and return those that acknowledge."""
        found = []
        for address in _SCAN_RANGE:
            try:
                self.bus.write(address, b"")
            except OSError:
                continue
            logger.warning("I2C device found at 0x%02X", address)
            found.append(address)
        return found

    def configure_pwm(self) -> None:
        """Enable the PWM controller and set its prescaler (about 60 Hz)."""
        if self.pwm is None:
            logger.error("PWM not initialized")
            return
        with _device_errors():
            self.pwm.enable()
            logger.info("PWM enabled")
            self.pwm.set_prescale(PWM_PRESCALE)
            logger.info("PWM prescale set to 60Hz")

    def init_imu_data(self) -> None:
        """Take a first IMU reading and log it, or log why it failed."""
        try:
            accel, gyro, temp = self.read_imu()
        except DeviceError as exc:
            logger.error("Failed to read IMU data: %r", exc)
            return
        logger.info("Initial IMU read successful:")
        logger.info("Accelerometer: %s", accel)
        logger.info("Gyroscope: %s", gyro)
        logger.info("Temperature: %s", temp)

    def execute_command(self, command: I2CCommand) -> Optional[ImuReading]:
        """Carry out a device command; returns the reading for ``ReadImu``."""
        match command:
            case Translate(direction=d, speed=s):
                self.apply_wheel_speeds(
                    self.embodied.compute_wheel_velocities(s, d, 0.0, 0.0)
                )
            case Rotate(speed=s, orientation=o):
                heading = math.fmod((0.0 if o is None else o) + s, 360.0)
                self.apply_wheel_speeds(
                    self.embodied.compute_wheel_velocities(0.0, 0.0, heading, s)
                )
            case Omni(direction=d, speed=s, rotation_speed=rs, orientation=o):
                heading = math.fmod((0.0 if o is None else o) + rs, 360.0)
                self.apply_wheel_speeds(
                    self.embodied.compute_wheel_velocities(s, d, heading, rs)
                )
            case ReadImu():
                return self.read_imu()
            case EnableDevices():
                self.enable()
            case DisableDevices():
                self.disable()
            case _:
                raise TypeError(f"not a device command: {command!r}")
        return None

    def apply_wheel_speeds(self, wheel_speeds: Sequence[float]) -> None:
        """Drive each motor with the magnitude and sign of its wheel speed.

        Magnitudes are clamped to 1.0 and scaled to the full duty range.
        """
        if len(wheel_speeds) < len(self.motor_channels):
            raise ValueError(
                f"expected {len(self.motor_channels)} wheel speeds, "
                f"got {len(wheel_speeds)}"
            )
        for (phase, enable), value in zip(self.motor_channels, wheel_speeds):
            speed = 1.0 if math.isnan(value) else min(abs(value), 1.0)
            forward = value >= 0.0
            if self.pwm is None:
                logger.error("PWM not initialized")
                continue
            with _device_errors():
                self.pwm.set_channel_on_off(phase, 0, 0 if forward else MAX_VALUE)
                self.pwm.set_channel_on_off(enable, 0, int(speed * MAX_VALUE))

    def read_imu(self) -> ImuReading:
        """Return ``((ax, ay, az), (gx, gy, gz), temperature)``."""
        if self._imu is None:
            raise ImuNotInitialized("IMU not initialized")
        with _device_errors():
            accel = self._imu.accel_norm()
            gyro = self._imu.gyro_norm()
            temp = self._imu.temperature()
        return (accel, gyro, temp)

    def enable(self) -> None:
        """Wake the PWM controller and put the IMU in low-noise six-axis mode."""
        with _device_errors():
            if self.pwm is not None:
                self.pwm.enable()
            if self._imu is not None:
                self._imu.set_power_mode(PowerMode.SIX_AXIS_LOW_NOISE)

    def disable(self) -> None:
        """Put the PWM controller and the IMU to sleep."""
        with _device_errors():
            if self.pwm is not None:
                self.pwm.disable()
            if self._imu is not None:
                self._imu.set_power_mode(PowerMode.SLEEP)