"""Dispatching of queued device and LED commands to the robot's hardware."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from omnibot.commands import I2CCommand, LEDCommand
from omnibot.i2c import DeviceError, I2CDevices, ImuReading
from omnibot.leds import LedModule
from omnibot.pca9685 import I2cBus

logger = logging.getLogger(__name__)

CHANNEL_CAPACITY = 16
DEFAULT_WHEEL_RADIUS = 0.148
DEFAULT_ROBOT_RADIUS = 0.195


def _queue() -> asyncio.Queue:
    return asyncio.Queue(maxsize=CHANNEL_CAPACITY)


@dataclass
class CommandChannels:
    """Bounded queues carrying device commands and LED commands."""

    i2c: "asyncio.Queue[I2CCommand]" = field(default_factory=_queue)
    led: "asyncio.Queue[LEDCommand]" = field(default_factory=_queue)


class SystemController:
    """Owns the bus devices and carries out device commands.

    If the devices cannot be initialised the bus is scanned for diagnosis and
    later commands are only logged.
    """

    def __init__(
        self,
        bus: I2cBus,
        wheel_radius: Optional[float] = None,
        robot_radius: Optional[float] = None,
    ) -> None:
        wr = DEFAULT_WHEEL_RADIUS if wheel_radius is None else wheel_radius
        rr = DEFAULT_ROBOT_RADIUS if robot_radius is None else robot_radius
        devices = I2CDevices(bus, wr, rr)
        self.sensors: Optional[I2CDevices]
        try:
            devices.init_devices()
        except DeviceError as exc:
            logger.warning("I2C init failed, scanning instead: %r", exc)
            devices.scan_bus()
            self.sensors = None
        else:
            try:
                devices.configure_pwm()
            except DeviceError as exc:
                logger.error("PWM configuration failed: %r", exc)
            devices.init_imu_data()
            self.sensors = devices
        self.robot_dimensions = (wr, rr)

    def handle(self, command: I2CCommand) -> Optional[ImuReading]:
        """Execute one command; device failures raise ``DeviceError``.

        Returns the IMU reading for a read command, otherwise ``None``.
        """
        if self.sensors is None:
            logger.warning(
                "I2C command received but devices not initialized: %r", command
            )
            return None
        return self.sensors.execute_command(command)

    async def i2c_ch(self, channel: "asyncio.Queue[I2CCommand]") -> None:
        """Take commands from ``channel`` and execute them, forever."""
        while True:
            command = await channel.get()
            try:
                logger.info("Received I2C Command: %r", command)
                try:
                    reading = self.handle(command)
                except DeviceError as exc:
                    logger.error("I2C command failed: %r", exc)
                else:
                    if reading is not None:
                        accel, gyro, temp = reading
                        logger.info(
                            "IMU Data Read: accel=%s gyro=%s temp=%s", accel, gyro, temp
                        )
                    elif self.sensors is not None:
                        logger.info("I2C command executed successfully")
            finally:
                channel.task_done()


async def run_leds(leds: LedModule, channel: "asyncio.Queue[LEDCommand]") -> None:
    """Take LED commands from ``channel`` and apply them, forever."""
    while True:
        command = await channel.get()
        try:
            leds.ex_command(command)
        except Exception as exc:  # driver errors are reported, not fatal
            logger.error("LED command failed: %r", exc)
        finally:
            channel.task_done()