"""Control core for a three-wheeled omni-wheel robot: kinematics, commands, device drivers, LEDs and a WebSocket command server."""

__version__ = "0.1.0"

__all__ = [
    "commands",
    "controller",
    "i2c",
    "icm42670",
    "kinematics",
    "leds",
    "mock_mcu",
    "pca9685",
    "server",
]