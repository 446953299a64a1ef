"""Kinematics for a three-wheeled omni-directional robot.

Maps a desired body motion onto wheel angular velocities and recovers the
body motion from measured wheel speeds.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

Matrix3 = tuple[tuple[float, float, float], ...]

_WHEEL_ANGLES = (math.pi / 3.0, math.pi, 5.0 * math.pi / 3.0)
_SMALL = 1e-6


class EmbodiedKinematics:
    """Kinematic model of a robot with three omni wheels spaced 120 degrees apart."""

    def __init__(self, wheel_radius: float, robot_radius: float) -> None:
        self.wheel_radius = wheel_radius
        self.robot_radius = robot_radius
        self.wheel_angles = _WHEEL_ANGLES

    @staticmethod
    def convert_to_body_frame(
        speed: float, angle: float, orientation: float
    ) -> tuple[float, float]:
        """Turn a global motion command into body-frame velocities ``(vx, vy)``.

        ``angle`` and ``orientation`` are in degrees, 0 along +X, counter-clockwise.
        """
        relative = math.radians(angle) - math.radians(orientation)
        vx = speed * math.cos(relative)
        vy = speed * math.sin(relative)
        return (-vy, vx)

    def construct_jacobian(self) -> Matrix3:
        """Return J such that wheel speeds = J * [vx, vy, omega]."""
        r = self.wheel_radius
        l = self.robot_radius
        return tuple(
            (math.cos(theta) / r, math.sin(theta) / r, l / r)
            for theta in self.wheel_angles
        )

    def compute_body_velocity(
        self, wheel_velocity: Sequence[float]
    ) -> tuple[float, float, float]:
        """Recover ``(vx, vy, omega)`` from three measured wheel speeds."""
        w0, w1, w2 = wheel_velocity
        inverse = invert_3x3(self.construct_jacobian())
        vx, vy, omega = (row[0] * w0 + row[1] * w1 + row[2] * w2 for row in inverse)
        return (vx, vy, omega)

    def compute_wheel_velocities(
        self, speed: float, angle: float, orientation: float, omega: float
    ) -> list[float]:
        """Wheel angular velocities that produce the requested motion.

        Values whose magnitude is below 1e-6 are reported as exactly zero.
        """
        vx, vy = self.convert_to_body_frame(speed, angle, orientation)
        body = (vx, vy, omega)
        wheels = []
        for row in self.construct_jacobian():
            value = sum(j * v for j, v in zip(row, body))
            wheels.append(0.0 if abs(value) < _SMALL else value)
        return wheels


def invert_3x3(m: Sequence[Sequence[float]]) -> Matrix3:
    """Invert a 3x3 matrix by cofactor expansion.

    Raises ``ValueError`` when the matrix is singular.
    """
    (a, b, c), (d, e, f), (g, h, i) = m
    det = a * (e * i - f * h) - b * (d * i - f * g) + c * (d * h - e * g)
    if det == 0:
        raise ValueError("matrix is singular")
    k = 1.0 / det
    return (
        ((e * i - f * h) * k, -(b * i - c * h) * k, (b * f - c * e) * k),
        (-(d * i - f * g) * k, (a * i - c * g) * k, -(a * f - c * d) * k),
        ((d * h - e * g) * k, -(a * h - b * g) * k, (a * e - b * d) * k),
    )