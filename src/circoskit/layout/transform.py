"""
Polar/Cartesian conversion shared by every track.

Angles are radians measured from 12 o'clock, increasing clockwise, in a
y-down drawing frame. Builders must never compute x/y with their own
trigonometry.
"""

import math
from typing import Tuple

TAU = 2 * math.pi


def to_cartesian(angle: float, radius: float) -> Tuple[float, float]:
    """Convert (angle, radius) to (x, y) with the origin at the circle center."""
    return radius * math.sin(angle), -radius * math.cos(angle)


def to_polar(x: float, y: float) -> Tuple[float, float]:
    """Inverse of :func:`to_cartesian`; angle is returned in ``[0, 2*pi)``."""
    radius = math.hypot(x, y)
    angle = math.atan2(x, -y) % TAU
    return angle, radius


def normalize_angle(angle: float, start: float = 0.0) -> float:
    """Map ``angle`` into ``[start, start + 2*pi)``."""
    return start + (angle - start) % TAU


def is_lower_half(angle: float) -> bool:
    """True when the angle points into the lower half of the circle."""
    a = angle % TAU
    return math.pi / 2 < a < 3 * math.pi / 2


def label_rotation(angle: float) -> Tuple[float, bool]:
    """
    Rotation in degrees for a label at ``angle``, and whether it was flipped.

    Labels on the lower half are turned by 180 degrees so they read
    upright.
    """
    degrees = math.degrees(angle) % 360
    if is_lower_half(angle):
        return (degrees + 180) % 360, True
    return degrees, False
