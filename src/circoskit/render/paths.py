"""
Backend-neutral path construction.

Paths are sequences of commands::

    ("M", x, y)                     move to
    ("L", x, y)                     line to
    ("Q", cx, cy, x, y)             quadratic Bezier
    ("C", c1x, c1y, c2x, c2y, x, y) cubic Bezier
    ("Z",)                          close

Circular arcs around the origin are emitted as cubic Beziers so every
backend (SVG, matplotlib, ...) can draw them without an arc primitive.
"""

import math
from typing import List, Sequence, Tuple

from circoskit.layout.transform import to_cartesian

PathCommand = Tuple

# Max sweep of one cubic segment when approximating an arc
MAX_ARC_STEP = math.pi / 2


class PathBuilder:
    """Accumulates path commands."""

    def __init__(self):
        self._commands: List[PathCommand] = []

    def move_to(self, x: float, y: float) -> "PathBuilder":
        self._commands.append(("M", x, y))
        return self

    def line_to(self, x: float, y: float) -> "PathBuilder":
        self._commands.append(("L", x, y))
        return self

    def quad_to(self, cx: float, cy: float, x: float, y: float) -> "PathBuilder":
        self._commands.append(("Q", cx, cy, x, y))
        return self

    def arc_to(self, start_angle: float, end_angle: float, radius: float) -> "PathBuilder":
        """
        Append a circular arc centered on the origin.

        The pen is assumed to be at ``(start_angle, radius)`` already. Arcs
        may run in either direction; a zero sweep appends nothing.
        """
        self._commands.extend(arc_commands(start_angle, end_angle, radius))
        return self

    def close(self) -> "PathBuilder":
        self._commands.append(("Z",))
        return self

    @property
    def commands(self) -> Tuple[PathCommand, ...]:
        return tuple(self._commands)


def arc_commands(start_angle: float, end_angle: float, radius: float) -> List[PathCommand]:
    """Cubic Bezier approximation of an origin-centered arc."""
    sweep = end_angle - start_angle
    if sweep == 0 or radius == 0:
        return []
    n = max(1, int(math.ceil(abs(sweep) / MAX_ARC_STEP - 1e-9)))
    step = sweep / n
    # Tangent handle length for a unit circle
    k = 4.0 / 3.0 * math.tan(step / 4)
    commands = []
    a0 = start_angle
    for _ in range(n):
        a1 = a0 + step
        x0, y0 = to_cartesian(a0, radius)
        x1, y1 = to_cartesian(a1, radius)
        # d/da of (r sin a, -r cos a) is (r cos a, r sin a)
        c1 = (x0 + k * radius * math.cos(a0), y0 + k * radius * math.sin(a0))
        c2 = (x1 - k * radius * math.cos(a1), y1 - k * radius * math.sin(a1))
        commands.append(("C", c1[0], c1[1], c2[0], c2[1], x1, y1))
        a0 = a1
    return commands


def annular_sector(
    start_angle: float, end_angle: float, inner_radius: float, outer_radius: float
) -> Tuple[PathCommand, ...]:
    """Closed outline of an annular sector (a pie slice when inner_radius is 0)."""
    builder = PathBuilder()
    builder.move_to(*to_cartesian(start_angle, outer_radius))
    builder.arc_to(start_angle, end_angle, outer_radius)
    if inner_radius > 0:
        builder.line_to(*to_cartesian(end_angle, inner_radius))
        builder.arc_to(end_angle, start_angle, inner_radius)
    else:
        builder.line_to(0.0, 0.0)
    return builder.close().commands


def flatten(commands: Sequence[PathCommand], steps: int = 8) -> List[List[Tuple[float, float]]]:
    """
    Approximate a path by polylines, one list of points per subpath.

    Used for hit testing; curve segments are sampled with ``steps`` points.
    """
    subpaths: List[List[Tuple[float, float]]] = []
    current: List[Tuple[float, float]] = []
    for cmd in commands:
        op = cmd[0]
        if op == "M":
            if current:
                subpaths.append(current)
            current = [(cmd[1], cmd[2])]
        elif op == "L":
            current.append((cmd[1], cmd[2]))
        elif op in ("Q", "C"):
            p0 = current[-1]
            pts = [(cmd[i], cmd[i + 1]) for i in range(1, len(cmd), 2)]
            for j in range(1, steps + 1):
                current.append(_bezier_point(p0, pts, j / steps))
        elif op == "Z":
            if current:
                current.append(current[0])
                subpaths.append(current)
                current = []
        else:
            raise ValueError(f"Unknown path command: {op!r}")
    if current:
        subpaths.append(current)
    return subpaths


def _bezier_point(p0, pts, t):
    ctrl = [p0] + pts
    # de Casteljau
    while len(ctrl) > 1:
        ctrl = [
            ((1 - t) * a[0] + t * b[0], (1 - t) * a[1] + t * b[1])
            for a, b in zip(ctrl[:-1], ctrl[1:])
        ]
    return ctrl[0]
