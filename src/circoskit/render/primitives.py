"""
Drawable primitives produced by the geometry builders.

Primitives carry resolved geometry plus style attributes only. The link
back to the source data is the opaque ``record_id``; ``track_id`` is filled
in by the orchestrator.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple, Union

from circoskit.layout.transform import label_rotation, to_cartesian
from circoskit.render.paths import PathCommand


@dataclass(frozen=True)
class Arc:
    """Annular sector between two angles and two radii."""

    start_angle: float
    end_angle: float
    inner_radius: float
    outer_radius: float
    style: Dict[str, Any] = field(default_factory=dict)
    record_id: Any = None
    track_id: Optional[str] = None

    @property
    def mid_angle(self) -> float:
        return (self.start_angle + self.end_angle) / 2


@dataclass(frozen=True)
class Path:
    """Free-form path built from M/L/Q/C/Z commands."""

    commands: Tuple[PathCommand, ...]
    closed: bool = False
    style: Dict[str, Any] = field(default_factory=dict)
    record_id: Any = None
    track_id: Optional[str] = None


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    style: Dict[str, Any] = field(default_factory=dict)
    record_id: Any = None
    track_id: Optional[str] = None


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle; ``(x, y)`` is the top-left corner."""

    x: float
    y: float
    width: float
    height: float
    style: Dict[str, Any] = field(default_factory=dict)
    record_id: Any = None
    track_id: Optional[str] = None


@dataclass(frozen=True)
class Text:
    """
    Text anchored at ``(x, y)``, running along the circle.

    ``rotation`` is in degrees, using the same clockwise-from-12-o'clock
    convention as angles. ``flipped`` marks labels turned 180 degrees to
    stay upright on the lower half of the circle.
    """

    x: float
    y: float
    text: str
    rotation: float = 0.0
    anchor: str = "start"
    flipped: bool = False
    style: Dict[str, Any] = field(default_factory=dict)
    record_id: Any = None
    track_id: Optional[str] = None

    @classmethod
    def at_angle(cls, angle: float, radius: float, text: str,
                 style: Optional[Dict[str, Any]] = None, record_id: Any = None) -> "Text":
        """Label centered at ``(angle, radius)`` with the upright flip applied."""
        x, y = to_cartesian(angle, radius)
        rotation, flipped = label_rotation(angle)
        return cls(x, y, text, rotation=rotation, anchor="middle", flipped=flipped,
                   style=dict(style or {}), record_id=record_id)


DrawablePrimitive = Union[Arc, Path, Circle, Rect, Text]


def tag(primitive: DrawablePrimitive, track_id: str) -> DrawablePrimitive:
    """Return a copy of the primitive owned by ``track_id``."""
    return replace(primitive, track_id=track_id)
