"""Drawable primitives, scene orchestration and output backends."""

from circoskit.render.paths import PathBuilder, annular_sector
from circoskit.render.primitives import Arc, Circle, DrawablePrimitive, Path, Rect, Text

__all__ = [
    "Arc",
    "Circle",
    "DrawablePrimitive",
    "Path",
    "PathBuilder",
    "Rect",
    "Text",
    "annular_sector",
]
