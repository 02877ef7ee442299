"""SVG output for rendered scenes."""

import html
import logging
from itertools import groupby
from pathlib import Path as FilePath
from typing import Any, Dict, Iterable, List, Union

from circoskit.render.paths import PathCommand, annular_sector
from circoskit.render.primitives import Arc, Circle, DrawablePrimitive, Path, Rect, Text

logger = logging.getLogger(__name__)

STYLE_ATTRS = {
    "fill": "fill",
    "opacity": "opacity",
    "stroke": "stroke",
    "stroke_width": "stroke-width",
    "font_size": "font-size",
}


def _num(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def path_d(commands: Iterable[PathCommand]) -> str:
    """SVG path data for a sequence of path commands."""
    parts = []
    for cmd in commands:
        parts.append(" ".join([cmd[0]] + [_num(v) for v in cmd[1:]]))
    return " ".join(parts)


def _style(style: Dict[str, Any]) -> str:
    attrs = []
    for key, attr in STYLE_ATTRS.items():
        if key in style and style[key] is not None:
            attrs.append(f'{attr}="{html.escape(str(style[key]), quote=True)}"')
    return " ".join(attrs)


def primitive_to_svg(primitive: DrawablePrimitive) -> str:
    if isinstance(primitive, Arc):
        d = path_d(annular_sector(primitive.start_angle, primitive.end_angle,
                                  primitive.inner_radius, primitive.outer_radius))
        return f'<path d="{d}" {_style(primitive.style)}/>'
    if isinstance(primitive, Path):
        style = dict(primitive.style)
        if not primitive.closed:
            style.setdefault("fill", "none")
        return f'<path d="{path_d(primitive.commands)}" {_style(style)}/>'
    if isinstance(primitive, Circle):
        return (f'<circle cx="{_num(primitive.cx)}" cy="{_num(primitive.cy)}" '
                f'r="{_num(primitive.r)}" {_style(primitive.style)}/>')
    if isinstance(primitive, Rect):
        return (f'<rect x="{_num(primitive.x)}" y="{_num(primitive.y)}" '
                f'width="{_num(primitive.width)}" height="{_num(primitive.height)}" '
                f'{_style(primitive.style)}/>')
    if isinstance(primitive, Text):
        anchor = {"start": "start", "middle": "middle", "end": "end"}.get(primitive.anchor, "start")
        return (f'<text transform="translate({_num(primitive.x)},{_num(primitive.y)}) '
                f'rotate({_num(primitive.rotation)})" text-anchor="{anchor}" '
                f'dominant-baseline="middle" {_style(primitive.style)}>'
                f'{html.escape(primitive.text)}</text>')
    raise TypeError(f"Unsupported primitive: {type(primitive).__name__}")


def scene_to_svg(scene: Any, width: float = 700, height: float = 700) -> str:
    """
    Serialize a scene to an SVG document.

    Primitives are grouped per track, in scene order, inside a group
    centered on the canvas.
    """
    lines: List[str] = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{_num(width)}" '
        f'height="{_num(height)}" viewBox="0 0 {_num(width)} {_num(height)}">',
        f'<g class="all" transform="translate({_num(width / 2)},{_num(height / 2)})">',
    ]
    for track_id, primitives in groupby(scene.primitives, key=lambda p: p.track_id):
        lines.append(f'<g class="{html.escape(str(track_id), quote=True)}">')
        lines.extend(primitive_to_svg(p) for p in primitives)
        lines.append("</g>")
    lines.append("</g>")
    lines.append("</svg>")
    return "\n".join(lines)


def write_svg(scene: Any, path: Union[str, FilePath], width: float = 700,
              height: float = 700) -> FilePath:
    """Write a scene to an SVG file, creating parent directories."""
    path = FilePath(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(scene_to_svg(scene, width, height), encoding="utf-8")
    logger.info(f"Wrote {len(scene.primitives)} primitives to {path}")
    return path
