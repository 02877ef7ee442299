"""matplotlib output for rendered scenes (PNG, PDF, SVG via savefig)."""

import logging
from pathlib import Path as FilePath
from typing import Any, Iterable, Union

from matplotlib import patches
from matplotlib.figure import Figure
from matplotlib.path import Path as MplPath

from circoskit.render.paths import PathCommand, annular_sector
from circoskit.render.primitives import Arc, Circle, DrawablePrimitive, Path, Rect, Text

logger = logging.getLogger(__name__)

HALIGN = {"start": "left", "middle": "center", "end": "right"}


def to_mpl_path(commands: Iterable[PathCommand]) -> MplPath:
    """Convert path commands to a matplotlib Path."""
    vertices = []
    codes = []
    start = (0.0, 0.0)
    for cmd in commands:
        op = cmd[0]
        if op == "M":
            start = (cmd[1], cmd[2])
            vertices.append(start)
            codes.append(MplPath.MOVETO)
        elif op == "L":
            vertices.append((cmd[1], cmd[2]))
            codes.append(MplPath.LINETO)
        elif op == "Q":
            vertices.extend([(cmd[1], cmd[2]), (cmd[3], cmd[4])])
            codes.extend([MplPath.CURVE3] * 2)
        elif op == "C":
            vertices.extend([(cmd[1], cmd[2]), (cmd[3], cmd[4]), (cmd[5], cmd[6])])
            codes.extend([MplPath.CURVE4] * 3)
        elif op == "Z":
            vertices.append(start)
            codes.append(MplPath.CLOSEPOLY)
        else:
            raise ValueError(f"Unknown path command: {op!r}")
    return MplPath(vertices, codes)


def _patch_kwargs(style, closed: bool = True):
    fill = style.get("fill")
    kwargs = {
        "facecolor": fill if closed and fill not in (None, "none") else "none",
        "edgecolor": style.get("stroke", "none"),
        "linewidth": style.get("stroke_width", 0 if "stroke" not in style else 1.0),
        "alpha": style.get("opacity", 1.0),
    }
    return kwargs


def draw_primitive(ax: Any, primitive: DrawablePrimitive, dpi: float = 100) -> None:
    style = primitive.style
    if isinstance(primitive, Arc):
        path = to_mpl_path(annular_sector(primitive.start_angle, primitive.end_angle,
                                          primitive.inner_radius, primitive.outer_radius))
        ax.add_patch(patches.PathPatch(path, **_patch_kwargs(style)))
    elif isinstance(primitive, Path):
        ax.add_patch(patches.PathPatch(to_mpl_path(primitive.commands),
                                       **_patch_kwargs(style, primitive.closed)))
    elif isinstance(primitive, Circle):
        ax.add_patch(patches.Circle((primitive.cx, primitive.cy), primitive.r,
                                    **_patch_kwargs(style)))
    elif isinstance(primitive, Rect):
        ax.add_patch(patches.Rectangle((primitive.x, primitive.y), primitive.width,
                                       primitive.height, **_patch_kwargs(style)))
    elif isinstance(primitive, Text):
        # Screen rotation is counter-clockwise, the y axis is inverted
        ax.text(
            primitive.x, primitive.y, primitive.text,
            rotation=-primitive.rotation,
            rotation_mode="anchor",
            ha=HALIGN.get(primitive.anchor, "left"),
            va="center",
            color=style.get("fill", "black"),
            alpha=style.get("opacity", 1.0),
            fontsize=style.get("font_size", 12) * 72 / dpi,
        )
    else:
        raise TypeError(f"Unsupported primitive: {type(primitive).__name__}")


def draw_scene(ax: Any, scene: Any, width: float = 700, height: float = 700,
               dpi: float = 100) -> Any:
    """Draw all primitives onto a matplotlib Axes centered on the circle."""
    ax.set_xlim(-width / 2, width / 2)
    ax.set_ylim(height / 2, -height / 2)
    ax.set_aspect("equal")
    ax.axis("off")
    for primitive in scene.primitives:
        draw_primitive(ax, primitive, dpi)
    return ax


def save_figure(scene: Any, path: Union[str, FilePath], width: float = 700,
                height: float = 700, dpi: float = 100) -> FilePath:
    """Render a scene to any format matplotlib can save (by file suffix)."""
    path = FilePath(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
    ax = fig.add_axes([0, 0, 1, 1])
    draw_scene(ax, scene, width, height, dpi)
    fig.savefig(path, dpi=dpi)
    logger.info(f"Saved figure to {path}")
    return path
