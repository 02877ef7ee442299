"""Primitives of the layout ring itself: segment arcs, labels and ticks."""

import logging
import math
from typing import List

from circoskit.layout.angular import AngularLayout
from circoskit.layout.transform import to_cartesian
from circoskit.render.paths import PathBuilder
from circoskit.render.primitives import Arc, DrawablePrimitive, Path, Text
from circoskit.tracks.scales import palette

logger = logging.getLogger(__name__)

LAYOUT_TRACK_ID = "layout"
MAX_TICKS_PER_SEGMENT = 1000
SEGMENT_PALETTE = "tab20"


def ring_primitives(layout: AngularLayout) -> List[DrawablePrimitive]:
    """Arcs for every segment, followed by ticks and labels when enabled."""
    conf = layout.config
    primitives: List[DrawablePrimitive] = []
    colors = palette(len(layout.segments), SEGMENT_PALETTE)
    for i, (seg, iv) in enumerate(zip(layout.segments, layout.intervals)):
        style = {"fill": seg.color or colors[i], "opacity": conf.opacity}
        primitives.append(
            Arc(iv.start_angle, iv.end_angle, conf.inner_radius, conf.outer_radius,
                style, seg.id)
        )
    if conf.ticks.display:
        primitives.extend(tick_primitives(layout))
    if conf.labels.display:
        primitives.extend(label_primitives(layout))
    return primitives


def label_primitives(layout: AngularLayout) -> List[Text]:
    conf = layout.config
    radius = conf.outer_radius + conf.labels.radial_offset
    if conf.ticks.display:
        radius += conf.ticks.size_major
    style = {"fill": conf.labels.color, "font_size": conf.labels.size}
    return [
        Text.at_angle((iv.start_angle + iv.end_angle) / 2, radius, seg.display_label,
                      style, seg.id)
        for seg, iv in zip(layout.segments, layout.intervals)
    ]


def tick_primitives(layout: AngularLayout) -> List[DrawablePrimitive]:
    """Minor ticks every ``spacing``; every ``label_spacing``-th tick is major."""
    conf = layout.config
    ticks = conf.ticks
    if ticks.spacing <= 0:
        logger.warning("Tick spacing must be positive; ticks skipped")
        return []
    r0 = conf.outer_radius
    label_style = {"fill": ticks.color, "font_size": ticks.label_size}
    primitives: List[DrawablePrimitive] = []
    for seg in layout.segments:
        count = int(math.floor(seg.len / ticks.spacing)) + 1
        if count > MAX_TICKS_PER_SEGMENT:
            logger.warning(
                f"Segment {seg.id} would get {count} ticks; increase tick spacing"
            )
            continue
        for i in range(count):
            position = i * ticks.spacing
            angle = layout.to_angle(seg.id, position)
            major = ticks.label_spacing > 0 and i % ticks.label_spacing == 0
            size = ticks.size_major if major else ticks.size_minor
            path = PathBuilder().move_to(*to_cartesian(angle, r0)).line_to(
                *to_cartesian(angle, r0 + size))
            primitives.append(Path(path.commands, False,
                                   {"stroke": ticks.color, "fill": "none"},
                                   (seg.id, position)))
            if major and ticks.labels:
                text = f"{position / ticks.label_denominator:g}{ticks.label_suffix}"
                primitives.append(Text.at_angle(
                    angle, r0 + size + ticks.label_size / 2, text, label_style,
                    (seg.id, position),
                ))
    return primitives
