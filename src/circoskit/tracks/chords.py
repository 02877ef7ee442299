"""Chord track: ribbons linking two position ranges."""

import math
from typing import Any, Mapping, Tuple

from circoskit.errors import RecordError
from circoskit.layout.angular import AngularLayout
from circoskit.layout.transform import to_cartesian
from circoskit.render.paths import PathBuilder
from circoskit.render.primitives import Path
from circoskit.tracks.base import (
    BuildResult,
    TrackBuilder,
    TrackType,
    base_style,
    check_record,
    iter_records,
    position_range,
    register_builder,
    segment_of,
    values_of,
)
from circoskit.tracks.scales import ValueScale, fixed_color, is_colormap, value_color


def anchor(
    record_id: Any, record: Mapping[str, Any], key: str, layout: AngularLayout
) -> Tuple[float, float]:
    """Angle range of the ``source`` or ``target`` end of a chord."""
    end = record.get(key)
    if not isinstance(end, Mapping):
        raise RecordError(record_id, f"missing {key} anchor")
    segment_id = segment_of(record_id, end, layout)
    start, stop = position_range(record_id, end)
    return layout.to_angle(segment_id, start), layout.to_angle(segment_id, stop)


def control_point(a: float, b: float, radius: float, curvature: float) -> Tuple[float, float]:
    """
    Bezier control point for a curve between two points on the circle.

    The point slides from the chord midpoint (curvature 0, a straight
    line) to the center (curvature 1).
    """
    xa, ya = to_cartesian(a, radius)
    xb, yb = to_cartesian(b, radius)
    k = (1 - curvature) / 2
    return k * (xa + xb), k * (ya + yb)


def ribbon(source: Tuple[float, float], target: Tuple[float, float],
           radius: float, curvature: float = 1.0) -> PathBuilder:
    """
    Closed ribbon outline.

    Runs along the source arc, curves to the target start, along the
    target arc and curves back. Identical anchors give a closed loop and
    zero-length ranges give a single curve pair.
    """
    s0, s1 = source
    t0, t1 = target
    builder = PathBuilder()
    builder.move_to(*to_cartesian(s0, radius))
    builder.arc_to(s0, s1, radius)
    builder.quad_to(*control_point(s1, t0, radius, curvature), *to_cartesian(t0, radius))
    builder.arc_to(t0, t1, radius)
    builder.quad_to(*control_point(t1, s0, radius, curvature), *to_cartesian(s0, radius))
    return builder.close()


@register_builder(TrackType.CHORDS)
class ChordsBuilder(TrackBuilder):
    """
    One ribbon per record.

    Records have ``source`` and ``target`` mappings, each with a segment
    id and ``start``/``end``, plus an optional ``value`` used for coloring
    when the track color is a colormap.
    """

    def build(self, records, config, layout, band):
        result = BuildResult()
        radius = config.radius if config.radius is not None else band.inner_radius
        scale = ValueScale.from_values(
            values_of(records), config.min, config.max, config.log_scale
        )
        for record_id, record in iter_records(records):
            try:
                record = check_record(record_id, record)
                source = anchor(record_id, record, "source", layout)
                target = anchor(record_id, record, "target", layout)
                fill = fixed_color(config.color)
                if record.get("value") is not None and is_colormap(config.color):
                    value = float(record["value"])
                    if not math.isfinite(value):
                        raise RecordError(record_id, f"value is not finite: {value}")
                    fill = value_color(config, scale, value)
                    if fill is None:
                        raise RecordError(record_id, f"value {value} cannot be scaled")
            except (TypeError, ValueError):
                result.skip(RecordError(record_id, f"value is not a number: {record.get('value')!r}"))
                continue
            except RecordError as e:
                result.skip(e)
                continue
            if record.get("color"):
                fill = record["color"]
            path = ribbon(source, target, radius, config.curvature)
            result.primitives.append(
                Path(path.commands, True, base_style(config, fill=fill), record_id)
            )
        return result
