"""Line track: connected values per series."""

import math
from typing import Any, List, Tuple

from circoskit.errors import RecordError
from circoskit.layout.transform import to_cartesian
from circoskit.render.paths import PathBuilder
from circoskit.render.primitives import Path
from circoskit.tracks.base import (
    BuildResult,
    TrackBuilder,
    TrackType,
    base_style,
    check_record,
    finite,
    iter_records,
    point_position,
    register_builder,
    segment_of,
    values_of,
)
from circoskit.tracks.scales import ValueScale, fixed_color, radial_position

# (angle, radius, record_id)
Vertex = Tuple[float, float, Any]


@register_builder(TrackType.LINE)
class LineBuilder(TrackBuilder):
    """
    One path per run of consecutive records.

    A run ends whenever the segment or the ``series`` key changes, or a
    record is skipped, so no line is drawn across the gap between two
    segments or over a missing value. Each path carries the tuple of the
    record ids it connects.
    """

    def build(self, records, config, layout, band):
        result = BuildResult()
        scale = ValueScale.from_values(
            values_of(records), config.min, config.max, config.log_scale
        )
        runs: List[List[Vertex]] = []
        current_key = None
        for record_id, record in iter_records(records):
            try:
                record = check_record(record_id, record)
                segment_id = segment_of(record_id, record, layout)
                position = point_position(record_id, record)
                value = finite(record_id, record, "value")
                ratio = scale.ratio(value)
                if math.isnan(ratio):
                    raise RecordError(record_id, f"value {value} cannot be scaled")
            except RecordError as e:
                result.skip(e)
                current_key = None
                continue
            key = (record.get("series"), segment_id)
            if key != current_key:
                runs.append([])
                current_key = key
            angle = layout.to_angle(segment_id, position)
            radius = radial_position(ratio, band.inner_radius, band.outer_radius, config.direction)
            runs[-1].append((angle, radius, record_id))

        baseline = band.outer_radius if config.direction == "in" else band.inner_radius
        for run in runs:
            result.primitives.append(self._path(run, config, baseline))
        return result

    def _path(self, run: List[Vertex], config, baseline: float) -> Path:
        builder = PathBuilder()
        a0, r0, _ = run[0]
        builder.move_to(*to_cartesian(a0, r0))
        prev_a, prev_r = a0, r0
        for angle, radius, _ in run[1:]:
            if config.interpolation == "step":
                builder.arc_to(prev_a, angle, prev_r)
            builder.line_to(*to_cartesian(angle, radius))
            prev_a, prev_r = angle, radius

        record_ids = tuple(v[2] for v in run)
        style = {"stroke": fixed_color(config.color), "stroke_width": config.thickness,
                 "opacity": config.opacity, "fill": "none"}
        if config.fill:
            last_a = run[-1][0]
            builder.line_to(*to_cartesian(last_a, baseline))
            builder.arc_to(last_a, a0, baseline)
            builder.close()
            style["fill"] = config.fill_color or style["stroke"]
            return Path(builder.commands, True, style, record_ids)
        return Path(builder.commands, False, style, record_ids)
