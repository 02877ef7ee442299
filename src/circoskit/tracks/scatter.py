"""Scatter track: one marker per record."""

import math

from circoskit.errors import RecordError
from circoskit.layout.transform import to_cartesian
from circoskit.render.primitives import Circle, Rect
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
from circoskit.tracks.scales import ValueScale, radial_position, value_color


@register_builder(TrackType.SCATTER)
class ScatterBuilder(TrackBuilder):

    def build(self, records, config, layout, band):
        result = BuildResult()
        scale = ValueScale.from_values(
            values_of(records), config.min, config.max, config.log_scale
        )
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
                continue
            angle = layout.to_angle(segment_id, position)
            radius = radial_position(ratio, band.inner_radius, band.outer_radius, config.direction)
            x, y = to_cartesian(angle, radius)
            style = base_style(config, fill=value_color(config, scale, value))
            if record.get("color"):
                style["fill"] = record["color"]
            if config.shape == "square":
                s = config.size
                marker = Rect(x - s, y - s, 2 * s, 2 * s, style, record_id)
            else:
                marker = Circle(x, y, config.size, style, record_id)
            result.primitives.append(marker)
        return result
