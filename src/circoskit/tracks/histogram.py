"""Histogram track: radial bars scaled to the band."""

import math

from circoskit.errors import RecordError
from circoskit.render.primitives import Arc
from circoskit.tracks.base import (
    BuildResult,
    TrackBuilder,
    TrackType,
    angle_range,
    base_style,
    check_record,
    finite,
    iter_records,
    position_range,
    register_builder,
    segment_of,
    values_of,
)
from circoskit.tracks.scales import ValueScale, radial_extent, value_color


@register_builder(TrackType.HISTOGRAM)
class HistogramBuilder(TrackBuilder):
    """
    One bar per record.

    Records carry ``start``/``end`` or a single ``position``; point records
    get a bar ``bin_width`` wide centered on the position.
    """

    def build(self, records, config, layout, band):
        result = BuildResult()
        scale = ValueScale.from_values(
            values_of(records), config.min, config.max, config.log_scale
        )
        for record_id, record in iter_records(records):
            try:
                record = check_record(record_id, record)
                segment_id = segment_of(record_id, record, layout)
                start, end = position_range(record_id, record, config.bin_width)
                value = finite(record_id, record, "value")
                if value == 0 and config.zero_policy == "omit":
                    continue
                ratio = scale.ratio(value)
                if math.isnan(ratio):
                    raise RecordError(record_id, f"value {value} cannot be scaled")
            except RecordError as e:
                result.skip(e)
                continue
            a0, a1 = angle_range(layout, segment_id, start, end)
            r0, r1 = radial_extent(ratio, band.inner_radius, band.outer_radius, config.direction)
            style = base_style(config, fill=value_color(config, scale, value))
            result.primitives.append(Arc(a0, a1, r0, r1, style, record_id))
        return result
