"""Heatmap track: arcs colored by value."""

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
from circoskit.tracks.scales import ColorScale, ValueScale


@register_builder(TrackType.HEATMAP)
class HeatmapBuilder(TrackBuilder):
    """
    One full-band arc per record, filled through a color scale.

    String values are categorical: they use ``config.categories`` or the
    next palette color in order of first appearance.
    """

    def build(self, records, config, layout, band):
        result = BuildResult()
        scale = ValueScale.from_values(
            values_of(records), config.min, config.max, config.log_scale
        )
        colors = ColorScale(scale, config.color, config.reverse, config.categories)
        for record_id, record in iter_records(records):
            try:
                record = check_record(record_id, record)
                segment_id = segment_of(record_id, record, layout)
                start, end = position_range(record_id, record)
                raw = record.get("value")
                if isinstance(raw, str):
                    fill = colors.categorical(raw)
                else:
                    value = finite(record_id, record, "value")
                    fill = colors.numeric(value)
                    if fill is None:
                        raise RecordError(record_id, f"value {value} cannot be scaled")
            except RecordError as e:
                result.skip(e)
                continue
            a0, a1 = angle_range(layout, segment_id, start, end)
            style = base_style(config, fill=fill)
            result.primitives.append(
                Arc(a0, a1, band.inner_radius, band.outer_radius, style, record_id)
            )
        return result
