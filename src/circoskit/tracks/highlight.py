"""Highlight track: shaded arcs over position ranges."""

from circoskit.errors import RecordError
from circoskit.render.primitives import Arc
from circoskit.tracks.base import (
    BuildResult,
    TrackBuilder,
    TrackType,
    angle_range,
    base_style,
    check_record,
    iter_records,
    position_range,
    register_builder,
    segment_of,
)


@register_builder(TrackType.HIGHLIGHT)
class HighlightBuilder(TrackBuilder):
    """One arc per record across the full band."""

    def build(self, records, config, layout, band):
        result = BuildResult()
        for record_id, record in iter_records(records):
            try:
                record = check_record(record_id, record)
                segment_id = segment_of(record_id, record, layout)
                start, end = position_range(record_id, record)
            except RecordError as e:
                result.skip(e)
                continue
            a0, a1 = angle_range(layout, segment_id, start, end)
            style = base_style(config)
            if record.get("color"):
                style["fill"] = record["color"]
            result.primitives.append(
                Arc(a0, a1, band.inner_radius, band.outer_radius, style, record_id)
            )
        return result
