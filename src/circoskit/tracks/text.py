"""Text track: labels placed at positions around the circle."""

from circoskit.errors import RecordError
from circoskit.render.primitives import Text
from circoskit.tracks.base import (
    BuildResult,
    TrackBuilder,
    TrackType,
    check_record,
    iter_records,
    point_position,
    register_builder,
    segment_of,
)


@register_builder(TrackType.TEXT)
class TextBuilder(TrackBuilder):
    """
    Label from the record ``value``, centered at the band's outer radius.

    Labels run along the circle; the ones on the lower half are turned
    by 180 degrees so they read upright.
    """

    def build(self, records, config, layout, band):
        result = BuildResult()
        radius = band.outer_radius + config.radial_offset
        for record_id, record in iter_records(records):
            try:
                record = check_record(record_id, record)
                segment_id = segment_of(record_id, record, layout)
                position = point_position(record_id, record)
                if record.get("value") is None:
                    raise RecordError(record_id, "missing label value")
            except RecordError as e:
                result.skip(e)
                continue
            angle = layout.to_angle(segment_id, position)
            style = {"fill": record.get("color") or config.color,
                     "font_size": config.size, "opacity": config.opacity}
            result.primitives.append(
                Text.at_angle(angle, radius, str(record["value"]), style, record_id)
            )
        return result
