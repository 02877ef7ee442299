"""Stack track: radially stacked sub-values per position range."""

import logging
import math
from typing import Any, List, Mapping

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
from circoskit.tracks.scales import is_colormap, palette

logger = logging.getLogger(__name__)


def sub_values(record_id: Any, record: Mapping[str, Any]) -> List[float]:
    """Validated ``values`` list of a stack record."""
    raw = record.get("values")
    if raw is None or isinstance(raw, (str, bytes)):
        raise RecordError(record_id, "missing values list")
    try:
        values = [float(v) for v in raw]
    except (TypeError, ValueError):
        raise RecordError(record_id, f"values are not numbers: {raw!r}") from None
    if not values:
        raise RecordError(record_id, "empty values list")
    if any(not math.isfinite(v) for v in values):
        raise RecordError(record_id, f"values are not finite: {values}")
    if any(v < 0 for v in values):
        raise RecordError(record_id, f"values must not be negative: {values}")
    return values


def _record_totals(records) -> List[float]:
    totals = []
    for record_id, record in iter_records(records):
        if not isinstance(record, Mapping):
            continue
        try:
            totals.append(sum(sub_values(record_id, record)))
        except RecordError:
            continue
    return totals


@register_builder(TrackType.STACK)
class StackBuilder(TrackBuilder):
    """
    Partition the band radially by each record's ``values``, in order.

    ``normalize`` mode divides each record by its own total so the stack
    always fills the band. ``clip`` mode scales every value by the track
    ``max`` (default: largest record total); parts that would extend past
    the band edge are cut at the edge and parts entirely beyond it are
    dropped.
    """

    def build(self, records, config, layout, band):
        result = BuildResult()
        width = band.width
        domain_max = config.max
        if config.mode == "clip" and domain_max is None:
            totals = _record_totals(records)
            domain_max = max(totals) if totals and max(totals) > 0 else 1.0

        for record_id, record in iter_records(records):
            try:
                record = check_record(record_id, record)
                segment_id = segment_of(record_id, record, layout)
                start, end = position_range(record_id, record)
                values = sub_values(record_id, record)
                if config.mode == "normalize":
                    total = sum(values)
                    if total <= 0:
                        raise RecordError(record_id, "values sum to zero")
                    heights = [width * v / total for v in values]
                else:
                    heights = [width * v / domain_max for v in values]
            except RecordError as e:
                result.skip(e)
                continue

            a0, a1 = angle_range(layout, segment_id, start, end)
            colors = self._colors(config, len(values))
            offset = 0.0
            for i, height in enumerate(heights):
                if offset >= width:
                    logger.debug(
                        f"Record {record_id}: {len(heights) - i} sub-values clipped at band edge"
                    )
                    break
                if height == 0:
                    continue
                top = min(offset + height, width)
                if config.direction == "in":
                    r0, r1 = band.outer_radius - top, band.outer_radius - offset
                else:
                    r0, r1 = band.inner_radius + offset, band.inner_radius + top
                style = base_style(config, fill=colors[i])
                result.primitives.append(Arc(a0, a1, r0, r1, style, (record_id, i)))
                offset = top
        return result

    @staticmethod
    def _colors(config, n: int) -> List[str]:
        if config.colors:
            return [config.colors[i % len(config.colors)] for i in range(n)]
        if is_colormap(config.color):
            return palette(n, config.color)
        return [config.color] * n
