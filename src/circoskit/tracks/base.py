"""
Track builder interface and registry.

A builder turns one track's records into drawable primitives. Builders
are pure: they read the layout and their radius band and return a fresh
BuildResult, so tracks can be built in any order or in parallel.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Mapping, Tuple, Type

import pandas as pd

from circoskit.errors import ConfigurationError, RecordError, SegmentLookupError
from circoskit.layout.angular import AngularLayout
from circoskit.layout.radius import RadiusBand
from circoskit.render.primitives import DrawablePrimitive

logger = logging.getLogger(__name__)

SEGMENT_KEYS = ("block_id", "segment", "chrom")


class TrackType(Enum):
    HIGHLIGHT = "highlight"
    HISTOGRAM = "histogram"
    HEATMAP = "heatmap"
    LINE = "line"
    SCATTER = "scatter"
    STACK = "stack"
    CHORDS = "chords"
    TEXT = "text"

    @classmethod
    def parse(cls, value: Any) -> "TrackType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown track type: {value}. Available: {[t.value for t in cls]}"
            ) from None


@dataclass
class BuildResult:
    """Primitives of one track plus the records that had to be skipped."""
    primitives: List[DrawablePrimitive] = field(default_factory=list)
    errors: List[RecordError] = field(default_factory=list)

    def skip(self, error: RecordError) -> None:
        logger.warning(f"Skipping {error}")
        self.errors.append(error)


class TrackBuilder(ABC):
    """Base class of all geometry builders."""

    track_type: TrackType

    @abstractmethod
    def build(
        self,
        records: Any,
        config: Any,
        layout: AngularLayout,
        band: RadiusBand,
    ) -> BuildResult:
        """
        Build primitives for one track.

        Args:
            records: Sequence of mappings or a DataFrame
            config: Track config dataclass of the matching type
            layout: Computed angular layout
            band: Radius band allocated to the track

        Returns:
            BuildResult with primitives and skipped-record errors
        """


_BUILDERS: Dict[TrackType, Type[TrackBuilder]] = {}


def register_builder(track_type: TrackType) -> Callable[[Type[TrackBuilder]], Type[TrackBuilder]]:
    """Class decorator adding a builder to the registry."""

    def decorator(cls: Type[TrackBuilder]) -> Type[TrackBuilder]:
        cls.track_type = track_type
        _BUILDERS[track_type] = cls
        return cls

    return decorator


def get_builder(track_type: Any) -> TrackBuilder:
    """Instantiate the builder registered for ``track_type``."""
    track_type = TrackType.parse(track_type)
    if track_type not in _BUILDERS:
        raise ConfigurationError(f"No builder registered for track type: {track_type.value}")
    return _BUILDERS[track_type]()


def available_track_types() -> List[str]:
    return [t.value for t in _BUILDERS]


# =============================================================================
# Record helpers
# =============================================================================

def iter_records(data: Any) -> Iterator[Tuple[Any, Mapping[str, Any]]]:
    """Yield ``(record_id, record)``; the id is the record's ``id`` or its index."""
    if data is None:
        return
    if isinstance(data, pd.DataFrame):
        data = records_from_frame(data)
    for i, record in enumerate(data):
        record_id = i
        if isinstance(record, Mapping):
            rid = record.get("id")
            if rid is not None and not (isinstance(rid, float) and math.isnan(rid)):
                record_id = rid
        yield record_id, record


def check_record(record_id: Any, record: Any) -> Mapping[str, Any]:
    if not isinstance(record, Mapping):
        raise RecordError(record_id, f"expected a mapping, got {type(record).__name__}")
    return record


def segment_of(record_id: Any, record: Mapping[str, Any], layout: AngularLayout) -> str:
    """Segment id of a record, validated against the layout."""
    for key in SEGMENT_KEYS:
        if key in record:
            segment_id = record[key]
            break
    else:
        raise RecordError(record_id, "missing segment id (block_id)")
    segment_id = str(segment_id)
    if segment_id not in layout:
        raise SegmentLookupError(record_id, segment_id)
    return segment_id


def finite(record_id: Any, record: Mapping[str, Any], key: str) -> float:
    """Numeric field of a record; missing or non-finite values are RecordErrors."""
    if key not in record:
        raise RecordError(record_id, f"missing field {key!r}")
    try:
        value = float(record[key])
    except (TypeError, ValueError):
        raise RecordError(record_id, f"{key} is not a number: {record[key]!r}") from None
    if not math.isfinite(value):
        raise RecordError(record_id, f"{key} is not finite: {value}")
    return value


def position_range(
    record_id: Any, record: Mapping[str, Any], default_width: float = 0.0
) -> Tuple[float, float]:
    """
    ``(start, end)`` of a record.

    Records with only ``position`` get a range of ``default_width``
    centered on it.
    """
    if "start" in record or "end" in record:
        start = finite(record_id, record, "start")
        end = finite(record_id, record, "end")
        if end < start:
            raise RecordError(record_id, f"end ({end}) is before start ({start})")
        return start, end
    position = finite(record_id, record, "position")
    half = default_width / 2
    return position - half, position + half


def point_position(record_id: Any, record: Mapping[str, Any]) -> float:
    """Single position; ranged records use their midpoint."""
    if "position" in record:
        return finite(record_id, record, "position")
    start, end = position_range(record_id, record)
    return (start + end) / 2


def angle_range(
    layout: AngularLayout, segment_id: str, start: float, end: float
) -> Tuple[float, float]:
    return layout.to_angle(segment_id, start), layout.to_angle(segment_id, end)


def base_style(config: Any, **overrides: Any) -> Dict[str, Any]:
    """Style attributes shared by every track type."""
    style = {
        "fill": getattr(config, "color", None),
        "opacity": getattr(config, "opacity", 1.0),
    }
    if getattr(config, "stroke_color", None):
        style["stroke"] = config.stroke_color
        style["stroke_width"] = config.stroke_width
    style.update(overrides)
    return {k: v for k, v in style.items() if v is not None}


def values_of(data: Any, key: str = "value") -> List[float]:
    """Finite numeric ``key`` values in the data, ignoring bad records."""
    values = []
    for _, record in iter_records(data):
        if not isinstance(record, Mapping):
            continue
        try:
            v = float(record.get(key))
        except (TypeError, ValueError):
            continue
        if math.isfinite(v):
            values.append(v)
    return values


def records_from_frame(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Row mappings of a DataFrame without its missing (NaN) cells."""
    return [
        {k: v for k, v in row.items() if not (isinstance(v, float) and math.isnan(v))}
        for row in df.to_dict("records")
    ]
