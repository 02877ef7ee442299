"""Angular partition of the circle into segment intervals."""

import bisect
import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from circoskit.errors import ConfigurationError
from circoskit.layout.segments import SegmentSet
from circoskit.layout.transform import TAU, normalize_angle

logger = logging.getLogger(__name__)

ClampHook = Callable[[str, float], None]


@dataclass
class LabelsConfig:
    """Segment labels drawn outside the layout ring."""
    display: bool = True
    radial_offset: float = 10.0
    size: float = 14.0
    color: str = "#000000"


@dataclass
class TicksConfig:
    """Position ticks drawn on the outer edge of the layout ring."""
    display: bool = False
    spacing: float = 10_000_000
    label_spacing: int = 5
    label_denominator: float = 1_000_000
    label_suffix: str = "Mb"
    label_size: float = 10.0
    size_minor: float = 2.0
    size_major: float = 5.0
    color: str = "#808080"
    labels: bool = True


@dataclass
class AngularLayoutConfig:
    """
    Geometry of the layout ring.

    Angles are radians. ``gap`` is either one value used after every
    segment or a mapping ``segment_id -> gap after that segment``.
    """
    inner_radius: float = 250.0
    outer_radius: float = 300.0
    gap: Union[float, Dict[str, float]] = 0.04
    gap_after_last: bool = True
    start_angle: float = 0.0
    end_angle: float = TAU
    opacity: float = 1.0
    labels: LabelsConfig = field(default_factory=LabelsConfig)
    ticks: TicksConfig = field(default_factory=TicksConfig)

    def gap_after(self, segment_id: str) -> float:
        if isinstance(self.gap, Mapping):
            return float(self.gap.get(segment_id, 0.0))
        return float(self.gap)

    def validate(self) -> None:
        """Raise ConfigurationError on an unusable ring geometry."""
        if not self.inner_radius < self.outer_radius:
            raise ConfigurationError(
                f"inner_radius ({self.inner_radius}) must be smaller than "
                f"outer_radius ({self.outer_radius})"
            )
        if self.inner_radius < 0:
            raise ConfigurationError("inner_radius must not be negative")
        sweep = self.end_angle - self.start_angle
        if sweep <= 0 or sweep > TAU + 1e-9:
            raise ConfigurationError(
                f"end_angle - start_angle must be in (0, 2*pi], got {sweep}"
            )
        gaps = self.gap.values() if isinstance(self.gap, Mapping) else [self.gap]
        if any(g < 0 for g in gaps):
            raise ConfigurationError("gap must not be negative")

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "AngularLayoutConfig":
        d = dict(d)
        try:
            labels = LabelsConfig(**d.pop("labels", {}) or {})
            ticks = TicksConfig(**d.pop("ticks", {}) or {})
            return cls(labels=labels, ticks=ticks, **d)
        except TypeError as e:
            raise ConfigurationError(f"Invalid layout configuration: {e}") from e


@dataclass(frozen=True)
class SegmentInterval:
    segment_id: str
    start_angle: float
    end_angle: float
    len: float

    @property
    def angle_span(self) -> float:
        return self.end_angle - self.start_angle


def build_intervals(
    segments: SegmentSet, config: AngularLayoutConfig
) -> Tuple[SegmentInterval, ...]:
    """
    Partition the sweep into one interval per segment.

    Args:
        segments: Validated segment set (may be empty)
        config: Layout geometry

    Returns:
        Intervals in segment order

    Raises:
        ConfigurationError: If the gaps leave no angle for the segments
    """
    config.validate()
    if len(segments) == 0:
        return ()

    ids = segments.ids
    gaps = [config.gap_after(sid) for sid in ids]
    if not config.gap_after_last:
        gaps[-1] = 0.0

    sweep = config.end_angle - config.start_angle
    usable = sweep - sum(gaps)
    if usable <= 0:
        raise ConfigurationError(
            f"Gaps ({sum(gaps):.4f} rad) leave no room for {len(ids)} segments "
            f"in a sweep of {sweep:.4f} rad"
        )

    total = segments.total_length
    intervals = []
    cursor = config.start_angle
    for seg, gap in zip(segments, gaps):
        span = usable * seg.len / total
        intervals.append(SegmentInterval(seg.id, cursor, cursor + span, seg.len))
        cursor += span + gap
    return tuple(intervals)


class AngularLayout:
    """
    Computed angular layout with position/angle lookups.

    The layout is immutable once built; a new segment set or configuration
    means building a new AngularLayout.
    """

    def __init__(
        self,
        segments: SegmentSet,
        config: Optional[AngularLayoutConfig] = None,
        on_clamp: Optional[ClampHook] = None,
    ):
        self.segments = segments
        self.config = config if config is not None else AngularLayoutConfig()
        self.on_clamp = on_clamp
        self.intervals = build_intervals(segments, self.config)
        self._by_id: Dict[str, SegmentInterval] = {
            iv.segment_id: iv for iv in self.intervals
        }
        self._starts: List[float] = [iv.start_angle for iv in self.intervals]
        logger.debug(
            f"Laid out {len(self.intervals)} segments over "
            f"{math.degrees(self.config.end_angle - self.config.start_angle):.1f} deg"
        )

    @classmethod
    def build(
        cls,
        segments: Any,
        config: Optional[AngularLayoutConfig] = None,
        on_clamp: Optional[ClampHook] = None,
    ) -> "AngularLayout":
        """Build a layout from a SegmentSet or raw segment records."""
        if not isinstance(segments, SegmentSet):
            segments = SegmentSet.from_records(segments)
        return cls(segments, config, on_clamp)

    def __contains__(self, segment_id: object) -> bool:
        return segment_id in self._by_id

    def interval(self, segment_id: str) -> SegmentInterval:
        """Raises KeyError for an unknown segment."""
        return self._by_id[segment_id]

    def to_angle(self, segment_id: str, position: float) -> float:
        """
        Angle of ``position`` within a segment.

        Positions outside ``[0, len]`` are clamped to the segment ends and
        reported through ``on_clamp``.
        """
        iv = self._by_id[segment_id]
        ratio = position / iv.len
        if ratio < 0 or ratio > 1:
            logger.debug(f"Clamped position {position} on {segment_id} (len {iv.len})")
            if self.on_clamp is not None:
                self.on_clamp(segment_id, position)
            ratio = min(max(ratio, 0.0), 1.0)
        return iv.start_angle + iv.angle_span * ratio

    def to_position(self, angle: float) -> Optional[Tuple[str, float]]:
        """
        Segment and position under ``angle``.

        Angles inside a gap resolve to the nearest segment end. Returns
        None for an empty layout.
        """
        if not self.intervals:
            return None
        a = normalize_angle(angle, self.config.start_angle)
        i = bisect.bisect_right(self._starts, a) - 1
        if i < 0:
            # Before the first start only happens through rounding
            i = 0
        iv = self.intervals[i]
        if a > iv.end_angle:
            nxt = self.intervals[i + 1] if i + 1 < len(self.intervals) else None
            next_start = nxt.start_angle if nxt is not None else self._starts[0] + TAU
            if next_start - a < a - iv.end_angle:
                iv = nxt if nxt is not None else self.intervals[0]
                return iv.segment_id, 0.0
            return iv.segment_id, iv.len
        if iv.angle_span == 0:
            return iv.segment_id, 0.0
        return iv.segment_id, (a - iv.start_angle) / iv.angle_span * iv.len

    def radius_domain(self) -> Tuple[float, float]:
        """Radial extent of the layout ring."""
        return self.config.inner_radius, self.config.outer_radius

    @property
    def total_length(self) -> float:
        return self.segments.total_length
