"""
Render orchestration: track registry, radius allocation and scene assembly.

The orchestrator owns no geometry math. It asks the layout, the radius
allocator and the per-type builders for their results, tags every
primitive with its track id and keeps the last scene for hit testing.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np
from matplotlib.path import Path as MplPath

from circoskit.errors import ConfigurationError, RecordError
from circoskit.layout.angular import AngularLayout, AngularLayoutConfig, ClampHook
from circoskit.layout.radius import RadiusAllocator, RadiusAllocatorConfig, RadiusBand
from circoskit.layout.ring import LAYOUT_TRACK_ID, ring_primitives
from circoskit.layout.transform import to_polar
from circoskit.render.paths import flatten
from circoskit.render.primitives import Arc, Circle, DrawablePrimitive, Path, Rect, tag
from circoskit.tracks import BuildResult, TrackConfig, TrackType, build_config, get_builder
from circoskit.tracks.base import iter_records

logger = logging.getLogger(__name__)

# Extra distance (drawing units) accepted around open paths when hit testing
HIT_TOLERANCE = 2.0


@dataclass
class TrackRegistration:
    track_id: str
    track_type: TrackType
    data: Any
    config: TrackConfig


@dataclass(frozen=True)
class HitResult:
    track_id: str
    record_id: Any


@dataclass
class Scene:
    """Ordered, track-tagged primitives of one render pass."""
    primitives: List[DrawablePrimitive] = field(default_factory=list)
    errors: Dict[str, List[RecordError]] = field(default_factory=dict)
    bands: Dict[str, RadiusBand] = field(default_factory=dict)

    def for_track(self, track_id: str) -> List[DrawablePrimitive]:
        return [p for p in self.primitives if p.track_id == track_id]

    @property
    def track_ids(self) -> List[str]:
        ids = []
        for p in self.primitives:
            if p.track_id not in ids:
                ids.append(p.track_id)
        return ids

    @property
    def error_count(self) -> int:
        return sum(len(v) for v in self.errors.values())


class RenderOrchestrator:
    """
    Builds scenes from a layout and an ordered set of tracks.

    Typical use::

        orch = RenderOrchestrator()
        orch.set_layout(segments, AngularLayoutConfig(gap=0.05))
        orch.add_track("cov", "histogram", records, {"min": 0})
        scene = orch.render()

    Rendering is idempotent: unchanged inputs give an identical scene,
    and only tracks whose data, config or band changed are rebuilt.
    """

    def __init__(
        self,
        allocator_config: Optional[RadiusAllocatorConfig] = None,
        width: float = 700,
        height: float = 700,
    ):
        self.width = width
        self.height = height
        self.allocator = RadiusAllocator(allocator_config)
        self._layout: Optional[AngularLayout] = None
        self._tracks: Dict[str, TrackRegistration] = {}
        self._cache: Dict[str, Tuple[RadiusBand, BuildResult]] = {}
        self._ring: List[DrawablePrimitive] = []
        self._scene: Optional[Scene] = None
        self._record_index: Dict[str, Dict[Any, Mapping[str, Any]]] = {}

    # =========================================================================
    # Layout and track registry
    # =========================================================================

    def set_layout(
        self,
        segments: Any,
        config: Union[AngularLayoutConfig, Mapping[str, Any], None] = None,
        on_clamp: Optional[ClampHook] = None,
    ) -> "RenderOrchestrator":
        """
        Compute a new layout; every track is rebuilt on the next render.

        Raises:
            ConfigurationError: On an invalid segment set or layout config.
                The previous layout stays in place.
        """
        if isinstance(config, Mapping):
            config = AngularLayoutConfig.from_dict(config)
        layout = AngularLayout.build(segments, config, on_clamp)
        self._layout = layout
        self._ring = [tag(p, LAYOUT_TRACK_ID) for p in ring_primitives(layout)]
        self._cache.clear()
        self._scene = None
        logger.info(f"Layout set with {len(layout.intervals)} segments")
        return self

    @property
    def layout(self) -> Optional[AngularLayout]:
        return self._layout

    @property
    def tracks(self) -> List[TrackRegistration]:
        return list(self._tracks.values())

    def add_track(
        self,
        track_id: str,
        track_type: Any,
        data: Any,
        config: Any = None,
    ) -> "RenderOrchestrator":
        """
        Register a track, or replace the one with the same id in place.

        Raises:
            ConfigurationError: On a reserved id or an invalid config
        """
        if track_id == LAYOUT_TRACK_ID:
            raise ConfigurationError(f"Track id {LAYOUT_TRACK_ID!r} is reserved")
        track_type = TrackType.parse(track_type)
        registration = TrackRegistration(
            track_id, track_type, data, build_config(track_type, config)
        )
        self._tracks[track_id] = registration
        self._cache.pop(track_id, None)
        self._record_index.pop(track_id, None)
        self._scene = None
        logger.debug(f"Registered {track_type.value} track {track_id}")
        return self

    def remove_track(self, track_id: str) -> "RenderOrchestrator":
        """
        Remove one track. Automatically allocated tracks registered after
        it move into the freed radius on the next render.
        """
        if track_id not in self._tracks:
            logger.warning(f"remove_track: unknown track {track_id}")
            return self
        del self._tracks[track_id]
        self._cache.pop(track_id, None)
        self._record_index.pop(track_id, None)
        self._scene = None
        return self

    def remove_tracks(self, track_ids: Union[str, Iterable[str], None] = None) -> "RenderOrchestrator":
        """Remove the given tracks, or every track when ``track_ids`` is None."""
        if track_ids is None:
            return self.remove_all_tracks()
        if isinstance(track_ids, str):
            track_ids = [track_ids]
        for track_id in list(track_ids):
            self.remove_track(track_id)
        return self

    def remove_all_tracks(self) -> "RenderOrchestrator":
        self._tracks.clear()
        self._cache.clear()
        self._record_index.clear()
        self._scene = None
        return self

    # =========================================================================
    # Rendering
    # =========================================================================

    def bands(self) -> Dict[str, RadiusBand]:
        """Current radius band of every registered track."""
        layout = self._require_layout()
        requests = [(t.track_id, t.config) for t in self._tracks.values()]
        return self.allocator.allocate(requests, layout.radius_domain())

    def render(
        self,
        track_ids: Optional[Iterable[str]] = None,
        workers: int = 1,
    ) -> Scene:
        """
        Build the scene: layout ring first, then tracks in registration order.

        Args:
            track_ids: Restrict the scene to these tracks (default: all)
            workers: Build independent tracks in this many threads

        Returns:
            Scene with tagged primitives and skipped-record errors per track
        """
        layout = self._require_layout()
        bands = self.bands()
        wanted = None if track_ids is None else set(track_ids)
        selected = [
            t for t in self._tracks.values()
            if wanted is None or t.track_id in wanted
        ]

        stale = [
            t for t in selected
            if t.track_id not in self._cache or self._cache[t.track_id][0] != bands[t.track_id]
        ]
        if workers > 1 and len(stale) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(
                    lambda t: self._build(t, layout, bands[t.track_id]), stale))
        else:
            results = [self._build(t, layout, bands[t.track_id]) for t in stale]
        for track, result in zip(stale, results):
            self._cache[track.track_id] = (bands[track.track_id], result)

        scene = Scene(primitives=list(self._ring))
        for track in selected:
            band, result = self._cache[track.track_id]
            scene.primitives.extend(result.primitives)
            scene.bands[track.track_id] = band
            if result.errors:
                scene.errors[track.track_id] = list(result.errors)
        self._scene = scene
        if scene.error_count:
            logger.warning(f"Rendered with {scene.error_count} skipped records")
        logger.info(
            f"Rendered {len(selected)} tracks, {len(scene.primitives)} primitives"
        )
        return scene

    def _build(self, track: TrackRegistration, layout: AngularLayout,
               band: RadiusBand) -> BuildResult:
        builder = get_builder(track.track_type)
        result = builder.build(track.data, track.config, layout, band)
        for error in result.errors:
            error.track_id = track.track_id
        result.primitives = [tag(p, track.track_id) for p in result.primitives]
        logger.debug(
            f"Built {track.track_id}: {len(result.primitives)} primitives, "
            f"{len(result.errors)} skipped"
        )
        return result

    def _require_layout(self) -> AngularLayout:
        if self._layout is None:
            raise ConfigurationError("No layout set; call set_layout() first")
        return self._layout

    # =========================================================================
    # Interaction
    # =========================================================================

    def hit_test(self, x: float, y: float) -> Optional[HitResult]:
        """
        Topmost primitive under ``(x, y)``, in center-origin coordinates.

        Uses the last rendered scene. Returns None when nothing is hit, and
        until the next render after the layout or any track changed.
        """
        if self._scene is None:
            return None
        for primitive in reversed(self._scene.primitives):
            if _contains(primitive, x, y):
                return HitResult(primitive.track_id, primitive.record_id)
        return None

    def record(self, track_id: str, record_id: Any) -> Optional[Mapping[str, Any]]:
        """
        Source record behind a hit.

        Composite ids (stack parts, line runs) resolve to their first record.
        """
        if track_id not in self._tracks:
            return None
        if track_id not in self._record_index:
            self._record_index[track_id] = dict(iter_records(self._tracks[track_id].data))
        index = self._record_index[track_id]
        if isinstance(record_id, tuple) and record_id not in index and record_id:
            record_id = record_id[0]
        return index.get(record_id)

    def tooltip(self, track_id: str, record_id: Any) -> Optional[str]:
        """Tooltip text from the track's ``tooltip`` option."""
        track = self._tracks.get(track_id)
        if track is None or track.config.tooltip is None:
            return None
        record = self.record(track_id, record_id)
        if record is None:
            return None
        tooltip = track.config.tooltip
        if callable(tooltip):
            return str(tooltip(record))
        try:
            return tooltip.format(**record)
        except (KeyError, IndexError, ValueError) as e:
            logger.debug(f"Tooltip format failed for {track_id}/{record_id}: {e}")
            return None


def _contains(primitive: DrawablePrimitive, x: float, y: float) -> bool:
    if isinstance(primitive, Arc):
        angle, radius = to_polar(x, y)
        if not primitive.inner_radius <= radius <= primitive.outer_radius:
            return False
        lo = min(primitive.start_angle, primitive.end_angle)
        hi = max(primitive.start_angle, primitive.end_angle)
        angle = lo + (angle - lo) % (2 * math.pi)
        return angle <= hi
    if isinstance(primitive, Circle):
        return math.hypot(x - primitive.cx, y - primitive.cy) <= primitive.r
    if isinstance(primitive, Rect):
        return (primitive.x <= x <= primitive.x + primitive.width
                and primitive.y <= y <= primitive.y + primitive.height)
    if isinstance(primitive, Path):
        polylines = flatten(primitive.commands)
        if primitive.closed:
            return any(
                len(points) >= 3 and MplPath(points).contains_point((x, y))
                for points in polylines
            )
        tolerance = primitive.style.get("stroke_width", 1.0) / 2 + HIT_TOLERANCE
        return any(_distance_to_polyline(points, x, y) <= tolerance for points in polylines)
    return False


def _distance_to_polyline(points: List[Tuple[float, float]], x: float, y: float) -> float:
    pts = np.asarray(points, dtype=float)
    if len(pts) == 1:
        return float(np.hypot(pts[0, 0] - x, pts[0, 1] - y))
    a, b = pts[:-1], pts[1:]
    ab = b - a
    ap = np.array([x, y]) - a
    denom = np.einsum("ij,ij->i", ab, ab)
    t = np.divide(np.einsum("ij,ij->i", ap, ab), denom,
                  out=np.zeros_like(denom), where=denom > 0)
    t = np.clip(t, 0.0, 1.0)
    nearest = a + ab * t[:, None]
    return float(np.min(np.hypot(nearest[:, 0] - x, nearest[:, 1] - y)))
