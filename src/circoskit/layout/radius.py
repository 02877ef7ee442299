"""Radius band allocation for registered tracks."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Literal, Optional, Protocol, Tuple

from circoskit.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Explicit radii at or below this value are ratios of the layout inner radius
RELATIVE_RADIUS_LIMIT = 10.0


@dataclass(frozen=True)
class RadiusBand:
    inner_radius: float
    outer_radius: float

    @property
    def width(self) -> float:
        return self.outer_radius - self.inner_radius

    def contains(self, radius: float) -> bool:
        return self.inner_radius <= radius <= self.outer_radius


@dataclass
class RadiusAllocatorConfig:
    """
    Automatic stacking parameters.

    Tracks without explicit radii are stacked from ``base_radius`` in
    ``direction``, each ``default_track_width`` wide with ``padding``
    between neighbours.
    """
    base_radius: Optional[float] = None
    default_track_width: float = 10.0
    padding: float = 0.0
    direction: Literal["outward", "inward"] = "outward"

    def validate(self) -> None:
        if self.default_track_width <= 0:
            raise ConfigurationError("default_track_width must be positive")
        if self.padding < 0:
            raise ConfigurationError("padding must not be negative")
        if self.direction not in ("outward", "inward"):
            raise ConfigurationError(f"Unknown allocation direction: {self.direction!r}")


class RadiusRequest(Protocol):
    inner_radius: Optional[float]
    outer_radius: Optional[float]


def resolve_radius(value: float, layout_inner_radius: float) -> float:
    """Apply the relative-radius rule to an explicit radius."""
    if 0 <= value <= RELATIVE_RADIUS_LIMIT:
        return value * layout_inner_radius
    return float(value)


def explicit_band(
    request: RadiusRequest, width: float, layout_inner_radius: float
) -> RadiusBand:
    """Band for a track that gives at least one of its radii."""
    inner = request.inner_radius
    outer = request.outer_radius
    if inner is not None:
        inner = resolve_radius(inner, layout_inner_radius)
    if outer is not None:
        outer = resolve_radius(outer, layout_inner_radius)
    if inner is None:
        inner = outer - width
    if outer is None:
        outer = inner + width
    if not inner < outer:
        raise ConfigurationError(
            f"Track inner radius ({inner}) must be smaller than outer radius ({outer})"
        )
    if inner < 0:
        raise ConfigurationError(f"Track inner radius must not be negative, got {inner}")
    return RadiusBand(inner, outer)


def is_automatic(request: RadiusRequest) -> bool:
    return request.inner_radius is None and request.outer_radius is None


def allocate(
    requests: Iterable[Tuple[str, RadiusRequest]],
    config: RadiusAllocatorConfig,
    layout_radii: Tuple[float, float],
) -> Dict[str, RadiusBand]:
    """
    Assign a band to every track, in registration order.

    Args:
        requests: (track_id, track config) pairs in registration order
        config: Automatic stacking parameters
        layout_radii: (inner, outer) radius of the layout ring

    Returns:
        Mapping of track id to band. Explicit bands may overlap automatic
        ones; automatic bands never overlap each other.
    """
    config.validate()
    layout_inner, layout_outer = layout_radii
    outward = config.direction == "outward"
    if config.base_radius is not None:
        cursor = float(config.base_radius)
    else:
        cursor = layout_outer if outward else layout_inner
    width = config.default_track_width

    bands: Dict[str, RadiusBand] = {}
    for track_id, request in requests:
        if not is_automatic(request):
            bands[track_id] = explicit_band(request, width, layout_inner)
            continue
        if outward:
            band = RadiusBand(cursor, cursor + width)
            cursor += width + config.padding
        else:
            if cursor - width < 0:
                raise ConfigurationError(
                    f"No radius left for track {track_id!r}: cursor at {cursor}"
                )
            band = RadiusBand(cursor - width, cursor)
            cursor -= width + config.padding
        bands[track_id] = band
        logger.debug(f"Track {track_id}: automatic band {band.inner_radius}-{band.outer_radius}")
    return bands


class RadiusAllocator:
    """
    Caching wrapper around :func:`allocate`.

    Bands are reused across passes while their value is unchanged, so a
    track whose band did not move keeps the identical band object.
    """

    def __init__(self, config: Optional[RadiusAllocatorConfig] = None):
        self.config = config if config is not None else RadiusAllocatorConfig()
        self._bands: Dict[str, RadiusBand] = {}

    def allocate(
        self,
        requests: Iterable[Tuple[str, RadiusRequest]],
        layout_radii: Tuple[float, float],
    ) -> Dict[str, RadiusBand]:
        fresh = allocate(requests, self.config, layout_radii)
        bands = {}
        for track_id, band in fresh.items():
            previous = self._bands.get(track_id)
            bands[track_id] = previous if previous == band else band
        self._bands = bands
        return dict(bands)
