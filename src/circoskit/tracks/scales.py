"""Value and color scales used by the track builders."""

import logging
import math
from typing import Any, Dict, Iterable, Optional

import matplotlib
import numpy as np
from matplotlib.colors import to_hex

from circoskit.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_COLORMAP = "YlGnBu"
CATEGORICAL_PALETTE = "tab10"


class ValueScale:
    """
    Maps values onto ``[0, 1]``.

    Linear or base-10 log. A degenerate domain (min == max) maps every
    value to 0.5, the middle of the range. Values that cannot be scaled
    (log of a non-positive number) map to NaN so the caller can reject
    the record.
    """

    def __init__(self, vmin: float, vmax: float, log_scale: bool = False):
        self.vmin = float(vmin)
        self.vmax = float(vmax)
        self.log_scale = log_scale
        if log_scale and (self.vmin <= 0 or self.vmax <= 0):
            logger.warning(
                f"Log scale domain [{self.vmin}, {self.vmax}] is not positive; "
                "non-positive values will be skipped"
            )

    @classmethod
    def from_values(
        cls,
        values: Iterable[float],
        vmin: Optional[float] = None,
        vmax: Optional[float] = None,
        log_scale: bool = False,
    ) -> "ValueScale":
        """Scale with domain defaults taken from the data."""
        arr = np.asarray(list(values), dtype=float)
        if log_scale:
            arr = arr[arr > 0]
        if vmin is None:
            vmin = float(arr.min()) if arr.size else 0.0
        if vmax is None:
            vmax = float(arr.max()) if arr.size else 1.0
        return cls(vmin, vmax, log_scale)

    def ratio(self, value: float) -> float:
        if self.log_scale:
            if value <= 0 or self.vmin <= 0 or self.vmax <= 0:
                return math.nan
            lo, hi, v = np.log10(self.vmin), np.log10(self.vmax), np.log10(value)
        else:
            lo, hi, v = self.vmin, self.vmax, value
        if hi == lo:
            return 0.5
        r = float((v - lo) / (hi - lo))
        if not math.isfinite(r):
            return math.nan
        return min(max(r, 0.0), 1.0)


def radial_extent(
    ratio: float, inner_radius: float, outer_radius: float, direction: str = "out"
) -> tuple:
    """
    Radii ``(r0, r1)`` of a bar of height ``ratio`` inside a band.

    ``out`` grows from the inner edge, ``in`` from the outer edge and
    ``center`` symmetrically from the middle of the band.
    """
    width = outer_radius - inner_radius
    height = width * ratio
    if direction == "out":
        return inner_radius, inner_radius + height
    if direction == "in":
        return outer_radius - height, outer_radius
    if direction == "center":
        mid = (inner_radius + outer_radius) / 2
        return mid - height / 2, mid + height / 2
    raise ValueError(f"Unknown direction: {direction}")


def radial_position(
    ratio: float, inner_radius: float, outer_radius: float, direction: str = "out"
) -> float:
    """Radius of a point at height ``ratio`` inside a band."""
    width = outer_radius - inner_radius
    if direction == "in":
        return outer_radius - width * ratio
    return inner_radius + width * ratio


class ColorScale:
    """
    Maps numeric values through a matplotlib colormap, and categorical
    values through an explicit mapping or a qualitative palette.
    """

    def __init__(
        self,
        value_scale: ValueScale,
        colormap: str = DEFAULT_COLORMAP,
        reverse: bool = False,
        categories: Optional[Dict[Any, str]] = None,
    ):
        self.value_scale = value_scale
        name = colormap if not reverse else reversed_name(colormap)
        try:
            self.cmap = matplotlib.colormaps[name]
        except KeyError:
            raise ConfigurationError(f"Unknown colormap: {name}") from None
        self.categories: Dict[Any, str] = dict(categories or {})
        self._palette = matplotlib.colormaps[CATEGORICAL_PALETTE]
        self._assigned = 0

    def numeric(self, value: float) -> Optional[str]:
        r = self.value_scale.ratio(value)
        if math.isnan(r):
            return None
        return to_hex(self.cmap(r))

    def categorical(self, value: Any) -> str:
        if value not in self.categories:
            n = getattr(self._palette, "N", 10)
            self.categories[value] = to_hex(self._palette(self._assigned % n))
            self._assigned += 1
        return self.categories[value]


def reversed_name(name: str) -> str:
    return name[:-2] if name.endswith("_r") else f"{name}_r"


def palette(n: int, name: str = CATEGORICAL_PALETTE) -> list:
    """``n`` hex colors from a matplotlib colormap."""
    cmap = matplotlib.colormaps[name]
    size = getattr(cmap, "N", 256)
    if size <= 20:
        return [to_hex(cmap(i % size)) for i in range(n)]
    return [to_hex(cmap(x)) for x in np.linspace(0, 1, max(n, 1))][:n]


def is_colormap(name: Optional[str]) -> bool:
    """True when ``name`` is a registered matplotlib colormap rather than a color."""
    return isinstance(name, str) and name in matplotlib.colormaps


def value_color(config: Any, scale: ValueScale, value: float) -> Optional[str]:
    """
    Fill for a valued record.

    A track color naming a colormap colors each record by its value;
    any other color is used as is.
    """
    if not is_colormap(config.color):
        return config.color
    r = scale.ratio(value)
    if math.isnan(r):
        return None
    return to_hex(matplotlib.colormaps[config.color](r))


def fixed_color(name: Optional[str]) -> Optional[str]:
    """A single color for ``name``; colormaps resolve to their top color."""
    if is_colormap(name):
        return to_hex(matplotlib.colormaps[name](1.0))
    return name
