"""Per-track configuration dataclasses."""

from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Union

from circoskit.errors import ConfigurationError
from circoskit.tracks.base import TrackType
from circoskit.tracks.scales import is_colormap, reversed_name

Tooltip = Union[str, Callable[[Mapping[str, Any]], str], None]

DIRECTIONS = ("out", "in", "center")


@dataclass
class TrackConfig:
    """Options every track accepts."""
    inner_radius: Optional[float] = None
    outer_radius: Optional[float] = None
    color: Optional[str] = None
    opacity: float = 1.0
    stroke_color: Optional[str] = None
    stroke_width: float = 1.0
    # Format string (``"{block_id}: {value}"``) or callable(record) -> str
    tooltip: Tooltip = None

    def validate(self) -> None:
        if not 0 <= self.opacity <= 1:
            raise ConfigurationError(f"opacity must be in [0, 1], got {self.opacity}")
        direction = getattr(self, "direction", None)
        if direction is not None and direction not in DIRECTIONS:
            raise ConfigurationError(
                f"direction must be one of {DIRECTIONS}, got {direction!r}"
            )
        vmin, vmax = getattr(self, "min", None), getattr(self, "max", None)
        if vmin is not None and vmax is not None and vmin > vmax:
            raise ConfigurationError(f"min ({vmin}) is greater than max ({vmax})")

    def to_dict(self) -> dict:
        d = asdict(self)
        if callable(d.get("tooltip")):
            d.pop("tooltip")
        return d


@dataclass
class HighlightConfig(TrackConfig):
    color: Optional[str] = "#d3d3d3"
    opacity: float = 0.5


@dataclass
class HistogramConfig(TrackConfig):
    color: Optional[str] = "#fd6a62"
    min: Optional[float] = None
    max: Optional[float] = None
    log_scale: bool = False
    direction: str = "out"
    zero_policy: Literal["draw", "omit"] = "draw"
    bin_width: float = 1.0

    def validate(self) -> None:
        super().validate()
        if self.zero_policy not in ("draw", "omit"):
            raise ConfigurationError(f"zero_policy must be draw or omit, got {self.zero_policy!r}")
        if self.bin_width < 0:
            raise ConfigurationError("bin_width must not be negative")


@dataclass
class HeatmapConfig(TrackConfig):
    # Name of a matplotlib colormap
    color: Optional[str] = "YlGnBu"
    min: Optional[float] = None
    max: Optional[float] = None
    log_scale: bool = False
    reverse: bool = False
    categories: Optional[Dict[str, str]] = None

    def validate(self) -> None:
        super().validate()
        if not is_colormap(self.color):
            raise ConfigurationError(
                f"Heatmap color must name a matplotlib colormap, got {self.color!r}"
            )
        if self.reverse and not is_colormap(reversed_name(self.color)):
            raise ConfigurationError(f"Colormap {self.color!r} has no reversed form")


@dataclass
class LineConfig(TrackConfig):
    color: Optional[str] = "#fd6a62"
    min: Optional[float] = None
    max: Optional[float] = None
    log_scale: bool = False
    direction: str = "out"
    interpolation: Literal["linear", "step"] = "linear"
    fill: bool = False
    fill_color: Optional[str] = None
    thickness: float = 1.0

    def validate(self) -> None:
        super().validate()
        if self.interpolation not in ("linear", "step"):
            raise ConfigurationError(f"Unknown interpolation: {self.interpolation!r}")
        if self.direction == "center":
            raise ConfigurationError("Line tracks support direction out or in")


@dataclass
class ScatterConfig(TrackConfig):
    color: Optional[str] = "#fd6a62"
    min: Optional[float] = None
    max: Optional[float] = None
    log_scale: bool = False
    direction: str = "out"
    size: float = 3.0
    shape: Literal["circle", "square"] = "circle"

    def validate(self) -> None:
        super().validate()
        if self.shape not in ("circle", "square"):
            raise ConfigurationError(f"Unknown scatter shape: {self.shape!r}")
        if self.direction == "center":
            raise ConfigurationError("Scatter tracks support direction out or in")


@dataclass
class StackConfig(TrackConfig):
    # Colormap used when ``colors`` is not given
    color: Optional[str] = "Spectral"
    mode: Literal["normalize", "clip"] = "normalize"
    max: Optional[float] = None
    colors: Optional[List[str]] = None
    direction: str = "out"

    def validate(self) -> None:
        super().validate()
        if self.mode not in ("normalize", "clip"):
            raise ConfigurationError(f"Unknown stack mode: {self.mode!r}")
        if self.max is not None and self.max <= 0:
            raise ConfigurationError("max must be positive")
        if self.direction == "center":
            raise ConfigurationError("Stack tracks support direction out or in")


@dataclass
class ChordsConfig(TrackConfig):
    color: Optional[str] = "#fd6a62"
    opacity: float = 0.7
    # Defaults to the inner radius of the track band
    radius: Optional[float] = None
    curvature: float = 1.0
    min: Optional[float] = None
    max: Optional[float] = None
    log_scale: bool = False

    def validate(self) -> None:
        super().validate()
        if not 0 <= self.curvature <= 1:
            raise ConfigurationError(f"curvature must be in [0, 1], got {self.curvature}")
        if self.radius is not None and self.radius <= 0:
            raise ConfigurationError("radius must be positive")


@dataclass
class TextConfig(TrackConfig):
    color: Optional[str] = "#000000"
    size: float = 12.0
    radial_offset: float = 0.0


CONFIG_CLASSES: Dict[TrackType, type] = {
    TrackType.HIGHLIGHT: HighlightConfig,
    TrackType.HISTOGRAM: HistogramConfig,
    TrackType.HEATMAP: HeatmapConfig,
    TrackType.LINE: LineConfig,
    TrackType.SCATTER: ScatterConfig,
    TrackType.STACK: StackConfig,
    TrackType.CHORDS: ChordsConfig,
    TrackType.TEXT: TextConfig,
}


def build_config(track_type: Any, config: Any = None) -> TrackConfig:
    """
    Validated config object for a track type.

    Args:
        track_type: TrackType or its name
        config: None, a mapping of options or a config instance

    Returns:
        Config dataclass of the matching type

    Raises:
        ConfigurationError: On unknown options or invalid values
    """
    cls = CONFIG_CLASSES[TrackType.parse(track_type)]
    if config is None:
        config = cls()
    elif isinstance(config, Mapping):
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown options for {cls.__name__}: {unknown}"
            )
        config = cls(**config)
    elif not isinstance(config, cls):
        raise ConfigurationError(
            f"Expected {cls.__name__} or a mapping, got {type(config).__name__}"
        )
    config.validate()
    return config
