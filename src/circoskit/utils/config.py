"""
Plot configuration files.

A configuration bundles the layout geometry, the automatic radius
allocation settings, the segment set and the list of tracks. It can be
written and read as YAML or JSON::

    width: 700
    height: 700
    segments: karyotype.tsv
    layout:
      inner_radius: 250
      outer_radius: 270
      gap: 0.04
    allocator:
      default_track_width: 20
      padding: 4
      direction: inward
    tracks:
      - id: coverage
        type: histogram
        data: coverage.tsv
        config: {min: 0, color: "#1f77b4"}
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from circoskit.errors import ConfigurationError
from circoskit.layout.angular import AngularLayoutConfig
from circoskit.layout.radius import RadiusAllocatorConfig
from circoskit.render.orchestrator import RenderOrchestrator
from circoskit.tracks.base import TrackType
from circoskit.utils.io import load_segments, load_track_data

logger = logging.getLogger(__name__)

# Canvas defaults
DEFAULT_WIDTH = 700
DEFAULT_HEIGHT = 700
DEFAULT_TRACK_WIDTH = 10.0


@dataclass
class TrackSpec:
    """One track entry of a configuration file."""
    id: str
    type: str
    data: Any = None
    config: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrackSpec":
        missing = [k for k in ("id", "type") if k not in d]
        if missing:
            raise ConfigurationError(f"Track entry is missing {missing}: {d}")
        unknown = sorted(set(d) - {"id", "type", "data", "config"})
        if unknown:
            raise ConfigurationError(f"Unknown track entry keys {unknown} in track {d['id']!r}")
        TrackType.parse(d["type"])
        return cls(id=str(d["id"]), type=str(d["type"]), data=d.get("data"),
                   config=dict(d.get("config") or {}))


@dataclass
class CircosConfig:
    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_HEIGHT
    # Inline segment records or a path to a segment table
    segments: Union[str, List[Dict[str, Any]], None] = None
    layout: AngularLayoutConfig = field(default_factory=AngularLayoutConfig)
    allocator: RadiusAllocatorConfig = field(
        default_factory=lambda: RadiusAllocatorConfig(default_track_width=DEFAULT_TRACK_WIDTH)
    )
    tracks: List[TrackSpec] = field(default_factory=list)
    # Directory relative data paths are resolved against
    base_dir: Optional[str] = None

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "segments": self.segments,
            "layout": self.layout.to_dict(),
            "allocator": asdict(self.allocator),
            "tracks": [asdict(t) for t in self.tracks],
        }

    @classmethod
    def from_dict(cls, d: dict, base_dir: Optional[str] = None) -> "CircosConfig":
        """Create a configuration from a dictionary."""
        if not isinstance(d, dict):
            raise ConfigurationError(f"Configuration must be a mapping, got {type(d).__name__}")
        unknown = sorted(set(d) - {"width", "height", "segments", "layout", "allocator", "tracks"})
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {unknown}")

        config = cls(base_dir=base_dir)
        if "width" in d:
            config.width = float(d["width"])
        if "height" in d:
            config.height = float(d["height"])
        if "segments" in d:
            config.segments = d["segments"]
        if "layout" in d:
            config.layout = AngularLayoutConfig.from_dict(d["layout"] or {})
        if "allocator" in d:
            allocator = {"default_track_width": DEFAULT_TRACK_WIDTH}
            allocator.update(d["allocator"] or {})
            try:
                config.allocator = RadiusAllocatorConfig(**allocator)
            except TypeError as e:
                raise ConfigurationError(f"Invalid allocator configuration: {e}") from e
        if "tracks" in d:
            config.tracks = [TrackSpec.from_dict(t) for t in d["tracks"] or []]
        return config

    @classmethod
    def from_yaml(cls, path: str) -> "CircosConfig":
        """Load from a YAML file."""
        with open(path, "r") as f:
            try:
                d = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        return cls.from_dict(d or {}, base_dir=str(Path(path).parent))

    def to_yaml(self, path: str) -> None:
        with open(path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_json(cls, path: str) -> "CircosConfig":
        """Load from a JSON file."""
        with open(path, "r") as f:
            try:
                d = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
        return cls.from_dict(d, base_dir=str(Path(path).parent))

    def to_json(self, path: str) -> None:
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> "CircosConfig":
        """Load by file suffix (.yaml/.yml or .json)."""
        suffix = Path(path).suffix.lower()
        if suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        if suffix == ".json":
            return cls.from_json(path)
        raise ConfigurationError(f"Unsupported configuration format: {suffix}")

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self) -> list:
        """
        Check the configuration.

        Raises ConfigurationError on fatal problems and returns a list of
        warnings for suspicious but usable settings.
        """
        warnings = []
        self.layout.validate()
        self.allocator.validate()
        if self.segments is None:
            raise ConfigurationError("No segments configured")
        ids = [t.id for t in self.tracks]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            warnings.append(f"Duplicate track ids {duplicates}: later entries replace earlier ones")
        if self.layout.outer_radius > min(self.width, self.height) / 2:
            warnings.append(
                f"Layout outer radius {self.layout.outer_radius} exceeds the canvas"
            )
        if not self.tracks:
            warnings.append("No tracks configured; only the layout will be drawn")
        for w in warnings:
            logger.warning(w)
        return warnings

    # =========================================================================
    # Assembly
    # =========================================================================

    def resolve_path(self, source: Any) -> Any:
        if isinstance(source, str) and self.base_dir is not None:
            path = Path(source)
            if not path.is_absolute():
                return Path(self.base_dir) / path
        return source

    def build_orchestrator(self) -> RenderOrchestrator:
        """Load segments and track data and register everything."""
        self.validate()
        orchestrator = RenderOrchestrator(self.allocator, self.width, self.height)
        orchestrator.set_layout(load_segments(self.resolve_path(self.segments)), self.layout)
        for spec in self.tracks:
            data = load_track_data(self.resolve_path(spec.data), spec.type)
            orchestrator.add_track(spec.id, spec.type, data, spec.config)
        return orchestrator
