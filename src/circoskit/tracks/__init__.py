"""Geometry builders, one per track type."""

from circoskit.tracks.base import (
    BuildResult,
    TrackBuilder,
    TrackType,
    available_track_types,
    get_builder,
    register_builder,
)
from circoskit.tracks.chords import ChordsBuilder
from circoskit.tracks.config import TrackConfig, build_config
from circoskit.tracks.heatmap import HeatmapBuilder
from circoskit.tracks.highlight import HighlightBuilder
from circoskit.tracks.histogram import HistogramBuilder
from circoskit.tracks.line import LineBuilder
from circoskit.tracks.scatter import ScatterBuilder
from circoskit.tracks.stack import StackBuilder
from circoskit.tracks.text import TextBuilder

__all__ = [
    "BuildResult",
    "ChordsBuilder",
    "HeatmapBuilder",
    "HighlightBuilder",
    "HistogramBuilder",
    "LineBuilder",
    "ScatterBuilder",
    "StackBuilder",
    "TextBuilder",
    "TrackBuilder",
    "TrackConfig",
    "TrackType",
    "available_track_types",
    "build_config",
    "get_builder",
    "register_builder",
]
