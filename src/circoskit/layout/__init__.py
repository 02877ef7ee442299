"""Segment partition, radius bands and coordinate transforms."""

from circoskit.layout.angular import (
    AngularLayout,
    AngularLayoutConfig,
    LabelsConfig,
    SegmentInterval,
    TicksConfig,
    build_intervals,
)
from circoskit.layout.radius import (
    RadiusAllocator,
    RadiusAllocatorConfig,
    RadiusBand,
    allocate,
)
from circoskit.layout.segments import Segment, SegmentSet
from circoskit.layout.transform import to_cartesian, to_polar

__all__ = [
    "AngularLayout",
    "AngularLayoutConfig",
    "LabelsConfig",
    "RadiusAllocator",
    "RadiusAllocatorConfig",
    "RadiusBand",
    "Segment",
    "SegmentInterval",
    "SegmentSet",
    "TicksConfig",
    "allocate",
    "build_intervals",
    "to_cartesian",
    "to_polar",
]
