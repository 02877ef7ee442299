"""Exception hierarchy for circosKit."""

from typing import Any, Optional


class CircosError(Exception):
    """Base class for all circosKit errors."""


class ConfigurationError(CircosError, ValueError):
    """Invalid segment set, layout or track configuration."""


class RecordError(CircosError):
    """
    A single malformed data record.

    Builders collect these instead of raising them, so one bad record
    never aborts the rest of the track.
    """

    def __init__(self, record_id: Any, reason: str, track_id: Optional[str] = None):
        self.record_id = record_id
        self.reason = reason
        self.track_id = track_id
        super().__init__(f"record {record_id!r}: {reason}")


class SegmentLookupError(RecordError, LookupError):
    """A record references a segment id that is not in the layout."""

    def __init__(self, record_id: Any, segment_id: Any, track_id: Optional[str] = None):
        self.segment_id = segment_id
        super().__init__(record_id, f"unknown segment {segment_id!r}", track_id)
