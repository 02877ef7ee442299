"""Utility modules for circosKit."""

from circoskit.utils.config import (
    DEFAULT_HEIGHT,
    DEFAULT_TRACK_WIDTH,
    DEFAULT_WIDTH,
    CircosConfig,
    TrackSpec,
)
from circoskit.utils.io import (
    frame_to_records,
    intervals_frame,
    load_segments,
    load_table,
    load_track_data,
    save_intervals,
)
from circoskit.utils.logging_utils import setup_logger
from circoskit.utils.validation import validate_columns, validate_file_exists
