"""File I/O utilities for circosKit."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import numpy as np
import pandas as pd

from circoskit.errors import ConfigurationError
from circoskit.layout.angular import AngularLayout
from circoskit.layout.segments import SegmentSet
from circoskit.tracks.base import TrackType, records_from_frame
from circoskit.utils.validation import validate_columns, validate_file_exists

logger = logging.getLogger(__name__)

TAB_SUFFIXES = {".tsv", ".txt", ".bed", ".tab"}
CHORD_ENDS = ("source", "target")


def load_table(filepath: Union[str, Path]) -> pd.DataFrame:
    """
    Load a CSV or tab-separated table.

    Args:
        filepath: Path to the table; ``.tsv``, ``.txt``, ``.bed`` and
            ``.tab`` files are read as tab-separated

    Returns:
        DataFrame with the table contents
    """
    filepath = Path(filepath)
    validate_file_exists(str(filepath), "Table")
    sep = "\t" if filepath.suffix.lower() in TAB_SUFFIXES else ","
    df = pd.read_csv(filepath, sep=sep)
    logger.info(f"Loaded {len(df)} records from {filepath.name}")
    return df


def load_segments(source: Union[str, Path, pd.DataFrame, List[Dict[str, Any]]]) -> SegmentSet:
    """
    Load a segment set (karyotype) from a file, DataFrame or record list.

    ``length`` is accepted as an alias of the ``len`` column.
    """
    if isinstance(source, (str, Path)):
        df = load_table(source)
    elif isinstance(source, pd.DataFrame):
        df = source
    else:
        return SegmentSet.from_records(source)
    if "len" not in df.columns and "length" in df.columns:
        df = df.rename(columns={"length": "len"})
    validate_columns(df, description="Segment table")
    return SegmentSet.from_records(df)


def _nest_chord_columns(record: Dict[str, Any]) -> Dict[str, Any]:
    """Turn ``source_id``/``source_start``/... columns into nested anchors."""
    nested = {}
    for key, value in record.items():
        prefix, _, field = key.partition("_")
        if prefix in CHORD_ENDS and field:
            if field == "id":
                field = "block_id"
            nested.setdefault(prefix, {})[field] = value
        else:
            nested[key] = value
    return nested


def _parse_values(value: Any) -> Any:
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            return json.loads(text)
        return [float(v) for v in text.split(",") if v.strip()]
    return value


def frame_to_records(df: pd.DataFrame, track_type: Any) -> List[Dict[str, Any]]:
    """
    Records for a track from a flat table.

    Chord tables use ``source_id, source_start, source_end, target_id,
    target_start, target_end`` columns; stack tables hold comma-separated
    ``values``.
    """
    track_type = TrackType.parse(track_type)
    records = records_from_frame(df)
    if track_type is TrackType.CHORDS:
        records = [_nest_chord_columns(r) for r in records]
    elif track_type is TrackType.STACK and "values" in df.columns:
        for r in records:
            try:
                r["values"] = _parse_values(r["values"])
            except ValueError:
                # Left as is; the stack builder reports the record
                logger.debug(f"Unparsable stack values: {r['values']!r}")
    return records


def load_track_data(source: Any, track_type: Any) -> Any:
    """Track records from a table path, a DataFrame or an inline list."""
    if isinstance(source, (str, Path)):
        return frame_to_records(load_table(source), track_type)
    if isinstance(source, pd.DataFrame):
        return frame_to_records(source, track_type)
    if source is None:
        raise ConfigurationError("Track has no data")
    return source


def intervals_frame(layout: AngularLayout) -> pd.DataFrame:
    """Segment intervals of a layout as a DataFrame (angles in radians and degrees)."""
    df = pd.DataFrame(
        [
            {
                "segment_id": iv.segment_id,
                "len": iv.len,
                "start_angle": iv.start_angle,
                "end_angle": iv.end_angle,
            }
            for iv in layout.intervals
        ],
        columns=["segment_id", "len", "start_angle", "end_angle"],
    )
    df["start_deg"] = np.degrees(df["start_angle"])
    df["end_deg"] = np.degrees(df["end_angle"])
    return df


def save_intervals(layout: AngularLayout, filepath: Union[str, Path]) -> None:
    """Write the interval table as TSV."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    intervals_frame(layout).to_csv(filepath, sep="\t", index=False)
    logger.info(f"Saved {len(layout.intervals)} intervals to {filepath}")
