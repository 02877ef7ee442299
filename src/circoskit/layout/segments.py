"""Segment definitions forming the base partition of the circle."""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

import pandas as pd

from circoskit.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    """A named range of the circle, e.g. one chromosome."""

    id: str
    len: float
    label: Optional[str] = None
    color: Optional[str] = None

    @property
    def display_label(self) -> str:
        return self.label if self.label is not None else self.id

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Segment":
        """Create a segment from a mapping with ``id`` and ``len`` (or ``length``)."""
        if "id" not in d:
            raise ConfigurationError(f"Segment record without id: {dict(d)}")
        length = d.get("len", d.get("length"))
        if length is None:
            raise ConfigurationError(f"Segment {d['id']!r} has no len")
        try:
            length = float(length)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Segment {d['id']!r} has a non-numeric len: {length!r}") from None
        label = d.get("label")
        color = d.get("color")
        return cls(
            id=str(d["id"]),
            len=length,
            label=None if _is_missing(label) else str(label),
            color=None if _is_missing(color) else str(color),
        )


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


class SegmentSet:
    """
    Ordered, validated collection of segments.

    Ids must be unique and every length must be a positive finite number.
    The order given is the order the segments appear clockwise.
    """

    def __init__(self, segments: Iterable[Segment]):
        self._segments: List[Segment] = list(segments)
        self._index: Dict[str, int] = {}
        for i, seg in enumerate(self._segments):
            if seg.id in self._index:
                raise ConfigurationError(f"Duplicate segment id: {seg.id!r}")
            if not math.isfinite(seg.len) or seg.len <= 0:
                raise ConfigurationError(
                    f"Segment {seg.id!r} must have a positive length, got {seg.len}"
                )
            self._index[seg.id] = i

    @classmethod
    def from_records(
        cls,
        records: Union[pd.DataFrame, Iterable[Union[Segment, Mapping[str, Any]]]],
    ) -> "SegmentSet":
        """
        Build a segment set from mappings, Segment objects or a DataFrame.

        Args:
            records: Segment definitions in display order

        Returns:
            Validated SegmentSet

        Raises:
            ConfigurationError: On duplicate ids or non-positive lengths
        """
        if isinstance(records, pd.DataFrame):
            records = records.to_dict("records")
        segments = [
            r if isinstance(r, Segment) else Segment.from_dict(r) for r in records
        ]
        logger.debug(f"Loaded {len(segments)} segments")
        return cls(segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def __contains__(self, segment_id: object) -> bool:
        return segment_id in self._index

    def __getitem__(self, segment_id: str) -> Segment:
        try:
            return self._segments[self._index[segment_id]]
        except KeyError:
            raise KeyError(segment_id) from None

    @property
    def ids(self) -> List[str]:
        return [seg.id for seg in self._segments]

    @property
    def total_length(self) -> float:
        return sum(seg.len for seg in self._segments)
