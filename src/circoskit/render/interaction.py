"""Pointer interaction on top of the orchestrator's hit testing."""

import logging
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from circoskit.render.orchestrator import HitResult, RenderOrchestrator

logger = logging.getLogger(__name__)

EVENTS = ("hover", "click")


class InteractionLayer:
    """
    Hover and click handling for one orchestrator.

    Coordinates are relative to the circle center. The host owns the
    tooltip widget; this class only produces its text.
    """

    def __init__(self, orchestrator: RenderOrchestrator):
        self.orchestrator = orchestrator
        self._callbacks: Dict[str, List[Callable[..., Any]]] = {e: [] for e in EVENTS}
        self._selection: Set[Tuple[str, Any]] = set()

    def on(self, event: str, callback: Callable[..., Any]) -> "InteractionLayer":
        """
        Register a callback.

        ``hover`` callbacks receive ``(hit, tooltip_text)``; ``click``
        callbacks receive ``(hit, selected)``. ``hit`` may be None.
        """
        if event not in self._callbacks:
            raise ValueError(f"Unknown event: {event}. Available: {list(EVENTS)}")
        self._callbacks[event].append(callback)
        return self

    def hover(self, x: float, y: float) -> Optional[str]:
        hit = self.orchestrator.hit_test(x, y)
        text = None
        if hit is not None:
            text = self.orchestrator.tooltip(hit.track_id, hit.record_id)
        for callback in self._callbacks["hover"]:
            callback(hit, text)
        return text

    def click(self, x: float, y: float) -> Optional[HitResult]:
        """Toggle selection of the record under the pointer."""
        hit = self.orchestrator.hit_test(x, y)
        selected = False
        if hit is not None:
            key = (hit.track_id, _hashable(hit.record_id))
            if key in self._selection:
                self._selection.discard(key)
            else:
                self._selection.add(key)
                selected = True
            logger.debug(f"{'Selected' if selected else 'Deselected'} {key}")
        for callback in self._callbacks["click"]:
            callback(hit, selected)
        return hit

    @property
    def selection(self) -> Set[Tuple[str, Any]]:
        return set(self._selection)

    def clear_selection(self) -> None:
        self._selection.clear()


def _hashable(value: Any) -> Any:
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value
