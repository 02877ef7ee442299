"""Tests for the render orchestrator and interaction layer."""

import math

import pytest

from circoskit.errors import ConfigurationError
from circoskit.layout import RadiusAllocatorConfig, RadiusBand
from circoskit.layout.transform import to_cartesian
from circoskit.render.interaction import InteractionLayer
from circoskit.render.orchestrator import HitResult, RenderOrchestrator

SEGMENTS = [{"id": "A", "len": 100}, {"id": "B", "len": 200}]


def bars(n=3):
    return [
        {"id": f"bar{i}", "block_id": "A", "start": i * 10, "end": i * 10 + 10, "value": i + 1}
        for i in range(n)
    ]


@pytest.fixture
def orchestrator():
    orch = RenderOrchestrator(
        RadiusAllocatorConfig(base_radius=200, default_track_width=10, padding=2,
                              direction="inward")
    )
    orch.set_layout(SEGMENTS, {"gap": math.radians(5), "labels": {"display": False}})
    return orch


class TestRegistry:
    """Test track registration."""

    def test_render_requires_layout(self):
        """Test the error before set_layout."""
        with pytest.raises(ConfigurationError, match="No layout"):
            RenderOrchestrator().render()

    def test_layout_ring_first(self, orchestrator):
        """Test that the layout arcs lead the scene."""
        orchestrator.add_track("h", "histogram", bars(), {"min": 0})
        scene = orchestrator.render()
        assert scene.track_ids == ["layout", "h"]
        assert [p.record_id for p in scene.for_track("layout")] == ["A", "B"]

    def test_reserved_id(self, orchestrator):
        """Test that the layout track id cannot be registered."""
        with pytest.raises(ConfigurationError, match="reserved"):
            orchestrator.add_track("layout", "highlight", [])

    def test_bad_heatmap_color_rejected(self, orchestrator):
        """Test that a non-colormap heatmap color fails at registration."""
        orchestrator.add_track("a", "highlight", bars(1))
        with pytest.raises(ConfigurationError, match="colormap"):
            orchestrator.add_track(
                "h", "heatmap", [{"block_id": "A", "start": 0, "end": 10, "value": 1}],
                {"color": "#ff0000"},
            )
        scene = orchestrator.render()
        assert scene.track_ids == ["layout", "a"]

    def test_invalid_layout_keeps_previous(self, orchestrator):
        """Test that a failed set_layout leaves the old layout in place."""
        previous = orchestrator.layout
        with pytest.raises(ConfigurationError):
            orchestrator.set_layout(SEGMENTS, {"gap": 4.0})
        assert orchestrator.layout is previous

    def test_registration_order(self, orchestrator):
        """Test z-order by registration and in-place replacement."""
        orchestrator.add_track("first", "histogram", bars())
        orchestrator.add_track("second", "highlight", bars())
        orchestrator.add_track("first", "scatter", bars())
        scene = orchestrator.render()
        assert scene.track_ids == ["layout", "first", "second"]
        assert scene.bands["first"] == RadiusBand(190, 200)
        assert scene.bands["second"] == RadiusBand(178, 188)


class TestRender:
    """Test scene assembly."""

    def test_idempotent(self, orchestrator):
        """Test that repeated renders give identical scenes."""
        orchestrator.add_track("h", "histogram", bars(), {"min": 0})
        orchestrator.add_track("c", "chords", [
            {"source": {"block_id": "A", "start": 0, "end": 5},
             "target": {"block_id": "B", "start": 10, "end": 20}},
        ])
        first = orchestrator.render()
        second = orchestrator.render()
        assert first.primitives == second.primitives
        assert all(p.track_id is not None for p in first.primitives)

    def test_parallel_matches_serial(self, orchestrator):
        """Test building tracks in worker threads."""
        for i in range(4):
            orchestrator.add_track(f"t{i}", "histogram", bars(i + 1))
        serial = orchestrator.render().primitives
        orchestrator.set_layout(SEGMENTS, {"gap": math.radians(5), "labels": {"display": False}})
        parallel = orchestrator.render(workers=4).primitives
        assert parallel == serial

    def test_remove_shifts_later_tracks(self, orchestrator):
        """Test that removal re-allocates trailing automatic tracks."""
        for track_id in ("a", "b", "c"):
            orchestrator.add_track(track_id, "highlight", bars(1))
        before = orchestrator.render().bands
        orchestrator.remove_track("b")
        after = orchestrator.render()
        assert after.bands["a"] == before["a"]
        assert after.bands["c"] == before["b"]
        assert "b" not in after.track_ids
        assert after.for_track("c")[0].outer_radius == before["b"].outer_radius

    def test_remove_tracks_forms(self, orchestrator):
        """Test removing by id, by list and all at once."""
        for track_id in ("a", "b", "c", "d"):
            orchestrator.add_track(track_id, "highlight", bars(1))
        orchestrator.remove_tracks("a")
        orchestrator.remove_tracks(["b", "missing"])
        assert [t.track_id for t in orchestrator.tracks] == ["c", "d"]
        orchestrator.remove_tracks()
        assert orchestrator.tracks == []
        assert orchestrator.render().track_ids == ["layout"]

    def test_errors_reported_per_track(self, orchestrator):
        """Test the skipped-record side channel."""
        records = bars(2) + [{"id": "bad", "block_id": "Z", "start": 0, "end": 1, "value": 1}]
        orchestrator.add_track("h", "histogram", records)
        scene = orchestrator.render()
        assert scene.error_count == 1
        (error,) = scene.errors["h"]
        assert error.record_id == "bad"
        assert error.track_id == "h"
        assert len(scene.for_track("h")) == 2

    def test_render_subset(self, orchestrator):
        """Test rendering selected tracks only."""
        orchestrator.add_track("a", "highlight", bars(1))
        orchestrator.add_track("b", "highlight", bars(1))
        assert orchestrator.render(["b"]).track_ids == ["layout", "b"]


class TestInteraction:
    """Test hit testing, tooltips and selection."""

    @pytest.fixture
    def scene_orchestrator(self, orchestrator):
        orchestrator.add_track(
            "h", "histogram", bars(), {"min": 0, "max": 3, "tooltip": "{id}: {value}"}
        )
        orchestrator.render()
        return orchestrator

    def point_in_bar(self, orchestrator, position, radius=191):
        return to_cartesian(orchestrator.layout.to_angle("A", position), radius)

    def test_hit_before_render(self, orchestrator):
        """Test that nothing is hit before a render."""
        assert orchestrator.hit_test(0, -195) is None

    def test_hits_cleared_by_changes(self, orchestrator):
        """Test that replacing a track or the layout drops stale hits."""
        orchestrator.add_track(
            "h", "highlight", [{"id": "old", "block_id": "A", "start": 0, "end": 100}]
        )
        orchestrator.render()
        point = to_cartesian(orchestrator.layout.to_angle("A", 50), 195)
        assert orchestrator.hit_test(*point) == HitResult("h", "old")

        orchestrator.add_track(
            "h", "highlight", [{"id": "new", "block_id": "A", "start": 0, "end": 1}]
        )
        assert orchestrator.hit_test(*point) is None
        orchestrator.render()
        assert orchestrator.hit_test(*point) is None
        inside = to_cartesian(orchestrator.layout.to_angle("A", 0.5), 195)
        assert orchestrator.hit_test(*inside) == HitResult("h", "new")

        orchestrator.set_layout(SEGMENTS, {"gap": math.radians(5), "labels": {"display": False}})
        assert orchestrator.hit_test(*to_cartesian(math.radians(200), 275)) is None

    def test_hit_test(self, scene_orchestrator):
        """Test topmost hits and misses."""
        hit = scene_orchestrator.hit_test(*self.point_in_bar(scene_orchestrator, 15))
        assert hit == HitResult("h", "bar1")
        ring = scene_orchestrator.hit_test(*to_cartesian(math.radians(200), 275))
        assert ring == HitResult("layout", "B")
        assert scene_orchestrator.hit_test(0, 0) is None

    def test_tooltip(self, scene_orchestrator):
        """Test tooltip text from a format string and a callable."""
        assert scene_orchestrator.tooltip("h", "bar2") == "bar2: 3"
        assert scene_orchestrator.tooltip("layout", "A") is None
        scene_orchestrator.add_track(
            "h", "histogram", bars(), {"tooltip": lambda r: f"value={r['value']}"}
        )
        assert scene_orchestrator.tooltip("h", "bar0") == "value=1"

    def test_record_lookup_composite_id(self, orchestrator):
        """Test that stack part ids resolve to their record."""
        orchestrator.add_track("s", "stack", [
            {"id": "r1", "block_id": "A", "start": 0, "end": 10, "values": [1, 2]},
        ])
        assert orchestrator.record("s", ("r1", 1))["values"] == [1, 2]
        assert orchestrator.record("missing", "r1") is None

    def test_hover_and_click(self, scene_orchestrator):
        """Test callbacks and selection toggling."""
        layer = InteractionLayer(scene_orchestrator)
        hovered, clicked = [], []
        layer.on("hover", lambda hit, text: hovered.append(text))
        layer.on("click", lambda hit, selected: clicked.append(selected))
        x, y = self.point_in_bar(scene_orchestrator, 5)

        assert layer.hover(x, y) == "bar0: 1"
        assert layer.hover(0, 0) is None
        assert hovered == ["bar0: 1", None]

        layer.click(x, y)
        assert layer.selection == {("h", "bar0")}
        layer.click(x, y)
        assert layer.selection == set()
        assert clicked == [True, False]

    def test_unknown_event(self, scene_orchestrator):
        """Test rejection of unknown events."""
        with pytest.raises(ValueError):
            InteractionLayer(scene_orchestrator).on("drag", print)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
