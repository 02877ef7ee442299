"""Tests for chord ribbons."""

import math

import pytest

from circoskit.errors import SegmentLookupError
from circoskit.layout import AngularLayout, AngularLayoutConfig, RadiusBand
from circoskit.layout.transform import to_cartesian
from circoskit.render.paths import flatten
from circoskit.tracks import build_config, get_builder
from circoskit.tracks.chords import control_point, ribbon

BAND = RadiusBand(100, 110)


@pytest.fixture
def layout():
    return AngularLayout.build(
        [{"id": "A", "len": 100}, {"id": "B", "len": 200}],
        AngularLayoutConfig(gap=math.radians(5)),
    )


def build(records, layout, **config):
    return get_builder("chords").build(records, build_config("chords", config), layout, BAND)


def chord(source, target, **extra):
    record = {
        "source": {"block_id": source[0], "start": source[1], "end": source[2]},
        "target": {"block_id": target[0], "start": target[1], "end": target[2]},
    }
    record.update(extra)
    return record


def _orientation(p, q, r):
    return (q[0] - p[0]) * (r[1] - p[1]) - (q[1] - p[1]) * (r[0] - p[0])


def _crosses(a, b, c, d):
    """Proper crossing of segments ab and cd (shared endpoints do not count)."""
    o1, o2 = _orientation(a, b, c), _orientation(a, b, d)
    o3, o4 = _orientation(c, d, a), _orientation(c, d, b)
    return o1 * o2 < -1e-9 and o3 * o4 < -1e-9


def self_intersects(points):
    segments = list(zip(points[:-1], points[1:]))
    for i in range(len(segments)):
        for j in range(i + 2, len(segments)):
            if _crosses(*segments[i], *segments[j]):
                return True
    return False


class TestControlPoint:
    """Test the curvature parameter."""

    def test_full_curvature_is_center(self):
        """Test that curvature 1 pulls the control point to the origin."""
        assert control_point(0.3, 2.0, 100, 1.0) == pytest.approx((0, 0))

    def test_zero_curvature_is_midpoint(self):
        """Test that curvature 0 gives the chord midpoint."""
        xa, ya = to_cartesian(0.3, 100)
        xb, yb = to_cartesian(2.0, 100)
        assert control_point(0.3, 2.0, 100, 0.0) == pytest.approx(((xa + xb) / 2, (ya + yb) / 2))


class TestRibbon:
    """Test ribbon outlines."""

    def test_command_sequence(self):
        """Test arc, curve, arc, curve, close."""
        commands = ribbon((0.1, 0.3), (2.0, 2.4), 100).commands
        ops = [c[0] for c in commands]
        assert ops == ["M", "C", "Q", "C", "Q", "Z"]
        assert commands[0][1:] == pytest.approx(to_cartesian(0.1, 100))
        assert commands[2][-2:] == pytest.approx(to_cartesian(2.0, 100))
        assert commands[4][-2:] == pytest.approx(to_cartesian(0.1, 100))

    def test_zero_length_ranges(self):
        """Test that point anchors give a curve pair."""
        ops = [c[0] for c in ribbon((1.0, 1.0), (3.0, 3.0), 100).commands]
        assert ops == ["M", "Q", "Q", "Z"]


class TestChordsBuilder:
    """Test the chord builder."""

    def test_identical_anchors(self, layout):
        """Test that identical anchors give a closed loop."""
        result = build([chord(("A", 10, 20), ("A", 10, 20))], layout)
        assert not result.errors
        (path,) = result.primitives
        assert path.closed
        assert path.commands[-1] == ("Z",)
        polyline = flatten(path.commands)[0]
        assert polyline[0] == pytest.approx(polyline[-1])

    def test_adjacent_ranges_across_boundary(self, layout):
        """Test a continuous, non-self-intersecting ribbon across segments."""
        result = build([chord(("A", 90, 100), ("B", 0, 10))], layout)
        (path,) = result.primitives
        polylines = flatten(path.commands, steps=32)
        assert len(polylines) == 1
        points = polylines[0]
        steps = [math.dist(p, q) for p, q in zip(points, points[1:])]
        assert max(steps) < 20
        assert not self_intersects(points)

    def test_anchors_on_band_inner_radius(self, layout):
        """Test that arc ends sit on the band inner radius by default."""
        result = build([chord(("A", 0, 50), ("B", 0, 50))], layout)
        (path,) = result.primitives
        x, y = path.commands[0][1:]
        assert math.hypot(x, y) == pytest.approx(100)
        custom = build([chord(("A", 0, 50), ("B", 0, 50))], layout, radius=80)
        x, y = custom.primitives[0].commands[0][1:]
        assert math.hypot(x, y) == pytest.approx(80)

    def test_overlapping_same_segment(self, layout):
        """Test overlapping ranges on one segment."""
        result = build([chord(("B", 0, 100), ("B", 50, 150))], layout)
        assert len(result.primitives) == 1
        assert not result.errors

    def test_bad_anchors(self, layout):
        """Test missing and unknown anchors."""
        result = build([
            {"source": {"block_id": "A", "start": 0, "end": 1}},
            chord(("A", 0, 1), ("Q", 0, 1)),
            chord(("A", 0, 1), ("B", 0, 1), value="many"),
        ], layout, color="plasma")
        assert result.primitives == []
        assert len(result.errors) == 3
        assert isinstance(result.errors[1], SegmentLookupError)

    @pytest.mark.parametrize("color", [None, "#00ff00"])
    def test_value_ignored_without_colormap(self, layout, color):
        """Test that values only matter when coloring by a colormap."""
        result = build([
            chord(("A", 0, 1), ("B", 0, 1), value=3),
            chord(("A", 0, 1), ("B", 0, 1), value="many"),
        ], layout, color=color)
        assert not result.errors
        assert len(result.primitives) == 2
        for primitive in result.primitives:
            assert primitive.style.get("fill") == color

    def test_colors(self, layout):
        """Test value coloring and record overrides."""
        result = build([
            chord(("A", 0, 1), ("B", 0, 1), value=1),
            chord(("A", 0, 1), ("B", 0, 1), value=5),
            chord(("A", 0, 1), ("B", 0, 1), value=5, color="#123456"),
        ], layout, color="plasma")
        fills = [p.style["fill"] for p in result.primitives]
        assert fills[0] != fills[1]
        assert fills[2] == "#123456"
        assert result.primitives[0].style["opacity"] == 0.7
