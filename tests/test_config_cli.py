"""Tests for configuration files, table loading and the CLI."""

import json
import subprocess
import sys

import pandas as pd
import pytest
import yaml
from click.testing import CliRunner

from circoskit import __version__
from circoskit.cli import main
from circoskit.errors import ConfigurationError
from circoskit.layout import AngularLayout
from circoskit.utils import (
    CircosConfig,
    TrackSpec,
    frame_to_records,
    intervals_frame,
    load_segments,
    load_track_data,
    validate_columns,
)


@pytest.fixture
def project(tmp_path):
    """A config file with segment and track tables next to it."""
    pd.DataFrame({"id": ["chr1", "chr2"], "length": [1000, 500]}).to_csv(
        tmp_path / "karyotype.tsv", sep="\t", index=False
    )
    pd.DataFrame({
        "block_id": ["chr1", "chr1", "chr9"],
        "start": [0, 100, 0],
        "end": [100, 200, 10],
        "value": [1.0, 3.0, 2.0],
    }).to_csv(tmp_path / "coverage.csv", index=False)
    pd.DataFrame({
        "source_id": ["chr1"], "source_start": [0], "source_end": [50],
        "target_id": ["chr2"], "target_start": [10], "target_end": [60],
    }).to_csv(tmp_path / "links.tsv", sep="\t", index=False)
    config = {
        "width": 600,
        "height": 600,
        "segments": "karyotype.tsv",
        "layout": {"inner_radius": 200, "outer_radius": 220, "gap": 0.05},
        "allocator": {"default_track_width": 20, "padding": 5, "direction": "inward"},
        "tracks": [
            {"id": "coverage", "type": "histogram", "data": "coverage.csv",
             "config": {"min": 0}},
            {"id": "links", "type": "chords", "data": "links.tsv"},
            {"id": "marks", "type": "text",
             "data": [{"block_id": "chr2", "position": 250, "value": "mark"}]},
        ],
    }
    path = tmp_path / "plot.yaml"
    path.write_text(yaml.safe_dump(config))
    return path


class TestLoading:
    """Test table loading helpers."""

    def test_load_segments_alias(self, project):
        """Test the length column alias."""
        segments = load_segments(project.parent / "karyotype.tsv")
        assert segments.ids == ["chr1", "chr2"]
        assert segments["chr2"].len == 500

    def test_missing_columns(self):
        """Test the error for a segment table without lengths."""
        with pytest.raises(ConfigurationError, match="missing required columns"):
            load_segments(pd.DataFrame({"id": ["a"]}))
        assert validate_columns(pd.DataFrame({"id": [], "len": []}))

    def test_missing_file(self, tmp_path):
        """Test the error for a missing table."""
        with pytest.raises(FileNotFoundError):
            load_track_data(str(tmp_path / "nope.csv"), "histogram")

    def test_chord_columns_nested(self):
        """Test flat chord columns becoming source/target anchors."""
        df = pd.DataFrame({
            "source_id": ["a"], "source_start": [1], "source_end": [2],
            "target_id": ["b"], "target_start": [3], "target_end": [4], "value": [5],
        })
        (record,) = frame_to_records(df, "chords")
        assert record["source"] == {"block_id": "a", "start": 1, "end": 2}
        assert record["target"]["block_id"] == "b"
        assert record["value"] == 5

    def test_stack_values_parsed(self):
        """Test comma-separated and JSON value lists."""
        df = pd.DataFrame({"block_id": ["a", "a"], "start": [0, 1], "end": [1, 2],
                           "values": ["1,2,3", "[4, 5]"]})
        records = frame_to_records(df, "stack")
        assert records[0]["values"] == [1.0, 2.0, 3.0]
        assert records[1]["values"] == [4, 5]

    def test_no_data(self):
        """Test a track without data."""
        with pytest.raises(ConfigurationError):
            load_track_data(None, "highlight")

    def test_intervals_frame(self):
        """Test the interval table columns."""
        layout = AngularLayout.build([{"id": "a", "len": 1}, {"id": "b", "len": 1}])
        df = intervals_frame(layout)
        assert list(df.columns) == [
            "segment_id", "len", "start_angle", "end_angle", "start_deg", "end_deg"
        ]
        assert df["start_deg"].iloc[0] == 0


class TestCircosConfig:
    """Test configuration files."""

    def test_load_yaml(self, project):
        """Test parsing nested sections."""
        config = CircosConfig.load(str(project))
        assert config.width == 600
        assert config.layout.inner_radius == 200
        assert config.allocator.direction == "inward"
        assert [t.id for t in config.tracks] == ["coverage", "links", "marks"]
        assert config.base_dir == str(project.parent)

    def test_yaml_json_round_trip(self, project, tmp_path):
        """Test writing and reading back both formats."""
        config = CircosConfig.load(str(project))
        config.to_yaml(str(tmp_path / "copy.yaml"))
        config.to_json(str(tmp_path / "copy.json"))
        from_yaml = CircosConfig.load(str(tmp_path / "copy.yaml"))
        from_json = CircosConfig.load(str(tmp_path / "copy.json"))
        assert from_yaml.to_dict() == config.to_dict()
        assert from_json.to_dict() == json.loads(json.dumps(config.to_dict()))

    @pytest.mark.parametrize("data", [
        {"colour": 1},
        {"layout": {"innner_radius": 1}},
        {"allocator": {"step": 1}},
        {"tracks": [{"id": "t"}]},
        {"tracks": [{"id": "t", "type": "pie"}]},
    ])
    def test_invalid_entries(self, data):
        """Test rejected configuration entries."""
        with pytest.raises((ConfigurationError, ValueError)):
            CircosConfig.from_dict(data)

    def test_unsupported_format(self, tmp_path):
        """Test an unknown config suffix."""
        with pytest.raises(ConfigurationError, match="Unsupported"):
            CircosConfig.load(str(tmp_path / "plot.toml"))

    def test_validate_warnings(self):
        """Test warnings for suspicious settings."""
        config = CircosConfig.from_dict({
            "width": 300, "height": 300,
            "segments": [{"id": "a", "len": 1}],
            "tracks": [{"id": "t", "type": "highlight"}, {"id": "t", "type": "text"}],
        })
        warnings = config.validate()
        assert any("Duplicate" in w for w in warnings)
        assert any("exceeds the canvas" in w for w in warnings)
        with pytest.raises(ConfigurationError, match="No segments"):
            CircosConfig().validate()

    def test_build_orchestrator(self, project):
        """Test assembling tracks from relative data paths."""
        orchestrator = CircosConfig.load(str(project)).build_orchestrator()
        scene = orchestrator.render()
        assert scene.track_ids == ["layout", "coverage", "links", "marks"]
        assert scene.bands["coverage"].outer_radius == 200
        assert scene.bands["links"].outer_radius == 175
        assert scene.error_count == 1
        assert TrackSpec.from_dict({"id": "x", "type": "line"}).config == {}


class TestCli:
    """Test the command line interface."""

    def test_version(self):
        """Test --version."""
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_render_svg(self, project, tmp_path):
        """Test rendering a config to SVG."""
        out = tmp_path / "out" / "plot.svg"
        result = CliRunner().invoke(main, ["render", "-c", str(project), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert out.read_text().startswith("<svg")
        assert "skipped" in result.output

    def test_render_png(self, project, tmp_path):
        """Test rendering through matplotlib."""
        out = tmp_path / "plot.png"
        result = CliRunner().invoke(
            main, ["render", "-c", str(project), "-o", str(out), "--dpi", "50",
                   "--track", "coverage"]
        )
        assert result.exit_code == 0, result.output
        assert out.stat().st_size > 0

    def test_render_strict(self, project, tmp_path):
        """Test that --strict fails on skipped records."""
        out = tmp_path / "plot.svg"
        result = CliRunner().invoke(
            main, ["render", "-c", str(project), "-o", str(out), "--strict"]
        )
        assert result.exit_code != 0
        assert "1 records were skipped" in result.output
        assert not out.exists()

    def test_render_bad_config(self, tmp_path):
        """Test a readable error for invalid configs."""
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"segments": [{"id": "a", "len": 1}],
                                        "layout": {"gap": 7}}))
        result = CliRunner().invoke(main, ["render", "-c", str(path), "-o", "x.svg"])
        assert result.exit_code != 0
        assert "Error" in result.output

    def test_layout_table(self, project, tmp_path):
        """Test the interval table on stdout and to a file."""
        result = CliRunner().invoke(main, ["layout", "-c", str(project)])
        assert result.exit_code == 0, result.output
        assert any(line.startswith("segment_id\tlen") for line in result.output.splitlines())
        out = tmp_path / "intervals.tsv"
        CliRunner().invoke(main, ["layout", "-c", str(project), "-o", str(out)])
        assert list(pd.read_csv(out, sep="\t")["segment_id"]) == ["chr1", "chr2"]

    def test_track_types(self):
        """Test listing the track types."""
        result = CliRunner().invoke(main, ["track-types"])
        assert result.exit_code == 0
        assert set(result.output.split()) == {
            "highlight", "histogram", "heatmap", "line", "scatter", "stack", "chords", "text"
        }

    def test_help_subprocess(self):
        """Test render --help through the module entry point."""
        result = subprocess.run(
            [sys.executable, "-m", "circoskit.cli", "render", "--help"],
            capture_output=True,
            text=True
        )
        assert result.returncode == 0
        assert "--config" in result.stdout
        assert "--strict" in result.stdout


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
