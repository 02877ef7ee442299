"""
circosKit CLI - Command Line Interface for circular plots.

Usage:
    circos <command> [options]
"""

import logging
import sys
from pathlib import Path

import click

from circoskit import __version__
from circoskit.errors import CircosError


@click.group()
@click.version_option(version=__version__, prog_name="circosKit")
def main():
    """circosKit - Circos-style circular plots from tabular data.

    Use 'circos <command> --help' for detailed usage of each command.
    """
    pass


def _load(config_file, verbose, log_file=None):
    from circoskit.utils.config import CircosConfig
    from circoskit.utils.logging_utils import setup_logger

    setup_logger(level=logging.DEBUG if verbose else logging.INFO, log_file=log_file)
    try:
        return CircosConfig.load(config_file)
    except (CircosError, OSError) as e:
        raise click.ClickException(str(e)) from e


# ============================================================================
# Rendering Commands
# ============================================================================

@main.command()
@click.option("-c", "--config", "config_file", required=True, help="Plot config file (YAML/JSON)")
@click.option("-o", "--output", required=True, help="Output file (.svg, .png, .pdf)")
@click.option("--dpi", default=100, help="Resolution for raster output")
@click.option("--track", "track_ids", multiple=True, help="Only render these track ids")
@click.option("--strict", is_flag=True, help="Fail when any record is skipped")
@click.option("--log-file", help="Also write the log to this file")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
def render(config_file, output, dpi, track_ids, strict, log_file, verbose):
    """Render a plot described by a config file.

    SVG output is written directly; other formats go through matplotlib.
    Skipped records are reported on stderr and the plot is still written
    unless --strict is given.
    """
    from circoskit.render.mpl import save_figure
    from circoskit.render.svg import write_svg

    config = _load(config_file, verbose, log_file)
    try:
        orchestrator = config.build_orchestrator()
        scene = orchestrator.render(track_ids or None)
    except (CircosError, OSError) as e:
        raise click.ClickException(str(e)) from e

    for track_id, errors in scene.errors.items():
        for error in errors:
            click.echo(f"[{track_id}] skipped {error}", err=True)
    if strict and scene.error_count:
        raise click.ClickException(f"{scene.error_count} records were skipped")

    if Path(output).suffix.lower() == ".svg":
        write_svg(scene, output, config.width, config.height)
    else:
        save_figure(scene, output, config.width, config.height, dpi)
    click.echo(f"Wrote {output} ({len(scene.primitives)} primitives)")


@main.command()
@click.option("-c", "--config", "config_file", required=True, help="Plot config file (YAML/JSON)")
@click.option("-o", "--output", help="Output TSV (default: stdout)")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
def layout(config_file, output, verbose):
    """Print the angular interval of every segment.

    Columns: segment_id, len, start/end angle in radians and degrees.
    """
    from circoskit.layout.angular import AngularLayout
    from circoskit.utils.io import intervals_frame, load_segments, save_intervals

    config = _load(config_file, verbose)
    try:
        config.validate()
        segments = load_segments(config.resolve_path(config.segments))
        computed = AngularLayout(segments, config.layout)
    except (CircosError, OSError) as e:
        raise click.ClickException(str(e)) from e

    if output:
        save_intervals(computed, output)
    else:
        intervals_frame(computed).to_csv(sys.stdout, sep="\t", index=False)


@main.command("track-types")
def track_types():
    """List the available track types."""
    from circoskit.tracks import available_track_types

    for name in available_track_types():
        click.echo(name)


if __name__ == "__main__":
    main()
