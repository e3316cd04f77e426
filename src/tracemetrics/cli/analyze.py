"""Analyze a trace file and print its page load metrics."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from ..analysis.report import PageLoadReport, analyze_trace, report_to_dict
from ..core.errors import TraceMetricsError
from ._console import info, warning


@click.command(help="Compute page load metrics for a trace file.")
@click.argument("trace", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--all-frames",
    is_flag=True,
    help="Report metrics for every frame instead of only the main frame.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Emit results as JSON.",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Log pipeline progress to stderr.",
)
def analyze(
    trace: Path,
    all_frames: bool,
    json_output: bool,
    verbose: bool,
) -> None:
    """Run the page load pipeline over a trace."""

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    try:
        report = analyze_trace(trace, main_frame_only=not all_frames)
    except (TraceMetricsError, RuntimeError) as exc:
        raise click.ClickException(str(exc)) from exc

    if json_output:
        click.echo(json.dumps(report_to_dict(report), indent=2))
        return

    _print_report(report)


def _print_report(report: PageLoadReport) -> None:
    info(f"Trace: {report.trace_path}")
    info(f"Events: {report.event_count}")
    info(f"Main frame: {report.main_frame_id or 'unknown'}")

    if report.warnings:
        info("")
        for warn_msg in report.warnings:
            warning(f"Warning: {warn_msg}")

    for frame_id, navigations in report.frames.items():
        info("")
        info(f"Frame {frame_id}:")
        for navigation_id, navigation in navigations.items():
            info(f"  Navigation {navigation_id} ({navigation['url'] or 'no url'})")
            for metric in navigation["metrics"]:
                suffix = " (estimated)" if metric["estimated"] else ""
                info(
                    f"    {metric['metric']:4} {metric['score']:>10}  "
                    f"{metric['classification']}{suffix}"
                )

    if report.markers:
        info("")
        info("Markers:")
        for marker in report.markers:
            info(f"  {marker['name']:36} +{marker['relative_us'] / 1000:.1f}ms")


__all__ = ["analyze"]
