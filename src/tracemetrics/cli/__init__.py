"""Command-line interface for tracemetrics (Click-based)."""

from __future__ import annotations

import click

# Import to trigger registry decorators
from tracemetrics import handlers  # noqa: F401

from .analyze import analyze
from .list import list_cmd


@click.group(help="Trace analysis CLI tool")
def cli() -> None:
    """Top-level CLI group."""


cli.add_command(analyze, "analyze")
cli.add_command(list_cmd, "list")


def main() -> None:
    """CLI entry point for console scripts."""
    cli()


__all__ = ["cli", "main"]
