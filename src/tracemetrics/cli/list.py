"""List registered trace handlers."""

from __future__ import annotations

import click

from tracemetrics.core.registry import HandlerRegistry

from ._console import error, info


@click.group(help="List available components")
def list_cmd() -> None:
    """List available components in the registry."""


@list_cmd.command("handlers", help="List available trace handlers")
def list_handlers() -> None:
    """List all registered handlers with their dependencies."""
    items = HandlerRegistry.items()

    if not items:
        error("No handlers registered")
        return

    info("Handlers:")
    for name, _handler_cls in items:
        deps = ", ".join(HandlerRegistry.dependencies_of(name)) or "-"
        info(f"  {name:20} deps: {deps}")


__all__ = ["list_cmd"]
