"""Command groups and shared helpers."""

import click
from rich.console import Console

from research_council.council import ResearchCouncil


def get_council(ctx: click.Context) -> ResearchCouncil:
    """Open the council once per invocation and close it on exit."""
    root = ctx.find_root()
    council = root.obj.get("council")
    if council is None:
        council = root.with_resource(ResearchCouncil(root.obj["settings"]))
        root.obj["council"] = council
    return council


def fail(console: Console, error: Exception | str) -> None:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error:[/red] {error}")
    raise click.exceptions.Exit(1)
