"""CLI entry point."""

import logging
from pathlib import Path

import click
from rich.console import Console

from research_council import __version__
from research_council.cli.commands.contexts import context_group, seed
from research_council.cli.commands.conversations import conversation_group
from research_council.cli.commands.graph import graph_group
from research_council.cli.commands.memory import memory_group
from research_council.cli.commands.reports import report_group
from research_council.config import Settings
from research_council.errors import ConfigurationError

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="council")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for the database and graph (default: $COUNCIL_DATA_DIR).",
)
@click.option(
    "--mock/--no-mock",
    default=None,
    help="Force mock replies on or off (default: $LLM_MOCK).",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context, data_dir: Path | None, mock: bool | None, verbose: bool
) -> None:
    """Research Council CLI.

    Runs phased research conversations with a panel of configurable agents.
    """
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    updates: dict = {}
    if data_dir is not None:
        updates["data_dir"] = data_dir
    if mock is not None:
        updates["llm_mock"] = mock
    if verbose:
        updates["log_level"] = "DEBUG"
    settings = settings.model_copy(update=updates)

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["console"] = console


cli.add_command(context_group, "context")
cli.add_command(seed)
cli.add_command(conversation_group, "conversation")
cli.add_command(memory_group, "memory")
cli.add_command(graph_group, "graph")
cli.add_command(report_group, "report")
