"""Memory ledger commands."""

import click
from rich.console import Console

from research_council.cli.commands import fail, get_council
from research_council.cli.output import create_memories_table
from research_council.errors import CouncilError
from research_council.memory.ledger import MemoryFilters
from research_council.memory.models import MemoryType


@click.group("memory")
def memory_group() -> None:
    """Query and manage extracted memories."""
    pass


@memory_group.command("list")
@click.option("--type", "memory_type", type=click.Choice([t.value for t in MemoryType]))
@click.option("--source", help="'user' or an agent context ID.")
@click.option("--conversation", "conversation_id", help="Conversation ID.")
@click.option("--min-importance", type=click.FloatRange(0.0, 1.0))
@click.option("--model", help="Substring of the extracting or classifying model.")
@click.option("-q", "--query", "q", help="Substring of the memory text.")
@click.option(
    "--sort",
    type=click.Choice(["new", "importance", "confidence"]),
    default="new",
    show_default=True,
)
@click.option("--limit", default=200, show_default=True)
@click.pass_context
def list_memories(
    ctx: click.Context,
    memory_type: str | None,
    source: str | None,
    conversation_id: str | None,
    min_importance: float | None,
    model: str | None,
    q: str | None,
    sort: str,
    limit: int,
) -> None:
    """List memories matching the given filters."""
    console: Console = ctx.obj["console"]
    records = get_council(ctx).ledger.search(
        MemoryFilters(
            type=memory_type,
            source=source,
            conversation_id=conversation_id,
            min_importance=min_importance,
            model=model,
            q=q,
        ),
        sort=sort,
        limit=limit,
    )
    if not records:
        console.print("[yellow]No memories found.[/yellow]")
        return
    console.print(create_memories_table(records))


@memory_group.command("extract")
@click.argument("message_id")
@click.pass_context
def extract(ctx: click.Context, message_id: str) -> None:
    """Run memory extraction for one message now.

    Running it again for the same message stores duplicates.
    """
    console: Console = ctx.obj["console"]
    try:
        records = get_council(ctx).memory_pipeline.extract_for_message(message_id)
    except CouncilError as e:
        fail(console, e)
    console.print(f"[green]Extracted {len(records)} memories.[/green]")
    if records:
        console.print(create_memories_table(records))


@memory_group.command("forget")
@click.argument("memory_id")
@click.pass_context
def forget(ctx: click.Context, memory_id: str) -> None:
    """Delete a memory."""
    console: Console = ctx.obj["console"]
    if not get_council(ctx).ledger.forget(memory_id):
        fail(console, f"Memory not found: {memory_id}")
    console.print(f"[green]Forgot[/green] {memory_id}")
