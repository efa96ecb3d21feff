"""Entity graph commands."""

import click
from rich.console import Console

from research_council.cli.commands import fail, get_council
from research_council.cli.output import create_graph_tables


@click.group("graph")
def graph_group() -> None:
    """Inspect the entity graph."""
    pass


@graph_group.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show entity graph size and entity types."""
    console: Console = ctx.obj["console"]
    stats = get_council(ctx).graph.get_stats()
    console.print(
        f"[cyan]Entity Graph:[/cyan] {stats.node_count} entities, "
        f"{stats.edge_count} relations"
    )
    if stats.entity_types:
        console.print(f"  Entity types: {', '.join(stats.entity_types)}")


@graph_group.command()
@click.option("--limit", default=50, show_default=True, help="Maximum entities.")
@click.pass_context
def snapshot(ctx: click.Context, limit: int) -> None:
    """Show the most-mentioned entities and the relations among them."""
    console: Console = ctx.obj["console"]
    snap = get_council(ctx).graph.snapshot(limit)
    if not snap.entities:
        console.print("[yellow]The graph is empty.[/yellow]")
        return
    entities, relations = create_graph_tables(snap)
    console.print(entities)
    if snap.relations:
        console.print(relations)


@graph_group.command()
@click.argument("entity_id")
@click.pass_context
def neighbors(ctx: click.Context, entity_id: str) -> None:
    """Show the outgoing relations of one entity."""
    console: Console = ctx.obj["console"]
    graph = get_council(ctx).graph
    if graph.get_entity(entity_id) is None:
        fail(console, f"Entity not found: {entity_id}")
    edges = graph.get_neighbors(entity_id)
    if not edges:
        console.print(f"[yellow]{entity_id} has no outgoing relations.[/yellow]")
        return
    for relation_type, target in edges:
        console.print(f"{entity_id} [magenta]{relation_type}[/magenta] {target}")
