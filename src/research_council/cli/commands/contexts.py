"""Context hierarchy commands."""

from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from research_council.cli.commands import fail, get_council
from research_council.cli.output import create_contexts_table, create_resolution_table
from research_council.contexts.models import (
    AgentType,
    ContextLevel,
    ContextNode,
    ContextProperties,
    ModelSelection,
    Traits,
)
from research_council.contexts.seed import seed_hierarchy
from research_council.errors import CouncilError


def parse_assignments(pairs: tuple[str, ...]) -> dict[str, Any]:
    """Turn ``key=value`` pairs into a dict, reading values as YAML scalars.

    ``null`` (or an empty value) clears a key so it is inherited again.
    """
    result: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected key=value, got {pair!r}")
        result[key.strip()] = yaml.safe_load(raw) if raw.strip() else None
    return result


def _model_fields(
    provider: str | None,
    model: str | None,
    temperature: float | None,
    max_tokens: int | None,
) -> dict[str, Any]:
    fields = {
        "provider": provider,
        "model": model,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    return {k: v for k, v in fields.items() if v is not None}


_model_options = [
    click.option("--provider", help="Model provider (openai, anthropic, gemini)."),
    click.option("--model", "model_name", help="Model identifier."),
    click.option("--temperature", type=float, help="Sampling temperature."),
    click.option("--max-tokens", type=int, help="Reply token limit."),
    click.option("--prop", "props", multiple=True, help="Property key=value."),
    click.option("--trait", "traits", multiple=True, help="Trait name=value."),
]


def model_options(func):
    for option in reversed(_model_options):
        func = option(func)
    return func


@click.group("context")
def context_group() -> None:
    """Manage the context hierarchy."""
    pass


@context_group.command("list")
@click.pass_context
def list_contexts(ctx: click.Context) -> None:
    """List all contexts, outermost level first."""
    console: Console = ctx.obj["console"]
    nodes = get_council(ctx).contexts.list_all()
    if not nodes:
        console.print("[yellow]No contexts found.[/yellow] Try `council seed`.")
        return
    console.print(create_contexts_table(nodes))


@context_group.command("create")
@click.argument("name")
@click.option(
    "--level",
    type=click.Choice([level.value for level in ContextLevel]),
    required=True,
)
@click.option("--parent", "parent_id", help="Parent context ID.")
@click.option(
    "--agent-type",
    type=click.Choice([t.value for t in AgentType]),
    help="Role, required for Agent level.",
)
@model_options
@click.pass_context
def create_context(
    ctx: click.Context,
    name: str,
    level: str,
    parent_id: str | None,
    agent_type: str | None,
    provider: str | None,
    model_name: str | None,
    temperature: float | None,
    max_tokens: int | None,
    props: tuple[str, ...],
    traits: tuple[str, ...],
) -> None:
    """Create a context node."""
    console: Console = ctx.obj["console"]
    council = get_council(ctx)

    properties = parse_assignments(props)
    recognized = set(ContextProperties.model_fields) - {"extensions"}
    extensions = {k: v for k, v in properties.items() if k not in recognized}
    model_fields = _model_fields(provider, model_name, temperature, max_tokens)
    try:
        node = ContextNode(
            name=name,
            level=ContextLevel(level),
            parent_id=parent_id,
            agent_type=AgentType(agent_type) if agent_type else None,
            properties=ContextProperties(
                **{k: v for k, v in properties.items() if k in recognized},
                extensions=extensions,
            ),
            traits=Traits(**parse_assignments(traits)),
            model=ModelSelection(**model_fields) if model_fields else None,
        )
        council.contexts.create(node)
    except (CouncilError, ValidationError) as e:
        fail(console, e)
    console.print(f"[green]Created[/green] {node.level.value} {node.name} ({node.id})")


@context_group.command("show")
@click.argument("context_id")
@click.pass_context
def show_context(ctx: click.Context, context_id: str) -> None:
    """Show the effective configuration of a context and its origins."""
    console: Console = ctx.obj["console"]
    try:
        resolved = get_council(ctx).resolver.resolve(context_id)
    except CouncilError as e:
        fail(console, e)
    if not resolved.origins:
        console.print("[yellow]Nothing is configured for this context.[/yellow]")
        return
    console.print(create_resolution_table(resolved))


@context_group.command("set")
@click.argument("context_id")
@click.option("--name", help="New name.")
@click.option("--agent-type", type=click.Choice([t.value for t in AgentType]))
@model_options
@click.pass_context
def set_context(
    ctx: click.Context,
    context_id: str,
    name: str | None,
    agent_type: str | None,
    provider: str | None,
    model_name: str | None,
    temperature: float | None,
    max_tokens: int | None,
    props: tuple[str, ...],
    traits: tuple[str, ...],
) -> None:
    """Patch one context locally. Ancestors are never changed."""
    console: Console = ctx.obj["console"]
    try:
        node = get_council(ctx).contexts.patch(
            context_id,
            name=name,
            agent_type=AgentType(agent_type) if agent_type else None,
            properties=parse_assignments(props),
            traits=parse_assignments(traits),
            model=_model_fields(provider, model_name, temperature, max_tokens),
        )
    except (CouncilError, ValidationError) as e:
        fail(console, e)
    console.print(f"[green]Updated[/green] {node.name} ({node.id})")


@context_group.command("delete")
@click.argument("context_id")
@click.pass_context
def delete_context(ctx: click.Context, context_id: str) -> None:
    """Delete one context. Its children are kept."""
    console: Console = ctx.obj["console"]
    if not get_council(ctx).contexts.delete(context_id):
        fail(console, f"Context not found: {context_id}")
    console.print(f"[green]Deleted[/green] {context_id}")


@click.command("seed")
@click.argument(
    "config_file",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.pass_context
def seed(ctx: click.Context, config_file: Path | None) -> None:
    """Create contexts from a YAML hierarchy (bundled example by default)."""
    console: Console = ctx.obj["console"]
    try:
        created = seed_hierarchy(get_council(ctx).contexts, config_file)
    except (CouncilError, ValueError, yaml.YAMLError) as e:
        fail(console, e)
    console.print(f"[green]Seeded {len(created)} contexts.[/green]")
    console.print(create_contexts_table(created))
