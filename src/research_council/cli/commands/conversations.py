"""Conversation and turn commands."""

import click
from rich.console import Console
from rich.table import Table

from research_council.cli.commands import fail, get_council
from research_council.cli.output import create_conversations_table, print_message
from research_council.errors import CouncilError
from research_council.workflow.phases import PHASE_ORDER


@click.group("conversation")
def conversation_group() -> None:
    """Run research conversations."""
    pass


@conversation_group.command("create")
@click.option("--title", default="Research Session", show_default=True)
@click.option("--topic", help="Research topic.")
@click.option(
    "--participant",
    "participants",
    multiple=True,
    help="Agent context ID (repeatable). Default: every agent.",
)
@click.pass_context
def create_conversation(
    ctx: click.Context, title: str, topic: str | None, participants: tuple[str, ...]
) -> None:
    """Start a conversation in the research phase."""
    console: Console = ctx.obj["console"]
    try:
        convo = get_council(ctx).orchestrator.create_conversation(
            title=title, participant_ids=list(participants), topic=topic
        )
    except CouncilError as e:
        fail(console, e)
    console.print(f"[green]Created conversation[/green] {convo.id}")


@conversation_group.command("list")
@click.option("--limit", default=50, show_default=True)
@click.pass_context
def list_conversations(ctx: click.Context, limit: int) -> None:
    """List recent conversations."""
    console: Console = ctx.obj["console"]
    conversations = get_council(ctx).conversations.list_recent(limit)
    if not conversations:
        console.print("[yellow]No conversations found.[/yellow]")
        return
    console.print(create_conversations_table(conversations))


@conversation_group.command("send")
@click.argument("conversation_id")
@click.argument("text")
@click.pass_context
def send(ctx: click.Context, conversation_id: str, text: str) -> None:
    """Send a message and print each agent's reply."""
    console: Console = ctx.obj["console"]
    council = get_council(ctx)
    try:
        result = council.orchestrator.send_user_message(conversation_id, text)
    except CouncilError as e:
        fail(console, e)

    if not result.agent_messages:
        console.print("[yellow]No agent replied in this phase.[/yellow]")
    for message in result.agent_messages:
        print_message(console, message)


@conversation_group.command("messages")
@click.argument("conversation_id")
@click.option("--limit", default=500, show_default=True)
@click.pass_context
def messages(ctx: click.Context, conversation_id: str, limit: int) -> None:
    """Print the message log of a conversation."""
    console: Console = ctx.obj["console"]
    council = get_council(ctx)
    try:
        council.conversations.get(conversation_id)
    except CouncilError as e:
        fail(console, e)
    for message in council.messages.list_for_conversation(conversation_id, limit):
        print_message(console, message)


@conversation_group.command("phase")
@click.argument("conversation_id")
@click.option(
    "--to",
    "target",
    type=click.Choice([p.value for p in PHASE_ORDER]),
    help="Jump straight to this phase instead of advancing one step.",
)
@click.pass_context
def phase(ctx: click.Context, conversation_id: str, target: str | None) -> None:
    """Advance the conversation to its next phase."""
    console: Console = ctx.obj["console"]
    orchestrator = get_council(ctx).orchestrator
    try:
        if target:
            convo = orchestrator.set_phase(conversation_id, target)
        else:
            convo = orchestrator.advance_phase(conversation_id)
    except CouncilError as e:
        fail(console, e)
    console.print(f"Phase: [magenta]{convo.phase.value}[/magenta]")


@conversation_group.command("topic")
@click.argument("conversation_id")
@click.argument("topic", required=False)
@click.pass_context
def topic(ctx: click.Context, conversation_id: str, topic: str | None) -> None:
    """Set the research topic; omit TOPIC to clear it."""
    console: Console = ctx.obj["console"]
    try:
        convo = get_council(ctx).orchestrator.set_topic(conversation_id, topic)
    except CouncilError as e:
        fail(console, e)
    console.print(f"Topic: {convo.topic or '(none)'}")


@conversation_group.command("topics")
@click.option("--limit", default=30, show_default=True)
@click.pass_context
def topics(ctx: click.Context, limit: int) -> None:
    """List recent distinct topics."""
    console: Console = ctx.obj["console"]
    rows = get_council(ctx).conversations.recent_topics(limit)
    if not rows:
        console.print("[yellow]No topics yet.[/yellow]")
        return

    table = Table(title="Recent Topics")
    table.add_column("Topic", style="cyan")
    table.add_column("Conversation", style="dim")
    table.add_column("Phase", style="magenta")
    for row in rows:
        table.add_row(row["topic"], row["conversation_id"], row["phase"])
    console.print(table)
