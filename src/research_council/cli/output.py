"""Rich output formatting helpers."""

import json
from typing import Any

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from research_council.contexts.models import ContextNode, ResolvedContext
from research_council.memory.models import GraphSnapshot, MemoryRecord
from research_council.reports.models import Report
from research_council.workflow.models import Conversation, Message, SenderRole


def _short(value: Any, width: int = 60) -> str:
    text = "" if value is None else str(value)
    return text if len(text) <= width else text[: width - 1] + "…"


def create_contexts_table(nodes: list[ContextNode]) -> Table:
    """Create a table of context nodes.

    Args:
        nodes: Nodes to list.

    Returns:
        Configured Rich Table.
    """
    table = Table(title="Contexts")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Level", style="magenta")
    table.add_column("Role")
    table.add_column("Parent", style="dim")
    for node in nodes:
        table.add_row(
            node.id,
            node.name,
            node.level.value,
            node.agent_type.value if node.agent_type else "",
            node.parent_id or "",
        )
    return table


def create_resolution_table(resolved: ResolvedContext) -> Table:
    """Create a table of effective values and where each came from."""
    table = Table(title=f"Effective configuration for {resolved.context_id}")
    table.add_column("Path", style="cyan")
    table.add_column("Value")
    table.add_column("From", style="magenta")
    for path, origin in resolved.origins.items():
        table.add_row(
            path,
            _short(json.dumps(origin.value)),
            f"{origin.contributing_level.value} {origin.contributing_node_id}",
        )
    return table


def create_conversations_table(conversations: list[Conversation]) -> Table:
    table = Table(title="Conversations")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Topic")
    table.add_column("Phase", style="magenta")
    table.add_column("Updated")
    for convo in conversations:
        table.add_row(
            convo.id,
            convo.title,
            convo.topic or "",
            convo.phase.value,
            convo.updated_at.strftime("%Y-%m-%d %H:%M"),
        )
    return table


def print_message(console: Console, message: Message) -> None:
    """Print one message as a panel; system messages are shown in red."""
    if message.sender is SenderRole.USER:
        title, style = "You", "green"
    elif message.sender is SenderRole.SYSTEM:
        title, style = "System", "red"
    else:
        meta = message.metadata
        title = f"{meta.agent_name or 'Agent'} ({meta.provider}:{meta.model})"
        style = "cyan"
    console.print(Panel(Markdown(message.content), title=title, border_style=style))


def create_memories_table(records: list[MemoryRecord]) -> Table:
    table = Table(title="Memories")
    table.add_column("ID", style="dim")
    table.add_column("Type", style="magenta")
    table.add_column("Imp.", justify="right")
    table.add_column("Conf.", justify="right")
    table.add_column("Source", style="dim")
    table.add_column("Content", style="cyan")
    for record in records:
        table.add_row(
            record.id,
            record.type.value,
            f"{record.importance:.2f}",
            f"{record.confidence:.2f}",
            _short(record.source, 12),
            _short(record.content),
        )
    return table


def create_graph_tables(snapshot: GraphSnapshot) -> tuple[Table, Table]:
    """Create entity and relation tables for a graph snapshot."""
    entities = Table(title="Entities")
    entities.add_column("ID", style="cyan")
    entities.add_column("Name")
    entities.add_column("Type", style="magenta")
    entities.add_column("Mentions", justify="right")
    entities.add_column("Conf.", justify="right")
    for entity in snapshot.entities:
        entities.add_row(
            entity.id,
            entity.name or "",
            entity.type or "",
            str(entity.mentions),
            f"{entity.confidence:.2f}",
        )

    relations = Table(title="Relations")
    relations.add_column("Source", style="cyan")
    relations.add_column("Type", style="magenta")
    relations.add_column("Target", style="cyan")
    relations.add_column("Weight", justify="right")
    for relation in snapshot.relations:
        relations.add_row(
            relation.source, relation.type, relation.target, f"{relation.weight:.2f}"
        )
    return entities, relations


def create_reports_table(reports: list[Report]) -> Table:
    table = Table(title="Reports")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Format", style="magenta")
    table.add_column("Version", justify="right")
    table.add_column("Created")
    for report in reports:
        table.add_row(
            report.id,
            report.title,
            f"{report.format.value}/{report.detail_level.value}",
            str(report.version_number),
            report.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    return table
