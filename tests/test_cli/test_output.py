"""Tests for Rich output formatting helpers."""

from rich.console import Console
from rich.table import Table

from research_council.cli.output import (
    _short,
    create_contexts_table,
    create_graph_tables,
    create_memories_table,
    print_message,
)
from research_council.contexts.models import AgentType, ContextLevel
from research_council.memory.models import GraphSnapshot
from research_council.testing.factories import (
    make_context,
    make_entity,
    make_memory_record,
    make_message,
    make_relation,
)
from research_council.workflow.models import MessageMetadata, SenderRole


def render(renderable) -> str:
    console = Console(width=200, record=True)
    console.print(renderable)
    return console.export_text()


class TestShort:
    def test_truncates_with_ellipsis(self) -> None:
        assert _short("abcdef", 4) == "abc…"
        assert _short("abc", 4) == "abc"
        assert _short(None) == ""


class TestCreateContextsTable:
    def test_columns_and_rows(self) -> None:
        node = make_context(
            name="Researcher-1",
            level=ContextLevel.AGENT,
            agent_type=AgentType.RESEARCHER,
            parent_id="room-1",
        )
        table = create_contexts_table([node])
        assert isinstance(table, Table)
        assert table.title == "Contexts"
        assert [col.header for col in table.columns] == [
            "ID",
            "Name",
            "Level",
            "Role",
            "Parent",
        ]
        text = render(table)
        assert "Researcher-1" in text
        assert "room-1" in text


class TestCreateMemoriesTable:
    def test_scores_are_formatted(self) -> None:
        record = make_memory_record(importance=0.25, confidence=0.5)
        text = render(create_memories_table([record]))
        assert "0.25" in text
        assert "0.50" in text


class TestCreateGraphTables:
    def test_entities_and_relations(self) -> None:
        snapshot = GraphSnapshot(
            entities=[make_entity(id="a", name="Alpha"), make_entity(id="b")],
            relations=[make_relation(source="a", target="b", type="PART_OF")],
        )
        entities, relations = create_graph_tables(snapshot)
        assert len(entities.rows) == 2
        assert "PART_OF" in render(relations)


class TestPrintMessage:
    def test_agent_title_names_model(self) -> None:
        console = Console(width=200, record=True)
        message = make_message(
            sender=SenderRole.AGENT,
            content="Plasma is hot.",
            metadata=MessageMetadata(
                agent_name="Researcher-1", provider="openai", model="gpt-4o-mini"
            ),
        )
        print_message(console, message)
        text = console.export_text()
        assert "Researcher-1 (openai:gpt-4o-mini)" in text
        assert "Plasma is hot." in text

    def test_system_message(self) -> None:
        console = Console(width=200, record=True)
        print_message(
            console, make_message(sender=SenderRole.SYSTEM, content="Model error")
        )
        assert "System" in console.export_text()
