"""Tests for configuration inheritance resolution."""

import pytest

from research_council.contexts.models import (
    AgentType,
    ContextLevel,
    ContextProperties,
    ModelSelection,
    Traits,
)
from research_council.contexts.resolver import ConfigHierarchyResolver, flatten_node
from research_council.errors import CycleDetectedError, NotFoundError
from research_council.testing.factories import make_context


@pytest.fixture
def hierarchy(contexts):
    """Domain -> Project -> Room -> Agent with a few values at each level."""
    domain = contexts.create(
        make_context(
            name="Domain",
            properties=ContextProperties(
                system_instruction="Be rigorous.",
                research_topic="Quantum networking",
                extensions={"tone": "formal"},
            ),
            traits=Traits(curiosity=0.4),
            model=ModelSelection(provider="anthropic", temperature=0.2),
        )
    )
    project = contexts.create(
        make_context(
            name="Project",
            level=ContextLevel.PROJECT,
            parent_id=domain.id,
            traits=Traits(thoroughness=0.6),
        )
    )
    room = contexts.create(
        make_context(name="Room", level=ContextLevel.ROOM, parent_id=project.id)
    )
    agent = contexts.create(
        make_context(
            name="Researcher-1",
            level=ContextLevel.AGENT,
            agent_type=AgentType.RESEARCHER,
            parent_id=room.id,
            traits=Traits(curiosity=0.9),
        )
    )
    return {"domain": domain, "project": project, "room": room, "agent": agent}


class TestFlattenNode:
    def test_only_explicit_values_are_listed(self):
        node = make_context(
            properties=ContextProperties(
                research_topic="AI", extensions={"b": 2, "a": 1}
            ),
            traits=Traits(clarity=0.5),
        )
        assert flatten_node(node) == [
            ("properties.research_topic", "AI"),
            ("properties.extensions.a", 1),
            ("properties.extensions.b", 2),
            ("traits.clarity", 0.5),
        ]

    def test_model_fields_are_flattened(self):
        node = make_context(model=ModelSelection(provider="openai", max_tokens=900))
        assert ("model.provider", "openai") in flatten_node(node)
        assert ("model.max_tokens", 900) in flatten_node(node)


class TestResolve:
    def test_local_value_wins_over_ancestor(self, resolver, hierarchy):
        resolved = resolver.resolve(hierarchy["agent"].id)
        assert resolved.traits.curiosity == 0.9
        assert resolved.origins["traits.curiosity"].contributing_node_id == (
            hierarchy["agent"].id
        )

    def test_value_from_single_ancestor_names_that_ancestor(self, resolver, hierarchy):
        resolved = resolver.resolve(hierarchy["agent"].id)
        origin = resolved.origins["traits.thoroughness"]
        assert origin.value == 0.6
        assert origin.contributing_node_id == hierarchy["project"].id
        assert origin.contributing_level is ContextLevel.PROJECT

    def test_domain_temperature_reaches_agent(self, resolver, hierarchy):
        resolved = resolver.resolve(hierarchy["agent"].id)
        assert resolved.model_selection.temperature == 0.2
        origin = resolved.origins["model.temperature"]
        assert origin.contributing_node_id == hierarchy["domain"].id
        assert origin.contributing_level is ContextLevel.DOMAIN

    def test_extensions_inherit_per_key(self, resolver, contexts, hierarchy):
        contexts.patch(hierarchy["room"].id, properties={"audience": "execs"})
        resolved = resolver.resolve(hierarchy["agent"].id)
        assert resolved.properties.extensions == {
            "audience": "execs",
            "tone": "formal",
        }

    def test_dotted_extension_key_stays_one_key(self, resolver, contexts, hierarchy):
        contexts.patch(hierarchy["agent"].id, properties={"style.tone": "formal"})
        resolved = resolver.resolve(hierarchy["agent"].id)
        assert resolved.properties.extensions["style.tone"] == "formal"
        assert "style" not in resolved.properties.extensions
        assert (
            resolved.origins["properties.extensions.style.tone"].contributing_node_id
            == hierarchy["agent"].id
        )

    def test_dotted_key_beside_its_prefix_key(self, resolver, contexts, hierarchy):
        contexts.patch(hierarchy["room"].id, properties={"style": "x"})
        contexts.patch(hierarchy["agent"].id, properties={"style.tone": "formal"})
        resolved = resolver.resolve(hierarchy["agent"].id)
        assert resolved.properties.extensions == {
            "style": "x",
            "style.tone": "formal",
            "tone": "formal",
        }

    def test_unset_paths_are_absent(self, resolver, hierarchy):
        resolved = resolver.resolve(hierarchy["agent"].id)
        assert "traits.creativity" not in resolved.origins
        assert resolved.traits.creativity is None
        assert resolved.model_selection.max_tokens is None

    def test_node_without_values_resolves_empty(self, resolver, contexts):
        node = contexts.create(make_context(name="Bare"))
        resolved = resolver.resolve(node.id)
        assert resolved.effective == {}
        assert resolved.origins == {}

    def test_resolution_is_deterministic(self, resolver, hierarchy):
        first = resolver.resolve(hierarchy["agent"].id)
        second = resolver.resolve(hierarchy["agent"].id)
        assert first.model_dump_json() == second.model_dump_json()

    def test_unknown_context_raises(self, resolver):
        with pytest.raises(NotFoundError, match="Context not found"):
            resolver.resolve("missing")

    def test_dangling_parent_ends_walk(self, resolver, contexts, hierarchy):
        contexts.delete(hierarchy["room"].id)
        resolved = resolver.resolve(hierarchy["agent"].id)
        assert resolved.traits.curiosity == 0.9
        assert "traits.thoroughness" not in resolved.origins


class TestLineage:
    def test_lineage_is_nearest_first(self, resolver, hierarchy):
        names = [n.name for n in resolver.lineage(hierarchy["agent"].id)]
        assert names == ["Researcher-1", "Room", "Project", "Domain"]

    def test_cycle_is_rejected(self, resolver, contexts):
        a = contexts.create(make_context(name="A"))
        b = contexts.create(make_context(name="B", parent_id=a.id))
        with contexts.db.connect() as conn:
            node = a.model_copy(update={"parent_id": b.id})
            conn.execute(
                "UPDATE contexts SET parent_id = ?, payload = ? WHERE id = ?",
                (b.id, node.model_dump_json(), a.id),
            )
        with pytest.raises(CycleDetectedError):
            resolver.lineage(a.id)

    def test_depth_limit(self, contexts):
        parent = contexts.create(make_context(name="root"))
        for i in range(5):
            parent = contexts.create(make_context(name=f"n{i}", parent_id=parent.id))
        shallow = ConfigHierarchyResolver(contexts, max_depth=3)
        with pytest.raises(CycleDetectedError):
            shallow.lineage(parent.id)
        assert len(ConfigHierarchyResolver(contexts).lineage(parent.id)) == 6
