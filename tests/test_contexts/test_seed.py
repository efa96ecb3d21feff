"""Tests for YAML hierarchy seeding."""

import pytest

from research_council.contexts.models import AgentType, ContextLevel
from research_council.contexts.seed import load_hierarchy_config, seed_hierarchy


class TestLoadHierarchyConfig:
    def test_bundled_default_loads(self):
        config = load_hierarchy_config()
        assert config["contexts"][0]["level"] == "Domain"

    def test_missing_contexts_key_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("agents: []\n")
        with pytest.raises(ValueError, match="contexts"):
            load_hierarchy_config(path)


class TestSeedHierarchy:
    def test_default_hierarchy(self, contexts, resolver):
        created = seed_hierarchy(contexts)

        levels = [n.level for n in created]
        assert levels[:3] == [
            ContextLevel.DOMAIN,
            ContextLevel.PROJECT,
            ContextLevel.ROOM,
        ]
        agents = contexts.list_agents()
        assert {a.agent_type for a in agents} == {
            AgentType.RESEARCHER,
            AgentType.ANALYZER,
            AgentType.AUTHOR,
        }

        researcher = next(a for a in agents if a.agent_type is AgentType.RESEARCHER)
        resolved = resolver.resolve(researcher.id)
        assert resolved.traits.curiosity == 0.9
        assert resolved.model_selection.temperature == 0.2
        assert resolved.origins["model.temperature"].contributing_level is (
            ContextLevel.DOMAIN
        )

    def test_custom_file(self, contexts, tmp_path):
        path = tmp_path / "hierarchy.yaml"
        path.write_text(
            "contexts:\n"
            "  - name: Biology\n"
            "    level: Domain\n"
            "    children:\n"
            "      - name: Analyst\n"
            "        level: Agent\n"
            "        agent_type: Analyzer\n"
            "        traits:\n"
            "          analytical: 0.95\n"
        )
        domain, agent = seed_hierarchy(contexts, path)
        assert agent.parent_id == domain.id
        assert agent.traits.analytical == 0.95
