"""Tests for agent prompt construction."""

from research_council.contexts.models import AgentType, Traits
from research_council.workflow.prompting import build_prompt, format_traits


class TestFormatTraits:
    def test_unset_traits_show_default(self):
        text = format_traits(AgentType.RESEARCHER, Traits(curiosity=0.9))
        assert "- Curiosity 0.9" in text
        assert "- Thoroughness 0.5" in text

    def test_author_extras_only_for_author(self):
        traits = Traits(clarity=0.8)
        assert "Clarity" not in format_traits(AgentType.ANALYZER, traits)
        assert "- Clarity 0.8" in format_traits(AgentType.AUTHOR, traits)
        assert "- Persuasiveness 0.5" in format_traits(AgentType.AUTHOR, traits)


class TestBuildPrompt:
    def test_includes_role_topic_and_message(self):
        prompt = build_prompt(
            AgentType.ANALYZER, Traits(), "Is this sound?", topic="Fusion"
        )
        assert prompt.startswith("Role: Analyzer.")
        assert "Topic: Fusion" in prompt
        assert "User message:\nIs this sound?" in prompt
        assert prompt.endswith("Respond in Markdown.")

    def test_missing_topic_is_general(self):
        prompt = build_prompt(AgentType.RESEARCHER, Traits(), "hi")
        assert "Topic: general" in prompt
