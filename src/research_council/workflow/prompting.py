"""Role- and trait-aware prompts for agent turns."""

from research_council.contexts.models import AgentType, Traits

DEFAULT_TRAIT = 0.5

ROLE_BRIEFS: dict[AgentType, str] = {
    AgentType.RESEARCHER: (
        "Role: Researcher. Explore sources, discover info, cite where possible. "
        "Ask 1-2 follow-up questions."
    ),
    AgentType.ANALYZER: (
        "Role: Analyzer. Evaluate critically. Identify risks, contradictions. "
        "Be concise."
    ),
    AgentType.SYNTHESIZER: (
        "Role: Synthesizer. Connect ideas; produce a short synthesis."
    ),
    AgentType.AUTHOR: "Role: Author. Organize clearly with headings and bullets.",
}

_COMMON_TRAITS = (
    "curiosity",
    "thoroughness",
    "creativity",
    "analytical",
    "communication",
)
_AUTHOR_TRAITS = ("structure", "clarity", "persuasiveness")


def format_traits(role: AgentType, traits: Traits) -> str:
    """Render trait scores as a bullet list; unset traits show the 0.5 default."""
    names = _COMMON_TRAITS + (_AUTHOR_TRAITS if role is AgentType.AUTHOR else ())
    lines = ["Traits:"]
    for name in names:
        value = getattr(traits, name)
        lines.append(f"- {name.title()} {DEFAULT_TRAIT if value is None else value}")
    return "\n".join(lines)


def build_prompt(
    role: AgentType,
    traits: Traits,
    user_message: str,
    topic: str | None = None,
) -> str:
    """Build the user prompt for one agent's reply.

    Args:
        role: The agent's role.
        traits: Effective trait scores.
        user_message: Text the user just sent.
        topic: Research topic, or None for "general".

    Returns:
        Prompt text asking for a Markdown reply.
    """
    return (
        f"{ROLE_BRIEFS[AgentType(role)]}\n"
        f"Topic: {topic or 'general'}\n"
        f"{format_traits(AgentType(role), traits)}\n\n"
        f"User message:\n{user_message}\n\n"
        "Respond in Markdown."
    )
