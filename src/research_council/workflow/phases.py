"""Conversation phases and the fixed tables keyed by them."""

from enum import Enum

from research_council.contexts.models import AgentType
from research_council.llm.base import Candidate


class Phase(str, Enum):
    """Research workflow phases, in canonical order."""

    RESEARCH = "research"
    ANALYSIS = "analysis"
    SYNTHESIS = "synthesis"
    REPORT = "report"


PHASE_ORDER: tuple[Phase, ...] = tuple(Phase)

_AGENT_TYPES: dict[Phase, tuple[AgentType, ...]] = {
    Phase.RESEARCH: (AgentType.RESEARCHER,),
    Phase.ANALYSIS: (AgentType.ANALYZER,),
    Phase.SYNTHESIS: (
        AgentType.SYNTHESIZER,
        AgentType.ANALYZER,
        AgentType.RESEARCHER,
    ),
    Phase.REPORT: (AgentType.AUTHOR,),
}

# Tried after the agent's own model selection.
_FALLBACKS: dict[Phase, tuple[Candidate, ...]] = {
    Phase.RESEARCH: (
        Candidate(provider="gemini", model="gemini-2.0-flash"),
        Candidate(provider="openai", model="gpt-4o-mini"),
    ),
    Phase.ANALYSIS: (
        Candidate(provider="anthropic", model="claude-3-5-sonnet-latest"),
        Candidate(provider="openai", model="gpt-4o-mini"),
    ),
    Phase.SYNTHESIS: (
        Candidate(provider="anthropic", model="claude-3-5-haiku-latest"),
        Candidate(provider="gemini", model="gemini-2.0-flash"),
    ),
    Phase.REPORT: (
        Candidate(provider="anthropic", model="claude-3-5-sonnet-latest"),
        Candidate(provider="gemini", model="gemini-2.0-flash"),
    ),
}


def agent_types_for_phase(phase: Phase) -> tuple[AgentType, ...]:
    """Agent roles allowed to respond during a phase."""
    return _AGENT_TYPES[Phase(phase)]


def fallbacks_for_phase(phase: Phase) -> list[Candidate]:
    """Phase-specific fallback provider/models."""
    return list(_FALLBACKS[Phase(phase)])


def next_phase(phase: Phase) -> Phase:
    """The phase after ``phase``; ``report`` is terminal and maps to itself."""
    index = PHASE_ORDER.index(Phase(phase))
    return PHASE_ORDER[min(index + 1, len(PHASE_ORDER) - 1)]
