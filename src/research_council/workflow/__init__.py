"""Conversations, phases, prompting and the turn loop."""

from research_council.workflow.models import (
    Conversation,
    Message,
    MessageMetadata,
    PhaseChange,
    SenderRole,
    TurnResult,
)
from research_council.workflow.phases import (
    PHASE_ORDER,
    Phase,
    agent_types_for_phase,
    fallbacks_for_phase,
    next_phase,
)
from research_council.workflow.store import ConversationStore, MessageStore


def __getattr__(name: str):
    """Lazy-import TurnOrchestrator to break circular import with memory."""
    if name == "TurnOrchestrator":
        from research_council.workflow.turns import TurnOrchestrator

        return TurnOrchestrator
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Conversation",
    "ConversationStore",
    "Message",
    "MessageMetadata",
    "MessageStore",
    "PHASE_ORDER",
    "Phase",
    "PhaseChange",
    "SenderRole",
    "TurnOrchestrator",
    "TurnResult",
    "agent_types_for_phase",
    "fallbacks_for_phase",
    "next_phase",
]
