"""Conversation and message models."""

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from research_council.workflow.phases import Phase


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PhaseChange(BaseModel):
    phase: Phase
    at: datetime = Field(default_factory=_now)


class Conversation(BaseModel):
    """A research session with exactly one current phase."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str = "Research Session"
    participant_ids: list[str] = Field(
        default_factory=list, description="Empty means every Agent-level context"
    )
    status: str = "active"
    topic: str | None = None
    phase: Phase = Phase.RESEARCH
    phase_history: list[PhaseChange] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class SenderRole(str, Enum):
    USER = "user"
    AGENT = "agent"
    SYSTEM = "system"


class MessageMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str | None = None
    model: str | None = None
    tokens_input: int | None = None
    tokens_output: int | None = None
    agent_name: str | None = None
    phase: Phase | None = None
    error: str | None = None


class Message(BaseModel):
    """One immutable entry in a conversation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    conversation_id: str
    sender: SenderRole
    context_id: str | None = None
    content: str
    metadata: MessageMetadata = Field(default_factory=MessageMetadata)
    timestamp: datetime = Field(default_factory=_now)


class TurnResult(BaseModel):
    """Outcome of one user turn: the stored user message and successful replies."""

    user_message: Message
    agent_messages: list[Message] = Field(default_factory=list)
