"""Data models for the context hierarchy.

A context node is one level of configuration (Domain, Project, Room or Agent).
Unset fields are ``None`` so that resolution can tell "not defined here"
apart from an explicit value.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class ContextLevel(str, Enum):
    """Hierarchy levels, outermost first."""

    DOMAIN = "Domain"
    PROJECT = "Project"
    ROOM = "Room"
    AGENT = "Agent"

    @property
    def rank(self) -> int:
        return list(ContextLevel).index(self)


class AgentType(str, Enum):
    """Agent roles that can take part in a conversation."""

    RESEARCHER = "Researcher"
    ANALYZER = "Analyzer"
    SYNTHESIZER = "Synthesizer"
    AUTHOR = "Author"


class ContextProperties(BaseModel):
    """Recognized inheritable properties plus an extension map."""

    system_instruction: str | None = None
    research_topic: str | None = None
    is_active: bool | None = None
    extensions: dict[str, Any] = Field(
        default_factory=dict, description="Custom keys, inherited one by one"
    )


class Traits(BaseModel):
    """Personality scores in [0, 1]; the last three are Author extras."""

    curiosity: float | None = Field(None, ge=0.0, le=1.0)
    thoroughness: float | None = Field(None, ge=0.0, le=1.0)
    creativity: float | None = Field(None, ge=0.0, le=1.0)
    analytical: float | None = Field(None, ge=0.0, le=1.0)
    communication: float | None = Field(None, ge=0.0, le=1.0)
    structure: float | None = Field(None, ge=0.0, le=1.0)
    clarity: float | None = Field(None, ge=0.0, le=1.0)
    persuasiveness: float | None = Field(None, ge=0.0, le=1.0)


class ModelSelection(BaseModel):
    """Which provider/model an agent should use and how to sample it."""

    provider: str | None = None
    model: str | None = None
    temperature: float | None = Field(None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(None, gt=0)
    context_window: int | None = Field(None, gt=0)


class ContextNode(BaseModel):
    """A node in the configuration forest."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(..., min_length=1)
    level: ContextLevel
    parent_id: str | None = None
    agent_type: AgentType | None = None
    properties: ContextProperties = Field(default_factory=ContextProperties)
    traits: Traits = Field(default_factory=Traits)
    model: ModelSelection | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _agents_need_a_role(self) -> "ContextNode":
        if self.level is ContextLevel.AGENT and self.agent_type is None:
            raise ValueError("Agent-level contexts require an agent_type")
        return self


class Origin(BaseModel):
    """Which node supplied an effective value."""

    value: Any
    contributing_node_id: str
    contributing_level: ContextLevel


class ResolvedContext(BaseModel):
    """Effective configuration of a node plus per-path provenance."""

    context_id: str
    effective: dict[str, Any]
    origins: dict[str, Origin]

    @property
    def properties(self) -> ContextProperties:
        return ContextProperties.model_validate(self.effective.get("properties", {}))

    @property
    def traits(self) -> Traits:
        return Traits.model_validate(self.effective.get("traits", {}))

    @property
    def model_selection(self) -> ModelSelection:
        return ModelSelection.model_validate(self.effective.get("model", {}))
