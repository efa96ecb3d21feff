"""Data models for the memory ledger and the entity graph.

Pydantic models for scored memory records, graph entities/relations and the
snapshot handed to the UI and to report generation.
"""

import time
import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from research_council.workflow.phases import Phase


class MemoryType(str, Enum):
    FACT = "fact"
    INSIGHT = "insight"
    QUESTION = "question"
    ACTION = "action"


class MemoryRecord(BaseModel):
    """A scored statement distilled from one message. Never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    content: str = Field(..., min_length=1)
    type: MemoryType
    confidence: float = Field(0.7, ge=0.0, le=1.0)
    importance: float = Field(0.5, ge=0.0, le=1.0)
    source: str = Field(..., description="'user' or the agent's context id")
    source_message_id: str | None = None
    conversation_id: str | None = None
    phase: Phase | None = None
    agent_name: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    extracted_by: str | None = Field(None, description="provider:model of stage 1")
    classified_by: str | None = Field(None, description="provider:model of stage 2")


class Entity(BaseModel):
    """Represents a node in the entity graph."""

    id: str = Field(..., min_length=1, description="Stable short id from the extractor")
    name: str | None = None
    type: str | None = None
    confidence: float = Field(0.7, ge=0.0, le=1.0)
    mentions: int = Field(1, ge=0)


class Relation(BaseModel):
    """Represents a directed, typed, weighted edge in the entity graph."""

    source: str = Field(..., description="ID of the source entity")
    target: str = Field(..., description="ID of the target entity")
    type: str = Field("RELATED_TO", description="Relation type, e.g. 'PART_OF'")
    weight: float = Field(0.5, ge=0.0, description="Accumulated strength")
    updated_at: float = Field(default_factory=time.time)


class GraphSnapshot(BaseModel):
    """Top entities and the relations among them."""

    entities: list[Entity] = Field(default_factory=list)
    relations: list[Relation] = Field(default_factory=list)


class GraphStats(BaseModel):
    """Statistics about the current state of the entity graph."""

    node_count: int
    edge_count: int
    entity_types: list[str]


class GraphUpdate(BaseModel):
    """What one message contributed to the graph."""

    entities: list[Entity] = Field(default_factory=list)
    relations: list[Relation] = Field(default_factory=list)
