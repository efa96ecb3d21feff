"""Memory ledger, extraction pipelines and the entity graph."""

from research_council.memory.entities import EntityGraphUpdater
from research_council.memory.extraction import MemoryExtractionPipeline, importance_for
from research_council.memory.graph_store import GraphStore
from research_council.memory.ledger import MemoryFilters, MemoryLedger
from research_council.memory.models import (
    Entity,
    GraphSnapshot,
    GraphStats,
    GraphUpdate,
    MemoryRecord,
    MemoryType,
    Relation,
)

__all__ = [
    "Entity",
    "EntityGraphUpdater",
    "GraphSnapshot",
    "GraphStats",
    "GraphStore",
    "GraphUpdate",
    "MemoryExtractionPipeline",
    "MemoryFilters",
    "MemoryLedger",
    "MemoryRecord",
    "MemoryType",
    "Relation",
    "importance_for",
]
