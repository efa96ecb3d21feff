"""Context hierarchy: models, persistence, inheritance resolution, seeding."""

from research_council.contexts.models import (
    AgentType,
    ContextLevel,
    ContextNode,
    ContextProperties,
    ModelSelection,
    Origin,
    ResolvedContext,
    Traits,
)
from research_council.contexts.resolver import ConfigHierarchyResolver
from research_council.contexts.seed import seed_hierarchy
from research_council.contexts.store import ContextStore

__all__ = [
    "AgentType",
    "ConfigHierarchyResolver",
    "ContextLevel",
    "ContextNode",
    "ContextProperties",
    "ContextStore",
    "ModelSelection",
    "Origin",
    "ResolvedContext",
    "Traits",
    "seed_hierarchy",
]
