"""Effective configuration for a context node.

Walks the parent chain from the node to the root and applies
closest-definition-wins per dotted property path, recording which ancestor
supplied each value.
"""

import logging
from typing import Any

from research_council.contexts.models import ContextNode, Origin, ResolvedContext
from research_council.contexts.store import ContextStore
from research_council.errors import CycleDetectedError

logger = logging.getLogger(__name__)

EXTENSIONS_PREFIX = "properties.extensions."


def flatten_node(node: ContextNode) -> list[tuple[str, Any]]:
    """List the (path, value) pairs a node defines explicitly.

    Paths are ``properties.<field>``, ``properties.extensions.<key>``,
    ``traits.<name>`` and ``model.<field>``. Unset (None) fields are omitted.
    """
    pairs: list[tuple[str, Any]] = []

    props = node.properties.model_dump(exclude={"extensions"}, exclude_none=True)
    for key, value in props.items():
        pairs.append((f"properties.{key}", value))
    for key in sorted(node.properties.extensions):
        pairs.append(
            (f"{EXTENSIONS_PREFIX}{key}", node.properties.extensions[key])
        )

    for key, value in node.traits.model_dump(exclude_none=True).items():
        pairs.append((f"traits.{key}", value))

    if node.model is not None:
        for key, value in node.model.model_dump(exclude_none=True).items():
            pairs.append((f"model.{key}", value))

    return pairs


def _nest(origins: dict[str, Origin]) -> dict[str, Any]:
    """Rebuild a nested dict from dotted paths.

    An extension key is one key even when it contains dots.
    """
    effective: dict[str, Any] = {}
    for path, origin in origins.items():
        if path.startswith(EXTENSIONS_PREFIX):
            parts = path.split(".", 2)
        else:
            parts = path.split(".")
        cursor = effective
        for part in parts[:-1]:
            cursor = cursor.setdefault(part, {})
        cursor[parts[-1]] = origin.value
    return effective


class ConfigHierarchyResolver:
    """Computes effective configuration and provenance for context nodes.

    Args:
        store: Context store to read nodes from.
        max_depth: Longest parent chain accepted before reporting a cycle.
    """

    def __init__(self, store: ContextStore, max_depth: int = 32) -> None:
        self.store = store
        self.max_depth = max_depth

    def lineage(self, context_id: str) -> list[ContextNode]:
        """Return the node followed by its ancestors, nearest first.

        A parent id that no longer exists ends the walk.

        Raises:
            NotFoundError: If the starting node does not exist.
            CycleDetectedError: If a node repeats or the chain is too deep.
        """
        node = self.store.get(context_id)
        chain = [node]
        visited = {node.id}

        while node.parent_id is not None:
            if node.parent_id in visited or len(chain) > self.max_depth:
                raise CycleDetectedError(
                    context_id, [n.id for n in chain] + [node.parent_id]
                )
            parent = self.store.find(node.parent_id)
            if parent is None:
                logger.warning(
                    "Context %s references missing parent %s; stopping walk.",
                    node.id,
                    node.parent_id,
                )
                break
            visited.add(parent.id)
            chain.append(parent)
            node = parent

        return chain

    def resolve(self, context_id: str) -> ResolvedContext:
        """Resolve the effective configuration of a node.

        Args:
            context_id: Node to resolve.

        Returns:
            ResolvedContext with the nested effective config and an origin
            record per path, both sorted by path.
        """
        origins: dict[str, Origin] = {}
        for node in self.lineage(context_id):
            for path, value in flatten_node(node):
                if path not in origins:
                    origins[path] = Origin(
                        value=value,
                        contributing_node_id=node.id,
                        contributing_level=node.level,
                    )

        origins = dict(sorted(origins.items()))
        return ResolvedContext(
            context_id=context_id,
            effective=_nest(origins),
            origins=origins,
        )
