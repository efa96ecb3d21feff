"""Entity graph store backed by NetworkX.

Persists a directed multigraph to a JSON file. Nodes are entities, and
parallel edges between the same pair are distinguished by relation type.
"""

import json
import logging
import threading
import time
from pathlib import Path
from typing import Any

import networkx as nx
from networkx.readwrite import json_graph

from research_council.memory.models import (
    Entity,
    GraphSnapshot,
    GraphStats,
    Relation,
)

logger = logging.getLogger(__name__)


class GraphStore:
    """Directed entity graph with JSON file persistence.

    Mutations are serialized with a lock since background pipelines write
    from worker threads.

    Args:
        storage_path: Path to the JSON file for graph persistence.
    """

    def __init__(self, storage_path: Path) -> None:
        self.storage_path = Path(storage_path)
        self.graph = nx.MultiDiGraph()
        self._lock = threading.RLock()
        self._ensure_storage_dir()
        self._load()

    def _ensure_storage_dir(self) -> None:
        """Create parent directories if they don't exist."""
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> None:
        """Load graph from JSON file if it exists."""
        if not self.storage_path.exists():
            logger.info("No existing graph found. Initialized empty graph.")
            return
        try:
            with open(self.storage_path, "r") as f:
                data = json.load(f)
            self.graph = json_graph.node_link_graph(
                data, directed=True, multigraph=True, edges="links"
            )
            logger.info(
                "Loaded graph from %s with %d nodes.",
                self.storage_path,
                self.graph.number_of_nodes(),
            )
        except (OSError, ValueError, KeyError) as e:
            logger.error("Failed to load graph from %s: %s", self.storage_path, e)
            self.graph = nx.MultiDiGraph()

    def _save(self) -> None:
        """Persist graph to JSON file."""
        data = json_graph.node_link_data(self.graph, edges="links")
        tmp_path = self.storage_path.with_suffix(".tmp")
        with open(tmp_path, "w") as f:
            json.dump(data, f, indent=2)
        tmp_path.replace(self.storage_path)

    def upsert_entity(self, entity: Entity) -> Entity:
        """Add an entity or merge it into the existing node.

        A new id starts at one mention. A repeat keeps the first non-null
        name and type, takes the higher confidence and adds one mention.

        Args:
            entity: Entity as reported by the extractor.

        Returns:
            The stored entity after the merge.
        """
        with self._lock:
            if self.graph.has_node(entity.id):
                data = self.graph.nodes[entity.id]
                if data.get("name") is None:
                    data["name"] = entity.name
                if data.get("type") is None:
                    data["type"] = entity.type
                data["confidence"] = max(
                    data.get("confidence", 0.0), entity.confidence
                )
                data["mentions"] = data.get("mentions", 0) + 1
            else:
                self.graph.add_node(
                    entity.id,
                    name=entity.name,
                    type=entity.type,
                    confidence=entity.confidence,
                    mentions=1,
                )
            self._save()
            return self._entity(entity.id)

    def upsert_relation(self, relation: Relation) -> Relation | None:
        """Add a relation or accumulate weight on the existing one.

        Relations are keyed by (source, target, type). A repeat adds the new
        weight to the stored weight and refreshes ``updated_at``.

        Args:
            relation: The relation to add.

        Returns:
            The stored relation, or None if an endpoint is not a known entity.
        """
        with self._lock:
            for endpoint in (relation.source, relation.target):
                if not self.graph.has_node(endpoint):
                    logger.warning(
                        "Skipping %s relation: unknown entity %s",
                        relation.type,
                        endpoint,
                    )
                    return None

            now = time.time()
            key = relation.type
            if self.graph.has_edge(relation.source, relation.target, key=key):
                data = self.graph.edges[relation.source, relation.target, key]
                data["weight"] = data.get("weight", 0.0) + relation.weight
                data["updated_at"] = now
            else:
                self.graph.add_edge(
                    relation.source,
                    relation.target,
                    key=key,
                    relation=relation.type,
                    weight=relation.weight,
                    updated_at=now,
                )
            self._save()
            data = self.graph.edges[relation.source, relation.target, key]
            return self._relation(relation.source, relation.target, key, data)

    def get_entity(self, entity_id: str) -> Entity | None:
        with self._lock:
            if not self.graph.has_node(entity_id):
                return None
            return self._entity(entity_id)

    def get_relation(
        self, source: str, target: str, relation_type: str = "RELATED_TO"
    ) -> Relation | None:
        with self._lock:
            if not self.graph.has_edge(source, target, key=relation_type):
                return None
            data = self.graph.edges[source, target, relation_type]
            return self._relation(source, target, relation_type, data)

    def get_neighbors(self, node_id: str) -> list[tuple[str, str]]:
        """Get 1-hop neighbors for a node.

        Args:
            node_id: The node to query.

        Returns:
            List of (relation_type, target_node_id) tuples.
        """
        with self._lock:
            if not self.graph.has_node(node_id):
                return []
            return [
                (data.get("relation", key), target)
                for _, target, key, data in self.graph.out_edges(
                    node_id, keys=True, data=True
                )
            ]

    def snapshot(self, limit: int = 50) -> GraphSnapshot:
        """Top entities by mentions and confidence, plus the relations among them.

        Args:
            limit: Maximum number of entities.

        Returns:
            GraphSnapshot ordered by mentions desc, confidence desc, id asc.
        """
        with self._lock:
            entities = sorted(
                (self._entity(node_id) for node_id in self.graph.nodes),
                key=lambda e: (-e.mentions, -e.confidence, e.id),
            )[: max(0, limit)]
            keep = {e.id for e in entities}
            relations = [
                self._relation(source, target, key, data)
                for source, target, key, data in self.graph.edges(
                    keys=True, data=True
                )
                if source in keep and target in keep
            ]
        relations.sort(key=lambda r: (r.source, r.target, r.type))
        return GraphSnapshot(entities=entities, relations=relations)

    def get_stats(self) -> GraphStats:
        """Return current graph statistics.

        Returns:
            GraphStats with node count, edge count, and entity types.
        """
        with self._lock:
            types = {
                data["type"]
                for _, data in self.graph.nodes(data=True)
                if data.get("type")
            }
            return GraphStats(
                node_count=self.graph.number_of_nodes(),
                edge_count=self.graph.number_of_edges(),
                entity_types=sorted(types),
            )

    def close(self) -> None:
        """Flush the graph to disk."""
        with self._lock:
            self._save()
        logger.debug("Graph saved to %s", self.storage_path)

    def __enter__(self) -> "GraphStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _entity(self, entity_id: str) -> Entity:
        data = self.graph.nodes[entity_id]
        return Entity(
            id=entity_id,
            name=data.get("name"),
            type=data.get("type"),
            confidence=data.get("confidence", 0.0),
            mentions=data.get("mentions", 0),
        )

    @staticmethod
    def _relation(
        source: str, target: str, key: str, data: dict[str, Any]
    ) -> Relation:
        return Relation(
            source=source,
            target=target,
            type=data.get("relation", key),
            weight=data.get("weight", 0.0),
            updated_at=data.get("updated_at", 0.0),
        )
