"""Persistence for context nodes."""

import logging
from typing import Any

from research_council.contexts.models import AgentType, ContextLevel, ContextNode
from research_council.errors import NotFoundError
from research_council.storage.database import Database

logger = logging.getLogger(__name__)


class ContextStore:
    """CRUD for context nodes.

    Args:
        db: Shared document database.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def create(self, node: ContextNode) -> ContextNode:
        """Insert a new node.

        Raises:
            NotFoundError: If ``node.parent_id`` names a missing context.
        """
        if node.parent_id is not None and self.find(node.parent_id) is None:
            raise NotFoundError("Context", node.parent_id)

        with self.db.connect() as conn:
            conn.execute(
                """
                INSERT INTO contexts (id, name, level, parent_id, payload)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    node.id,
                    node.name,
                    node.level.value,
                    node.parent_id,
                    node.model_dump_json(),
                ),
            )
        logger.debug("Created %s context %s (%s)", node.level.value, node.name, node.id)
        return node

    def find(self, context_id: str) -> ContextNode | None:
        with self.db.connect() as conn:
            row = conn.execute(
                "SELECT payload FROM contexts WHERE id = ?", (context_id,)
            ).fetchone()
        return ContextNode.model_validate_json(row["payload"]) if row else None

    def get(self, context_id: str) -> ContextNode:
        """Fetch a node or raise NotFoundError."""
        node = self.find(context_id)
        if node is None:
            raise NotFoundError("Context", context_id)
        return node

    def get_many(self, context_ids: list[str]) -> list[ContextNode]:
        """Fetch nodes in the order given, silently skipping missing ids."""
        nodes = []
        for context_id in context_ids:
            node = self.find(context_id)
            if node is not None:
                nodes.append(node)
        return nodes

    def list_all(self, limit: int = 200) -> list[ContextNode]:
        """All nodes ordered by level (outermost first), then name."""
        with self.db.connect() as conn:
            rows = conn.execute("SELECT payload FROM contexts").fetchall()
        nodes = [ContextNode.model_validate_json(r["payload"]) for r in rows]
        nodes.sort(key=lambda n: (n.level.rank, n.name))
        return nodes[:limit]

    def list_agents(self) -> list[ContextNode]:
        """Agent-level nodes in creation order."""
        with self.db.connect() as conn:
            rows = conn.execute(
                "SELECT payload FROM contexts WHERE level = ? ORDER BY rowid",
                (ContextLevel.AGENT.value,),
            ).fetchall()
        return [ContextNode.model_validate_json(r["payload"]) for r in rows]

    def patch(
        self,
        context_id: str,
        *,
        name: str | None = None,
        agent_type: AgentType | None = None,
        properties: dict[str, Any] | None = None,
        traits: dict[str, Any] | None = None,
        model: dict[str, Any] | None = None,
    ) -> ContextNode:
        """Apply a local patch to one node. Ancestors are never touched.

        ``properties`` keys that are not recognized fields go into the
        extension map. A ``None`` value clears the local definition so the
        path is inherited again.

        Returns:
            The updated node.

        Raises:
            NotFoundError: If the node does not exist.
        """
        node = self.get(context_id)
        data = node.model_dump()

        if name is not None:
            data["name"] = name
        if agent_type is not None:
            data["agent_type"] = agent_type
        if properties:
            recognized = set(data["properties"]) - {"extensions"}
            for key, value in properties.items():
                if key in recognized:
                    data["properties"][key] = value
                elif value is None:
                    data["properties"]["extensions"].pop(key, None)
                else:
                    data["properties"]["extensions"][key] = value
        if traits:
            data["traits"].update(traits)
        if model:
            merged = dict(data["model"] or {})
            merged.update(model)
            has_value = any(v is not None for v in merged.values())
            data["model"] = merged if has_value else None

        updated = ContextNode.model_validate(data)
        with self.db.connect() as conn:
            conn.execute(
                "UPDATE contexts SET name = ?, payload = ? WHERE id = ?",
                (updated.name, updated.model_dump_json(), context_id),
            )
        return updated

    def delete(self, context_id: str) -> bool:
        """Delete one node. Children keep their (now dangling) parent reference.

        Returns:
            True if a node was deleted, False otherwise.
        """
        with self.db.connect() as conn:
            cursor = conn.execute("DELETE FROM contexts WHERE id = ?", (context_id,))
            return cursor.rowcount > 0
