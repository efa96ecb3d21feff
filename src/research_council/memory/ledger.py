"""SQLite-backed ledger of scored memory records."""

import logging
from dataclasses import dataclass

from research_council.errors import NotFoundError
from research_council.memory.models import MemoryRecord, MemoryType
from research_council.storage.database import Database

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 200
MAX_LIMIT = 1000

_SORTS = {
    "new": "timestamp DESC",
    "importance": "importance DESC, confidence DESC, timestamp DESC",
    "confidence": "confidence DESC, importance DESC, timestamp DESC",
}


@dataclass
class MemoryFilters:
    """Optional filters for ``MemoryLedger.search``; None means unfiltered."""

    type: MemoryType | str | None = None
    source: str | None = None
    conversation_id: str | None = None
    min_importance: float | None = None
    model: str | None = None
    q: str | None = None


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return max(1, min(MAX_LIMIT, int(limit)))


class MemoryLedger:
    """Append-and-delete store for memory records.

    Records are never updated after insertion.

    Args:
        db: Shared document database.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def add(self, record: MemoryRecord) -> MemoryRecord:
        with self.db.connect() as conn:
            conn.execute(
                """
                INSERT INTO memories
                    (id, conversation_id, source_message_id, type, source, content,
                     confidence, importance, extracted_by, classified_by,
                     timestamp, payload)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.conversation_id,
                    record.source_message_id,
                    record.type.value,
                    record.source,
                    record.content,
                    record.confidence,
                    record.importance,
                    record.extracted_by,
                    record.classified_by,
                    record.timestamp.isoformat(),
                    record.model_dump_json(),
                ),
            )
        return record

    def find(self, memory_id: str) -> MemoryRecord | None:
        with self.db.connect() as conn:
            row = conn.execute(
                "SELECT payload FROM memories WHERE id = ?", (memory_id,)
            ).fetchone()
        return MemoryRecord.model_validate_json(row["payload"]) if row else None

    def get(self, memory_id: str) -> MemoryRecord:
        record = self.find(memory_id)
        if record is None:
            raise NotFoundError("Memory", memory_id)
        return record

    def search(
        self,
        filters: MemoryFilters | None = None,
        sort: str = "new",
        limit: int | None = DEFAULT_LIMIT,
    ) -> list[MemoryRecord]:
        """Query memories.

        Args:
            filters: Field filters. ``model`` matches a substring of either
                provenance label; ``q`` matches a substring of the content.
            sort: One of ``new``, ``importance`` or ``confidence``.
            limit: Maximum rows, clamped to [1, 1000].

        Returns:
            Matching records in the requested order.

        Raises:
            ValueError: If ``sort`` is not recognized.
        """
        if sort not in _SORTS:
            raise ValueError(f"Unknown sort {sort!r}; expected one of {sorted(_SORTS)}")
        filters = filters or MemoryFilters()

        clauses: list[str] = []
        params: list[object] = []
        if filters.type:
            clauses.append("type = ?")
            params.append(MemoryType(filters.type).value)
        if filters.source:
            clauses.append("source = ?")
            params.append(filters.source)
        if filters.conversation_id:
            clauses.append("conversation_id = ?")
            params.append(filters.conversation_id)
        if filters.min_importance is not None:
            clauses.append("importance >= ?")
            params.append(float(filters.min_importance))
        if filters.model:
            clauses.append("(extracted_by LIKE ? OR classified_by LIKE ?)")
            params.extend([f"%{filters.model}%"] * 2)
        if filters.q:
            clauses.append("content LIKE ?")
            params.append(f"%{filters.q}%")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        query = (
            f"SELECT payload FROM memories {where} "
            f"ORDER BY {_SORTS[sort]}, rowid ASC LIMIT ?"
        )
        params.append(clamp_limit(limit))

        with self.db.connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [MemoryRecord.model_validate_json(r["payload"]) for r in rows]

    def list_for_conversation(self, conversation_id: str) -> list[MemoryRecord]:
        """Every memory of a conversation, most important first.

        Ties break on confidence desc, then oldest first.
        """
        with self.db.connect() as conn:
            rows = conn.execute(
                """
                SELECT payload FROM memories WHERE conversation_id = ?
                ORDER BY importance DESC, confidence DESC, timestamp ASC, rowid ASC
                """,
                (conversation_id,),
            ).fetchall()
        return [MemoryRecord.model_validate_json(r["payload"]) for r in rows]

    def forget(self, memory_id: str) -> bool:
        """Delete a memory by ID.

        Returns:
            True if a row was removed.
        """
        with self.db.connect() as conn:
            cursor = conn.execute("DELETE FROM memories WHERE id = ?", (memory_id,))
        if cursor.rowcount:
            logger.info("Forgot memory %s", memory_id)
        return bool(cursor.rowcount)
