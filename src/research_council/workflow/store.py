"""Persistence for conversations and messages."""

from datetime import datetime, timezone
from typing import Any

from research_council.errors import NotFoundError
from research_council.storage.database import Database
from research_council.workflow.models import Conversation, Message


class ConversationStore:
    """Stores conversations as JSON documents.

    Args:
        db: Shared document database.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def save(self, conversation: Conversation) -> Conversation:
        """Insert or replace a conversation."""
        with self.db.connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO conversations
                    (id, topic, phase, updated_at, payload)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    conversation.id,
                    conversation.topic,
                    conversation.phase.value,
                    conversation.updated_at.isoformat(),
                    conversation.model_dump_json(),
                ),
            )
        return conversation

    def find(self, conversation_id: str) -> Conversation | None:
        with self.db.connect() as conn:
            row = conn.execute(
                "SELECT payload FROM conversations WHERE id = ?", (conversation_id,)
            ).fetchone()
        return Conversation.model_validate_json(row["payload"]) if row else None

    def get(self, conversation_id: str) -> Conversation:
        conversation = self.find(conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation", conversation_id)
        return conversation

    def update(self, conversation: Conversation, **changes: Any) -> Conversation:
        """Save a copy of ``conversation`` with ``changes`` and a fresh updated_at."""
        updated = conversation.model_copy(
            update={**changes, "updated_at": datetime.now(timezone.utc)}
        )
        return self.save(updated)

    def list_recent(self, limit: int = 50) -> list[Conversation]:
        with self.db.connect() as conn:
            rows = conn.execute(
                "SELECT payload FROM conversations ORDER BY updated_at DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [Conversation.model_validate_json(r["payload"]) for r in rows]

    def recent_topics(self, limit: int = 30) -> list[dict[str, Any]]:
        """Latest conversation for each distinct non-empty topic, newest first.

        Returns:
            Dicts with ``topic``, ``conversation_id``, ``phase`` and ``updated_at``.
        """
        with self.db.connect() as conn:
            rows = conn.execute(
                """
                SELECT topic, id, phase, updated_at FROM conversations
                WHERE topic IS NOT NULL AND topic != ''
                ORDER BY updated_at DESC
                """
            ).fetchall()

        topics: list[dict[str, Any]] = []
        seen: set[str] = set()
        for row in rows:
            if row["topic"] in seen:
                continue
            seen.add(row["topic"])
            topics.append(
                {
                    "topic": row["topic"],
                    "conversation_id": row["id"],
                    "phase": row["phase"],
                    "updated_at": row["updated_at"],
                }
            )
        return topics[:limit]


class MessageStore:
    """Append-only message log.

    Args:
        db: Shared document database.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def add(self, message: Message) -> Message:
        with self.db.connect() as conn:
            conn.execute(
                """
                INSERT INTO messages (id, conversation_id, timestamp, payload)
                VALUES (?, ?, ?, ?)
                """,
                (
                    message.id,
                    message.conversation_id,
                    message.timestamp.isoformat(),
                    message.model_dump_json(),
                ),
            )
        return message

    def find(self, message_id: str) -> Message | None:
        with self.db.connect() as conn:
            row = conn.execute(
                "SELECT payload FROM messages WHERE id = ?", (message_id,)
            ).fetchone()
        return Message.model_validate_json(row["payload"]) if row else None

    def get(self, message_id: str) -> Message:
        message = self.find(message_id)
        if message is None:
            raise NotFoundError("Message", message_id)
        return message

    def list_for_conversation(
        self, conversation_id: str, limit: int = 500
    ) -> list[Message]:
        """Messages in timestamp order, insertion order breaking ties."""
        with self.db.connect() as conn:
            rows = conn.execute(
                """
                SELECT payload FROM messages WHERE conversation_id = ?
                ORDER BY timestamp ASC, rowid ASC LIMIT ?
                """,
                (conversation_id, limit),
            ).fetchall()
        return [Message.model_validate_json(r["payload"]) for r in rows]
