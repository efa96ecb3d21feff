"""Entity and relation extraction into the entity graph."""

import logging
import re
from typing import Any

from pydantic import ValidationError

from research_council.errors import ParseError
from research_council.llm.base import Candidate, GenerationRequest
from research_council.llm.parsing import parse_json
from research_council.llm.router import ProviderFallbackRouter
from research_council.memory.graph_store import GraphStore
from research_council.memory.models import Entity, GraphUpdate, Relation
from research_council.workflow.store import MessageStore

logger = logging.getLogger(__name__)

DEFAULT_RELATION = "RELATED_TO"
DEFAULT_WEIGHT = 0.5

ENTITY_CANDIDATES = (
    Candidate(provider="gemini", model="gemini-2.0-flash"),
    Candidate(provider="openai", model="gpt-4o-mini"),
)

ENTITY_PROMPT = """Extract named entities and relationships from the text.
Return JSON with "entities" and "relationships".
Entity: {{ "id": stable-short-id, "name": string, "type": "concept|person|org|tech|place|other", "confidence": 0..1 }}
Relationship: {{ "a": entityId, "b": entityId, "type": "RELATED_TO|PART_OF|CONTRADICTS", "weight": 0..1 }}
Text:
{text}"""


def safe_rel(value: Any) -> str:
    """Upper-case a relation type and strip everything outside ``[A-Z0-9_]``."""
    cleaned = re.sub(r"[^A-Z0-9_]", "", str(value or "").upper())
    return cleaned or DEFAULT_RELATION


def _lists(payload: Any) -> tuple[list[Any], list[Any]]:
    """Pull entity and relationship lists out of a parsed reply.

    Accepts the expected object, or a list of objects that each carry one
    or both keys. Values that are not lists are ignored.
    """
    chunks = payload if isinstance(payload, list) else [payload]
    entities: list[Any] = []
    relations: list[Any] = []
    for chunk in chunks:
        if not isinstance(chunk, dict):
            continue
        found = chunk.get("entities")
        if isinstance(found, list):
            entities.extend(found)
        found = chunk.get("relationships") or chunk.get("relations")
        if isinstance(found, list):
            relations.extend(found)
    return entities, relations


class EntityGraphUpdater:
    """Extracts entities and relations from a message and upserts them.

    Args:
        router: Fallback router for the extraction call.
        messages: Source of the message text.
        graph: Destination graph store.
    """

    def __init__(
        self,
        router: ProviderFallbackRouter,
        messages: MessageStore,
        graph: GraphStore,
    ) -> None:
        self.router = router
        self.messages = messages
        self.graph = graph

    def update_for_message(self, message_id: str) -> GraphUpdate:
        """Extract and upsert the entities and relations of one message.

        Args:
            message_id: ID of a stored message.

        Returns:
            The entities and relations as stored after the upserts.

        Raises:
            NotFoundError: If the message does not exist.
            ProviderError: If the extraction call fails on every provider.
        """
        message = self.messages.get(message_id)
        response = self.router.generate(
            ENTITY_CANDIDATES,
            GenerationRequest(
                prompt=ENTITY_PROMPT.format(text=message.content),
                temperature=0,
                max_tokens=500,
            ),
        )

        try:
            payload = parse_json(response.text)
        except ParseError as exc:
            logger.debug("No entities parsed from message %s: %s", message_id, exc)
            return GraphUpdate()

        raw_entities, raw_relations = _lists(payload)
        update = GraphUpdate()
        for raw in raw_entities:
            entity = self._entity(raw)
            if entity is not None:
                update.entities.append(self.graph.upsert_entity(entity))

        for raw in raw_relations:
            relation = self._relation(raw)
            if relation is None:
                continue
            stored = self.graph.upsert_relation(relation)
            if stored is not None:
                update.relations.append(stored)

        logger.info(
            "Graph update from message %s: %d entities, %d relations",
            message_id,
            len(update.entities),
            len(update.relations),
        )
        return update

    @staticmethod
    def _entity(raw: Any) -> Entity | None:
        if not isinstance(raw, dict) or not str(raw.get("id") or "").strip():
            logger.warning("Skipping entity without id: %r", raw)
            return None
        confidence = raw.get("confidence")
        try:
            return Entity(
                id=str(raw["id"]).strip(),
                name=raw.get("name"),
                type=raw.get("type"),
                confidence=(
                    max(0.0, min(1.0, float(confidence)))
                    if isinstance(confidence, (int, float))
                    else 0.7
                ),
            )
        except ValidationError as exc:
            logger.warning("Skipping invalid entity %r: %s", raw, exc)
            return None

    @staticmethod
    def _relation(raw: Any) -> Relation | None:
        if not isinstance(raw, dict):
            return None
        source = raw.get("a") or raw.get("source")
        target = raw.get("b") or raw.get("target")
        if not source or not target:
            logger.warning("Skipping relation without endpoints: %r", raw)
            return None
        weight = raw.get("weight")
        return Relation(
            source=str(source),
            target=str(target),
            type=safe_rel(raw.get("type")),
            weight=(
                max(0.0, float(weight))
                if isinstance(weight, (int, float))
                else DEFAULT_WEIGHT
            ),
        )
