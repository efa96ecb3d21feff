"""Two-stage memory extraction: extract candidates, then classify each one.

Stage 1 asks one model for up to eight short memories as a JSON list.
Stage 2 asks a second model to type and score every candidate. Each stored
record names both models for provenance.
"""

import logging
from typing import Any

from research_council.errors import ProviderError
from research_council.llm.base import Candidate, GenerationRequest
from research_council.llm.parsing import parse_list, parse_object
from research_council.llm.router import ProviderFallbackRouter
from research_council.memory.ledger import MemoryLedger
from research_council.memory.models import MemoryRecord, MemoryType
from research_council.workflow.models import Message, SenderRole
from research_council.workflow.store import MessageStore

logger = logging.getLogger(__name__)

MAX_CANDIDATES = 8
DEFAULT_CONFIDENCE = 0.7

EXTRACTION_CANDIDATES = (
    Candidate(provider="openai", model="gpt-4o-mini"),
    Candidate(provider="anthropic", model="claude-3-5-sonnet-latest"),
)
CLASSIFICATION_CANDIDATES = (
    Candidate(provider="anthropic", model="claude-3-5-sonnet-latest"),
    Candidate(provider="openai", model="gpt-4o-mini"),
)

# Actions outrank facts, facts outrank insights, insights outrank questions.
BASE_IMPORTANCE: dict[MemoryType, float] = {
    MemoryType.ACTION: 0.85,
    MemoryType.FACT: 0.75,
    MemoryType.INSIGHT: 0.65,
    MemoryType.QUESTION: 0.55,
}

EXTRACTION_PROMPT = (
    "Extract 0-8 concise memories from the text below. "
    "Return STRICT JSON array like: "
    '[{{"content":"...", "type":"fact|insight|question|action"?, '
    '"confidence":0..1?}}]'
    "\n\nText:\n{text}"
)

CLASSIFICATION_PROMPT = (
    "Classify the following memory as one of: fact, insight, question, action. "
    'Return strict JSON: {{"type":"fact|insight|question|action", '
    '"confidence":0..1}}\n\n'
    'Memory: "{content}"'
)


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def importance_for(memory_type: MemoryType | str, confidence: float) -> float:
    """Derive importance from type and confidence.

    ``base * (0.5 + confidence / 2)``, clamped to [0, 1].
    """
    base = BASE_IMPORTANCE[MemoryType(memory_type)]
    return clamp01(base * (0.5 + confidence / 2))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_type(value: Any) -> MemoryType | None:
    try:
        return MemoryType(str(value).strip().lower())
    except ValueError:
        return None


def source_for(message: Message) -> str:
    """``user`` for user messages, the sending agent's context id otherwise."""
    if message.sender is SenderRole.AGENT:
        return message.context_id or "agent"
    return "user"


class MemoryExtractionPipeline:
    """Turns a stored message into scored memory records.

    Args:
        router: Fallback router for both model calls.
        messages: Source of the message text.
        ledger: Destination for the records.
    """

    def __init__(
        self,
        router: ProviderFallbackRouter,
        messages: MessageStore,
        ledger: MemoryLedger,
    ) -> None:
        self.router = router
        self.messages = messages
        self.ledger = ledger

    def extract_for_message(self, message_id: str) -> list[MemoryRecord]:
        """Extract, classify and store memories for one message.

        Running this twice for the same message stores duplicates.

        Args:
            message_id: ID of a stored message.

        Returns:
            The stored records, possibly empty.

        Raises:
            NotFoundError: If the message does not exist.
            ProviderError: If the extraction call fails on every provider.
        """
        message = self.messages.get(message_id)

        extraction = self.router.generate(
            EXTRACTION_CANDIDATES,
            GenerationRequest(
                prompt=EXTRACTION_PROMPT.format(text=message.content),
                temperature=0,
                max_tokens=600,
            ),
        )
        items = [
            item for item in parse_list(extraction.text) if isinstance(item, dict)
        ][:MAX_CANDIDATES]
        if not items:
            logger.debug("No memories extracted from message %s", message_id)
            return []

        stored: list[MemoryRecord] = []
        for item in items:
            content = str(item.get("content") or item.get("text") or "").strip()
            if not content:
                continue
            record = self._classify(message, item, content, extraction.label)
            stored.append(self.ledger.add(record))

        logger.info(
            "Stored %d memories from message %s (extracted by %s)",
            len(stored),
            message_id,
            extraction.label,
        )
        return stored

    def _classify(
        self,
        message: Message,
        item: dict[str, Any],
        content: str,
        extracted_by: str,
    ) -> MemoryRecord:
        classified_by: str | None = None
        verdict: dict[str, Any] = {}
        try:
            response = self.router.generate(
                CLASSIFICATION_CANDIDATES,
                GenerationRequest(
                    prompt=CLASSIFICATION_PROMPT.format(content=content),
                    temperature=0,
                    max_tokens=120,
                ),
            )
        except ProviderError as exc:
            logger.warning("Classification failed, keeping extractor guess: %s", exc)
        else:
            classified_by = response.label
            verdict = parse_object(response.text) or {}

        memory_type = (
            _as_type(verdict.get("type"))
            or _as_type(item.get("type"))
            or MemoryType.INSIGHT
        )

        if _is_number(verdict.get("confidence")):
            confidence = clamp01(verdict["confidence"])
        elif _is_number(item.get("confidence")):
            confidence = clamp01(item["confidence"])
        else:
            confidence = DEFAULT_CONFIDENCE

        if _is_number(item.get("importance")):
            importance = clamp01(item["importance"])
        else:
            importance = importance_for(memory_type, confidence)

        return MemoryRecord(
            content=content,
            type=memory_type,
            confidence=confidence,
            importance=importance,
            source=source_for(message),
            source_message_id=message.id,
            conversation_id=message.conversation_id,
            phase=message.metadata.phase,
            agent_name=message.metadata.agent_name,
            timestamp=message.timestamp,
            extracted_by=extracted_by,
            classified_by=classified_by,
        )
