"""Report synthesis from a conversation's memories and the entity graph.

One model call plans the outline, then one call per section writes its
Markdown body. Each section prefers the model pack suited to it and falls
back through the others.
"""

import json
import logging

from pydantic import ValidationError

from research_council.errors import ParseError
from research_council.llm.base import (
    Candidate,
    GenerationRequest,
    GenerationResponse,
)
from research_council.llm.parsing import parse_json
from research_council.llm.router import ProviderFallbackRouter
from research_council.memory.graph_store import GraphStore
from research_council.memory.ledger import MemoryLedger
from research_council.memory.models import GraphSnapshot, MemoryRecord
from research_council.reports.models import (
    DetailLevel,
    ModelUsage,
    OutlineSection,
    Report,
    ReportFormat,
    ReportSection,
)
from research_council.reports.store import ReportStore
from research_council.workflow.store import ConversationStore

logger = logging.getLogger(__name__)

SUMMARY_PACK = Candidate(provider="gemini", model="gemini-2.0-flash")
NARRATIVE_PACK = Candidate(provider="openai", model="gpt-4o-mini")
TECH_PACK = Candidate(provider="anthropic", model="claude-3-5-sonnet-latest")

GRAPH_LIMIT = 80
GRAPH_PROMPT_CHARS = 2000
OUTLINE_MEMORIES = 80
SECTION_MEMORIES = 120

MAX_TOKENS: dict[DetailLevel, int] = {
    DetailLevel.BRIEF: 700,
    DetailLevel.BALANCED: 1100,
    DetailLevel.IN_DEPTH: 1600,
}

DEFAULT_OUTLINE = (
    OutlineSection(key="exec_summary", title="Executive Summary"),
    OutlineSection(key="key_findings", title="Key Findings"),
    OutlineSection(key="detailed_analysis", title="Detailed Analysis"),
    OutlineSection(key="entity_graph", title="Entity Relationships"),
    OutlineSection(key="open_questions", title="Open Questions"),
    OutlineSection(key="recommendations", title="Recommendations"),
)

OUTLINE_PROMPT = """You are the Author agent specialized in report generation.
Create a JSON object like:
{{ "sections": [ {{ "key":"exec_summary","title":"..." }}, ... ] }}
(Use keys: exec_summary, key_findings, detailed_analysis, entity_graph, open_questions, recommendations)
Topic: {topic}
Format: {format}, Detail: {detail}, Style: {style}
Memories: {memories}
Graph: {graph}"""

SECTION_PROMPT = """Write the "{title}" section in Markdown.
Stay focused on "{topic}".
Use memories and graph below. Be structured and helpful.
Return ONLY the Markdown body (no code fences).
Memories: {memories}
Graph: {graph}
Style: {style}"""


def pack_for_section(key: str) -> Candidate:
    if key == "exec_summary":
        return SUMMARY_PACK
    if key == "entity_graph":
        return TECH_PACK
    return NARRATIVE_PACK


def parse_outline(text: str) -> list[OutlineSection]:
    """Read an outline from a model reply, or fall back to the default one.

    Accepts ``{"sections": [...]}`` or a bare list of ``{key, title}``.
    """
    try:
        payload = parse_json(text, brackets="{}[]")
    except ParseError as exc:
        logger.warning("Unparseable outline, using default: %s", exc)
        return list(DEFAULT_OUTLINE)

    raw = payload.get("sections") if isinstance(payload, dict) else payload
    sections: list[OutlineSection] = []
    seen: set[str] = set()
    for item in raw if isinstance(raw, list) else []:
        if not isinstance(item, dict) or not item.get("key"):
            continue
        try:
            section = OutlineSection(
                key=str(item["key"]), title=str(item.get("title") or item["key"])
            )
        except ValidationError:
            continue
        if section.key not in seen:
            seen.add(section.key)
            sections.append(section)
    return sections or list(DEFAULT_OUTLINE)


def _memory_digest(records: list[MemoryRecord], limit: int) -> str:
    return json.dumps(
        [
            {
                "content": r.content,
                "type": r.type.value,
                "importance": round(r.importance, 3),
                "confidence": round(r.confidence, 3),
            }
            for r in records[:limit]
        ]
    )


def _graph_digest(snapshot: GraphSnapshot) -> str:
    return snapshot.model_dump_json()[:GRAPH_PROMPT_CHARS]


class ReportGenerator:
    """Builds and stores reports for conversations.

    Args:
        router: Fallback router for outline and section calls.
        conversations: Source of the conversation topic.
        ledger: Memories feeding the report.
        graph: Entity graph feeding the report.
        store: Destination for generated reports.
    """

    def __init__(
        self,
        router: ProviderFallbackRouter,
        conversations: ConversationStore,
        ledger: MemoryLedger,
        graph: GraphStore,
        store: ReportStore,
    ) -> None:
        self.router = router
        self.conversations = conversations
        self.ledger = ledger
        self.graph = graph
        self.store = store

    def generate(
        self,
        conversation_id: str,
        title: str | None = None,
        report_format: ReportFormat | str = ReportFormat.STANDARD,
        style: str = "concise",
        detail_level: DetailLevel | str | None = None,
    ) -> Report:
        """Generate, store and return a report.

        Args:
            conversation_id: Conversation to report on.
            title: Used as the topic when the conversation has none.
            report_format: executive, standard or comprehensive.
            style: Free-form style hint, e.g. concise, narrative, technical.
            detail_level: brief, balanced or in-depth; derived from the
                format when omitted.

        Returns:
            The stored report.

        Raises:
            NotFoundError: If the conversation does not exist.
            ProviderError: If a model call fails on every provider.
        """
        conversation = self.conversations.get(conversation_id)
        report_format = ReportFormat(report_format)
        detail = (
            DetailLevel(detail_level)
            if detail_level
            else DetailLevel.for_format(report_format)
        )
        topic = conversation.topic or title or "Research Report"

        memories = self.ledger.list_for_conversation(conversation_id)
        snapshot = self.graph.snapshot(GRAPH_LIMIT)
        graph_text = _graph_digest(snapshot)

        outline_response = self.router.generate(
            [SUMMARY_PACK, NARRATIVE_PACK, TECH_PACK],
            GenerationRequest(
                prompt=OUTLINE_PROMPT.format(
                    topic=topic,
                    format=report_format.value,
                    detail=detail.value,
                    style=style,
                    memories=_memory_digest(memories, OUTLINE_MEMORIES),
                    graph=graph_text,
                ),
                temperature=0.2,
                max_tokens=700,
            ),
        )
        outline = parse_outline(outline_response.text)
        models_used = [_usage(outline_response, "outline")]

        section_memories = _memory_digest(memories, SECTION_MEMORIES)
        sections: dict[str, ReportSection] = {}
        for entry in outline:
            response = self.router.generate(
                [pack_for_section(entry.key), SUMMARY_PACK, NARRATIVE_PACK],
                GenerationRequest(
                    prompt=SECTION_PROMPT.format(
                        title=entry.title,
                        topic=topic,
                        memories=section_memories,
                        graph=graph_text,
                        style=style,
                    ),
                    temperature=0.4,
                    max_tokens=MAX_TOKENS[detail],
                ),
            )
            sections[entry.key] = ReportSection(
                title=entry.title, markdown=response.text
            )
            models_used.append(_usage(response, f"section:{entry.key}"))

        report = Report(
            conversation_id=conversation_id,
            topic=conversation.topic or "",
            title=title or topic,
            format=report_format,
            detail_level=detail,
            style=style,
            structure=outline,
            sections=sections,
            source_memory_ids=[m.id for m in memories],
            version_number=self.store.count_for_conversation(conversation_id) + 1,
            models_used=models_used,
        )
        logger.info(
            "Generated report %s for conversation %s with %d sections",
            report.id,
            conversation_id,
            len(sections),
        )
        return self.store.add(report)


def _usage(response: GenerationResponse, purpose: str) -> ModelUsage:
    return ModelUsage(provider=response.provider, model=response.model, purpose=purpose)
