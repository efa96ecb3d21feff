"""Phase-driven turn loop.

A user message is answered by every participating agent whose role is
eligible in the conversation's current phase, one agent at a time. An
agent's failure is recorded as a system message and never aborts the turn.
"""

import logging
from datetime import datetime, timezone

from research_council.background import BackgroundDispatcher
from research_council.contexts.models import ContextLevel, ContextNode
from research_council.contexts.resolver import ConfigHierarchyResolver
from research_council.contexts.store import ContextStore
from research_council.llm.base import Candidate, GenerationRequest
from research_council.llm.router import ProviderFallbackRouter
from research_council.memory.entities import EntityGraphUpdater
from research_council.memory.extraction import MemoryExtractionPipeline
from research_council.workflow.models import (
    Conversation,
    Message,
    MessageMetadata,
    PhaseChange,
    SenderRole,
    TurnResult,
)
from research_council.workflow.phases import (
    Phase,
    agent_types_for_phase,
    fallbacks_for_phase,
    next_phase,
)
from research_council.workflow.prompting import build_prompt
from research_council.workflow.store import ConversationStore, MessageStore

logger = logging.getLogger(__name__)

TURN_TEMPERATURE = 0.2
TURN_MAX_TOKENS = 600


class TurnOrchestrator:
    """Runs conversation turns and owns phase transitions.

    Args:
        contexts: Context node store.
        resolver: Effective-configuration resolver.
        conversations: Conversation store.
        messages: Message store.
        router: Fallback router used for agent replies.
        dispatcher: Background runner for the derived-state pipelines.
        memory_pipeline: Memory extraction, run for every stored message.
        entity_updater: Entity graph extraction, run for every stored message.
    """

    def __init__(
        self,
        contexts: ContextStore,
        resolver: ConfigHierarchyResolver,
        conversations: ConversationStore,
        messages: MessageStore,
        router: ProviderFallbackRouter,
        dispatcher: BackgroundDispatcher,
        memory_pipeline: MemoryExtractionPipeline,
        entity_updater: EntityGraphUpdater,
    ) -> None:
        self.contexts = contexts
        self.resolver = resolver
        self.conversations = conversations
        self.messages = messages
        self.router = router
        self.dispatcher = dispatcher
        self.memory_pipeline = memory_pipeline
        self.entity_updater = entity_updater

    def create_conversation(
        self,
        title: str = "Research Session",
        participant_ids: list[str] | None = None,
        topic: str | None = None,
    ) -> Conversation:
        """Start a conversation in the research phase.

        Raises:
            NotFoundError: If a participant id names a missing context.
        """
        for context_id in participant_ids or []:
            self.contexts.get(context_id)
        conversation = Conversation(
            title=title,
            participant_ids=list(participant_ids or []),
            topic=topic or None,
            phase_history=[PhaseChange(phase=Phase.RESEARCH)],
        )
        logger.info("Created conversation %s (%s)", conversation.id, title)
        return self.conversations.save(conversation)

    def send_user_message(self, conversation_id: str, content: str) -> TurnResult:
        """Store a user message and collect replies from the eligible agents.

        Args:
            conversation_id: Target conversation.
            content: The user's text.

        Returns:
            The stored user message and the agent replies that succeeded.

        Raises:
            NotFoundError: If the conversation does not exist.
        """
        conversation = self.conversations.get(conversation_id)
        phase = conversation.phase

        user_message = self.messages.add(
            Message(
                conversation_id=conversation.id,
                sender=SenderRole.USER,
                content=content,
            )
        )
        self._dispatch_background(user_message)

        replies: list[Message] = []
        for agent in self.active_agents(conversation):
            reply = self._run_agent(conversation, agent, content)
            if reply is not None:
                replies.append(reply)
                self._dispatch_background(reply)

        logger.info(
            "Turn in %s (%s phase): %d agent replies",
            conversation.id,
            phase.value,
            len(replies),
        )
        return TurnResult(user_message=user_message, agent_messages=replies)

    def active_agents(self, conversation: Conversation) -> list[ContextNode]:
        """Participants (or every agent) whose role may act in the current phase."""
        if conversation.participant_ids:
            candidates = self.contexts.get_many(conversation.participant_ids)
        else:
            candidates = self.contexts.list_agents()
        allowed = set(agent_types_for_phase(conversation.phase))
        return [
            node
            for node in candidates
            if node.level is ContextLevel.AGENT and node.agent_type in allowed
        ]

    def _run_agent(
        self, conversation: Conversation, agent: ContextNode, content: str
    ) -> Message | None:
        phase = conversation.phase
        try:
            resolved = self.resolver.resolve(agent.id)
            selection = resolved.model_selection
            properties = resolved.properties

            candidates: list[Candidate] = []
            if selection.provider:
                candidates.append(
                    Candidate(provider=selection.provider, model=selection.model)
                )
            candidates.extend(fallbacks_for_phase(phase))

            request = GenerationRequest(
                prompt=build_prompt(
                    agent.agent_type,
                    resolved.traits,
                    content,
                    properties.research_topic or conversation.topic,
                ),
                system=properties.system_instruction,
                temperature=(
                    TURN_TEMPERATURE
                    if selection.temperature is None
                    else selection.temperature
                ),
                max_tokens=selection.max_tokens or TURN_MAX_TOKENS,
            )
            response = self.router.generate(candidates, request)
        except Exception as exc:
            logger.warning(
                "Agent %s failed during %s phase: %s", agent.name, phase.value, exc
            )
            self.messages.add(
                Message(
                    conversation_id=conversation.id,
                    sender=SenderRole.SYSTEM,
                    content=(
                        f"Model error for agent {agent.name} "
                        f"during {phase.value} phase: {exc}"
                    ),
                    metadata=MessageMetadata(
                        error=str(exc), phase=phase, agent_name=agent.name
                    ),
                )
            )
            return None

        return self.messages.add(
            Message(
                conversation_id=conversation.id,
                sender=SenderRole.AGENT,
                context_id=agent.id,
                content=response.text,
                metadata=MessageMetadata(
                    provider=response.provider,
                    model=response.model,
                    tokens_input=response.usage.input,
                    tokens_output=response.usage.output,
                    agent_name=agent.name,
                    phase=phase,
                ),
            )
        )

    def _dispatch_background(self, message: Message) -> None:
        self.dispatcher.submit(
            f"memory:{message.id}", self.memory_pipeline.extract_for_message, message.id
        )
        self.dispatcher.submit(
            f"entities:{message.id}", self.entity_updater.update_for_message, message.id
        )

    def advance_phase(self, conversation_id: str) -> Conversation:
        """Move one step along research → analysis → synthesis → report.

        At ``report`` this is a no-op and records no history entry.
        """
        conversation = self.conversations.get(conversation_id)
        target = next_phase(conversation.phase)
        if target is conversation.phase:
            return conversation
        return self._change_phase(conversation, target)

    def set_phase(self, conversation_id: str, phase: Phase | str) -> Conversation:
        """Jump to any phase.

        This is an explicit override of the normal progression. It accepts
        any target, including the current phase, and always records history.
        """
        conversation = self.conversations.get(conversation_id)
        return self._change_phase(conversation, Phase(phase))

    def _change_phase(self, conversation: Conversation, phase: Phase) -> Conversation:
        history = conversation.phase_history + [
            PhaseChange(phase=phase, at=datetime.now(timezone.utc))
        ]
        logger.info(
            "Conversation %s phase %s -> %s",
            conversation.id,
            conversation.phase.value,
            phase.value,
        )
        return self.conversations.update(
            conversation, phase=phase, phase_history=history
        )

    def set_topic(self, conversation_id: str, topic: str | None) -> Conversation:
        """Set or clear (empty/None) the research topic."""
        conversation = self.conversations.get(conversation_id)
        cleaned = (topic or "").strip() or None
        return self.conversations.update(conversation, topic=cleaned)
