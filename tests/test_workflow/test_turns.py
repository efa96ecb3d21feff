"""Tests for the turn orchestrator."""

from unittest.mock import MagicMock

import pytest

from research_council.contexts.models import (
    AgentType,
    ContextLevel,
    ContextProperties,
    ModelSelection,
    Traits,
)
from research_council.errors import AllProvidersFailedError, NotFoundError
from research_council.testing.factories import make_context
from research_council.testing.fixtures import create_mock_router, make_response
from research_council.workflow.models import SenderRole
from research_council.workflow.phases import Phase
from research_council.workflow.turns import TurnOrchestrator


@pytest.fixture
def domain(contexts):
    return contexts.create(
        make_context(
            name="Domain",
            properties=ContextProperties(
                system_instruction="Cite sources.", research_topic="Fusion power"
            ),
            model=ModelSelection(temperature=0.7),
        )
    )


@pytest.fixture
def agents(contexts, domain):
    created = {}
    for name, role in [
        ("Researcher-1", AgentType.RESEARCHER),
        ("Analyzer-1", AgentType.ANALYZER),
        ("Synthesizer-1", AgentType.SYNTHESIZER),
        ("Author-1", AgentType.AUTHOR),
    ]:
        created[role] = contexts.create(
            make_context(
                name=name,
                level=ContextLevel.AGENT,
                agent_type=role,
                parent_id=domain.id,
                traits=Traits(curiosity=0.9),
            )
        )
    return created


@pytest.fixture
def router():
    return create_mock_router(reply=lambda request: "A considered reply.")


@pytest.fixture
def dispatcher():
    return MagicMock()


@pytest.fixture
def orchestrator(contexts, resolver, conversations, messages, router, dispatcher):
    return TurnOrchestrator(
        contexts=contexts,
        resolver=resolver,
        conversations=conversations,
        messages=messages,
        router=router,
        dispatcher=dispatcher,
        memory_pipeline=MagicMock(),
        entity_updater=MagicMock(),
    )


class TestSendUserMessage:
    def test_only_eligible_roles_reply(self, orchestrator, agents, messages):
        convo = orchestrator.create_conversation()
        result = orchestrator.send_user_message(convo.id, "What is ITER?")

        assert result.user_message.sender is SenderRole.USER
        assert [m.metadata.agent_name for m in result.agent_messages] == [
            "Researcher-1"
        ]
        reply = result.agent_messages[0]
        assert reply.sender is SenderRole.AGENT
        assert reply.context_id == agents[AgentType.RESEARCHER].id
        assert reply.metadata.phase is Phase.RESEARCH
        assert reply.metadata.tokens_input == 10
        assert reply.metadata.tokens_output == 20
        assert len(messages.list_for_conversation(convo.id)) == 2

    def test_no_eligible_participant_is_not_a_failure(
        self, orchestrator, agents, messages, router
    ):
        convo = orchestrator.create_conversation(
            participant_ids=[
                agents[AgentType.ANALYZER].id,
                agents[AgentType.AUTHOR].id,
            ]
        )
        result = orchestrator.send_user_message(convo.id, "Hello")

        assert result.agent_messages == []
        stored = messages.list_for_conversation(convo.id)
        assert [m.sender for m in stored] == [SenderRole.USER]
        router.generate.assert_not_called()

    def test_request_uses_effective_configuration(self, orchestrator, agents, router):
        convo = orchestrator.create_conversation(topic="Conversation topic")
        orchestrator.send_user_message(convo.id, "Go")

        candidates, request = router.generate.call_args.args
        assert [c.label for c in candidates] == [
            "gemini:gemini-2.0-flash",
            "openai:gpt-4o-mini",
        ]
        assert request.system == "Cite sources."
        assert request.temperature == 0.7
        assert request.max_tokens == 600
        assert "Topic: Fusion power" in request.prompt
        assert "- Curiosity 0.9" in request.prompt
        assert "User message:\nGo" in request.prompt

    def test_agent_model_is_tried_before_phase_fallbacks(
        self, orchestrator, contexts, agents, router
    ):
        analyzer = agents[AgentType.ANALYZER]
        contexts.patch(analyzer.id, model={"provider": "openai", "model": "gpt-4o"})
        convo = orchestrator.create_conversation(participant_ids=[analyzer.id])
        orchestrator.set_phase(convo.id, Phase.ANALYSIS)

        orchestrator.send_user_message(convo.id, "Critique this.")

        candidates, _ = router.generate.call_args.args
        assert [c.label for c in candidates] == [
            "openai:gpt-4o",
            "anthropic:claude-3-5-sonnet-latest",
            "openai:gpt-4o-mini",
        ]

    def test_conversation_topic_used_without_research_topic(
        self, orchestrator, contexts, domain, agents, router
    ):
        contexts.patch(domain.id, properties={"research_topic": None})
        convo = orchestrator.create_conversation(topic="Tidal energy")
        orchestrator.send_user_message(convo.id, "Go")

        _, request = router.generate.call_args.args
        assert "Topic: Tidal energy" in request.prompt

    def test_agent_failure_becomes_system_message(
        self, orchestrator, agents, messages, router
    ):
        def reply(request):
            if "Role: Analyzer" in request.prompt:
                raise AllProvidersFailedError([("openai:gpt-4o-mini", "HTTP 500")])
            return "fine"

        router.generate.side_effect = lambda candidates, request: make_response(
            reply(request)
        )
        convo = orchestrator.create_conversation()
        orchestrator.set_phase(convo.id, Phase.SYNTHESIS)

        result = orchestrator.send_user_message(convo.id, "Synthesize.")

        assert [m.metadata.agent_name for m in result.agent_messages] == [
            "Researcher-1",
            "Synthesizer-1",
        ]
        system = [
            m
            for m in messages.list_for_conversation(convo.id)
            if m.sender is SenderRole.SYSTEM
        ]
        assert len(system) == 1
        assert system[0].content.startswith(
            "Model error for agent Analyzer-1 during synthesis phase:"
        )
        assert "HTTP 500" in system[0].content
        assert system[0].metadata.phase is Phase.SYNTHESIS
        assert "HTTP 500" in system[0].metadata.error

    def test_background_pipelines_dispatched_per_message(
        self, orchestrator, agents, dispatcher
    ):
        convo = orchestrator.create_conversation()
        result = orchestrator.send_user_message(convo.id, "Hi")

        submitted = [c.args for c in dispatcher.submit.call_args_list]
        assert len(submitted) == 4
        dispatched_ids = [args[2] for args in submitted]
        assert dispatched_ids == [
            result.user_message.id,
            result.user_message.id,
            result.agent_messages[0].id,
            result.agent_messages[0].id,
        ]
        assert submitted[0][1] == orchestrator.memory_pipeline.extract_for_message
        assert submitted[1][1] == orchestrator.entity_updater.update_for_message

    def test_unknown_conversation_raises(self, orchestrator):
        with pytest.raises(NotFoundError):
            orchestrator.send_user_message("nope", "Hi")


class TestConversationLifecycle:
    def test_create_starts_in_research(self, orchestrator):
        convo = orchestrator.create_conversation(title="T", topic="X")
        assert convo.phase is Phase.RESEARCH
        assert [h.phase for h in convo.phase_history] == [Phase.RESEARCH]

    def test_create_with_unknown_participant_raises(self, orchestrator):
        with pytest.raises(NotFoundError):
            orchestrator.create_conversation(participant_ids=["ghost"])

    def test_advance_walks_phases_and_stops_at_report(self, orchestrator):
        convo = orchestrator.create_conversation()
        phases = [orchestrator.advance_phase(convo.id).phase for _ in range(4)]
        assert phases == [
            Phase.ANALYSIS,
            Phase.SYNTHESIS,
            Phase.REPORT,
            Phase.REPORT,
        ]
        final = orchestrator.conversations.get(convo.id)
        assert len(final.phase_history) == 4

    def test_set_phase_jumps_and_records_history(self, orchestrator):
        convo = orchestrator.create_conversation()
        jumped = orchestrator.set_phase(convo.id, "report")
        back = orchestrator.set_phase(convo.id, Phase.RESEARCH)
        assert jumped.phase is Phase.REPORT
        assert [h.phase for h in back.phase_history] == [
            Phase.RESEARCH,
            Phase.REPORT,
            Phase.RESEARCH,
        ]

    def test_set_topic_strips_and_clears(self, orchestrator):
        convo = orchestrator.create_conversation()
        assert orchestrator.set_topic(convo.id, "  Fusion  ").topic == "Fusion"
        assert orchestrator.set_topic(convo.id, "").topic is None
