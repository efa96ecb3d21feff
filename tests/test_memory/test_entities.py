"""Tests for entity and relation extraction."""

import pytest

from research_council.errors import NotFoundError
from research_council.memory.entities import EntityGraphUpdater, safe_rel
from research_council.testing.factories import make_message
from research_council.testing.fixtures import create_mock_router

ITER_REPLY = """Here you go:
{"entities": [
  {"id": "iter", "name": "ITER", "type": "org", "confidence": 0.9},
  {"id": "tokamak", "name": "Tokamak", "type": "tech"}
],
"relationships": [
  {"a": "tokamak", "b": "iter", "type": "part of", "weight": 0.4},
  {"a": "tokamak", "b": "stellarator", "type": "CONTRADICTS"}
]}"""


@pytest.fixture
def message(messages):
    return messages.add(make_message(content="ITER is built around a tokamak."))


class TestSafeRel:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("PART_OF", "PART_OF"),
            ("part of", "PARTOF"),
            ("contradicts!", "CONTRADICTS"),
            ("", "RELATED_TO"),
            (None, "RELATED_TO"),
            ("???", "RELATED_TO"),
        ],
    )
    def test_sanitizes(self, raw, expected):
        assert safe_rel(raw) == expected


class TestUpdateForMessage:
    def test_upserts_entities_and_known_relations(self, messages, graph, message):
        router = create_mock_router([ITER_REPLY])
        update = EntityGraphUpdater(router, messages, graph).update_for_message(
            message.id
        )

        assert [e.id for e in update.entities] == ["iter", "tokamak"]
        assert graph.get_entity("tokamak").confidence == 0.7
        # stellarator is not a known entity
        assert len(update.relations) == 1
        relation = update.relations[0]
        assert (relation.source, relation.target, relation.type) == (
            "tokamak",
            "iter",
            "PARTOF",
        )
        assert relation.weight == 0.4

    def test_repeat_message_accumulates(self, messages, graph, message):
        router = create_mock_router([ITER_REPLY, ITER_REPLY])
        updater = EntityGraphUpdater(router, messages, graph)
        updater.update_for_message(message.id)
        updater.update_for_message(message.id)

        assert graph.get_entity("iter").mentions == 2
        assert graph.get_relation("tokamak", "iter", "PARTOF").weight == (
            pytest.approx(0.8)
        )

    def test_default_weight_and_alt_keys(self, messages, graph, message):
        router = create_mock_router(
            [
                '[{"entities": [{"id": "a"}, {"id": "b"}]},'
                ' {"relations": [{"source": "a", "target": "b"}]}]'
            ]
        )
        update = EntityGraphUpdater(router, messages, graph).update_for_message(
            message.id
        )
        assert update.relations[0].type == "RELATED_TO"
        assert update.relations[0].weight == 0.5

    def test_entities_without_id_are_skipped(self, messages, graph, message):
        router = create_mock_router(
            ['{"entities": [{"name": "Nameless"}, {"id": "  "}, {"id": "ok"}]}']
        )
        update = EntityGraphUpdater(router, messages, graph).update_for_message(
            message.id
        )
        assert [e.id for e in update.entities] == ["ok"]

    def test_unparseable_reply_changes_nothing(self, messages, graph, message):
        router = create_mock_router(["no json here"])
        update = EntityGraphUpdater(router, messages, graph).update_for_message(
            message.id
        )
        assert update.entities == []
        assert graph.get_stats().node_count == 0

    @pytest.mark.parametrize(
        "reply",
        [
            '{"entities": 5, "relationships": []}',
            '{"entities": "iter", "relationships": "PART_OF"}',
            '{"entities": {"id": "iter"}, "relations": 3}',
            '[{"entities": null}, 7, "text"]',
        ],
    )
    def test_non_list_values_yield_empty_update(
        self, messages, graph, message, reply
    ):
        router = create_mock_router([reply])
        update = EntityGraphUpdater(router, messages, graph).update_for_message(
            message.id
        )
        assert update.entities == []
        assert update.relations == []
        assert graph.get_stats().node_count == 0

    def test_uses_entity_candidates(self, messages, graph, message):
        router = create_mock_router(['{"entities": []}'])
        EntityGraphUpdater(router, messages, graph).update_for_message(message.id)

        candidates, request = router.generate.call_args.args
        assert [c.provider for c in candidates] == ["gemini", "openai"]
        assert request.temperature == 0
        assert request.max_tokens == 500
        assert "ITER is built around a tokamak." in request.prompt

    def test_missing_message(self, messages, graph):
        router = create_mock_router([])
        with pytest.raises(NotFoundError):
            EntityGraphUpdater(router, messages, graph).update_for_message("nope")
        router.generate.assert_not_called()
