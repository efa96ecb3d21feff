"""Shared test utilities, fixtures, and factories."""

from research_council.testing.factories import (
    make_context,
    make_entity,
    make_memory_record,
    make_message,
    make_relation,
    make_settings,
)
from research_council.testing.fixtures import (
    ScriptedAdapter,
    create_mock_router,
    create_scripted_adapters,
    make_response,
    provider_failure,
)

__all__ = [
    "ScriptedAdapter",
    "create_mock_router",
    "create_scripted_adapters",
    "make_context",
    "make_entity",
    "make_memory_record",
    "make_message",
    "make_relation",
    "make_response",
    "make_settings",
    "provider_failure",
]
