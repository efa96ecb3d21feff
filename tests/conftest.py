"""Shared test configuration and fixtures."""

import pytest

from research_council.contexts.resolver import ConfigHierarchyResolver
from research_council.contexts.store import ContextStore
from research_council.memory.graph_store import GraphStore
from research_council.memory.ledger import MemoryLedger
from research_council.storage.database import Database
from research_council.testing.factories import make_settings
from research_council.workflow.store import ConversationStore, MessageStore


@pytest.fixture
def settings(tmp_path):
    """Mock-mode settings rooted in a temporary directory."""
    return make_settings(tmp_path)


@pytest.fixture
def db(tmp_path):
    return Database(tmp_path / "council.db")


@pytest.fixture
def contexts(db):
    return ContextStore(db)


@pytest.fixture
def resolver(contexts):
    return ConfigHierarchyResolver(contexts)


@pytest.fixture
def conversations(db):
    return ConversationStore(db)


@pytest.fixture
def messages(db):
    return MessageStore(db)


@pytest.fixture
def ledger(db):
    return MemoryLedger(db)


@pytest.fixture
def graph(tmp_path):
    store = GraphStore(storage_path=tmp_path / "entity_graph.json")
    yield store
    store.close()
