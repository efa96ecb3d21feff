"""Composition root: builds and owns every council component."""

import logging
from typing import Any

import httpx

from research_council.background import BackgroundDispatcher
from research_council.config import Settings
from research_council.contexts.resolver import ConfigHierarchyResolver
from research_council.contexts.store import ContextStore
from research_council.llm.router import ProviderFallbackRouter
from research_council.memory.entities import EntityGraphUpdater
from research_council.memory.extraction import MemoryExtractionPipeline
from research_council.memory.graph_store import GraphStore
from research_council.memory.ledger import MemoryLedger
from research_council.reports.generator import ReportGenerator
from research_council.reports.store import ReportStore
from research_council.storage.database import Database
from research_council.workflow.store import ConversationStore, MessageStore
from research_council.workflow.turns import TurnOrchestrator

logger = logging.getLogger(__name__)


class ResearchCouncil:
    """One council instance over a data directory.

    The graph store, HTTP client and background workers are opened here and
    released by ``close()``; use the instance as a context manager.

    Args:
        settings: Runtime settings; read from the environment when omitted.
        router: Router to use instead of building one from settings.
        http_client: Shared HTTP client for a router built here.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        router: ProviderFallbackRouter | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.db = Database(self.settings.db_path)
        self.graph = GraphStore(self.settings.graph_path)
        self._owns_router = router is None
        self.router = router or ProviderFallbackRouter(
            self.settings, http_client=http_client
        )
        self.dispatcher = BackgroundDispatcher(
            max_workers=self.settings.background_workers,
            max_pending=self.settings.background_queue_size,
        )

        self.contexts = ContextStore(self.db)
        self.resolver = ConfigHierarchyResolver(
            self.contexts, max_depth=self.settings.max_resolution_depth
        )
        self.conversations = ConversationStore(self.db)
        self.messages = MessageStore(self.db)
        self.ledger = MemoryLedger(self.db)
        self.report_store = ReportStore(self.db)

        self.memory_pipeline = MemoryExtractionPipeline(
            self.router, self.messages, self.ledger
        )
        self.entity_updater = EntityGraphUpdater(
            self.router, self.messages, self.graph
        )
        self.orchestrator = TurnOrchestrator(
            contexts=self.contexts,
            resolver=self.resolver,
            conversations=self.conversations,
            messages=self.messages,
            router=self.router,
            dispatcher=self.dispatcher,
            memory_pipeline=self.memory_pipeline,
            entity_updater=self.entity_updater,
        )
        self.reports = ReportGenerator(
            self.router,
            self.conversations,
            self.ledger,
            self.graph,
            self.report_store,
        )
        logger.debug(
            "Council ready at %s (mock=%s)",
            self.settings.data_dir,
            self.settings.llm_mock,
        )

    def close(self) -> None:
        """Drain background work, then persist the graph and close the router."""
        self.dispatcher.shutdown(wait=True)
        self.graph.close()
        if self._owns_router:
            self.router.close()

    def __enter__(self) -> "ResearchCouncil":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
