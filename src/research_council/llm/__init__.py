"""Provider adapters, the fallback router and model-output parsing."""

from research_council.llm.base import (
    Candidate,
    GenerationRequest,
    GenerationResponse,
    ProviderAdapter,
    Usage,
)
from research_council.llm.router import MOCK_MARKER, ProviderFallbackRouter

__all__ = [
    "Candidate",
    "GenerationRequest",
    "GenerationResponse",
    "MOCK_MARKER",
    "ProviderAdapter",
    "ProviderFallbackRouter",
    "Usage",
]
