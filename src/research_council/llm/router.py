"""Ordered multi-provider fallback.

The router only knows the ``ProviderAdapter`` capability. Adapter classes are
looked up by provider name in a registry, so a new provider is one new
adapter class plus one registry entry.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import httpx

from research_council.config import PROVIDER_ENV, Settings
from research_council.errors import AllProvidersFailedError, ConfigurationError
from research_council.llm.anthropic import AnthropicAdapter
from research_council.llm.base import (
    Candidate,
    GenerationRequest,
    GenerationResponse,
    ProviderAdapter,
    Usage,
)
from research_council.llm.gemini import GeminiAdapter
from research_council.llm.openai import OpenAIAdapter

logger = logging.getLogger(__name__)

MOCK_MARKER = "**[MOCK RESPONSE]**"
MOCK_PROMPT_CHARS = 800

AdapterFactory = Callable[..., ProviderAdapter]

DEFAULT_ADAPTERS: dict[str, AdapterFactory] = {
    "openai": OpenAIAdapter,
    "anthropic": AnthropicAdapter,
    "gemini": GeminiAdapter,
}

CandidateLike = Candidate | Mapping[str, Any] | tuple


def as_candidate(value: CandidateLike) -> Candidate:
    """Accept a Candidate, a ``{"provider", "model"}`` mapping or a tuple."""
    if isinstance(value, Candidate):
        return value
    if isinstance(value, tuple):
        provider, *rest = value
        return Candidate(provider=provider, model=rest[0] if rest else None)
    return Candidate.model_validate(value)


def mock_response(request: GenerationRequest) -> GenerationResponse:
    """Deterministic echo reply used when mock mode is on."""
    return GenerationResponse(
        text=(
            f"{MOCK_MARKER}\n\nYou asked:\n\n{request.prompt[:MOCK_PROMPT_CHARS]}\n\n"
            "(Set LLM_MOCK=0 and add an API key to hit real models.)"
        ),
        usage=Usage(input=0, output=0),
        model="mock-model",
        provider="mock",
    )


class ProviderFallbackRouter:
    """Tries provider/model candidates in order until one succeeds.

    Args:
        settings: Credentials, default models, base URLs and mock flag.
        adapters: Provider name to adapter factory. Defaults to openai,
            anthropic and gemini.
        http_client: Shared HTTP client; one is created (and owned) if omitted.
    """

    def __init__(
        self,
        settings: Settings,
        adapters: Mapping[str, AdapterFactory] | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.settings = settings
        self.adapters = dict(DEFAULT_ADAPTERS if adapters is None else adapters)
        self._owns_client = http_client is None
        self.http = http_client or httpx.Client(timeout=settings.request_timeout)

    def _is_usable(self, provider: str) -> bool:
        return (
            provider in self.adapters
            and self.settings.credential_for(provider) is not None
        )

    def available_providers(self) -> list[str]:
        """Credentialed providers with a registered adapter, in preference order."""
        return [p for p in self.settings.provider_preference if self._is_usable(p)]

    def normalize(self, candidates: Iterable[CandidateLike]) -> list[Candidate]:
        """Build the effective chain for a request.

        Drops uncredentialed candidates and fills in default models. When
        nothing usable remains, every available provider is used in
        preference order; otherwise available providers not already listed
        are appended after the explicit ones.
        """
        chain: list[Candidate] = []
        for raw in candidates:
            candidate = as_candidate(raw)
            if not self._is_usable(candidate.provider):
                continue
            chain.append(
                Candidate(
                    provider=candidate.provider,
                    model=candidate.model
                    or self.settings.default_model_for(candidate.provider),
                )
            )

        present = {c.provider for c in chain}
        for provider in self.available_providers():
            if provider not in present:
                chain.append(
                    Candidate(
                        provider=provider,
                        model=self.settings.default_model_for(provider),
                    )
                )
        return chain

    def generate(
        self,
        candidates: Iterable[CandidateLike],
        request: GenerationRequest,
    ) -> GenerationResponse:
        """Generate a reply from the first candidate that succeeds.

        Args:
            candidates: Ordered (provider, model) preferences.
            request: The generation request.

        Returns:
            The first successful response.

        Raises:
            ConfigurationError: If no provider has a credential and mock is off.
            AllProvidersFailedError: If every normalized candidate failed.
        """
        if self.settings.llm_mock:
            return mock_response(request)

        requested = [as_candidate(c) for c in candidates]
        chain = self.normalize(requested)
        if not chain:
            names = sorted({c.provider for c in requested} | set(PROVIDER_ENV))
            env_vars = " / ".join(
                PROVIDER_ENV.get(n, f"{n.upper()}_API_KEY") for n in names
            )
            raise ConfigurationError(
                "No LLM providers configured "
                f"(requested: {', '.join(c.provider for c in requested) or 'none'}). "
                f"Set one of {env_vars}, or set LLM_MOCK=1 for mock replies."
            )

        attempts: list[tuple[str, str]] = []
        for candidate in chain:
            try:
                adapter = self._make_adapter(candidate)
                return adapter.generate(request)
            except Exception as exc:
                logger.warning(
                    "Provider %s failed, trying next candidate: %s",
                    candidate.label,
                    exc,
                )
                attempts.append((candidate.label, str(exc)))

        raise AllProvidersFailedError(attempts)

    def _make_adapter(self, candidate: Candidate) -> ProviderAdapter:
        factory = self.adapters[candidate.provider]
        return factory(
            api_key=self.settings.credential_for(candidate.provider),
            model=candidate.model,
            base_url=self.settings.base_url_for(candidate.provider),
            client=self.http,
        )

    def close(self) -> None:
        """Close the HTTP client if the router created it."""
        if self._owns_client:
            self.http.close()

    def __enter__(self) -> "ProviderFallbackRouter":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
