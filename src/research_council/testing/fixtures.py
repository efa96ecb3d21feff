"""Test doubles for the provider layer."""

from collections.abc import Callable, Iterable
from unittest.mock import MagicMock

from research_council.errors import ProviderError
from research_council.llm.base import GenerationRequest, GenerationResponse, Usage


def make_response(
    text: str, provider: str = "openai", model: str = "test-model"
) -> GenerationResponse:
    """Create a GenerationResponse with small fixed usage."""
    return GenerationResponse(
        text=text, usage=Usage(input=10, output=20), model=model, provider=provider
    )


def create_mock_router(
    responses: Iterable[str | GenerationResponse | Exception] | None = None,
    reply: Callable[[GenerationRequest], str] | None = None,
) -> MagicMock:
    """Create a mock ProviderFallbackRouter.

    Args:
        responses: Replies returned (or raised) by successive ``generate``
            calls. Strings are wrapped in a GenerationResponse.
        reply: Alternatively, a function computing reply text from the
            request, used for every call.

    Returns:
        MagicMock with the router interface; inspect ``generate.call_args_list``.
    """
    mock = MagicMock()
    if reply is not None:
        mock.generate.side_effect = lambda candidates, request: make_response(
            reply(request)
        )
    else:
        mock.generate.side_effect = [
            make_response(item) if isinstance(item, str) else item
            for item in (responses or [])
        ]
    return mock


class ScriptedAdapter:
    """A ProviderAdapter that answers from a script instead of the network.

    Instances are created by the router through the factory returned from
    ``create_scripted_adapters``.
    """

    def __init__(
        self,
        provider: str,
        model: str,
        outcome: str | Exception,
        calls: list[str],
    ) -> None:
        self.provider = provider
        self.model = model
        self.outcome = outcome
        self.calls = calls

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        self.calls.append(f"{self.provider}:{self.model}")
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return make_response(self.outcome, provider=self.provider, model=self.model)


def create_scripted_adapters(
    outcomes: dict[str, str | Exception],
) -> tuple[dict[str, Callable[..., ScriptedAdapter]], list[str]]:
    """Build an adapter registry whose providers follow a script.

    Args:
        outcomes: Provider name to reply text, or to an exception to raise.

    Returns:
        (registry for ``ProviderFallbackRouter(adapters=...)``, list that
        records every ``provider:model`` actually called, in order)
    """
    calls: list[str] = []

    def factory_for(provider: str) -> Callable[..., ScriptedAdapter]:
        def factory(api_key: str, model: str, base_url: str, client=None):
            return ScriptedAdapter(provider, model, outcomes[provider], calls)

        return factory

    return {provider: factory_for(provider) for provider in outcomes}, calls


def provider_failure(provider: str) -> ProviderError:
    """A ProviderError like the ones raised by the HTTP adapters."""
    return ProviderError(f"{provider} returned HTTP 500: boom")
