"""Request/response contract shared by every provider adapter."""

from typing import Any, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, Field

from research_council.errors import ProviderError

DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_TOKENS = 512


class GenerationRequest(BaseModel):
    """A single-prompt generation request."""

    prompt: str
    system: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None


class Usage(BaseModel):
    input: int = 0
    output: int = 0


class GenerationResponse(BaseModel):
    """Canonical response returned by every adapter."""

    text: str
    usage: Usage = Field(default_factory=Usage)
    model: str
    provider: str

    @property
    def label(self) -> str:
        """``provider:model`` identifier used for provenance."""
        return f"{self.provider}:{self.model}"


class Candidate(BaseModel):
    """One entry of a fallback chain. A missing model means the provider default."""

    provider: str
    model: str | None = None

    @property
    def label(self) -> str:
        return f"{self.provider}:{self.model or 'default'}"


@runtime_checkable
class ProviderAdapter(Protocol):
    """The single capability a provider must implement."""

    provider: str
    model: str

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Run one generation request against the provider."""
        ...


class HTTPAdapter:
    """Shared plumbing for adapters that talk to a REST endpoint over httpx.

    Args:
        api_key: Provider credential.
        model: Model identifier sent with each request.
        base_url: Base URL of the provider API.
        client: Shared HTTP client; a private one is created when omitted.
        timeout: Timeout for a privately created client, in seconds.
    """

    provider = "http"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        client: httpx.Client | None = None,
        timeout: float = 120.0,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ValueError(f"{type(self).__name__} requires a non-empty base_url")
        if not base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"base_url must start with http:// or https://, got: {base_url}"
            )
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)

    def _post(
        self,
        path: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """POST a JSON payload and return the decoded body.

        Raises:
            ProviderError: On transport errors, non-2xx status or non-JSON body.
        """
        try:
            resp = self.client.post(
                f"{self.base_url}{path}",
                json=payload,
                headers=headers,
                params=params,
            )
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"{self.provider} returned HTTP {exc.response.status_code}: "
                f"{exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"{self.provider} request failed: {exc}") from exc
        except ValueError as exc:
            raise ProviderError(f"{self.provider} returned invalid JSON") from exc

    def _response(
        self, text: str, input_tokens: Any, output_tokens: Any
    ) -> GenerationResponse:
        return GenerationResponse(
            text=text,
            usage=Usage(input=int(input_tokens or 0), output=int(output_tokens or 0)),
            model=self.model,
            provider=self.provider,
        )
