"""OpenAI chat-completions adapter.

Works against api.openai.com or any OpenAI-compatible endpoint.
"""

from typing import Any

from research_council.errors import ProviderError
from research_council.llm.base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    GenerationRequest,
    GenerationResponse,
    HTTPAdapter,
)


class OpenAIAdapter(HTTPAdapter):
    """Adapter for OpenAI-compatible ``/chat/completions`` endpoints."""

    provider = "openai"

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Send a chat completion request.

        Args:
            request: Prompt, optional system prompt and sampling settings.

        Returns:
            The assistant's reply with token usage.

        Raises:
            ProviderError: If the request fails or the payload is malformed.
        """
        messages: list[dict[str, str]] = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        messages.append({"role": "user", "content": request.prompt})

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": (
                DEFAULT_TEMPERATURE
                if request.temperature is None
                else request.temperature
            ),
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
        }
        data = self._post(
            "/chat/completions",
            payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

        try:
            text = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError("openai response has no choices") from exc
        usage = data.get("usage") or {}
        return self._response(
            text, usage.get("prompt_tokens"), usage.get("completion_tokens")
        )
