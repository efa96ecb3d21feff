"""Anthropic Messages API adapter."""

from typing import Any

from research_council.errors import ProviderError
from research_council.llm.base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    GenerationRequest,
    GenerationResponse,
    HTTPAdapter,
)

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicAdapter(HTTPAdapter):
    """Adapter for Anthropic's ``/messages`` endpoint."""

    provider = "anthropic"

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": (
                DEFAULT_TEMPERATURE
                if request.temperature is None
                else request.temperature
            ),
            "messages": [{"role": "user", "content": request.prompt}],
        }
        if request.system:
            payload["system"] = request.system

        data = self._post(
            "/messages",
            payload,
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
        )

        blocks = data.get("content")
        if not isinstance(blocks, list):
            raise ProviderError("anthropic response has no content blocks")
        text = "\n".join(
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        )
        usage = data.get("usage") or {}
        return self._response(
            text, usage.get("input_tokens"), usage.get("output_tokens")
        )
