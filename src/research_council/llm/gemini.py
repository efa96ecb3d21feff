"""Google Gemini ``generateContent`` adapter."""

from typing import Any

from research_council.errors import ProviderError
from research_council.llm.base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    GenerationRequest,
    GenerationResponse,
    HTTPAdapter,
)


class GeminiAdapter(HTTPAdapter):
    """Adapter for the Generative Language REST API."""

    provider = "gemini"

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": request.prompt}]}],
            "generationConfig": {
                "temperature": (
                    DEFAULT_TEMPERATURE
                    if request.temperature is None
                    else request.temperature
                ),
                "maxOutputTokens": request.max_tokens or DEFAULT_MAX_TOKENS,
            },
        }
        if request.system:
            payload["systemInstruction"] = {"parts": [{"text": request.system}]}

        data = self._post(
            f"/models/{self.model}:generateContent",
            payload,
            params={"key": self.api_key},
        )

        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError("gemini response has no candidates") from exc
        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
        usage = data.get("usageMetadata") or {}
        return self._response(
            text, usage.get("promptTokenCount"), usage.get("candidatesTokenCount")
        )
