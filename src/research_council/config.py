"""Runtime settings for the research council.

Values come from environment variables (see ``Settings.from_env``); the CLI
applies command-line overrides on top.
"""

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from research_council.errors import ConfigurationError

DEFAULT_DATA_DIR = Path.home() / ".research-council"

# Environment variable holding each provider's API key.
PROVIDER_ENV: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
}

# Order used when no explicit candidate is usable.
PROVIDER_PREFERENCE: tuple[str, ...] = ("gemini", "openai", "anthropic")

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-haiku-latest",
    "gemini": "gemini-2.0-flash",
}

DEFAULT_BASE_URLS: dict[str, str] = {
    "openai": "https://api.openai.com/v1",
    "anthropic": "https://api.anthropic.com/v1",
    "gemini": "https://generativelanguage.googleapis.com/v1beta",
}


class Settings(BaseModel):
    """Configuration for a council instance.

    Args:
        data_dir: Directory holding the SQLite database and graph file.
        llm_mock: Return deterministic echo replies instead of calling providers.
        api_keys: Provider name to API key.
        models: Provider name to default model, used when a candidate omits one.
        base_urls: Provider name to REST base URL.
        provider_preference: Order for auto-selected fallback providers.
        request_timeout: HTTP timeout for provider calls, in seconds.
        max_resolution_depth: Longest parent chain the resolver will walk.
        background_workers: Worker threads for memory/graph pipelines.
        background_queue_size: Max pending background tasks before rejecting.
        log_level: Root log level applied by the CLI.
    """

    data_dir: Path = DEFAULT_DATA_DIR
    llm_mock: bool = False
    api_keys: dict[str, str] = Field(default_factory=dict)
    models: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_MODELS))
    base_urls: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_BASE_URLS)
    )
    provider_preference: tuple[str, ...] = PROVIDER_PREFERENCE
    request_timeout: float = 120.0
    max_resolution_depth: int = 32
    background_workers: int = 2
    background_queue_size: int = 64
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Returns:
            A populated Settings instance.

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed.
        """
        env = os.environ if environ is None else environ

        api_keys = {
            provider: env[var]
            for provider, var in PROVIDER_ENV.items()
            if env.get(var, "").strip()
        }
        models = {
            provider: env.get(f"{provider.upper()}_MODEL") or default
            for provider, default in DEFAULT_MODELS.items()
        }
        base_urls = {
            provider: env.get(f"{provider.upper()}_BASE_URL") or default
            for provider, default in DEFAULT_BASE_URLS.items()
        }

        return cls(
            data_dir=Path(env.get("COUNCIL_DATA_DIR") or DEFAULT_DATA_DIR),
            llm_mock=env.get("LLM_MOCK", "0").strip().lower() in ("1", "true", "yes"),
            api_keys=api_keys,
            models=models,
            base_urls=base_urls,
            request_timeout=_number(env, "COUNCIL_REQUEST_TIMEOUT", 120.0, float),
            max_resolution_depth=_number(env, "COUNCIL_MAX_DEPTH", 32, int),
            background_workers=_number(env, "COUNCIL_BACKGROUND_WORKERS", 2, int),
            background_queue_size=_number(env, "COUNCIL_BACKGROUND_QUEUE", 64, int),
            log_level=env.get("COUNCIL_LOG_LEVEL", "INFO"),
        )

    @property
    def db_path(self) -> Path:
        return self.data_dir / "council.db"

    @property
    def graph_path(self) -> Path:
        return self.data_dir / "entity_graph.json"

    def credential_for(self, provider: str) -> str | None:
        """Return the provider's API key, or None if missing or blank."""
        key = self.api_keys.get(provider, "")
        return key if key.strip() else None

    def default_model_for(self, provider: str) -> str:
        return self.models.get(provider) or DEFAULT_MODELS.get(provider, "")

    def base_url_for(self, provider: str) -> str:
        return self.base_urls.get(provider) or DEFAULT_BASE_URLS.get(provider, "")

    def credentialed_providers(self) -> list[str]:
        """Providers with a credential, in preference order."""
        return [p for p in self.provider_preference if self.credential_for(p)]


def _number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from exc
