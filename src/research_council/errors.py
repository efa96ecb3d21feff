"""Exception hierarchy shared across the council."""


class CouncilError(Exception):
    """Base class for every error raised by research_council."""


class ConfigurationError(CouncilError):
    """No usable provider credentials, or invalid settings."""


class NotFoundError(CouncilError):
    """A referenced context, conversation, message or memory does not exist."""

    def __init__(self, kind: str, item_id: str) -> None:
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind} not found: {item_id}")


class CycleDetectedError(CouncilError):
    """The parent chain of a context revisits a node or never terminates."""

    def __init__(self, context_id: str, chain: list[str]) -> None:
        self.context_id = context_id
        self.chain = chain
        super().__init__(
            f"Parent chain of context {context_id} does not terminate: "
            f"{' -> '.join(chain)}"
        )


class ProviderError(CouncilError):
    """A single provider call failed."""


class AllProvidersFailedError(ProviderError):
    """Every candidate in a fallback chain failed.

    Attributes:
        attempts: (``provider:model``, error message) pairs in the order tried.
    """

    def __init__(self, attempts: list[tuple[str, str]]) -> None:
        self.attempts = attempts
        tried = "; ".join(f"{label} ({error})" for label, error in attempts)
        super().__init__(f"All LLM fallbacks failed. Tried: {tried}")


class ParseError(CouncilError):
    """Model output could not be parsed as structured data."""
