"""Domain-specific exceptions: framework-independent."""


class SearchValidationError(ValueError):
    """Raised when search input is rejected before the pipeline runs."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class ScoreInvariantError(Exception):
    """Raised when a matcher produces a score outside [0, 1].

    This is a programming error; the search service converts it into a
    degraded, empty result instead of failing the caller.
    """

    def __init__(self, task_id: str, score: float, matched_on: str):
        self.task_id = task_id
        self.score = score
        self.matched_on = matched_on
        super().__init__(
            f"Score {score!r} for task '{task_id}' ({matched_on}) is outside [0, 1]"
        )


class SemanticSearchError(Exception):
    """Raised when a semantic search backend cannot produce usable results."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"[{provider}] {message}")


class ChatProviderError(Exception):
    """Raised when a chat provider returns an error.

    Provider-agnostic: works for OpenRouter, Groq, OpenAI, etc.
    """

    def __init__(self, provider: str, status_code: int, message: str):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{provider}] {status_code}: {message}")
