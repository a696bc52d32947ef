"""Abstract interface (port) for the semantic escalation backend."""

from abc import ABC, abstractmethod

from task_search.domain.entities import SemanticMatch, Task


class SemanticSearchProvider(ABC):
    """Port for AI/embedding-backed task search used when fuzzy matching is weak."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique name identifying this backend (e.g. 'llm', 'embeddings')."""
        ...

    @abstractmethod
    async def semantic_search(
        self,
        query: str,
        corpus: list[Task],
        limit: int,
    ) -> list[SemanticMatch]:
        """Rank corpus tasks by semantic relevance to the raw query.

        Args:
            query: The original, un-normalized user query.
            corpus: The same task snapshot the fuzzy pass scored.
            limit: Maximum number of matches wanted.

        Returns:
            Matches with scores in [0, 1], best first.

        Raises:
            Any exception on timeout, auth failure, rate limiting or bad
            output; the caller treats every failure the same way.
        """
        ...
