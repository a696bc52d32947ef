"""Search service: natural-language task search over a task corpus.

Pipeline:
  1. Normalize the query (empty → immediate "none" result).
  2. Expand it into a few lexical variants.
  3. Fuzzy-score every (task, variant) pair, keep the best per task.
  4. Escalate to a semantic backend when the fuzzy pass is weak or forced.
  5. Rank, truncate, report the method actually used.

Escalation failures never fail the search; the fuzzy result is returned.
"""

import asyncio
import logging
import re
import time

from task_search.application.interfaces.semantic_search_provider import SemanticSearchProvider
from task_search.application.interfaces.task_repository import TaskRepository
from task_search.application.services.fuzzy_matcher import FuzzyMatcher
from task_search.application.services.lexicon import LexiconRegistry, LexiconSnapshot
from task_search.application.services.query_expander import QueryExpander
from task_search.application.services.text_normalizer import TextNormalizer
from task_search.domain.entities import (
    MatchCandidate,
    MatchedOn,
    NormalizedQuery,
    QueryVariant,
    SearchConfig,
    SearchMethod,
    SearchOptions,
    SearchResult,
    SemanticMatch,
    Task,
    TaskFilters,
)
from task_search.domain.exceptions import ScoreInvariantError, SearchValidationError

logger = logging.getLogger(__name__)

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    flags=re.IGNORECASE,
)
_PROVIDER_ID_RE = re.compile(r"^\d{10,}$")


class SearchService:
    """Application service orchestrating fuzzy search and semantic escalation.

    Holds no per-call state; every ``search`` call is independent.
    """

    def __init__(
        self,
        *,
        task_repository: TaskRepository | None = None,
        semantic_provider: SemanticSearchProvider | None = None,
        lexicon_registry: LexiconRegistry | None = None,
        config: SearchConfig | None = None,
        normalizer: TextNormalizer | None = None,
    ):
        self._task_repo = task_repository
        self._semantic_provider = semantic_provider
        self._lexicon_registry = lexicon_registry or LexiconRegistry()
        self._config = config or SearchConfig()
        self._normalizer = normalizer or TextNormalizer()
        self._matcher = FuzzyMatcher(self._config, normalizer=self._normalizer)

    @property
    def config(self) -> SearchConfig:
        return self._config

    async def search(
        self,
        query: str,
        options: SearchOptions | None = None,
        *,
        corpus: list[Task] | None = None,
    ) -> SearchResult:
        """Search the corpus (or the task repository) for tasks matching ``query``.

        Raises:
            SearchValidationError: If limit or min_score are out of range.
        """
        options = options or SearchOptions()
        limit, min_score = self._resolve_options(options)
        start = time.perf_counter()

        nq = self._normalizer.normalize(query)
        if nq.is_empty:
            logger.info("Search skipped: empty query %r", query)
            return SearchResult(query=nq, elapsed_ms=self._elapsed_ms(start))

        logger.info(
            "Search start: query=%r tokens=%s entities=%d limit=%d min_score=%.2f force_semantic=%s",
            query,
            list(nq.tokens),
            len(nq.entities),
            limit,
            min_score,
            options.force_semantic,
        )

        tasks = await self._load_corpus(corpus, include_completed=options.include_completed)
        variants = self._expand(nq, tasks, skip_expansion=options.skip_expansion)

        try:
            best, skipped = await self._fuzzy_pass(query, tasks, variants, min_score)
        except ScoreInvariantError:
            logger.exception("Search aborted on invalid score for query %r", query)
            return SearchResult(
                query=nq,
                variants=variants,
                elapsed_ms=self._elapsed_ms(start),
                degraded=True,
            )

        method = SearchMethod.FUZZY
        if self._should_escalate(best, force=options.force_semantic):
            searchable = [task for task in tasks if self._is_searchable(task)]
            semantic = await self._semantic_pass(query, searchable, limit)
            if semantic is not None:
                self._merge_semantic(best, semantic, tasks, min_score)
                method = SearchMethod.FUZZY_SEMANTIC

        ranked = self._rank(best)
        result = SearchResult(
            query=nq,
            variants=variants,
            matches=[candidate for candidate, _ in ranked[:limit]],
            method=method,
            elapsed_ms=self._elapsed_ms(start),
            total_candidates=len(ranked),
            skipped=skipped,
        )

        logger.info(
            "Search complete: method=%s matches=%d/%d top=%s skipped=%d %dms",
            result.method.value,
            result.match_count,
            result.total_candidates,
            f"{result.matches[0].score:.2f}" if result.matches else "n/a",
            result.skipped,
            result.elapsed_ms,
        )
        return result

    async def quick_search(self, query: str, tasks: list[Task]) -> list[Task]:
        """Identity-variant fuzzy lookup over a given task list; no escalation."""
        nq = self._normalizer.normalize(query)
        if nq.is_empty:
            return []
        variants = self._expander(self._lexicon_registry.current()).identity_only(nq)
        best, _ = await self._fuzzy_pass(query, tasks, variants, self._config.min_score)
        return [candidate.task for candidate, _ in self._rank(best)]

    def preview_expansion(self, query: str) -> tuple[NormalizedQuery, list[QueryVariant]]:
        """Normalize and expand a query without scoring (debugging aid)."""
        nq = self._normalizer.normalize(query)
        if nq.is_empty:
            return nq, []
        return nq, self._expander(self._lexicon_registry.current()).expand(nq)

    # ── Pipeline steps ──────────────────────────────────────────────

    def _resolve_options(self, options: SearchOptions) -> tuple[int, float]:
        limit = self._config.default_limit if options.limit is None else options.limit
        if not 1 <= limit <= self._config.max_limit:
            raise SearchValidationError(
                "limit", f"must be between 1 and {self._config.max_limit}, got {limit}"
            )
        min_score = self._config.min_score if options.min_score is None else options.min_score
        if not 0.0 <= min_score <= 1.0:
            raise SearchValidationError("min_score", f"must be between 0 and 1, got {min_score}")
        return limit, min_score

    async def _load_corpus(
        self, corpus: list[Task] | None, *, include_completed: bool
    ) -> list[Task]:
        if corpus is None:
            if self._task_repo is None:
                logger.warning("No corpus given and no task repository configured")
                return []
            filters = TaskFilters(completed=None if include_completed else False)
            corpus = await self._task_repo.get_tasks(filters)
        if include_completed:
            return list(corpus)
        return [task for task in corpus if not getattr(task, "is_completed", False)]

    def _expand(
        self, nq: NormalizedQuery, tasks: list[Task], *, skip_expansion: bool
    ) -> list[QueryVariant]:
        snapshot = self._lexicon_registry.current()
        expander = self._expander(snapshot)
        if skip_expansion:
            return expander.identity_only(nq)
        lexicon = snapshot.lexicon.extended(self._corpus_vocabulary(tasks))
        return expander.expand(nq, lexicon=lexicon)

    def _expander(self, snapshot: LexiconSnapshot) -> QueryExpander:
        return QueryExpander.from_snapshot(snapshot, self._config, normalizer=self._normalizer)

    def _corpus_vocabulary(self, tasks: list[Task]) -> set[str]:
        words: set[str] = set()
        for task in tasks:
            if not self._is_searchable(task):
                continue
            for text in (task.content, task.description, task.category, *(task.labels or [])):
                if isinstance(text, str):
                    words.update(self._normalizer.tokenize(text))
        return words - self._normalizer.stop_words

    async def _fuzzy_pass(
        self,
        query: str,
        tasks: list[Task],
        variants: list[QueryVariant],
        min_score: float,
    ) -> tuple[dict[str, tuple[MatchCandidate, int]], int]:
        """Score corpus × variants; return best candidate per task id and skip count."""
        best: dict[str, tuple[MatchCandidate, int]] = {}
        skipped = 0
        looks_like_id = self._looks_like_task_id(query)

        for index, task in enumerate(tasks):
            if index and index % self._config.yield_every == 0:
                await asyncio.sleep(0)

            if not self._is_searchable(task):
                skipped += 1
                logger.debug("Skipping malformed task at corpus index %d: %r", index, task)
                continue

            if looks_like_id and task.id == query.strip():
                best[task.id] = (
                    MatchCandidate(
                        task=task,
                        score=1.0,
                        matched_on=MatchedOn.EXACT,
                        reasoning="matched task id",
                        coverage=1.0,
                    ),
                    index,
                )
                continue

            doc = self._matcher.prepare(task)
            for variant in variants:
                candidate = self._matcher.score_document(doc, variant, min_score=min_score)
                if candidate is None:
                    continue
                self._check_score(candidate)
                current = best.get(task.id)
                # Variants arrive in rank order, so only a strictly better
                # score may replace the current best.
                if current is None or candidate.score > current[0].score:
                    best[task.id] = (candidate, index)

        return best, skipped

    def _should_escalate(
        self, best: dict[str, tuple[MatchCandidate, int]], *, force: bool
    ) -> bool:
        if self._semantic_provider is None:
            if force:
                logger.info("Semantic search forced but no provider configured")
            return False
        if force:
            return True
        if len(best) < self._config.escalation_min_candidates:
            return True
        top = max(candidate.score for candidate, _ in best.values())
        return top < self._config.escalation_min_top_score

    async def _semantic_pass(
        self, query: str, tasks: list[Task], limit: int
    ) -> list[SemanticMatch] | None:
        """Run the semantic backend; None on any failure."""
        provider = self._semantic_provider
        if provider is None or not tasks:
            return None

        logger.info("Escalating to semantic search via %s", provider.provider_name)
        try:
            return await asyncio.wait_for(
                provider.semantic_search(query, tasks, limit),
                timeout=self._config.semantic_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Semantic search timed out after %.1fs: returning fuzzy results",
                self._config.semantic_timeout_seconds,
            )
        except Exception as e:
            logger.warning(
                "Semantic search failed (%s: %s): returning fuzzy results",
                type(e).__name__,
                e,
            )
        return None

    def _merge_semantic(
        self,
        best: dict[str, tuple[MatchCandidate, int]],
        semantic: list[SemanticMatch],
        tasks: list[Task],
        min_score: float,
    ) -> None:
        positions = {
            task.id: (task, index)
            for index, task in enumerate(tasks)
            if self._is_searchable(task)
        }
        for match in semantic:
            located = positions.get(match.task_id)
            if located is None:
                logger.debug("Semantic match for unknown task id %r ignored", match.task_id)
                continue
            score = min(1.0, max(0.0, float(match.score)))
            if score <= 0.0 or score < min_score:
                continue
            task, index = located
            current = best.get(task.id)
            if current is None or score > current[0].score:
                best[task.id] = (
                    MatchCandidate(
                        task=task,
                        score=score,
                        matched_on=MatchedOn.SEMANTIC,
                        reasoning=match.reasoning,
                    ),
                    index,
                )

    @staticmethod
    def _rank(
        best: dict[str, tuple[MatchCandidate, int]]
    ) -> list[tuple[MatchCandidate, int]]:
        return sorted(
            best.values(),
            key=lambda item: (-item[0].score, -item[0].coverage, item[1]),
        )

    # ── Small helpers ───────────────────────────────────────────────

    @staticmethod
    def _check_score(candidate: MatchCandidate) -> None:
        if not 0.0 <= candidate.score <= 1.0:
            raise ScoreInvariantError(candidate.task.id, candidate.score, candidate.matched_on)

    @staticmethod
    def _is_searchable(task: object) -> bool:
        if not isinstance(task, Task):
            return False
        if not task.id or not isinstance(task.content, str) or not task.content.strip():
            return False
        if not all(
            value is None or isinstance(value, str) for value in (task.description, task.category)
        ):
            return False
        labels = task.labels or []
        return isinstance(labels, list) and all(isinstance(label, str) for label in labels)

    @staticmethod
    def _looks_like_task_id(query: str) -> bool:
        stripped = query.strip()
        return bool(_UUID_RE.match(stripped) or _PROVIDER_ID_RE.match(stripped))

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.perf_counter() - start) * 1000)
