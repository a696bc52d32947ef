"""Fuzzy matcher: scores one task against one query variant.

Rules, first hit wins:
  1. Substring of the normalized task content         → 1.0, "exact"
  2. Normalized edit similarity ≥ fuzzy_threshold     → similarity, "fuzzy-content"
  3. Token overlap with content / description / labels → ratio,
     "fuzzy-content" | "fuzzy-description" | "token-overlap"
A category hit adds a flat bonus on top. Anything under the floor is dropped.
"""

from dataclasses import dataclass

from rapidfuzz.distance import Levenshtein

from task_search.application.services.text_normalizer import TextNormalizer
from task_search.domain.entities import (
    MatchCandidate,
    MatchedOn,
    QueryVariant,
    SearchConfig,
    Task,
)


@dataclass(frozen=True)
class TaskDocument:
    """A task's text, normalized once per search call."""

    task: Task
    content: str
    content_tokens: frozenset[str]
    description: str
    description_tokens: frozenset[str]
    label_tokens: frozenset[str]
    category: str


class FuzzyMatcher:
    """Pure scoring of (task, variant) pairs."""

    def __init__(
        self,
        config: SearchConfig | None = None,
        *,
        normalizer: TextNormalizer | None = None,
    ):
        self._config = config or SearchConfig()
        self._normalizer = normalizer or TextNormalizer()

    def prepare(self, task: Task) -> TaskDocument:
        tokenize = self._normalizer.tokenize
        content_words = tokenize(task.content)
        description_words = tokenize(task.description or "")
        label_words = [w for label in task.labels for w in tokenize(label)]
        return TaskDocument(
            task=task,
            content=" ".join(content_words),
            content_tokens=frozenset(content_words),
            description=" ".join(description_words),
            description_tokens=frozenset(description_words),
            label_tokens=frozenset(label_words),
            category=self._normalizer.normalize_text(task.category),
        )

    def score(
        self,
        task: Task,
        variant: QueryVariant,
        *,
        min_score: float | None = None,
    ) -> MatchCandidate | None:
        """Score a task against a variant; None when below the floor."""
        return self.score_document(self.prepare(task), variant, min_score=min_score)

    def score_document(
        self,
        doc: TaskDocument,
        variant: QueryVariant,
        *,
        min_score: float | None = None,
    ) -> MatchCandidate | None:
        floor = self._config.min_score if min_score is None else min_score
        score, matched_on, reasoning, coverage = self._base_score(doc, variant)

        if doc.category and self._category_matches(doc.category, variant):
            score = min(1.0, score + self._config.category_bonus)
            if matched_on:
                matched_on += MatchedOn.CATEGORY_SUFFIX
                reasoning += f"; category '{doc.category}' matched"
            else:
                matched_on = MatchedOn.CATEGORY
                reasoning = f"category '{doc.category}' matched '{variant.text}'"

        if not matched_on or score <= 0.0 or score < floor:
            return None

        return MatchCandidate(
            task=doc.task,
            score=score,
            matched_on=matched_on,
            reasoning=reasoning,
            variant=variant,
            coverage=coverage,
        )

    # ── Private helpers ──────────────────────────────────────────────

    def _base_score(
        self, doc: TaskDocument, variant: QueryVariant
    ) -> tuple[float, str, str, float]:
        """Return (score, matched_on, reasoning, coverage) before the category bonus."""
        text = variant.text
        if text and doc.content:
            if text in doc.content:
                coverage = len(text) / len(doc.content)
                return 1.0, MatchedOn.EXACT, f"matched '{text}' exactly in task content", coverage

            similarity = Levenshtein.normalized_similarity(text, doc.content)
            if similarity >= self._config.fuzzy_threshold:
                return (
                    similarity,
                    MatchedOn.FUZZY_CONTENT,
                    f"matched '{text}' against task content (similarity {similarity:.2f})",
                    0.0,
                )

        query_tokens = frozenset(variant.tokens)
        if not query_tokens:
            return 0.0, "", "", 0.0

        best_hits = len(query_tokens & doc.content_tokens)
        best = (best_hits, MatchedOn.FUZZY_CONTENT, "content")
        for hits, tag, where in (
            (len(query_tokens & doc.description_tokens), MatchedOn.FUZZY_DESCRIPTION, "description"),
            (len(query_tokens & doc.label_tokens), MatchedOn.TOKEN_OVERLAP, "labels"),
        ):
            if hits > best[0]:
                best = (hits, tag, where)

        hits, tag, where = best
        if not hits:
            return 0.0, "", "", 0.0
        ratio = hits / len(query_tokens)
        return (
            ratio,
            tag,
            f"matched {hits}/{len(query_tokens)} words of '{text}' in task {where} "
            f"(overlap {ratio:.2f})",
            0.0,
        )

    def _category_matches(self, category: str, variant: QueryVariant) -> bool:
        if category == variant.text or category in variant.tokens:
            return True
        return any(
            self._normalizer.normalize_text(entity.text) == category
            for entity in variant.entities
        )
