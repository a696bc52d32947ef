"""Query expander: turns one normalized query into a few lexical variants.

Variants broaden recall for misspelled or paraphrased queries. Generation is
rule-based and deterministic: the same query, lexicon, synonym table and
config always yield the same ordered list.

Order (decreasing estimated relevance):
  identity → typo-corrected → synonym swaps → entity-only → adjacent pairs
"""

import logging

from task_search.application.services.lexicon import Lexicon, LexiconSnapshot, SynonymTable
from task_search.application.services.text_normalizer import TextNormalizer
from task_search.domain.entities import (
    NormalizedQuery,
    QueryVariant,
    SearchConfig,
    VariantKind,
)

logger = logging.getLogger(__name__)

_SHORT_TOKEN_LENGTH = 4  # Tokens this short only get single-edit corrections


class QueryExpander:
    """Generates a capped, ordered list of QueryVariants."""

    def __init__(
        self,
        lexicon: Lexicon | None = None,
        synonyms: SynonymTable | None = None,
        config: SearchConfig | None = None,
        *,
        normalizer: TextNormalizer | None = None,
    ):
        defaults = LexiconSnapshot.default()
        self._lexicon = lexicon if lexicon is not None else defaults.lexicon
        self._synonyms = synonyms if synonyms is not None else defaults.synonyms
        self._config = config or SearchConfig()
        self._normalizer = normalizer or TextNormalizer()

    @classmethod
    def from_snapshot(
        cls,
        snapshot: LexiconSnapshot,
        config: SearchConfig | None = None,
        *,
        normalizer: TextNormalizer | None = None,
    ) -> "QueryExpander":
        return cls(snapshot.lexicon, snapshot.synonyms, config, normalizer=normalizer)

    def expand(
        self,
        nq: NormalizedQuery,
        *,
        lexicon: Lexicon | None = None,
    ) -> list[QueryVariant]:
        """Expand a normalized query; the identity variant is always first.

        Args:
            nq: The normalized query.
            lexicon: Optional per-call vocabulary (e.g. extended with corpus
                words); defaults to the expander's own lexicon.
        """
        vocabulary = lexicon if lexicon is not None else self._lexicon
        candidates: list[tuple[VariantKind, str, tuple[str, ...]]] = [
            (VariantKind.IDENTITY, nq.text, nq.tokens),
        ]

        words = list(nq.words)
        corrected = self._correct_typos(words, vocabulary)
        if corrected is not None:
            candidates.append(self._candidate(VariantKind.TYPO, corrected))

        candidates.extend(self._synonym_candidates(corrected or words))

        if nq.entities:
            entity_words = self._normalizer.tokenize(" ".join(e.text for e in nq.entities))
            if entity_words:
                candidates.append(self._candidate(VariantKind.ENTITY, entity_words))

        if len(nq.tokens) >= 3:
            for first, second in zip(nq.tokens, nq.tokens[1:]):
                candidates.append((VariantKind.PARTIAL, f"{first} {second}", (first, second)))

        variants = self._finalize(candidates, nq)
        logger.debug(
            "Expanded %r into %d variants: %s",
            nq.text,
            len(variants),
            [v.text for v in variants],
        )
        return variants

    def identity_only(self, nq: NormalizedQuery) -> list[QueryVariant]:
        """Just the identity variant: used when expansion is skipped."""
        return [
            QueryVariant(
                text=nq.text,
                tokens=nq.tokens,
                kind=VariantKind.IDENTITY,
                rank=0,
                entities=nq.entities,
            )
        ]

    # ── Private helpers ──────────────────────────────────────────────

    def _correct_typos(self, words: list[str], lexicon: Lexicon) -> list[str] | None:
        """Replace every correctable token at once; None when nothing changed."""
        if not len(lexicon):
            return None
        corrected = list(words)
        changed = False
        for i, word in enumerate(words):
            if (
                word in lexicon
                or word in self._normalizer.stop_words
                or word.isdigit()
                or self._synonyms.synonyms(word)
            ):
                continue
            limit = 1 if len(word) <= _SHORT_TOKEN_LENGTH else 2
            replacement = lexicon.nearest(word, min(self._config.max_typo_distance, limit))
            if replacement:
                corrected[i] = replacement
                changed = True
        return corrected if changed else None

    def _synonym_candidates(
        self, words: list[str]
    ) -> list[tuple[VariantKind, str, tuple[str, ...]]]:
        """One variant per single-token synonym swap, capped."""
        out: list[tuple[VariantKind, str, tuple[str, ...]]] = []
        seen: set[str] = set()
        cap = self._config.max_synonym_variants
        for i, word in enumerate(words):
            if word in self._normalizer.stop_words:
                continue
            for synonym in self._synonyms.synonyms(word):
                swapped = [*words[:i], *synonym.split(), *words[i + 1:]]
                candidate = self._candidate(VariantKind.SYNONYM, swapped)
                if candidate[1] in seen:
                    continue
                seen.add(candidate[1])
                out.append(candidate)
                if len(out) >= cap:
                    return out
        return out

    def _candidate(
        self, kind: VariantKind, words: list[str]
    ) -> tuple[VariantKind, str, tuple[str, ...]]:
        return kind, " ".join(words), self._normalizer.remove_stop_words(tuple(words))

    def _finalize(
        self,
        candidates: list[tuple[VariantKind, str, tuple[str, ...]]],
        nq: NormalizedQuery,
    ) -> list[QueryVariant]:
        """Drop duplicates/empties (identity always survives) and apply the cap."""
        variants: list[QueryVariant] = []
        seen: set[str] = set()
        for kind, text, tokens in candidates:
            if kind is not VariantKind.IDENTITY and (not text or text in seen):
                continue
            seen.add(text)
            variants.append(
                QueryVariant(
                    text=text,
                    tokens=tokens,
                    kind=kind,
                    rank=len(variants),
                    entities=nq.entities,
                )
            )
            if len(variants) >= self._config.max_variants:
                break
        return variants
