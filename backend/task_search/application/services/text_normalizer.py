"""Text normalizer: the foundation every matching strategy builds on.

Queries and task text go through the same lower-casing and tokenization so
that substring and token comparisons line up. Queries additionally get
lightweight, rule-based entity extraction (names, dates, quoted phrases).
"""

import re

from task_search.domain.entities import Entity, EntityKind, NormalizedQuery

# ── Vocabulary constants ────────────────────────────────────────────

STOP_WORDS: frozenset[str] = frozenset({
    "a", "about", "all", "an", "and", "any", "are", "as", "at", "be", "by",
    "do", "does", "for", "from", "i", "in", "into", "is", "it", "its", "me",
    "my", "of", "on", "or", "our", "re", "regarding", "so", "some", "that",
    "the", "their", "this", "to", "up", "was", "we", "with", "you", "your",
})

_WEEKDAYS = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)
RELATIVE_DATE_WORDS: frozenset[str] = frozenset({
    "today", "tonight", "tomorrow", "yesterday", "weekend", *_WEEKDAYS,
})

# Sentence-initial words that are capitalized by position, not because they
# start a name ("Call John Smith" names "John Smith").
_LEADING_VERBS = frozenset({
    "ask", "book", "buy", "call", "cancel", "check", "email", "finish", "fix",
    "follow", "get", "meet", "message", "pay", "phone", "pick", "plan",
    "remind", "reply", "review", "schedule", "send", "text", "update", "write",
})

# ── Patterns ────────────────────────────────────────────────────────

_TOKEN_RE = re.compile(r"[^\W_]+(?:['\-][^\W_]+)*")
_APOSTROPHES_RE = re.compile(r"[‘’ʼ]")
_PHRASE_RE = re.compile(r"\"([^\"]+)\"|“([^”]+)”")
_ISO_DATE_RE = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")
_NUMERIC_DATE_RE = re.compile(r"\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b")
_RELATIVE_DATE_RE = re.compile(
    r"\b(" + "|".join(sorted(RELATIVE_DATE_WORDS)) + r")\b",
    flags=re.IGNORECASE,
)
_CAPITALIZED_RUN_RE = re.compile(r"\b[A-Z][\w'\-]*(?:[ \t]+[A-Z][\w'\-]*)+")


class TextNormalizer:
    """Pure, stateless normalizer for queries and task text."""

    def __init__(self, stop_words: frozenset[str] = STOP_WORDS):
        self._stop_words = stop_words

    @property
    def stop_words(self) -> frozenset[str]:
        return self._stop_words

    def normalize(self, query: str) -> NormalizedQuery:
        """Normalize a raw query.

        Empty or whitespace-only input yields a query with zero tokens; that
        is a valid result, not an error.
        """
        original = query or ""
        collapsed = " ".join(_APOSTROPHES_RE.sub("'", original).split())
        if not collapsed:
            return NormalizedQuery(original=original)

        words = tuple(self.tokenize(collapsed))
        tokens = self.remove_stop_words(words)
        entities = tuple(self.extract_entities(collapsed))

        return NormalizedQuery(
            original=original,
            text=" ".join(words),
            words=words,
            tokens=tokens,
            entities=entities,
        )

    def tokenize(self, text: str) -> list[str]:
        """Lower-case and split on whitespace/punctuation boundaries."""
        if not text:
            return []
        return _TOKEN_RE.findall(_APOSTROPHES_RE.sub("'", text).lower())

    def normalize_text(self, text: str | None) -> str:
        """Canonical form of arbitrary text for substring comparisons."""
        return " ".join(self.tokenize(text or ""))

    def remove_stop_words(self, words: tuple[str, ...]) -> tuple[str, ...]:
        """Drop stop-words, but never turn a non-empty sequence into an empty one."""
        kept = tuple(w for w in words if w not in self._stop_words)
        return kept or words

    def extract_entities(self, text: str) -> list[Entity]:
        """Extract name/date/phrase entities, ordered by position in the text."""
        found: list[tuple[int, Entity]] = []
        phrase_spans: list[tuple[int, int]] = []

        for m in _PHRASE_RE.finditer(text):
            phrase = (m.group(1) or m.group(2) or "").strip()
            if phrase:
                found.append((m.start(), Entity(EntityKind.PHRASE, phrase)))
                phrase_spans.append(m.span())

        for pattern in (_ISO_DATE_RE, _NUMERIC_DATE_RE, _RELATIVE_DATE_RE):
            for m in pattern.finditer(text):
                if not _inside(m.start(), phrase_spans):
                    found.append((m.start(), Entity(EntityKind.DATE, m.group(0).lower())))

        for start, name in self._name_runs(text):
            if not _inside(start, phrase_spans):
                found.append((start, Entity(EntityKind.NAME, name)))

        found.sort(key=lambda item: item[0])
        entities: list[Entity] = []
        seen: set[tuple[EntityKind, str]] = set()
        for _, entity in found:
            key = (entity.kind, entity.text.lower())
            if key not in seen:
                seen.add(key)
                entities.append(entity)
        return entities

    def _name_runs(self, text: str) -> list[tuple[int, str]]:
        """Capitalized multi-word runs, split at date words, minus leading verbs."""
        runs: list[tuple[int, str]] = []
        for m in _CAPITALIZED_RUN_RE.finditer(text):
            offset = m.start()
            current: list[str] = []
            current_start = offset
            for word_match in re.finditer(r"\S+", m.group(0)):
                word = word_match.group(0)
                lowered = word.lower()
                is_leading = offset + word_match.start() == _first_word_offset(text)
                if lowered in RELATIVE_DATE_WORDS or (
                    not current
                    and (lowered in self._stop_words or (is_leading and lowered in _LEADING_VERBS))
                ):
                    if len(current) >= 2:
                        runs.append((current_start, " ".join(current)))
                    current = []
                    continue
                if not current:
                    current_start = offset + word_match.start()
                current.append(word)
            if len(current) >= 2:
                runs.append((current_start, " ".join(current)))
        return runs


def _inside(position: int, spans: list[tuple[int, int]]) -> bool:
    return any(start <= position < end for start, end in spans)


def _first_word_offset(text: str) -> int:
    m = re.search(r"\S", text)
    return m.start() if m else 0


_default_normalizer = TextNormalizer()


def normalize(query: str) -> NormalizedQuery:
    """Normalize a query with the default stop-word list."""
    return _default_normalizer.normalize(query)
