"""Lexicon and synonym table used by query expansion.

Both are immutable once built. The process-wide ``LexiconRegistry`` hands out
the current ``LexiconSnapshot`` and replaces it wholesale on rebuild, so a
search running concurrently with a reload sees either the old table or the
new one, never a mix.
"""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from rapidfuzz.distance import Levenshtein

logger = logging.getLogger(__name__)

# ── Built-in defaults ───────────────────────────────────────────────

DEFAULT_SYNONYM_GROUPS: tuple[tuple[str, ...], ...] = (
    ("call", "phone", "ring"),
    ("buy", "purchase", "order"),
    ("email", "mail", "message"),
    ("fix", "repair", "mend"),
    ("appointment", "appt", "booking"),
    ("meeting", "meet", "sync"),
    ("schedule", "book", "arrange"),
    ("reply", "respond", "answer"),
    ("review", "check", "inspect"),
    ("write", "draft"),
    ("pay", "settle"),
    ("bill", "invoice"),
    ("doctor", "dr", "physician"),
    ("presentation", "slides", "deck"),
    ("groceries", "shopping", "food"),
    ("clean", "tidy"),
    ("car", "vehicle"),
    ("document", "doc"),
    ("tomorrow", "tmrw"),
)

DEFAULT_VOCABULARY: frozenset[str] = frozenset({
    "agenda", "application", "birthday", "budget", "cancel", "clean", "client",
    "contract", "dentist", "deadline", "dinner", "errand", "expense", "finish",
    "follow", "gift", "gym", "haircut", "insurance", "interview", "kitchen",
    "laundry", "lunch", "milk", "notes", "order", "package", "plan",
    "prescription", "project", "proposal", "receipt", "register", "registration",
    "renew", "report", "reservation", "sink", "submit", "subscription", "taxes",
    "ticket", "update", "vendor", "visa", "workout",
})


class SynonymTable:
    """Symmetric synonym lookup built from synonym groups."""

    def __init__(self, groups: Iterable[Iterable[str]] = ()):
        mapping: dict[str, list[str]] = {}
        normalized_groups: list[tuple[str, ...]] = []
        for group in groups:
            members: list[str] = []
            for raw in group:
                word = " ".join(str(raw).lower().split())
                if word and word not in members:
                    members.append(word)
            if len(members) < 2:
                continue
            normalized_groups.append(tuple(members))
            for word in members:
                bucket = mapping.setdefault(word, [])
                for other in members:
                    if other != word and other not in bucket:
                        bucket.append(other)
        self._groups = tuple(normalized_groups)
        self._mapping = {word: tuple(others) for word, others in mapping.items()}

    @property
    def groups(self) -> tuple[tuple[str, ...], ...]:
        return self._groups

    def synonyms(self, word: str) -> tuple[str, ...]:
        return self._mapping.get(word, ())

    def words(self) -> frozenset[str]:
        return frozenset(w for w in self._mapping if " " not in w)

    def __len__(self) -> int:
        return len(self._mapping)


@dataclass(frozen=True)
class Lexicon:
    """Known vocabulary for typo correction.

    ``corpus_words`` are preferred over ``base_words`` when two corrections
    are equally close, since words the user actually wrote in their tasks are
    the likelier intent.
    """

    base_words: frozenset[str] = frozenset()
    corpus_words: frozenset[str] = field(default_factory=frozenset)

    def __contains__(self, word: object) -> bool:
        return word in self.base_words or word in self.corpus_words

    def __len__(self) -> int:
        return len(self.base_words | self.corpus_words)

    def extended(self, words: Iterable[str]) -> "Lexicon":
        """Return a new lexicon with extra corpus-derived words."""
        extra = frozenset(w for w in words if _is_vocabulary_word(w))
        if not extra or extra <= self.corpus_words:
            return self
        return Lexicon(base_words=self.base_words, corpus_words=self.corpus_words | extra)

    def nearest(self, token: str, max_distance: int) -> str | None:
        """Closest vocabulary word within ``max_distance`` edits, or None.

        Ties break on corpus words first, then alphabetically, so the result
        never depends on set iteration order.
        """
        if max_distance <= 0 or not token:
            return None
        best: tuple[int, int, str] | None = None
        for source_rank, words in ((0, self.corpus_words), (1, self.base_words)):
            for word in words:
                if word == token or abs(len(word) - len(token)) > max_distance:
                    continue
                distance = Levenshtein.distance(token, word, score_cutoff=max_distance)
                if distance > max_distance:
                    continue
                key = (distance, source_rank, word)
                if best is None or key < best:
                    best = key
        return best[2] if best else None


@dataclass(frozen=True)
class LexiconSnapshot:
    """An immutable (lexicon, synonym table) pair."""

    lexicon: Lexicon
    synonyms: SynonymTable

    @classmethod
    def build(
        cls,
        vocabulary: Iterable[str] = (),
        synonym_groups: Iterable[Iterable[str]] = (),
    ) -> "LexiconSnapshot":
        table = SynonymTable(synonym_groups)
        words = {w.lower() for w in vocabulary if _is_vocabulary_word(w.lower())}
        words |= table.words()
        return cls(lexicon=Lexicon(base_words=frozenset(words)), synonyms=table)

    @classmethod
    def default(cls) -> "LexiconSnapshot":
        return cls.build(DEFAULT_VOCABULARY, DEFAULT_SYNONYM_GROUPS)


class LexiconRegistry:
    """Process-wide holder of the current lexicon snapshot."""

    def __init__(self, snapshot: LexiconSnapshot | None = None):
        self._snapshot = snapshot or LexiconSnapshot.default()
        self._lock = threading.Lock()

    def current(self) -> LexiconSnapshot:
        return self._snapshot

    def rebuild(
        self,
        *,
        vocabulary: Iterable[str] = (),
        synonym_groups: Iterable[Iterable[str]] = (),
    ) -> LexiconSnapshot:
        """Build a new snapshot on top of the defaults and swap it in."""
        snapshot = LexiconSnapshot.build(
            [*DEFAULT_VOCABULARY, *vocabulary],
            [*DEFAULT_SYNONYM_GROUPS, *synonym_groups],
        )
        with self._lock:
            self._snapshot = snapshot
        logger.info(
            "Lexicon rebuilt: vocabulary=%d synonym_entries=%d",
            len(snapshot.lexicon),
            len(snapshot.synonyms),
        )
        return snapshot

    def load_file(self, path: str | Path) -> LexiconSnapshot:
        """Rebuild from a YAML file with ``vocabulary`` and ``synonyms`` keys.

        A missing file keeps the built-in defaults.
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.warning("Lexicon file %s not found: using built-in defaults", file_path)
            return self.rebuild()

        with file_path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}

        vocabulary = [str(w) for w in data.get("vocabulary", []) or []]
        groups = [
            [str(w) for w in group]
            for group in data.get("synonyms", []) or []
            if isinstance(group, list)
        ]
        logger.info(
            "Loaded lexicon file %s: %d words, %d synonym groups",
            file_path,
            len(vocabulary),
            len(groups),
        )
        return self.rebuild(vocabulary=vocabulary, synonym_groups=groups)


def _is_vocabulary_word(word: str) -> bool:
    return len(word) >= 2 and not word.isdigit() and " " not in word
