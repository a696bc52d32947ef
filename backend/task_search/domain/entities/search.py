"""Domain entities for natural-language task search: query, variants, matches."""

from dataclasses import dataclass, field
from enum import Enum

from .task import Task


class EntityKind(str, Enum):
    """Kinds of entities the normalizer can pull out of a query."""

    NAME = "name"
    DATE = "date"
    PHRASE = "phrase"


@dataclass(frozen=True)
class Entity:
    """A typed fragment of the query (person/project name, date, quoted phrase)."""

    kind: EntityKind
    text: str


@dataclass(frozen=True)
class NormalizedQuery:
    """A query after lower-casing, tokenization and entity extraction.

    ``words`` keeps every token (stop-words included) so variants can be
    rebuilt as readable text; ``tokens`` is the stop-word-free form used for
    overlap scoring.
    """

    original: str
    text: str = ""
    words: tuple[str, ...] = ()
    tokens: tuple[str, ...] = ()
    entities: tuple[Entity, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.tokens and not self.entities


class VariantKind(str, Enum):
    """How a query variant was produced, in decreasing estimated relevance."""

    IDENTITY = "identity"
    TYPO = "typo"
    SYNONYM = "synonym"
    ENTITY = "entity"
    PARTIAL = "partial"


@dataclass(frozen=True)
class QueryVariant:
    """One candidate rewrite of the normalized query."""

    text: str
    tokens: tuple[str, ...]
    kind: VariantKind
    rank: int = 0  # Position in the expansion; 0 is the identity variant
    entities: tuple[Entity, ...] = ()


class MatchedOn:
    """Matched-on tags explaining which strategy produced a score."""

    EXACT = "exact"
    FUZZY_CONTENT = "fuzzy-content"
    FUZZY_DESCRIPTION = "fuzzy-description"
    TOKEN_OVERLAP = "token-overlap"
    CATEGORY = "category"
    SEMANTIC = "semantic"

    CATEGORY_SUFFIX = "+category"


@dataclass
class MatchCandidate:
    """A scored (task, variant) pairing."""

    task: Task
    score: float
    matched_on: str
    reasoning: str = ""
    variant: QueryVariant | None = None  # None for semantic matches
    coverage: float = 0.0  # Share of the content covered by an exact hit

    @property
    def variant_rank(self) -> int:
        return self.variant.rank if self.variant is not None else 1_000_000


class SearchMethod(str, Enum):
    """The search path that actually produced a result."""

    NONE = "none"
    FUZZY = "fuzzy"
    FUZZY_SEMANTIC = "fuzzy+semantic"


@dataclass(frozen=True)
class SemanticMatch:
    """A single hit returned by a semantic search backend."""

    task_id: str
    score: float
    reasoning: str = ""


@dataclass
class SearchOptions:
    """Per-call search options. ``None`` falls back to the SearchConfig default."""

    limit: int | None = None
    min_score: float | None = None
    force_semantic: bool = False
    include_completed: bool = False
    skip_expansion: bool = False


@dataclass(frozen=True)
class SearchConfig:
    """Tunable thresholds for the search pipeline.

    Passed into the services at construction so tests and callers never
    depend on process environment.
    """

    default_limit: int = 10
    max_limit: int = 50
    min_score: float = 0.25
    fuzzy_threshold: float = 0.8
    category_bonus: float = 0.1
    max_variants: int = 8
    max_synonym_variants: int = 3
    max_typo_distance: int = 2
    escalation_min_candidates: int = 3
    escalation_min_top_score: float = 0.5
    semantic_timeout_seconds: float = 4.0
    variation_preview: int = 5
    yield_every: int = 256


@dataclass
class SearchResult:
    """Ranked, deduplicated result of one search call."""

    query: NormalizedQuery
    variants: list[QueryVariant] = field(default_factory=list)
    matches: list[MatchCandidate] = field(default_factory=list)
    method: SearchMethod = SearchMethod.NONE
    elapsed_ms: int = 0
    total_candidates: int = 0
    skipped: int = 0
    degraded: bool = False

    @property
    def match_count(self) -> int:
        return len(self.matches)
