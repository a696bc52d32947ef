"""Pydantic schemas for the task search contract (HTTP and agent tool).

Field names are snake_case in Python and camelCase on the wire.
"""

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator

from task_search.domain.entities import (
    MatchCandidate,
    NormalizedQuery,
    QueryVariant,
    SearchOptions,
    SearchResult,
)


# ── Request Schemas ──────────────────────────────────────────────────


class SearchRequest(BaseModel):
    """Request body for a natural-language task search."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(..., min_length=1, description="Search query; natural language, typos are fine")
    # Upper bound and defaults come from the service SearchConfig
    limit: int | None = Field(default=None, ge=1, description="Maximum number of matches")
    min_score: float | None = Field(default=None, ge=0.0, le=1.0, alias="minScore")
    force_semantic: bool = Field(default=False, alias="forceSemantic")
    include_completed: bool = Field(default=False, alias="includeCompleted")

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be empty")
        return value

    def to_options(self) -> SearchOptions:
        return SearchOptions(
            limit=self.limit,
            min_score=self.min_score,
            force_semantic=self.force_semantic,
            include_completed=self.include_completed,
        )


class ExpandRequest(BaseModel):
    """Request body for the query-expansion preview."""

    query: str = Field(..., min_length=1)


# ── Response Schemas ─────────────────────────────────────────────────


class EntitySchema(BaseModel):
    """An entity extracted from the query."""

    kind: str
    text: str


class QueryExpansionSchema(BaseModel):
    """How the query was interpreted: returned for caller transparency."""

    original: str
    normalized: str
    variations: list[str] = []
    entities: list[EntitySchema] = []

    @classmethod
    def from_query(
        cls,
        nq: NormalizedQuery,
        variants: list[QueryVariant],
        *,
        preview: int | None = None,
    ) -> "QueryExpansionSchema":
        texts = [v.text for v in variants]
        return cls(
            original=nq.original,
            normalized=" ".join(nq.tokens),
            variations=texts if preview is None else texts[:preview],
            entities=[EntitySchema(kind=e.kind.value, text=e.text) for e in nq.entities],
        )


class SearchMatchSchema(BaseModel):
    """A single matching task."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    content: str
    description: str | None = None
    category: str | None = None
    priority: int = 1
    score: int = Field(..., ge=0, le=100, description="Match score as an integer percentage")
    matched_on: str = Field(..., alias="matchedOn")
    reasoning: str = ""

    @classmethod
    def from_candidate(cls, candidate: MatchCandidate) -> "SearchMatchSchema":
        task = candidate.task
        return cls(
            id=task.id,
            content=task.content,
            description=task.description,
            category=task.category,
            priority=task.priority,
            score=to_percent(candidate.score),
            matched_on=candidate.matched_on,
            reasoning=candidate.reasoning,
        )


class SearchResponse(BaseModel):
    """Full search result."""

    model_config = ConfigDict(populate_by_name=True)

    match_count: int = Field(..., alias="matchCount")
    search_method: str = Field(..., alias="searchMethod")
    search_time_ms: int = Field(..., alias="searchTimeMs")
    query_expansion: QueryExpansionSchema = Field(..., alias="queryExpansion")
    matches: list[SearchMatchSchema] = []

    @classmethod
    def from_result(cls, result: SearchResult, *, variation_preview: int = 5) -> "SearchResponse":
        return cls(
            match_count=result.match_count,
            search_method=result.method.value,
            search_time_ms=result.elapsed_ms,
            query_expansion=QueryExpansionSchema.from_query(
                result.query, result.variants, preview=variation_preview
            ),
            matches=[SearchMatchSchema.from_candidate(m) for m in result.matches],
        )


def to_percent(score: float) -> int:
    """Convert a 0–1 score to a 0–100 integer, rounding halves up."""
    return min(100, max(0, math.floor(score * 100 + 0.5)))
