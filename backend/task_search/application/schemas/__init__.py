from .search import (
    EntitySchema,
    ExpandRequest,
    QueryExpansionSchema,
    SearchMatchSchema,
    SearchRequest,
    SearchResponse,
    to_percent,
)

__all__ = [
    "EntitySchema",
    "ExpandRequest",
    "QueryExpansionSchema",
    "SearchMatchSchema",
    "SearchRequest",
    "SearchResponse",
    "to_percent",
]
