from .chat_message import ChatMessage, TokenUsage, ChatCompletionResult
from .task import Task, TaskFilters
from .search import (
    Entity,
    EntityKind,
    MatchCandidate,
    MatchedOn,
    NormalizedQuery,
    QueryVariant,
    SearchConfig,
    SearchMethod,
    SearchOptions,
    SearchResult,
    SemanticMatch,
    VariantKind,
)

__all__ = [
    "ChatMessage",
    "TokenUsage",
    "ChatCompletionResult",
    "Task",
    "TaskFilters",
    "Entity",
    "EntityKind",
    "MatchCandidate",
    "MatchedOn",
    "NormalizedQuery",
    "QueryVariant",
    "SearchConfig",
    "SearchMethod",
    "SearchOptions",
    "SearchResult",
    "SemanticMatch",
    "VariantKind",
]
