"""FastAPI dependency injection: wires infrastructure to application layer."""

import logging
from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends

from task_search.application.interfaces import SemanticSearchProvider, TaskRepository
from task_search.application.services import (
    LexiconRegistry,
    LLMSemanticSearchProvider,
    SearchService,
)
from task_search.config import Settings, get_settings
from task_search.domain.entities import SearchConfig
from task_search.infrastructure.openrouter import OpenRouterClient
from task_search.infrastructure.storage import JsonFileTaskRepository

logger = logging.getLogger(__name__)


def search_config_from_settings(settings: Settings) -> SearchConfig:
    """Map the ``search_*`` settings onto the engine's SearchConfig."""
    return SearchConfig(
        default_limit=settings.search_default_limit,
        max_limit=settings.search_max_limit,
        min_score=settings.search_min_score,
        fuzzy_threshold=settings.search_fuzzy_threshold,
        category_bonus=settings.search_category_bonus,
        max_variants=settings.search_max_variants,
        max_synonym_variants=settings.search_max_synonym_variants,
        max_typo_distance=settings.search_max_typo_distance,
        escalation_min_candidates=settings.search_escalation_min_candidates,
        escalation_min_top_score=settings.search_escalation_min_top_score,
        semantic_timeout_seconds=settings.semantic_timeout_seconds,
        variation_preview=settings.search_variation_preview,
    )


@lru_cache
def get_lexicon_registry() -> LexiconRegistry:
    """Process-wide lexicon registry, loaded from the lexicon file once."""
    registry = LexiconRegistry()
    registry.load_file(get_settings().lexicon_file)
    return registry


def get_task_repository() -> TaskRepository:
    """Provides the task corpus source."""
    return JsonFileTaskRepository(get_settings().tasks_file)


def get_semantic_provider() -> SemanticSearchProvider | None:
    """Provides the LLM semantic backend, or None when OpenRouter is not configured."""
    settings = get_settings()
    api_key = settings.openrouter_api_key.strip()
    if not api_key:
        return None

    chat_provider = OpenRouterClient(
        api_key=api_key,
        base_url=settings.openrouter_base_url,
        app_name=settings.openrouter_app_name,
        timeout=settings.semantic_timeout_seconds,
    )
    return LLMSemanticSearchProvider(
        chat_provider,
        model=settings.semantic_search_model,
        max_tokens=settings.semantic_search_max_tokens,
    )


async def get_search_service(
    task_repository: TaskRepository = Depends(get_task_repository),
    semantic_provider: SemanticSearchProvider | None = Depends(get_semantic_provider),
) -> AsyncGenerator[SearchService, None]:
    """Provides a SearchService with corpus, lexicon and optional semantic backend."""
    yield SearchService(
        task_repository=task_repository,
        semantic_provider=semantic_provider,
        lexicon_registry=get_lexicon_registry(),
        config=search_config_from_settings(get_settings()),
    )
