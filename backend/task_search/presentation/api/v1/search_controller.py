"""Task search API controller: natural-language task lookup."""

from fastapi import APIRouter, Depends, HTTPException

from task_search.application.schemas.search import (
    ExpandRequest,
    QueryExpansionSchema,
    SearchRequest,
    SearchResponse,
)
from task_search.application.services import SearchService
from task_search.domain.exceptions import SearchValidationError
from task_search.infrastructure.dependencies import get_search_service

router = APIRouter(prefix="/tasks/search", tags=["search"])


@router.post("", response_model=SearchResponse)
async def search_tasks(
    body: SearchRequest,
    service: SearchService = Depends(get_search_service),
):
    """Find tasks matching a fuzzy, possibly misspelled description."""
    try:
        result = await service.search(body.query, body.to_options())
    except SearchValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return SearchResponse.from_result(result, variation_preview=service.config.variation_preview)


@router.post("/expand", response_model=QueryExpansionSchema)
async def expand_query(
    body: ExpandRequest,
    service: SearchService = Depends(get_search_service),
):
    """Show how a query is normalized and expanded (no scoring): useful for debugging."""
    nq, variants = service.preview_expansion(body.query)
    return QueryExpansionSchema.from_query(nq, variants)
