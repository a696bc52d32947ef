"""``search_tasks`` agent tool: lets a chat agent look up existing tasks.

The agent calls this before creating a task so it can offer to update an
existing one instead of adding a duplicate.
"""

import logging
from typing import Any

from pydantic import ValidationError

from task_search.application.schemas.search import SearchRequest, SearchResponse
from task_search.application.services import SearchService
from task_search.domain.exceptions import SearchValidationError

logger = logging.getLogger(__name__)

SEARCH_TASKS_TOOL: dict[str, Any] = {
    "name": "search_tasks",
    "description": (
        "Search for existing tasks using smart fuzzy matching. "
        "Handles typos, different wording, and partial matches."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "Search query (can be natural language, handles typos)",
            },
            "limit": {
                "type": "integer",
                "description": "Maximum number of matches (1-50, default 10)",
            },
            "minScore": {
                "type": "number",
                "description": "Minimum match score between 0 and 1 (default 0.25)",
            },
            "forceSemantic": {
                "type": "boolean",
                "description": "Always run the semantic pass, even when fuzzy matches look good",
            },
            "includeCompleted": {
                "type": "boolean",
                "description": "Also search completed tasks",
            },
        },
        "required": ["query"],
    },
}


async def handle_search_tasks(service: SearchService, arguments: dict[str, Any]) -> dict[str, Any]:
    """Run a task search for the agent and return the JSON-ready result.

    Raises:
        SearchValidationError: If the arguments do not form a valid request.
    """
    try:
        request = SearchRequest.model_validate(arguments or {})
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        raise SearchValidationError(field, error.get("msg", "invalid value")) from e

    logger.info("Tool search_tasks: query=%r limit=%s", request.query, request.limit)
    result = await service.search(request.query, request.to_options())
    response = SearchResponse.from_result(result, variation_preview=service.config.variation_preview)
    return response.model_dump(by_alias=True)
