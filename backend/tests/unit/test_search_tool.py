"""Unit tests for the search_tasks agent tool and the response schemas."""

import pytest
from pydantic import ValidationError

from task_search.application.schemas.search import SearchRequest, SearchResponse, to_percent
from task_search.application.services import SearchService
from task_search.domain.entities import SearchConfig, Task
from task_search.domain.exceptions import SearchValidationError
from task_search.infrastructure.storage import InMemoryTaskRepository
from task_search.presentation.tools.search_tasks import SEARCH_TASKS_TOOL, handle_search_tasks


def _service() -> SearchService:
    return SearchService(
        task_repository=InMemoryTaskRepository([
            Task(id="t1", content="Call dentist for appointment", category="health", priority=2),
            Task(id="t2", content="Buy groceries"),
        ])
    )


class TestSearchTasksTool:
    def test_tool_schema(self):
        assert SEARCH_TASKS_TOOL["name"] == "search_tasks"
        assert SEARCH_TASKS_TOOL["input_schema"]["required"] == ["query"]
        assert "query" in SEARCH_TASKS_TOOL["input_schema"]["properties"]

    async def test_returns_camel_case_result(self):
        result = await handle_search_tasks(_service(), {"query": "dentist appt"})

        assert result["matchCount"] == 1
        assert result["searchMethod"] == "fuzzy"
        assert isinstance(result["searchTimeMs"], int)
        assert result["queryExpansion"]["original"] == "dentist appt"
        assert result["queryExpansion"]["normalized"] == "dentist appt"
        assert result["queryExpansion"]["variations"][0] == "dentist appt"
        assert result["matches"][0] == {
            "id": "t1",
            "content": "Call dentist for appointment",
            "description": None,
            "category": "health",
            "priority": 2,
            "score": 100,
            "matchedOn": "fuzzy-content",
            "reasoning": result["matches"][0]["reasoning"],
        }

    async def test_variation_preview_is_capped(self):
        service = SearchService(
            task_repository=InMemoryTaskRepository([Task(id="t1", content="Buy milk")]),
            config=SearchConfig(variation_preview=2),
        )

        result = await handle_search_tasks(service, {"query": "call email buy fix meeting"})

        assert len(result["queryExpansion"]["variations"]) == 2

    async def test_options_use_camel_case_names(self):
        service = SearchService(
            task_repository=InMemoryTaskRepository([
                Task(id="done", content="Buy groceries", is_completed=True),
            ])
        )

        result = await handle_search_tasks(
            service, {"query": "buy groceries", "includeCompleted": True, "minScore": 0.5}
        )

        assert [m["id"] for m in result["matches"]] == ["done"]

    @pytest.mark.parametrize(
        "arguments, field",
        [
            ({}, "query"),
            ({"query": "   "}, "query"),
            ({"query": "milk", "limit": 0}, "limit"),
            ({"query": "milk", "limit": 51}, "limit"),
            ({"query": "milk", "minScore": 2}, "minScore"),
        ],
    )
    async def test_invalid_arguments_raise(self, arguments, field):
        with pytest.raises(SearchValidationError) as exc_info:
            await handle_search_tasks(_service(), arguments)

        assert exc_info.value.field == field


class TestSchemas:
    @pytest.mark.parametrize(
        "score, expected",
        [(0.0, 0), (0.125, 13), (0.5, 50), (0.994, 99), (1.0, 100)],
    )
    def test_to_percent_rounds_half_up(self, score, expected):
        assert to_percent(score) == expected

    def test_request_defaults(self):
        request = SearchRequest(query="milk")

        assert request.limit is None
        assert request.min_score is None
        assert request.force_semantic is False
        assert request.include_completed is False

    def test_request_rejects_blank_query(self):
        with pytest.raises(ValidationError):
            SearchRequest(query="  ")

    def test_request_to_options(self):
        options = SearchRequest.model_validate(
            {"query": "milk", "limit": 3, "forceSemantic": True}
        ).to_options()

        assert options.limit == 3
        assert options.force_semantic is True
        assert options.min_score is None

    def test_response_serializes_with_aliases(self):
        response = SearchResponse(
            match_count=0,
            search_method="none",
            search_time_ms=0,
            query_expansion={"original": "", "normalized": ""},
        )

        assert response.model_dump(by_alias=True) == {
            "matchCount": 0,
            "searchMethod": "none",
            "searchTimeMs": 0,
            "queryExpansion": {
                "original": "",
                "normalized": "",
                "variations": [],
                "entities": [],
            },
            "matches": [],
        }
