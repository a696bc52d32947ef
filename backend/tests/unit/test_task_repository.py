"""Unit tests for the in-memory and JSON snapshot task repositories."""

import json
import logging

import pytest

from task_search.domain.entities import Task, TaskFilters
from task_search.infrastructure.storage import InMemoryTaskRepository, JsonFileTaskRepository


@pytest.fixture
def snapshot_file(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text(
        json.dumps({
            "tasks": [
                {
                    "id": 8401926001,
                    "content": "Call dentist for appointment",
                    "projectId": "p1",
                    "priority": 2,
                    "labels": ["phone"],
                    "isCompleted": False,
                    "due": {"date": "2026-10-21", "isRecurring": False},
                    "metadata": {"category": "health"},
                },
                {
                    "id": "t2",
                    "content": "Buy groceries",
                    "description": "",
                    "projectId": "p2",
                    "isCompleted": True,
                },
                {"id": "t3", "description": "no content"},
                {"content": "no id"},
                "not a row",
                {"id": "t4", "content": "Fix the kitchen sink", "priority": "high", "labels": "x"},
            ]
        }),
        encoding="utf-8",
    )
    return path


class TestJsonFileTaskRepository:
    async def test_maps_camel_case_rows(self, snapshot_file):
        repo = JsonFileTaskRepository(snapshot_file)

        task = await repo.get_by_id("8401926001")

        assert task == Task(
            id="8401926001",
            content="Call dentist for appointment",
            description=None,
            labels=["phone"],
            priority=2,
            category="health",
            due="2026-10-21",
            project_id="p1",
            is_completed=False,
        )

    async def test_malformed_rows_are_skipped(self, snapshot_file, caplog):
        repo = JsonFileTaskRepository(snapshot_file)

        with caplog.at_level(logging.WARNING):
            tasks = await repo.get_tasks()

        assert [t.id for t in tasks] == ["8401926001", "t2", "t4"]
        assert "Skipped 3 malformed task rows" in caplog.text

    async def test_bad_field_types_fall_back_to_defaults(self, snapshot_file):
        task = await JsonFileTaskRepository(snapshot_file).get_by_id("t4")

        assert task.priority == 1
        assert task.labels == []
        assert task.category is None

    async def test_non_string_text_fields_map_to_none(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text(
            json.dumps([
                {
                    "id": "t1",
                    "content": "Fix the kitchen sink",
                    "description": 42,
                    "labels": ["home", 3],
                    "due": {"date": 20261021},
                    "metadata": {"category": 7},
                },
            ]),
            encoding="utf-8",
        )

        task = await JsonFileTaskRepository(path).get_by_id("t1")

        assert task.description is None
        assert task.category is None
        assert task.due is None
        assert task.labels == ["home"]

    @pytest.mark.parametrize("value, expected", [(True, True), ("false", False), (1, False), (None, False)])
    async def test_is_completed_requires_boolean_true(self, tmp_path, value, expected):
        path = tmp_path / "tasks.json"
        path.write_text(
            json.dumps([{"id": "t1", "content": "Buy milk", "isCompleted": value}]),
            encoding="utf-8",
        )

        task = await JsonFileTaskRepository(path).get_by_id("t1")

        assert task.is_completed is expected

    async def test_invalid_json_is_an_empty_corpus(self, tmp_path, caplog):
        path = tmp_path / "tasks.json"
        path.write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            tasks = await JsonFileTaskRepository(path).get_tasks()

        assert tasks == []
        assert "not valid JSON" in caplog.text

    async def test_filters_are_applied(self, snapshot_file):
        repo = JsonFileTaskRepository(snapshot_file)

        open_tasks = await repo.get_tasks(TaskFilters())
        completed = await repo.get_tasks(TaskFilters(completed=True))
        project = await repo.get_tasks(TaskFilters(completed=None, project_id="p2"))

        assert [t.id for t in open_tasks] == ["8401926001", "t4"]
        assert [t.id for t in completed] == ["t2"]
        assert [t.id for t in project] == ["t2"]

    async def test_bare_list_snapshot(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps([{"id": "a", "content": "Renew passport"}]), encoding="utf-8")

        tasks = await JsonFileTaskRepository(path).get_tasks()

        assert [t.content for t in tasks] == ["Renew passport"]

    async def test_missing_file_is_an_empty_corpus(self, tmp_path):
        repo = JsonFileTaskRepository(tmp_path / "missing.json")

        assert await repo.get_tasks() == []
        assert await repo.get_by_id("x") is None


class TestInMemoryTaskRepository:
    async def test_filters_by_label_category_priority_and_limit(self):
        repo = InMemoryTaskRepository([
            Task(id="1", content="a", labels=["errand"], category="home", priority=1),
            Task(id="2", content="b", labels=["errand"], category="home", priority=4),
            Task(id="3", content="c", labels=["work"], category="work", priority=4),
            Task(id="4", content="d", labels=["errand"], category="home", priority=4),
        ])

        assert [t.id for t in await repo.get_tasks(TaskFilters(label="errand"))] == ["1", "2", "4"]
        assert [t.id for t in await repo.get_tasks(TaskFilters(category="work"))] == ["3"]
        assert [t.id for t in await repo.get_tasks(TaskFilters(priority=4, limit=2))] == ["2", "3"]

    async def test_no_filters_returns_everything(self):
        tasks = [Task(id="1", content="a", is_completed=True), Task(id="2", content="b")]
        repo = InMemoryTaskRepository(tasks)

        assert await repo.get_tasks() == tasks
        assert await repo.get_by_id("2") == tasks[1]
