"""Task repository adapters: in-memory and JSON snapshot backed.

The JSON snapshot is the task list as exported from the task provider:

    {"tasks": [{"id": "123", "content": "Buy milk", "projectId": "p1",
                "priority": 1, "labels": ["errand"], "isCompleted": false,
                "due": {"date": "2026-01-15"},
                "metadata": {"category": "errands"}}]}

A bare top-level list is accepted too.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from task_search.application.interfaces import TaskRepository
from task_search.domain.entities import Task, TaskFilters

logger = logging.getLogger(__name__)


def apply_filters(tasks: list[Task], filters: TaskFilters | None) -> list[Task]:
    """Return the tasks that satisfy ``filters``, preserving order."""
    if filters is None:
        return list(tasks)

    selected: list[Task] = []
    for task in tasks:
        if filters.completed is not None and task.is_completed != filters.completed:
            continue
        if filters.project_id is not None and task.project_id != filters.project_id:
            continue
        if filters.label is not None and filters.label not in (task.labels or []):
            continue
        if filters.category is not None and task.category != filters.category:
            continue
        if filters.priority is not None and task.priority != filters.priority:
            continue
        selected.append(task)
        if filters.limit is not None and len(selected) >= filters.limit:
            break
    return selected


class InMemoryTaskRepository(TaskRepository):
    """Implements the TaskRepository port over a list held in memory."""

    def __init__(self, tasks: list[Task] | None = None):
        self._tasks = list(tasks or [])

    async def get_tasks(self, filters: TaskFilters | None = None) -> list[Task]:
        return apply_filters(self._tasks, filters)

    async def get_by_id(self, task_id: str) -> Task | None:
        return next((t for t in self._tasks if t.id == task_id), None)


class JsonFileTaskRepository(TaskRepository):
    """Implements the TaskRepository port over a JSON task snapshot.

    The file is re-read on every call so a refreshed export is picked up
    without a restart. Rows that cannot be mapped to a Task are skipped.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    async def get_tasks(self, filters: TaskFilters | None = None) -> list[Task]:
        return apply_filters(await asyncio.to_thread(self._load), filters)

    async def get_by_id(self, task_id: str) -> Task | None:
        tasks = await asyncio.to_thread(self._load)
        return next((t for t in tasks if t.id == task_id), None)

    def _load(self) -> list[Task]:
        if not self._path.exists():
            logger.warning("Task snapshot %s not found: corpus is empty", self._path)
            return []

        try:
            data = json.loads(self._path.read_text("utf-8"))
        except json.JSONDecodeError as e:
            logger.warning("Task snapshot %s is not valid JSON (%s): corpus is empty", self._path, e)
            return []
        rows = data.get("tasks", []) if isinstance(data, dict) else data
        if not isinstance(rows, list):
            logger.warning("Task snapshot %s has no task list: corpus is empty", self._path)
            return []

        tasks: list[Task] = []
        skipped = 0
        for row in rows:
            task = self._to_entity(row)
            if task is None:
                skipped += 1
                continue
            tasks.append(task)

        if skipped:
            logger.warning("Skipped %d malformed task rows in %s", skipped, self._path)
        logger.debug("Loaded %d tasks from %s", len(tasks), self._path)
        return tasks

    @staticmethod
    def _to_entity(row: Any) -> Task | None:
        """Map a snapshot row → domain entity; None when the row is unusable."""
        if not isinstance(row, dict):
            return None
        task_id = row.get("id")
        content = row.get("content")
        if task_id in (None, "") or not isinstance(content, str):
            return None

        metadata = row.get("metadata") if isinstance(row.get("metadata"), dict) else {}
        due = row.get("due")
        labels = row.get("labels") if isinstance(row.get("labels"), list) else []
        priority = row.get("priority")

        return Task(
            id=str(task_id),
            content=content,
            description=_text(row.get("description")),
            labels=[label for label in labels if isinstance(label, str)],
            priority=priority if isinstance(priority, int) else 1,
            category=_text(metadata.get("category")) or _text(row.get("category")),
            due=_text(due.get("date")) if isinstance(due, dict) else None,
            project_id=str(row["projectId"]) if row.get("projectId") else None,
            is_completed=row.get("isCompleted") is True,
        )


def _text(value: Any) -> str | None:
    """Non-empty strings pass through; anything else maps to None."""
    return value if isinstance(value, str) and value else None
