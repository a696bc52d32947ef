"""Abstract interface (port) for reading the task corpus."""

from abc import ABC, abstractmethod

from task_search.domain.entities import Task, TaskFilters


class TaskRepository(ABC):
    """Port for task corpus access: implemented in the infrastructure layer."""

    @abstractmethod
    async def get_tasks(self, filters: TaskFilters | None = None) -> list[Task]:
        """Materialize a snapshot of tasks matching the filters."""
        ...

    @abstractmethod
    async def get_by_id(self, task_id: str) -> Task | None:
        ...
