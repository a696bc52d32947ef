"""Domain entities for tasks: the read-only corpus the search engine works on."""

from dataclasses import dataclass, field


@dataclass
class Task:
    """A task as synced from the task provider and enriched with AI metadata.

    The search engine only ever reads these; it never mutates a task.
    """

    id: str
    content: str
    description: str | None = None
    labels: list[str] = field(default_factory=list)
    priority: int = 1  # 1 (normal) – 4 (urgent)
    category: str | None = None  # From AI enrichment metadata
    due: str | None = None  # YYYY-MM-DD
    project_id: str | None = None
    is_completed: bool = False


@dataclass
class TaskFilters:
    """Filters accepted by a TaskRepository when materializing a corpus."""

    project_id: str | None = None
    label: str | None = None
    category: str | None = None
    priority: int | None = None
    completed: bool | None = False  # None = both open and completed
    limit: int | None = None
