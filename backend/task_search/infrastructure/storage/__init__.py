from .task_repository import InMemoryTaskRepository, JsonFileTaskRepository, apply_filters

__all__ = ["InMemoryTaskRepository", "JsonFileTaskRepository", "apply_filters"]
