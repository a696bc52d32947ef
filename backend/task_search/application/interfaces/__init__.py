from .chat_provider import ChatProvider
from .semantic_search_provider import SemanticSearchProvider
from .task_repository import TaskRepository

__all__ = [
    "ChatProvider",
    "SemanticSearchProvider",
    "TaskRepository",
]
