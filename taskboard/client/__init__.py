from taskboard.client.api import TaskboardClient
from taskboard.client.cache import TaskCache
from taskboard.client.errors import ApiError, Forbidden, NetworkError, NotFound, Unauthorized, ValidationError, error_message
from taskboard.client.filters import TaskFilter
from taskboard.client.mutations import MutationCoordinator
from taskboard.client.scroll import InfiniteScrollController, ScrollState
from taskboard.client.session import TaskSession

__all__ = [
    "ApiError",
    "Forbidden",
    "InfiniteScrollController",
    "MutationCoordinator",
    "NetworkError",
    "NotFound",
    "ScrollState",
    "TaskCache",
    "TaskFilter",
    "TaskSession",
    "TaskboardClient",
    "Unauthorized",
    "ValidationError",
    "error_message",
]
