from __future__ import annotations

from typing import Any, Optional

from taskboard.client.api import TaskboardClient
from taskboard.client.availability import DebouncedEmailCheck
from taskboard.client.cache import TaskCache
from taskboard.client.errors import ApiError
from taskboard.client.filters import TaskFilter
from taskboard.client.models import CachedTask, TaskId
from taskboard.client.mutations import MutationCoordinator
from taskboard.client.scroll import DEFAULT_PER_PAGE, InfiniteScrollController


class TaskSession:
    """
    Task list state for one signed-in user.

    Wires a single ``TaskCache`` into the scroll controller and the mutation
    coordinator, and remembers the last error of each mutation kind for display.
    """

    def __init__(self, client: TaskboardClient, *, owner_id: Optional[int] = None, per_page: int = DEFAULT_PER_PAGE) -> None:
        self.client = client
        self.cache = TaskCache()
        self.scroll = InfiniteScrollController(self.cache, client, per_page=per_page)
        self.mutations = MutationCoordinator(
            self.cache, client, owner_id=owner_id, reconcile=self.scroll.reconcile
        )
        self.email_check = DebouncedEmailCheck(self._email_available)
        self.errors: dict[str, Optional[ApiError]] = {"create": None, "update": None, "delete": None}

    @classmethod
    async def sign_in(cls, client: TaskboardClient, *, email: str, password: str, **kwargs: Any) -> "TaskSession":
        user = await client.login(email=email, password=password)
        session = cls(client, owner_id=user.id, **kwargs)
        await session.scroll.load_first_page()
        return session

    async def _email_available(self, email: str) -> bool:
        result = await self.client.check_email(email)
        return result.available

    @property
    def tasks(self) -> list[CachedTask]:
        return self.cache.visible()

    @property
    def all_tasks(self) -> list[CachedTask]:
        return self.cache.tasks

    @property
    def has_next_page(self) -> bool:
        return self.scroll.has_next_page

    @property
    def is_fetching_next_page(self) -> bool:
        return self.scroll.is_fetching

    async def set_filter(self, search: Optional[str] = None, status: Optional[str] = None) -> bool:
        return await self.scroll.change_filter(TaskFilter(search=search, status=status))

    async def clear_filters(self) -> bool:
        return await self.scroll.change_filter(TaskFilter())

    async def on_scroll(self, scroll_top: float, client_height: float, scroll_height: float) -> bool:
        return await self.scroll.on_scroll(scroll_top, client_height, scroll_height)

    async def _tracked(self, kind: str, coro):
        try:
            result = await coro
        except ApiError as exc:
            self.errors[kind] = exc
            raise
        self.errors[kind] = None
        return result

    async def create_task(self, title: str, description: Optional[str] = None, status: Optional[str] = None) -> CachedTask:
        return await self._tracked("create", self.mutations.create(title, description, status or "pending"))

    async def update_task(self, task_id: TaskId, **fields: Any) -> CachedTask:
        return await self._tracked("update", self.mutations.update(task_id, **fields))

    async def delete_task(self, task_id: TaskId) -> None:
        await self._tracked("delete", self.mutations.delete(task_id))
