from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Protocol

from taskboard.client.cache import EntrySnapshot, TaskCache
from taskboard.client.errors import NotFound, ValidationError
from taskboard.client.models import CachedTask, TaskId, generate_temp_id, is_temp_id
from taskboard.client.optimistic import OptimisticIntent
from taskboard.schemas.task import TaskStatus

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "status")


class TaskWriter(Protocol):
    async def create_task(
        self, *, title: str, description: Optional[str] = None, status: Optional[str] = None
    ) -> CachedTask: ...

    async def update_task(self, task_id: int, **fields: Any) -> CachedTask: ...

    async def delete_task(self, task_id: int) -> str: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean_changes(fields: dict[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown task fields: {', '.join(sorted(unknown))}")

    changes = dict(fields)
    if "title" in changes:
        title = (changes["title"] or "").strip()
        if not title:
            raise ValidationError("The title field is required.")
        changes["title"] = title
    if "status" in changes:
        try:
            changes["status"] = TaskStatus(changes["status"])
        except ValueError:
            raise ValidationError("The selected status is invalid.") from None
    return changes


class MutationCoordinator:
    """
    Optimistic create/update/delete against a shared ``TaskCache``.

    Each change is visible in the cache before the request is sent. A failed
    request puts back only the entry it touched and re-raises, so overlapping
    mutations never undo each other. Updates and deletes re-fetch the list
    afterwards through ``reconcile``.
    """

    def __init__(
        self,
        cache: TaskCache,
        api: TaskWriter,
        *,
        owner_id: Optional[int] = None,
        reconcile: Optional[Callable[[], Awaitable[Any]]] = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.cache = cache
        self.api = api
        self.owner_id = owner_id
        self.reconcile = reconcile
        self._now = now

    def _intent(
        self, name: str, task_id: TaskId, apply: Callable[[], None], **kwargs: Any
    ) -> OptimisticIntent[EntrySnapshot, Any]:
        def apply_fresh() -> None:
            # In-flight list requests predate this change; their results must not land.
            self.cache.invalidate()
            apply()

        return OptimisticIntent(
            name=name,
            snapshot=lambda: self.cache.snapshot_entry(task_id),
            apply=apply_fresh,
            revert=self.cache.restore_entry,
            **kwargs,
        )

    async def create(
        self,
        title: str,
        description: Optional[str] = None,
        status: TaskStatus | str = TaskStatus.pending,
    ) -> CachedTask:
        changes = _clean_changes({"title": title, "status": status or TaskStatus.pending})
        now = self._now()
        temp = CachedTask(
            id=generate_temp_id(),
            user_id=self.owner_id,
            title=changes["title"],
            description=description,
            status=changes["status"],
            created_at=now,
            updated_at=now,
        )

        def commit(created: CachedTask) -> None:
            self.cache.replace(temp.id, created, insert_missing=True)
            logger.debug("mutation event=created temp_id=%s task_id=%s", temp.id, created.id)

        intent = self._intent("create", temp.id, lambda: self.cache.prepend(temp), commit=commit)
        return await intent.run(
            lambda: self.api.create_task(
                title=temp.title, description=description, status=temp.status.value
            )
        )

    async def update(self, task_id: TaskId, **fields: Any) -> CachedTask:
        if is_temp_id(task_id):
            raise ValidationError("Task is still being saved")
        changes = _clean_changes(fields)

        def apply() -> None:
            self.cache.patch(task_id, **changes, updated_at=self._now())

        def commit(updated: CachedTask) -> None:
            self.cache.replace(task_id, updated)

        intent = self._intent(
            "update",
            task_id,
            apply,
            commit=commit,
            on_error=lambda exc: self._forget_missing(task_id, exc),
            settle=self.reconcile,
        )
        return await intent.run(lambda: self.api.update_task(task_id, **changes))

    async def delete(self, task_id: TaskId) -> None:
        if is_temp_id(task_id):
            raise ValidationError("Task is still being saved")

        intent = self._intent(
            "delete",
            task_id,
            lambda: self.cache.remove(task_id),
            on_error=lambda exc: self._forget_missing(task_id, exc),
            settle=self.reconcile,
        )
        await intent.run(lambda: self.api.delete_task(task_id))

    def _forget_missing(self, task_id: TaskId, exc: BaseException) -> None:
        if isinstance(exc, NotFound):
            self.cache.remove(task_id)
