"""Owner-scoped task queries and single-record mutations."""

import logging
import math
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.config import settings
from taskboard.core.errors import Forbidden, NotFound
from taskboard.models.task import Task
from taskboard.schemas.task import (
    PageMeta,
    TaskCreate,
    TaskPage,
    TaskResponse,
    TaskStatus,
    TaskUpdate,
    normalize_search,
)

logger = logging.getLogger(__name__)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class TaskQueryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_tasks(
        self,
        owner_id: int,
        search: Optional[str] = None,
        status: Optional[TaskStatus] = None,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> TaskPage:
        """Return one page of the owner's tasks, newest first.

        ``search`` matches title or description case-insensitively; a blank
        search is treated as no search.
        """
        per_page = per_page or settings.DEFAULT_PER_PAGE
        page = max(page, 1)

        conditions = [Task.user_id == owner_id]
        search = normalize_search(search)
        if search:
            pattern = _like_pattern(search)
            conditions.append(
                or_(
                    Task.title.ilike(pattern, escape="\\"),
                    Task.description.ilike(pattern, escape="\\"),
                )
            )
        if status is not None:
            conditions.append(Task.status == TaskStatus(status))

        total = await self.db.scalar(select(func.count(Task.id)).where(*conditions))
        total = total or 0

        result = await self.db.execute(
            select(Task)
            .where(*conditions)
            .order_by(Task.created_at.desc(), Task.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        tasks = result.scalars().all()

        return TaskPage(
            data=[TaskResponse.model_validate(task) for task in tasks],
            meta=PageMeta(
                current_page=page,
                last_page=max(1, math.ceil(total / per_page)),
                per_page=per_page,
                total=total,
            ),
        )

    async def _owned_task(self, owner_id: int, task_id: int) -> Task:
        task = await self.db.get(Task, task_id)
        if task is None:
            raise NotFound("Task not found")
        if task.user_id != owner_id:
            logger.warning(
                "task event=forbidden task_id=%s owner_id=%s requester_id=%s",
                task_id, task.user_id, owner_id,
            )
            raise Forbidden("Unauthorized")
        return task

    async def get_task(self, owner_id: int, task_id: int) -> TaskResponse:
        task = await self._owned_task(owner_id, task_id)
        return TaskResponse.model_validate(task)

    async def create_task(self, owner_id: int, payload: TaskCreate) -> TaskResponse:
        task = Task(
            user_id=owner_id,
            title=payload.title,
            description=payload.description,
            status=payload.status,
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)
        logger.info("task event=created task_id=%s owner_id=%s", task.id, owner_id)
        return TaskResponse.model_validate(task)

    async def update_task(self, owner_id: int, task_id: int, payload: TaskUpdate) -> TaskResponse:
        task = await self._owned_task(owner_id, task_id)
        changes = payload.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(task, field, value)
        await self.db.commit()
        await self.db.refresh(task)
        logger.info(
            "task event=updated task_id=%s owner_id=%s fields=%s",
            task_id, owner_id, ",".join(sorted(changes)) or "-",
        )
        return TaskResponse.model_validate(task)

    async def delete_task(self, owner_id: int, task_id: int) -> None:
        task = await self._owned_task(owner_id, task_id)
        await self.db.delete(task)
        await self.db.commit()
        logger.info("task event=deleted task_id=%s owner_id=%s", task_id, owner_id)
