from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel

from taskboard.schemas.task import PageMeta, TaskStatus

TEMP_ID_PREFIX = "temp-"

TaskId = Union[int, str]


def generate_temp_id() -> str:
    return f"{TEMP_ID_PREFIX}{uuid.uuid4().hex}"


def is_temp_id(task_id: TaskId) -> bool:
    return isinstance(task_id, str) and task_id.startswith(TEMP_ID_PREFIX)


class CachedTask(BaseModel):
    """A task as held by the client; ``id`` is a temp string until the server confirms it."""

    id: TaskId
    user_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.pending
    created_at: datetime
    updated_at: datetime

    class Config:
        frozen = True


class TaskListPage(BaseModel):
    data: list[CachedTask]
    meta: PageMeta

    @property
    def has_next_page(self) -> bool:
        return self.meta.current_page < self.meta.last_page
