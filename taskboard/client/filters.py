from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from taskboard.client.errors import ValidationError
from taskboard.client.models import CachedTask
from taskboard.schemas.task import TaskStatus, normalize_search


@dataclass(frozen=True)
class TaskFilter:
    """Active search/status filter; the same predicate the server applies."""

    search: Optional[str] = None
    status: Optional[TaskStatus] = None

    def __post_init__(self) -> None:
        # Accept raw form values: "" means no status.
        object.__setattr__(self, "search", normalize_search(self.search))
        if not self.status:
            object.__setattr__(self, "status", None)
        elif not isinstance(self.status, TaskStatus):
            try:
                object.__setattr__(self, "status", TaskStatus(self.status))
            except ValueError:
                raise ValidationError("The selected status is invalid.") from None

    @property
    def is_empty(self) -> bool:
        return self.search is None and self.status is None

    def matches(self, task: CachedTask) -> bool:
        if self.search is not None:
            term = self.search.lower()
            in_title = term in task.title.lower()
            in_description = term in (task.description or "").lower()
            if not in_title and not in_description:
                return False
        if self.status is not None and task.status != self.status:
            return False
        return True

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if self.search is not None:
            params["search"] = self.search
        if self.status is not None:
            params["status"] = self.status.value
        return params
