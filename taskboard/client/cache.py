"""In-memory accumulation of fetched task pages.

One ``TaskCache`` belongs to one client session. The scroll controller and
the mutation coordinator both receive it by reference; every change goes
through its methods, which run synchronously on the event loop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from taskboard.client.filters import TaskFilter
from taskboard.client.models import CachedTask, TaskId, TaskListPage, is_temp_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Listing:
    tasks: tuple[CachedTask, ...] = ()
    current_page: int = 0
    last_page: int = 1


@dataclass(frozen=True)
class Slot:
    task: Optional[CachedTask] = None
    index: int = 0
    # Entry that followed it; None when it was last.
    next_id: Optional[TaskId] = None


@dataclass(frozen=True)
class EntrySnapshot:
    """One entry as it stood before a local edit, in both lists."""

    task_id: TaskId
    entry: Slot = Slot()
    unfiltered: Slot = Slot()


def _unique(tasks: Iterable[CachedTask], seen: Optional[set] = None) -> list[CachedTask]:
    seen = set() if seen is None else seen
    out = []
    for task in tasks:
        if task.id in seen:
            continue
        seen.add(task.id)
        out.append(task)
    return out


def _index_of(tasks: list[CachedTask], task_id: TaskId) -> int:
    for i, task in enumerate(tasks):
        if task.id == task_id:
            return i
    return -1


def _replace_in(tasks: list[CachedTask], task_id: TaskId, task: CachedTask, insert_missing: bool) -> bool:
    i = _index_of(tasks, task_id)
    if task.id != task_id:
        # Server copy may already be present (e.g. a re-fetch landed first).
        j = _index_of(tasks, task.id)
        if j != -1:
            tasks[j] = task
            if i != -1:
                del tasks[i]
            return True
    if i != -1:
        tasks[i] = task
        return True
    if insert_missing:
        tasks.insert(0, task)
        return True
    return False


def _slot(tasks: list[CachedTask], task_id: TaskId) -> Slot:
    i = _index_of(tasks, task_id)
    if i == -1:
        return Slot()
    following = tasks[i + 1].id if i + 1 < len(tasks) else None
    return Slot(tasks[i], i, following)


def _put_back(tasks: list[CachedTask], task_id: TaskId, slot: Slot) -> None:
    i = _index_of(tasks, task_id)
    if slot.task is None:
        if i != -1:
            del tasks[i]
    elif i != -1:
        tasks[i] = slot.task
    elif slot.next_id is None:
        tasks.append(slot.task)
    else:
        j = _index_of(tasks, slot.next_id)
        tasks.insert(j if j != -1 else min(slot.index, len(tasks)), slot.task)


@dataclass
class TaskCache:
    filter: TaskFilter = field(default_factory=TaskFilter)
    current_page: int = 0
    last_page: int = 1
    _tasks: list[CachedTask] = field(default_factory=list, init=False)
    _unfiltered: Optional[Listing] = field(default=None, init=False)
    _version: int = field(default=0, init=False)
    _replace_next: bool = field(default=True, init=False)

    # -- reading ---------------------------------------------------------

    @property
    def tasks(self) -> list[CachedTask]:
        return list(self._tasks)

    @property
    def version(self) -> int:
        return self._version

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.last_page

    @property
    def unfiltered(self) -> Optional[Listing]:
        return self._unfiltered

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[CachedTask]:
        return iter(list(self._tasks))

    def get(self, task_id: TaskId) -> Optional[CachedTask]:
        i = _index_of(self._tasks, task_id)
        return self._tasks[i] if i != -1 else None

    def visible(self) -> list[CachedTask]:
        """Cached tasks that satisfy the active filter, in cache order."""
        return [t for t in self._tasks if self.filter.matches(t)]

    # -- request tokens --------------------------------------------------

    def begin_request(self) -> int:
        """Token to pass back with the response of a list request."""
        return self._version

    def is_current(self, token: int) -> bool:
        return token == self._version

    def invalidate(self) -> int:
        """Make every outstanding list request stale."""
        self._version += 1
        return self._version

    # -- filter transitions ----------------------------------------------

    def set_filter(self, new_filter: TaskFilter) -> bool:
        """
        Switch the active filter in one step.

        Returns True when page 1 must be fetched for the new filter, False when
        nothing changed or the list was restored from the unfiltered snapshot.
        """
        if new_filter == self.filter:
            return False

        self.filter = new_filter
        self._version += 1

        if new_filter.is_empty and self._unfiltered is not None and self._unfiltered.tasks:
            self._tasks = _unique(self._unfiltered.tasks)
            self.current_page = self._unfiltered.current_page
            self.last_page = self._unfiltered.last_page
            self._replace_next = False
            logger.debug("cache event=restored tasks=%s", len(self._tasks))
            return False

        # Keep the current list so visible() gives immediate feedback until page 1 lands.
        self.current_page = 0
        self.last_page = 1
        self._replace_next = True
        return True

    # -- server data -----------------------------------------------------

    def receive_page(self, token: int, page: TaskListPage) -> bool:
        if not self.is_current(token):
            logger.debug(
                "cache event=stale_page page=%s token=%s version=%s",
                page.meta.current_page, token, self._version,
            )
            return False

        if page.meta.current_page == 1 or self._replace_next:
            self._tasks = self._with_pending(page.data)
            self._replace_next = False
        else:
            self._tasks.extend(_unique(page.data, {t.id for t in self._tasks}))

        self.current_page = page.meta.current_page
        self.last_page = page.meta.last_page
        self._mirror()
        return True

    def replace_all(self, token: int, tasks: Iterable[CachedTask], *, current_page: int, last_page: int) -> bool:
        """Swap in a freshly re-fetched list (reconciliation)."""
        if not self.is_current(token):
            logger.debug("cache event=stale_reload token=%s version=%s", token, self._version)
            return False
        self._tasks = self._with_pending(tasks)
        self.current_page = current_page
        self.last_page = last_page
        self._replace_next = False
        self._mirror()
        return True

    def _with_pending(self, tasks: Iterable[CachedTask]) -> list[CachedTask]:
        # Optimistic inserts still awaiting the server stay on top.
        pending = [t for t in self._tasks if is_temp_id(t.id)]
        return _unique([*pending, *tasks])

    def _mirror(self) -> None:
        if self.filter.is_empty:
            self._unfiltered = Listing(tuple(self._tasks), self.current_page, self.last_page)

    # -- local edits -----------------------------------------------------

    def snapshot_entry(self, task_id: TaskId) -> EntrySnapshot:
        unfiltered = list(self._unfiltered.tasks) if self._unfiltered is not None else []
        return EntrySnapshot(task_id, _slot(self._tasks, task_id), _slot(unfiltered, task_id))

    def restore_entry(self, saved: EntrySnapshot) -> None:
        """
        Put one entry back the way ``snapshot_entry`` found it.

        Only that entry is touched: an entry that did not exist is removed, a
        removed one goes back in front of the entry that used to follow it, a
        changed one is replaced.
        """
        _put_back(self._tasks, saved.task_id, saved.entry)
        self._edit_unfiltered(lambda tasks: _put_back(tasks, saved.task_id, saved.unfiltered))
        self._mirror()

    def _edit_unfiltered(self, edit) -> None:
        # While a filter is active the unfiltered snapshot is edited separately.
        if self.filter.is_empty or self._unfiltered is None:
            return
        tasks = list(self._unfiltered.tasks)
        edit(tasks)
        self._unfiltered = Listing(tuple(tasks), self._unfiltered.current_page, self._unfiltered.last_page)

    def prepend(self, task: CachedTask) -> None:
        if self.get(task.id) is not None:
            raise ValueError(f"task {task.id!r} is already cached")
        self._tasks.insert(0, task)
        self._edit_unfiltered(lambda tasks: tasks.insert(0, task))
        self._mirror()

    def replace(self, task_id: TaskId, task: CachedTask, *, insert_missing: bool = False) -> bool:
        """Replace the entry for ``task_id`` with ``task`` (which may carry a new id)."""
        found = _replace_in(self._tasks, task_id, task, insert_missing)
        self._edit_unfiltered(lambda tasks: _replace_in(tasks, task_id, task, insert_missing))
        self._mirror()
        return found

    def patch(self, task_id: TaskId, **changes) -> Optional[CachedTask]:
        current = self.get(task_id)
        if current is None:
            return None
        patched = current.model_copy(update=changes)
        self.replace(task_id, patched)
        return patched

    def remove(self, task_id: TaskId) -> Optional[CachedTask]:
        i = _index_of(self._tasks, task_id)
        removed = self._tasks.pop(i) if i != -1 else None

        def drop(tasks: list[CachedTask]) -> None:
            j = _index_of(tasks, task_id)
            if j != -1:
                del tasks[j]

        self._edit_unfiltered(drop)
        self._mirror()
        return removed
