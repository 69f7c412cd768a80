from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional, Protocol

from taskboard.client.cache import TaskCache
from taskboard.client.errors import ApiError
from taskboard.client.filters import TaskFilter
from taskboard.client.models import CachedTask, TaskListPage

logger = logging.getLogger(__name__)

SCROLL_THRESHOLD = 200
THROTTLE_INTERVAL_S = 0.1
DEFAULT_PER_PAGE = 10


class TaskListSource(Protocol):
    async def list_tasks(
        self,
        *,
        page: int = 1,
        per_page: int = DEFAULT_PER_PAGE,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> TaskListPage: ...


class ScrollState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    ERROR = "error"


class InfiniteScrollController:
    """
    Loads task pages into a ``TaskCache`` as the user scrolls.

    A failed fetch leaves the controller in ERROR; the next scroll event moves
    it back to IDLE so the same page can be requested again.
    """

    def __init__(
        self,
        cache: TaskCache,
        api: TaskListSource,
        *,
        per_page: int = DEFAULT_PER_PAGE,
        threshold: float = SCROLL_THRESHOLD,
        throttle_interval: float = THROTTLE_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cache = cache
        self.api = api
        self.per_page = per_page
        self.threshold = threshold
        self.throttle_interval = throttle_interval
        self._clock = clock
        self._last_check: Optional[float] = None
        self._in_flight: Optional[object] = None
        self.state = ScrollState.IDLE
        self.last_error: Optional[ApiError] = None

    @property
    def has_next_page(self) -> bool:
        return self.cache.has_next_page

    @property
    def is_fetching(self) -> bool:
        return self.state is ScrollState.FETCHING

    def near_bottom(self, scroll_top: float, client_height: float, scroll_height: float) -> bool:
        return scroll_top + client_height >= scroll_height - self.threshold

    async def on_scroll(self, scroll_top: float, client_height: float, scroll_height: float) -> bool:
        """Handle a scroll event; returns True when a page was fetched and merged."""
        now = self._clock()
        if self._last_check is not None and now - self._last_check < self.throttle_interval:
            return False
        self._last_check = now

        if self.state is ScrollState.ERROR:
            self.state = ScrollState.IDLE
        if not self.near_bottom(scroll_top, client_height, scroll_height):
            return False
        return await self.fetch_next_page()

    async def fetch_next_page(self) -> bool:
        if self.state is not ScrollState.IDLE or not self.cache.has_next_page:
            return False
        return await self._fetch(self.cache.current_page + 1)

    async def load_first_page(self) -> bool:
        return await self._fetch(1)

    async def change_filter(self, new_filter: TaskFilter) -> bool:
        """Apply a new filter; fetches page 1 unless the cache could restore itself."""
        if not self.cache.set_filter(new_filter):
            return False
        return await self._fetch(1)

    async def _fetch(self, page: int) -> bool:
        fetch_id = object()
        self._in_flight = fetch_id
        self.state = ScrollState.FETCHING
        while True:
            token = self.cache.begin_request()
            params = self.cache.filter.to_params()
            try:
                result = await self.api.list_tasks(page=page, per_page=self.per_page, **params)
            except ApiError as exc:
                logger.warning("scroll event=fetch_failed page=%s error=%r", page, exc)
                if self._in_flight is fetch_id:
                    self._in_flight = None
                    self.state = ScrollState.ERROR
                    self.last_error = exc
                return False

            if self._in_flight is not fetch_id:
                # A newer fetch owns the controller state.
                return self.cache.receive_page(token, result)
            merged = self.cache.receive_page(token, result)
            if merged or page != self.cache.current_page + 1:
                break
            # A local mutation discarded the response; the page is still missing.
            logger.debug("scroll event=refetch page=%s", page)

        self._in_flight = None
        self.state = ScrollState.IDLE
        self.last_error = None
        return merged

    async def reconcile(self) -> bool:
        """
        Re-fetch every loaded page of the active filter and replace the list.

        Failures are logged and reported as False; the cached list is left as is.
        """
        token = self.cache.begin_request()
        params = self.cache.filter.to_params()
        pages = max(self.cache.current_page, 1)
        try:
            last = await self.api.list_tasks(page=1, per_page=self.per_page, **params)
            collected: list[CachedTask] = list(last.data)
            while last.meta.current_page < min(pages, last.meta.last_page):
                last = await self.api.list_tasks(
                    page=last.meta.current_page + 1, per_page=self.per_page, **params
                )
                collected.extend(last.data)
        except ApiError as exc:
            logger.warning("scroll event=reconcile_failed error=%r", exc)
            return False

        return self.cache.replace_all(
            token,
            collected,
            current_page=last.meta.current_page,
            last_page=last.meta.last_page,
        )
