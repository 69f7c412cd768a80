from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from taskboard.client.errors import ApiError

logger = logging.getLogger(__name__)

DEBOUNCE_DELAY_S = 0.5


class DebouncedEmailCheck:
    """
    Email availability lookup that waits for typing to pause.

    Each ``schedule`` cancels the previous pending lookup, so only the last
    value typed within ``delay`` seconds reaches the server.
    """

    def __init__(self, check: Callable[[str], Awaitable[bool]], *, delay: float = DEBOUNCE_DELAY_S) -> None:
        self._check = check
        self.delay = delay
        self._pending: Optional[asyncio.Task] = None
        self.email: Optional[str] = None
        self.available: Optional[bool] = None

    def schedule(self, email: str) -> asyncio.Task:
        self.cancel()
        self.email = email
        self.available = None
        self._pending = asyncio.ensure_future(self._run(email))
        return self._pending

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def wait(self) -> Optional[bool]:
        """Wait for the pending lookup (if any) and return its result."""
        pending = self._pending
        if pending is None:
            return self.available
        await asyncio.wait({pending})
        if pending.cancelled():
            return None
        return pending.result()

    async def _run(self, email: str) -> Optional[bool]:
        await asyncio.sleep(self.delay)
        try:
            available = await self._check(email)
        except ApiError as exc:
            # Lookup failures never block the form; leave the state unknown.
            logger.info("availability event=check_failed error=%r", exc)
            return None
        if email == self.email:
            self.available = available
        return available
