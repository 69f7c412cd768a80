from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")
R = TypeVar("R")


@dataclass
class OptimisticIntent(Generic[S, R]):
    """
    Speculative local change that is committed or reverted once the server answers.

    ``run`` takes a snapshot, applies the change, awaits the request, then
    either commits the response or restores the snapshot and re-raises.
    ``settle`` runs last in both cases.
    """

    name: str
    snapshot: Callable[[], S]
    apply: Callable[[], None]
    revert: Callable[[S], None]
    commit: Optional[Callable[[R], None]] = None
    on_error: Optional[Callable[[BaseException], None]] = None
    settle: Optional[Callable[[], Awaitable[Any]]] = None

    async def run(self, request: Callable[[], Awaitable[R]]) -> R:
        saved = self.snapshot()
        self.apply()
        try:
            try:
                result = await request()
            except BaseException as exc:
                self.revert(saved)
                logger.warning("optimistic event=rollback name=%s error=%r", self.name, exc)
                if self.on_error is not None:
                    self.on_error(exc)
                raise
            if self.commit is not None:
                self.commit(result)
            return result
        finally:
            if self.settle is not None:
                await self.settle()
