"""Best-effort background side effects."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class BestEffortRunner:
    """Run side effects in the background without blocking or failing callers.

    ``submit`` schedules the work on the running loop and returns
    immediately. A failure is logged and dropped; it is never re-raised to
    the submitter or to ``drain``.
    """

    def __init__(self) -> None:
        self._pending: set[asyncio.Task[None]] = set()
        self.failures = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(
        self, work: Callable[[], Awaitable[object]], *, description: str
    ) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(self._run(work, description))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run(self, work: Callable[[], Awaitable[object]], description: str) -> None:
        try:
            await work()
        except asyncio.CancelledError:
            logger.warning("Background task cancelled: %s", description)
            raise
        except Exception:
            self.failures += 1
            logger.exception("Background task failed: %s", description)

    async def drain(self) -> None:
        """Wait for every submitted side effect to settle."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
