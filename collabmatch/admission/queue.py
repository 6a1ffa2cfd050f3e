"""Priority admission queue with bounded per-queue concurrency."""

from __future__ import annotations

import asyncio
import heapq
import inspect
import itertools
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from collabmatch.admission.config import AdmissionConfig, get_admission_config
from collabmatch.errors import AdmissionRejectedError

logger = logging.getLogger(__name__)


class Priority(IntEnum):
    """Lower values run first."""

    CRITICAL = 1
    HIGH = 3
    NORMAL = 5
    LOW = 7
    BACKGROUND = 10


@dataclass(frozen=True)
class QueueStats:
    queued: int
    processing: int
    max_concurrent: int


@dataclass(order=True)
class _QueuedRequest:
    priority: int
    seq: int
    task: Callable[[], Any] = field(compare=False)
    future: asyncio.Future[Any] = field(compare=False)
    enqueued_at: float = field(compare=False, default_factory=time.monotonic)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class RequestQueueManager:
    """Admit tasks per named queue in priority order.

    At most ``max_concurrent`` tasks per queue run at once; the rest wait
    in a heap ordered by (priority, arrival). A dequeued task always runs
    to completion. Counters are only touched from the event loop thread.
    """

    def __init__(
        self, max_concurrent: int | None = None, max_queued: int | None = None
    ) -> None:
        config = get_admission_config()
        if max_concurrent is None:
            max_concurrent = config.max_concurrent
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1 (got {max_concurrent})")
        self.max_concurrent = max_concurrent
        self.max_queued = max_queued if max_queued is not None else config.max_queued
        self._queues: dict[str, list[_QueuedRequest]] = {}
        self._processing: dict[str, int] = {}
        self._running: set[asyncio.Task[None]] = set()
        self._seq = itertools.count()

    @classmethod
    def from_config(cls, config: AdmissionConfig) -> RequestQueueManager:
        return cls(max_concurrent=config.max_concurrent, max_queued=config.max_queued)

    def _queue(self, queue_name: str) -> list[_QueuedRequest]:
        if queue_name not in self._queues:
            self._queues[queue_name] = []
            self._processing[queue_name] = 0
        return self._queues[queue_name]

    async def enqueue(
        self,
        queue_name: str,
        task: Callable[[], Any],
        priority: int = Priority.NORMAL,
    ) -> Any:
        """Run ``task`` once admitted and return its result.

        Exceptions raised by the task reach the caller unchanged; failures
        to schedule it raise AdmissionRejectedError.
        """
        queue = self._queue(queue_name)
        if self.max_queued is not None and len(queue) >= self.max_queued:
            logger.warning(
                "Queue %s full (%d waiting); rejecting request", queue_name, len(queue)
            )
            raise AdmissionRejectedError(queue_name, reason="queue full")

        try:
            future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
            heapq.heappush(
                queue,
                _QueuedRequest(
                    priority=int(priority),
                    seq=next(self._seq),
                    task=task,
                    future=future,
                ),
            )
            self._drain(queue_name)
        except Exception as e:
            logger.exception("Failed to schedule request on queue %s", queue_name)
            raise AdmissionRejectedError(queue_name, reason=str(e)) from e

        return await future

    def _drain(self, queue_name: str) -> None:
        queue = self._queue(queue_name)
        while queue and self._processing[queue_name] < self.max_concurrent:
            request = heapq.heappop(queue)
            if request.future.done():
                # Caller gave up while waiting
                continue
            self._processing[queue_name] += 1
            runner = asyncio.get_running_loop().create_task(
                self._execute(queue_name, request)
            )
            self._running.add(runner)
            runner.add_done_callback(self._running.discard)

    async def _execute(self, queue_name: str, request: _QueuedRequest) -> None:
        waited = time.monotonic() - request.enqueued_at
        logger.debug(
            "Running %s request (priority %d) after %.3fs",
            queue_name,
            request.priority,
            waited,
        )
        try:
            result = await _maybe_await(request.task())
        except asyncio.CancelledError:
            if not request.future.done():
                request.future.cancel()
            raise
        except Exception as e:
            if not request.future.done():
                request.future.set_exception(e)
        else:
            if not request.future.done():
                request.future.set_result(result)
        finally:
            self._processing[queue_name] = max(0, self._processing[queue_name] - 1)
            self._drain(queue_name)

    def get_stats(self, queue_name: str) -> QueueStats:
        queue = self._queue(queue_name)
        return QueueStats(
            queued=len(queue),
            processing=self._processing[queue_name],
            max_concurrent=self.max_concurrent,
        )

    def all_stats(self) -> dict[str, QueueStats]:
        return {name: self.get_stats(name) for name in self._queues}


class AdmissionController:
    """Route requests through the queue unless their path is exempt."""

    def __init__(
        self,
        manager: RequestQueueManager | None = None,
        bypass_paths: Iterable[str] | None = None,
    ) -> None:
        config = get_admission_config()
        self.manager = manager or RequestQueueManager.from_config(config)
        self.bypass_paths = frozenset(
            config.bypass_paths if bypass_paths is None else bypass_paths
        )

    def is_bypassed(self, path: str) -> bool:
        return path in self.bypass_paths

    async def handle(
        self,
        path: str,
        queue_name: str,
        handler: Callable[[], Any],
        priority: int = Priority.NORMAL,
    ) -> Any:
        """Run ``handler`` under admission control.

        Raises:
            AdmissionRejectedError: The queue could not schedule the request.
                Its ``to_response()`` is the busy body for the transport.
        """
        if self.is_bypassed(path):
            return await _maybe_await(handler())
        return await self.manager.enqueue(queue_name, handler, priority)
