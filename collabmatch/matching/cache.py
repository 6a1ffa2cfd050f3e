"""Time-boxed, process-wide cache for the candidate project pool."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class AsyncCache(Protocol):
    async def get(
        self,
        key: Hashable,
        loader: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> T: ...

    def clear(self) -> None: ...


@dataclass
class _Entry:
    value: Any
    stored_at: float


class TTLCache:
    """Lazily populated cache holding one generation of data per key.

    A miss (or an expired entry) awaits ``loader`` and replaces the cached
    value. There is no locking: two concurrent misses may both load, and
    the last one to finish wins. Readers see data at most ``ttl`` old.
    Loader errors propagate and leave the previous entry untouched.
    """

    def __init__(
        self,
        default_ttl: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[Hashable, _Entry] = {}

    def _fresh(self, key: Hashable, ttl: float) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= ttl:
            return None
        return entry

    async def get(
        self,
        key: Hashable,
        loader: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        ttl = self.default_ttl if ttl is None else ttl
        if ttl > 0:
            entry = self._fresh(key, ttl)
            if entry is not None:
                return entry.value

        value = await loader()
        if ttl > 0:
            self._entries[key] = _Entry(value=value, stored_at=self._clock())
        return value

    def invalidate(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class NullCache:
    """Cache that never stores anything; every call hits the loader."""

    async def get(
        self,
        key: Hashable,
        loader: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        return await loader()

    def clear(self) -> None:
        return None
