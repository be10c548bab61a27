# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Small in-process TTL cache."""

import time
from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

V = TypeVar("V")

# Default freshness window for menu and path snapshots (in seconds)
DEFAULT_TTL_SECONDS = 60.0


class TTLCache(Generic[V]):
    """Keyed snapshot cache with a fixed time-to-live.

    Entries are replaced wholesale on ``set`` so a concurrent reader sees
    either the old or the new snapshot, never a partial one. Concurrent
    refreshes of the same key simply overwrite each other.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, V]] = {}

    def get(self, key: Hashable) -> V | None:
        """Return the cached value, or None when missing or stale."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            return None
        return value

    def set(self, key: Hashable, value: V) -> V:
        self._entries[key] = (self._clock(), value)
        return value

    def invalidate(self, key: Hashable | None = None) -> None:
        """Drop one entry, or everything when no key is given."""
        if key is None:
            self._entries = {}
        else:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)
