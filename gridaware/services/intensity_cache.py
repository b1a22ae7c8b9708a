"""
services/intensity_cache.py
============================
Cache abstraction for provider readings. The provider only sees
``get`` / ``set``; the backing store is swappable (in-memory here, Redis or
the host's key-value store elsewhere).
"""

from __future__ import annotations

import time
from typing import Callable, Dict, Optional, Protocol, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from gridaware.features.grid_provider import ProviderReading


class IntensityCache(Protocol):
    def get(self, key: str) -> Optional["ProviderReading"]: ...

    def set(self, key: str, value: "ProviderReading", ttl: int) -> None: ...


class MemoryIntensityCache:
    """
    Process-local TTL cache.

    Concurrent requests for the same key may both miss and both write; the
    last writer wins and the TTL bounds staleness.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, Tuple[float, "ProviderReading"]] = {}

    def get(self, key: str) -> Optional["ProviderReading"]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: "ProviderReading", ttl: int) -> None:
        self._entries[key] = (self._clock() + ttl, value)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
