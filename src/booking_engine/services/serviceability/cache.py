"""Explicit TTL cache for registry snapshots."""

from __future__ import annotations

import threading
import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class RegistryCache(Generic[T]):
    """Holds one loaded value for ``ttl_seconds``; ``ttl_seconds=0`` disables caching."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._loaded_at: Optional[float] = None

    def get(self, loader: Callable[[], T]) -> T:
        with self._lock:
            now = self._clock()
            if self._loaded_at is not None and now - self._loaded_at < self.ttl_seconds:
                return self._value  # type: ignore[return-value]
            value = loader()
            if self.ttl_seconds > 0:
                self._value, self._loaded_at = value, now
            return value

    def invalidate(self) -> None:
        with self._lock:
            self._value = None
            self._loaded_at = None

    @property
    def is_warm(self) -> bool:
        return self._loaded_at is not None
