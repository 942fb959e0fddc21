"""A size-bounded least-recently-used cache with soft and hard limits."""

from __future__ import annotations

import contextlib
from collections import OrderedDict
from typing import Any, Callable, ContextManager, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class KeyNotFound(KeyError):
    """The key asked for is not in the cache."""

    def __init__(self) -> None:
        super().__init__("key_not_found")


class Cache(Generic[K, V]):
    """LRU cache that may grow to ``max_size + elasticity`` before pruning to ``max_size``.

    A ``max_size`` of 0 makes it unbounded. Pass a lock (for example
    ``threading.Lock()``) to make it safe to share between threads.
    """

    def __init__(
        self, max_size: int = 1024, elasticity: int = 10, lock: Any = None
    ) -> None:
        if max_size < 0 or elasticity < 0:
            raise ValueError("max_size and elasticity must not be negative")
        self.max_size = max_size
        self.elasticity = elasticity
        self._lock = lock
        self._entries: OrderedDict[K, V] = OrderedDict()

    def _guard(self) -> ContextManager:
        return self._lock if self._lock is not None else contextlib.nullcontext()

    def __len__(self) -> int:
        with self._guard():
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._guard():
            return key in self._entries

    def clear(self) -> None:
        with self._guard():
            self._entries.clear()

    def insert(self, key: K, value: V) -> None:
        """Store a value and mark it most recently used."""
        with self._guard():
            if key in self._entries:
                self._entries[key] = value
                self._entries.move_to_end(key)
                return
            self._entries[key] = value
            self._prune()

    def try_get(self, key: K) -> V | None:
        """The value for a key, marking it most recently used, or None."""
        with self._guard():
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def get(self, key: K) -> V:
        """The value for a key, marking it most recently used."""
        with self._guard():
            if key not in self._entries:
                raise KeyNotFound()
            self._entries.move_to_end(key)
            return self._entries[key]

    def remove(self, key: K) -> bool:
        with self._guard():
            if key not in self._entries:
                return False
            del self._entries[key]
            return True

    def max_allowed_size(self) -> int:
        return self.max_size + self.elasticity

    def walk(self, f: Callable[[K, V], Any]) -> None:
        """Call ``f(key, value)`` for every entry, most recently used first."""
        with self._guard():
            for key, value in reversed(self._entries.items()):
                f(key, value)

    def _prune(self) -> int:
        if self.max_size == 0 or len(self._entries) < self.max_allowed_size():
            return 0
        count = 0
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)
            count += 1
        return count