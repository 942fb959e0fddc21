"""A thread barrier that also tracks how many parties are still outstanding."""

from __future__ import annotations

import threading


class PBarrier:
    def __init__(self, num: int) -> None:
        if num <= 0:
            raise ValueError(f"barrier needs at least one party, got {num}")
        self._barrier = threading.Barrier(num)
        self._lock = threading.Lock()
        self._wait_num = num

    def _decrement(self) -> None:
        with self._lock:
            self._wait_num -= 1

    def wait(self) -> None:
        """Count this party in and block until all parties arrive."""
        self._decrement()
        self._barrier.wait()

    def done(self) -> None:
        """Count this party in without blocking."""
        self._decrement()

    def ready(self) -> bool:
        with self._lock:
            return self._wait_num == 0

    def wait_num(self) -> int:
        with self._lock:
            return self._wait_num