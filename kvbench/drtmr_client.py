"""Client side of the cluster-hash key-value benchmark: request encoding and workers."""

from __future__ import annotations

import random
import struct
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Iterator

from .config import BenchmarkConfig, ReplyValue, RPCId, ThreadParam, Workload
from .dataset import Dataset

_U64 = struct.Struct("<Q")
_U64_MAX = (1 << 64) - 1


def _u64(value: int) -> bytes:
    value = int(value)
    if not 0 <= value <= _U64_MAX:
        raise ValueError(f"{value} does not fit in an unsigned 64-bit integer")
    return _U64.pack(value)


def encode_get(key: int) -> bytes:
    """Arguments of a GET: the key."""
    return _u64(key)


def encode_put(key: int, val: int) -> bytes:
    """Arguments of a PUT: the key followed by the value."""
    return _u64(key) + _u64(val)


def encode_update(key: int, val: int) -> bytes:
    """Arguments of an UPDATE: the key followed by the value."""
    return _u64(key) + _u64(val)


def encode_remove(key: int) -> bytes:
    """Arguments of a DELETE: the key."""
    return _u64(key)


def encode_scan(key: int, n: int) -> bytes:
    """Arguments of a SCAN: the start key followed by the number of entries."""
    return _u64(key) + _u64(n)


class Operation(Enum):
    SEARCH = RPCId.GET
    INSERT = RPCId.PUT
    UPDATE = RPCId.UPDATE
    REMOVE = RPCId.DELETE

    @property
    def rpc_id(self) -> RPCId:
        return self.value


def choose_operation(d: float, config: BenchmarkConfig) -> Operation:
    """Pick the operation for a uniform draw ``d`` from the configured ratios."""
    if d <= config.read_ratio:
        return Operation.SEARCH
    if d <= config.read_ratio + config.insert_ratio:
        return Operation.INSERT
    if d <= config.read_ratio + config.insert_ratio + config.update_ratio:
        return Operation.UPDATE
    return Operation.REMOVE


@dataclass(frozen=True)
class Request:
    """One RPC to send: its operation, key and encoded arguments."""

    operation: Operation
    key: int
    payload: bytes

    @property
    def rpc_id(self) -> RPCId:
        return self.operation.rpc_id


class _Cursor:
    """Cycles through a list of keys, wrapping to the start at the end."""

    def __init__(self, keys: list[int], what: str) -> None:
        self._keys = keys
        self._what = what
        self._index = 0

    def next(self) -> int:
        if not self._keys:
            raise ValueError(f"no {self._what} keys available")
        key = self._keys[self._index]
        self._index += 1
        if self._index == len(self._keys):
            self._index = 0
        return key


class ClientWorker:
    """Generates the request mix of one client thread and accounts for its results.

    For YCSB workloads, inserted keys come from ``insert_keys`` and removed keys
    from ``remove_keys``, both iterators supplied by a key generator; the other
    workloads cycle through the dataset's key lists.
    """

    def __init__(
        self,
        config: BenchmarkConfig,
        dataset: Dataset,
        thread_param: ThreadParam | None = None,
        rng: random.Random | None = None,
        insert_keys: Iterable[int] | None = None,
        remove_keys: Iterable[int] | None = None,
    ) -> None:
        self.config = config
        self.thread_param = thread_param if thread_param is not None else ThreadParam()
        self._rng = rng or random.Random()
        self._ycsb = Workload(config.workloads).is_ycsb
        if self._ycsb and (insert_keys is None or remove_keys is None):
            raise ValueError("YCSB workloads need insert_keys and remove_keys generators")
        self._insert_iter: Iterator[int] | None = (
            iter(insert_keys) if insert_keys is not None else None
        )
        self._remove_iter: Iterator[int] | None = (
            iter(remove_keys) if remove_keys is not None else None
        )
        self._query = _Cursor(dataset.bench_keys, "benchmark")
        self._update = _Cursor(dataset.bench_keys, "benchmark")
        self._remove = _Cursor(dataset.bench_keys, "benchmark")
        self._insert = _Cursor(dataset.nonexist_keys, "insert")
        self._last_duration_us = 0

    @property
    def thread_id(self) -> int:
        return self.thread_param.thread_id

    @staticmethod
    def _from_generator(source: Iterator[int] | None, what: str) -> int:
        try:
            return int(next(source))  # type: ignore[arg-type]
        except StopIteration:
            raise ValueError(f"the {what} key generator is exhausted") from None

    def next_request(self) -> Request:
        """Draw the next operation and its key, and encode it."""
        operation = choose_operation(self._rng.random(), self.config)
        if operation is Operation.SEARCH:
            key = self._query.next()
            return Request(operation, key, encode_get(key))
        if operation is Operation.INSERT:
            if self._ycsb:
                key = self._from_generator(self._insert_iter, "insert")
            else:
                key = self._insert.next()
            return Request(operation, key, encode_put(key, key))
        if operation is Operation.UPDATE:
            key = self._update.next()
            return Request(operation, key, encode_update(key, key))
        if self._ycsb:
            key = self._from_generator(self._remove_iter, "remove")
        else:
            key = self._remove.next()
        return Request(operation, key, encode_remove(key))

    def run(self, send: Callable[[RPCId, bytes], Any], count: int) -> list[int | None]:
        """Send ``count`` requests through ``send(rpc_id, payload)``.

        ``send`` returns the reply bytes. The result of a search is the value
        found, or None; other operations give None. Throughput and latency in
        microseconds are added to the thread parameters; removes are not timed
        and count the previous operation's latency again.
        """
        results: list[int | None] = []
        for _ in range(count):
            request = self.next_request()
            start = time.perf_counter()
            reply = send(request.rpc_id, request.payload)
            elapsed_us = int((time.perf_counter() - start) * 1_000_000)
            result: int | None = None
            if request.operation is Operation.SEARCH:
                self._last_duration_us = elapsed_us
                decoded = ReplyValue.unpack(reply)
                result = decoded.val if decoded.status else None
            elif request.operation is not Operation.REMOVE:
                self._last_duration_us = elapsed_us
            results.append(result)
            self.thread_param.throughput += 1
            self.thread_param.latency += float(self._last_duration_us)
        return results