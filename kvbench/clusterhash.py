"""Chained cluster hash table: header nodes of 16 slots pointing at data nodes."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

CLUSTER_H = 16

_U64_MASK = (1 << 64) - 1
_MURMUR_M = 0xC6A4A7935BD1E995
_MURMUR_R = 47
_DEFAULT_SEED = 0xDEADBEEF

# Sizes of the on-wire layout: next + CLUSTER_H keys + CLUSTER_H indexes,
# and a data node (key + valid flag, padded to 16 bytes) before its value.
_HEADER_SIZE = 8 + CLUSTER_H * 8 * 2
_DATA_NODE_SIZE = 16


def murmur_hash64a(key: int, seed: int) -> int:
    """MurmurHash64A of a single little-endian 64-bit key."""
    m = _MURMUR_M
    r = _MURMUR_R
    h = (seed ^ (8 * m)) & _U64_MASK

    k = (key & _U64_MASK) * m & _U64_MASK
    k ^= k >> r
    k = k * m & _U64_MASK
    h ^= k
    h = h * m & _U64_MASK

    h ^= h >> r
    h = h * m & _U64_MASK
    h ^= h >> r
    return h


class TableFull(RuntimeError):
    """No free data node or header node is left for an insert."""


@dataclass
class _HeaderNode:
    next: int = 0
    keys: list[int] = field(default_factory=lambda: [0] * CLUSTER_H)
    indexes: list[int] = field(default_factory=lambda: [0] * CLUSTER_H)


@dataclass
class _DataNode:
    key: int
    value: bytearray


class RdmaClusterHash:
    """A fixed-capacity hash table of ``length`` entries with chained header nodes.

    Header nodes occupy indices ``0 .. length/2 - 1``; the first ``length/16``
    of them are the hash buckets and the rest are overflow nodes. Data nodes
    occupy indices ``length/2 .. 3*length/2 - 1``; an index of 0 in a header
    marks an empty slot.
    """

    def __init__(self, length: int, entry_size: int = 64) -> None:
        length = int(length)
        if entry_size <= 0:
            raise ValueError(f"entry size must be positive, got {entry_size}")
        if length // CLUSTER_H == 0:
            raise ValueError(f"length must be at least {CLUSTER_H}, got {length}")
        self.entry_size = (((entry_size - 1) >> 3) + 1) << 3
        self.length = length
        self.logical_length = length // CLUSTER_H
        self.indirect_length = length // 2
        self.total_length = length + self.indirect_length
        self.free_indirect = self.logical_length
        self.free_data = self.indirect_length
        self.header_size = _HEADER_SIZE
        self.data_size = _DATA_NODE_SIZE + self.entry_size
        self.size = self.indirect_length * self.header_size + length * self.data_size

        self._headers: dict[int, _HeaderNode] = {}
        self._data: dict[int, _DataNode] = {}
        self._bucket_locks = [threading.Lock() for _ in range(self.logical_length)]
        self._alloc_lock = threading.Lock()

    def __len__(self) -> int:
        return self.free_data - self.indirect_length

    def _header(self, index: int) -> _HeaderNode:
        node = self._headers.get(index)
        if node is None:
            node = self._headers[index] = _HeaderNode()
        return node

    def _chain(self, bucket: int):
        node = self._header(bucket)
        while True:
            yield node
            if node.next == 0:
                return
            node = self._header(node.next)

    def _encode(self, val: bytes | int) -> bytearray:
        if isinstance(val, int):
            val = (val & _U64_MASK).to_bytes(8, "little")
        data = bytes(val)
        if len(data) > self.entry_size:
            raise ValueError(
                f"value of {len(data)} bytes exceeds entry size {self.entry_size}"
            )
        return bytearray(data.ljust(self.entry_size, b"\0"))

    def get_hash(self, key: int) -> int:
        """The bucket a key hashes to."""
        return murmur_hash64a(key, _DEFAULT_SEED) % self.logical_length

    def data_node_loc(self, index: int) -> int:
        """Byte offset of a data node in the table's layout."""
        return self.indirect_length * self.header_size + (
            index - self.indirect_length
        ) * self.data_size

    def insert(self, key: int, val: bytes | int) -> None:
        """Append a key and its value to the end of the key's chain."""
        value = self._encode(val)
        if self.free_data == self.total_length:
            raise TableFull(f"fail when inserting {key}")
        bucket = self.get_hash(key)
        with self._bucket_locks[bucket]:
            *_, node = self._chain(bucket)
            with self._alloc_lock:
                if self.free_data == self.total_length:
                    raise TableFull(f"fail when inserting {key}")
                slot = next(
                    (i for i, index in enumerate(node.indexes) if index == 0), None
                )
                if slot is None:
                    if self.free_indirect == self.indirect_length:
                        raise TableFull(
                            f"fail when allocating indirect node, key is {key}"
                        )
                    node.next = self.free_indirect
                    node = self._header(self.free_indirect)
                    self.free_indirect += 1
                    slot = 0
                data_index = self.free_data
                self.free_data += 1
            self._data[data_index] = _DataNode(key, value)
            node.keys[slot] = key
            node.indexes[slot] = data_index

    def _find(self, key: int) -> tuple[int, _DataNode] | None:
        for depth, node in enumerate(self._chain(self.get_hash(key)), start=1):
            for stored, index in zip(node.keys, node.indexes):
                if stored == key and index != 0:
                    return depth, self._data[index]
        return None

    def update(self, key: int, val: bytes | int) -> bool:
        """Overwrite the first 8 bytes of a key's value; reports whether it was found."""
        head = bytes(self._encode(val)[:8])
        with self._bucket_locks[self.get_hash(key)]:
            found = self._find(key)
            if found is None:
                return False
            found[1].value[:8] = head
            return True

    def get(self, key: int) -> bytes | None:
        """The stored value of a key, or None if it is absent."""
        found = self._find(key)
        return None if found is None else bytes(found[1].value)

    def read(self, key: int) -> int:
        """How many header nodes a lookup of a present key visits."""
        found = self._find(key)
        if found is None:
            raise KeyError(key)
        return found[0]

    def delete(self, key: int) -> None:
        """Deletion is unsupported: any entry for the key is left in place.

        The key's bucket is locked and searched so the call is ordered with
        concurrent writers; None is always returned.
        """
        with self._bucket_locks[self.get_hash(key)]:
            self._find(key)
        return None