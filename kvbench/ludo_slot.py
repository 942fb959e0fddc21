"""Bucketed slot table whose 64-bit cells pack a flag, fingerprint, length and address.

Cell layout, high bit to low: cache flag (1), fingerprint (7), length (16),
address (40).
"""

from __future__ import annotations

import hashlib
from enum import IntEnum
from typing import Callable

SLOTS_NUM_BUCKET = 4

_ADDR_MASK = (1 << 40) - 1
_U64_MAX = (1 << 64) - 1
_CACHE_BIT = 1 << 63
_DEFAULT_SEED = 0x93EA45


def combine(finger: int, length: int, addr: int) -> int:
    """Pack a cell with the cache flag set."""
    return (
        _CACHE_BIT
        | ((finger & 0x7F) << 56)
        | ((length & 0xFFFF) << 40)
        | (addr & _ADDR_MASK)
    )


def to_cachebit(num: int) -> int:
    return (num >> 63) & 0x01


def to_finger(num: int) -> int:
    return (num >> 56) & 0x7F


def to_length(num: int) -> int:
    return (num >> 40) & 0xFFFF


def to_addr(num: int) -> int:
    return num & _ADDR_MASK


class SlotState(IntEnum):
    """What check_slots found at a slot."""

    EMPTY = 0
    MAYBE_UPDATE = 1
    BUCKET_HAS_EMPTY = 2
    BUCKET_FULL = 3


def _seeded_hasher(seed: int) -> Callable[[int], int]:
    salt = seed.to_bytes(8, "little")

    def hasher(key: int) -> int:
        digest = hashlib.blake2b(
            (key & _U64_MAX).to_bytes(8, "little"), digest_size=8, salt=salt
        ).digest()
        return int.from_bytes(digest, "little")

    return hasher


class LudoBuckets:
    """Rows of four packed cells addressed by (row, slot)."""

    def __init__(
        self, num_elements: int, hasher: Callable[[int], int] | None = None
    ) -> None:
        if num_elements < 0:
            raise ValueError(f"number of buckets must not be negative, got {num_elements}")
        self._rows = [[0] * SLOTS_NUM_BUCKET for _ in range(num_elements)]
        self._hasher = hasher or _seeded_hasher(_DEFAULT_SEED)

    def __len__(self) -> int:
        return len(self._rows)

    def _bucket(self, row: int) -> list[int]:
        if not 0 <= row < len(self._rows):
            raise IndexError(f"row {row} out of range 0..{len(self._rows) - 1}")
        return self._rows[row]

    @staticmethod
    def _check_slot(slot: int) -> int:
        if not 0 <= slot < SLOTS_NUM_BUCKET:
            raise IndexError(f"slot {slot} out of range 0..{SLOTS_NUM_BUCKET - 1}")
        return slot

    def _cell(self, row: int, slot: int) -> int:
        return self._bucket(row)[self._check_slot(slot)]

    def fingerprint(self, key: int) -> int:
        return self._hasher(key) & 0x7F

    def check_slots(self, key: int, row: int, slot: int) -> SlotState:
        """Classify a slot for writing ``key``."""
        cell = self._cell(row, slot)
        if not to_length(cell):
            return SlotState.EMPTY
        if to_finger(cell) == self.fingerprint(key):
            return SlotState.MAYBE_UPDATE
        if any(not to_length(other) for other in self._bucket(row)):
            return SlotState.BUCKET_HAS_EMPTY
        return SlotState.BUCKET_FULL

    def read_addr(self, row: int, slot: int) -> int:
        return to_addr(self._cell(row, slot))

    def remove_addr(self, row: int, slot: int) -> None:
        self._bucket(row)[self._check_slot(slot)] = 0

    def read_cachebit(self, row: int, slot: int) -> bool:
        return bool(to_cachebit(self._cell(row, slot)))

    def set_cachebit(self, row: int, slot: int) -> None:
        self._bucket(row)[self._check_slot(slot)] |= _CACHE_BIT

    def read_bucket_addrs(self, row: int) -> list[int]:
        """The whole cells of a row whose length is non-zero, in slot order."""
        return [cell for cell in self._bucket(row) if to_length(cell)]

    def write_addr(
        self, key: int, row: int, slot: int, addr: int, length: int = 64
    ) -> None:
        self._bucket(row)[self._check_slot(slot)] = combine(
            self.fingerprint(key), length, addr
        )

    def empty_bucket(self, row: int) -> None:
        bucket = self._bucket(row)
        bucket[:] = [0] * SLOTS_NUM_BUCKET

    def write_cell(self, row: int, slot: int, val: int) -> None:
        if not 0 <= val <= _U64_MAX:
            raise ValueError(f"cell value {val} does not fit in 64 bits")
        self._bucket(row)[self._check_slot(slot)] = val