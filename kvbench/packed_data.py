"""Fixed-size block storage of (key, length, value) records."""

from __future__ import annotations

import logging
import struct
import threading
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)

_ADDR_MASK = (1 << 40) - 1


class StorageFull(RuntimeError):
    """Every record in the block storage is in use."""


@dataclass
class PackedStruct:
    """One record: key, data length and an 8-byte value."""

    key: int = 0
    data_length: int = 0
    data: int = 0

    _FORMAT = struct.Struct("<QIQ")

    def pack(self) -> bytes:
        return self._FORMAT.pack(self.key, self.data_length, self.data)

    @classmethod
    def unpack(cls, data: bytes) -> "PackedStruct":
        if len(data) != cls._FORMAT.size:
            raise ValueError(
                f"record must be {cls._FORMAT.size} bytes, got {len(data)}"
            )
        return cls(*cls._FORMAT.unpack(data))

    @classmethod
    def size(cls) -> int:
        return cls._FORMAT.size


class PackedData:
    """An array of records filled front to back by bulk loads."""

    def __init__(self, num_elements: int) -> None:
        num_elements = int(num_elements)
        if num_elements < 0:
            raise ValueError(f"capacity must not be negative, got {num_elements}")
        self._records = [PackedStruct() for _ in range(num_elements)]
        self._num = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return len(self._records)

    @property
    def loaded(self) -> int:
        """How many records bulk loads have filled."""
        return self._num

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, num: int) -> PackedStruct:
        return self._record(num)

    def _record(self, num: int) -> PackedStruct:
        if not 0 <= num < len(self._records):
            raise IndexError(f"record {num} out of range 0..{len(self._records) - 1}")
        return self._records[num]

    def read_key(self, num: int) -> int:
        return self._record(num).key

    def read_data(self, num: int) -> tuple[int, int]:
        """The value and data length of a record."""
        record = self._record(num)
        return record.data, record.data_length

    def read_data_with_key_check(self, num: int, key: int) -> tuple[int, int]:
        """The value and data length; the length is 0 if the key differs."""
        record = self._record(num)
        if record.key != key:
            return record.data, 0
        return record.data, record.data_length

    def remove_data_with_key_check(self, num: int, key: int) -> bool:
        """Clear a record if it holds ``key``; reports whether it did."""
        record = self._record(num)
        if record.key != key:
            return False
        self._records[num] = PackedStruct()
        return True

    def bulk_load_data(self, key: int, data_length: int, data: int) -> int:
        """Store a record in the next free place and return its index."""
        with self._lock:
            if self._num >= len(self._records):
                logger.info(
                    "It s time to end the benchmark, running out the space in block storage."
                )
                raise StorageFull(f"all {len(self._records)} records are in use")
            index = self._num
            self._records[index] = PackedStruct(key, data_length, data)
            self._num += 1
            return index

    def read_batch_keys(self, addrs: Iterable[int]) -> list[int]:
        """Keys of the records named by the low 40 bits of each address."""
        return [self._record(addr & _ADDR_MASK).key for addr in addrs]

    def update_data(self, num: int, key: int, data_length: int, data: int) -> int:
        self._records[self._index(num)] = PackedStruct(key, data_length, data)
        return data_length

    def remove_data(self, num: int) -> None:
        """Mark a record empty by zeroing its length."""
        self._record(num).data_length = 0

    def remote_addr(self, num: int) -> int:
        """Byte offset of a record in the packed layout."""
        return num * PackedStruct.size()

    def _index(self, num: int) -> int:
        self._record(num)
        return num