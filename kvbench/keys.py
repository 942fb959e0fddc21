"""The default benchmark key type: an unsigned 64-bit integer with model features."""

from __future__ import annotations

import struct
from dataclasses import dataclass

U64_MAX = (1 << 64) - 1

_FLOAT32 = struct.Struct("<f")


def _check_u64(value: int) -> int:
    value = int(value)
    if not 0 <= value <= U64_MAX:
        raise ValueError(f"key {value} does not fit in an unsigned 64-bit integer")
    return value


@dataclass(order=True)
class XKey:
    """A u64 key that maps to a one-element feature vector."""

    d: int = 0

    def __post_init__(self) -> None:
        self.d = _check_u64(self.d)

    def from_u64(self, k: int) -> None:
        """Replace the key value in place."""
        self.d = _check_u64(k)

    def to_u64(self) -> int:
        return self.d

    def to_scalar(self) -> int:
        return self.d

    def to_feature(self) -> list[float]:
        """Feature vector in double precision."""
        return [float(self.d)]

    def to_feature_float(self) -> list[float]:
        """Feature vector rounded to single precision."""
        (value,) = _FLOAT32.unpack(_FLOAT32.pack(float(self.d)))
        return [value]

    def feature_sz(self) -> int:
        return len(self.to_feature())

    @classmethod
    def min(cls) -> "XKey":
        return cls(0)

    @classmethod
    def max(cls) -> "XKey":
        return cls(U64_MAX)

    def __int__(self) -> int:
        return self.d

    def __str__(self) -> str:
        return f"[{self.d}]"