"""Server side of the cluster-hash key-value benchmark: RPC handlers over a cluster hash table."""

from __future__ import annotations

import logging
import struct
from typing import Callable, Iterable

from .clusterhash import CLUSTER_H, RdmaClusterHash
from .config import ReplyValue, RPCId
from .packed_data import PackedData

logger = logging.getLogger(__name__)

_U64 = struct.Struct("<Q")
_KEY = struct.Struct("<Q")
_KEY_VAL = struct.Struct("<QQ")
_VALUE_SIZE = 8


def _expect_size(args: bytes, size: int, what: str) -> None:
    if len(args) != size:
        raise ValueError(f"{what} arguments must be {size} bytes, got {len(args)}")


class ClusterHashServer:
    """Answers GET, PUT, UPDATE, DELETE and SCAN requests from a cluster hash table.

    Handlers take the encoded request arguments and return a ReplyValue;
    ``dispatch`` routes by RPC id and returns the packed reply.
    """

    def __init__(self, table: RdmaClusterHash, packed_data: PackedData) -> None:
        self.table = table
        self.packed_data = packed_data
        self._handlers: dict[RPCId, Callable[[bytes], ReplyValue]] = {
            RPCId.GET: self.handle_get,
            RPCId.PUT: self.handle_put,
            RPCId.UPDATE: self.handle_update,
            RPCId.DELETE: self.handle_remove,
            RPCId.SCAN: self.handle_scan,
        }

    @classmethod
    def from_keys(cls, keys: Iterable[int]) -> "ClusterHashServer":
        """Warm up a server with the given keys.

        Each key's record goes to the block storage and the table maps the key
        to the record's index. The table holds at least one full bucket.
        """
        keys = list(keys)
        packed_data = PackedData(int(1.2 * len(keys)))
        table = RdmaClusterHash(max(len(keys), CLUSTER_H), _VALUE_SIZE)
        for i, key in enumerate(keys):
            addr = packed_data.bulk_load_data(key, _VALUE_SIZE, i)
            table.insert(key, _U64.pack(addr))
            if i % 100000 == 0:
                logger.debug("cluster insert: %d", addr)
        logger.info("Cluster hash warmed up..")
        return cls(table, packed_data)

    def handle_get(self, args: bytes) -> ReplyValue:
        """Look a key up; a stored value of 0 or a missing key reports failure."""
        _expect_size(args, _KEY.size, "GET")
        (key,) = _KEY.unpack(args)
        stored = self.table.get(key)
        value = 0 if stored is None else int.from_bytes(stored[:_VALUE_SIZE], "little")
        return ReplyValue(status=bool(value), val=value)

    def handle_put(self, args: bytes) -> ReplyValue:
        """Insert a key with its value; the reply carries no result."""
        _expect_size(args, _KEY_VAL.size, "PUT")
        key, val = _KEY_VAL.unpack(args)
        self.table.insert(key, _U64.pack(val))
        return ReplyValue()

    def handle_update(self, args: bytes) -> ReplyValue:
        """Overwrite a key's value; always reports success with the new value."""
        _expect_size(args, _KEY_VAL.size, "UPDATE")
        key, val = _KEY_VAL.unpack(args)
        self.table.update(key, _U64.pack(val))
        return ReplyValue(status=True, val=val)

    def handle_remove(self, args: bytes) -> ReplyValue:
        """Removal is not supported by the table; reports success and changes nothing."""
        _expect_size(args, _KEY.size, "DELETE")
        return ReplyValue(status=True, val=0)

    def handle_scan(self, args: bytes) -> ReplyValue:
        """Range scans are not supported; the reply carries no result."""
        _expect_size(args, _KEY_VAL.size, "SCAN")
        return ReplyValue()

    def dispatch(self, rpc_id: RPCId | int, args: bytes) -> bytes:
        """Run the handler registered for ``rpc_id`` and return the packed reply."""
        try:
            handler = self._handlers[RPCId(rpc_id)]
        except ValueError:
            raise ValueError(f"unknown RPC id {rpc_id}") from None
        return handler(bytes(args)).pack()