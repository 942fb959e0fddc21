"""Benchmark configuration, workload names and shared wire types."""

from __future__ import annotations

import argparse
import struct
import sys
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Sequence

CACHELINE_SIZE = 1 << 6


class Workload(IntEnum):
    YCSB_A = 0
    YCSB_B = 1
    YCSB_C = 2
    YCSB_D = 3
    YCSB_E = 4
    YCSB_F = 5
    NORMAL = 6
    LOGNORMAL = 7
    BOOK = 8
    OSM = 9
    WIKI = 10
    FB = 11

    @property
    def is_ycsb(self) -> bool:
        return self < Workload.NORMAL


_WORKLOAD_NAMES = {
    "ycsba": Workload.YCSB_A,
    "ycsbb": Workload.YCSB_B,
    "ycsbc": Workload.YCSB_C,
    "ycsbd": Workload.YCSB_D,
    "ycsbe": Workload.YCSB_E,
    "ycsbf": Workload.YCSB_F,
    "normal": Workload.NORMAL,
    "lognormal": Workload.LOGNORMAL,
    "book": Workload.BOOK,
    "osm": Workload.OSM,
    "wiki": Workload.WIKI,
    "fb": Workload.FB,
}


def parse_workload(name: str) -> Workload:
    """Map a workload name such as ``ycsba`` to its Workload."""
    try:
        return _WORKLOAD_NAMES[name]
    except KeyError:
        raise ValueError(f"unsupported workload type: {name}") from None


class RPCId(IntEnum):
    """Identifiers of the RPCs a server registers, in registration order."""

    GET = 0
    PUT = 1
    UPDATE = 2
    DELETE = 3
    SCAN = 4


@dataclass
class ReplyValue:
    """Reply to a key-value RPC: whether it succeeded and the value returned."""

    status: bool = False
    val: int = 0

    _FORMAT = struct.Struct("<?Q")

    def pack(self) -> bytes:
        return self._FORMAT.pack(bool(self.status), self.val)

    @classmethod
    def unpack(cls, data: bytes) -> "ReplyValue":
        if len(data) != cls._FORMAT.size:
            raise ValueError(
                f"reply must be {cls._FORMAT.size} bytes, got {len(data)}"
            )
        status, val = cls._FORMAT.unpack(data)
        return cls(status, val)


@dataclass
class ThreadParam:
    """Per-thread counters a benchmark worker updates."""

    throughput: int = 0
    thread_id: int = 0
    latency: float = 0.0


@dataclass
class BenchmarkConfig:
    nkeys: int = 20000000
    non_nkeys: int = 1
    bench_nkeys: int = 1
    workloads: Workload = Workload.NORMAL
    zip_const: float = 0.99
    dists: str = "uniform"
    mem_threads: int = 1
    threads: int = 2
    coros: int = 2
    read_ratio: float = 1.0
    insert_ratio: float = 0.0
    update_ratio: float = 0.0
    server_addr: str = "localhost:8888"
    nic_idx: int = 2
    start_threads: int = 0
    seconds: int = 10
    statics: list = field(default_factory=list)


def _uint(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected an unsigned integer, got {text}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(allow_abbrev=False)
    add = parser.add_argument
    add("--nkeys", type=_uint, default=20000000, help="Number of keys to load")
    add("--non_nkeys", type=_uint, default=1, help="Number of non_keys for inserting")
    add("--bench_nkeys", type=_uint, default=1,
        help="Number of operations benchmarked for test")
    add("--workloads", default="normal", help="The workloads for evaluation")
    add("--dists", default="uniform",
        help="The request keys distribution only for ycsb")
    add("--zip_const", type=float, default=0.99,
        help="The default zipfian dist for skewness")
    add("--nic_idx", type=_uint, default=2,
        help="The index of the NIC used on this machine")
    add("--mem_threads", type=_uint, default=1, help="Server threads.")
    add("--threads", type=_uint, default=2, help="Client threads.")
    add("--coros", type=int, default=2, help="num client coroutine used per threads")
    add("--read_ratio", type=float, default=1.0, help="The ratio for reading")
    add("--insert_ratio", type=float, default=0.0, help="The ratio for writing")
    add("--update_ratio", type=float, default=0.0, help="The ratio for updating")
    add("--server_addr", default="localhost:8888", help="IP address of server")
    add("--start_threads", type=int, default=0,
        help="threads number used in this machine")
    add("--seconds", type=int, default=10, help="time seconds used to run benchmark")
    return parser


def load_benchmark_config(argv: Sequence[str] | None = None) -> BenchmarkConfig:
    """Parse command-line flags into a BenchmarkConfig."""
    if argv is None:
        argv = sys.argv[1:]
    ns = _build_parser().parse_args(list(argv))
    return BenchmarkConfig(
        nkeys=ns.nkeys,
        non_nkeys=ns.non_nkeys,
        bench_nkeys=ns.bench_nkeys,
        workloads=parse_workload(ns.workloads),
        zip_const=ns.zip_const,
        dists=ns.dists,
        mem_threads=ns.mem_threads,
        threads=ns.threads,
        coros=ns.coros,
        read_ratio=ns.read_ratio,
        insert_ratio=ns.insert_ratio,
        update_ratio=ns.update_ratio,
        server_addr=ns.server_addr,
        nic_idx=ns.nic_idx,
        start_threads=ns.start_threads,
        seconds=ns.seconds,
    )