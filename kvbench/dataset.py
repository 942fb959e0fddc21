"""Key sets for the benchmarks: keys loaded up front, keys to insert and keys to query."""

from __future__ import annotations

import logging
import random
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable

from .config import BenchmarkConfig, Workload

logger = logging.getLogger(__name__)

_U64 = struct.Struct("<Q")
_SCALE = 1_000_000_000_000

_SOSD_FILES = {
    Workload.BOOK: ("books_200M_uint64", False),
    Workload.OSM: ("osm_cellids_200M_uint64", False),
    Workload.FB: ("fb_200M_uint64", False),
    Workload.WIKI: ("wiki_ts_200M_uint64", True),
}


class UnsupportedWorkload(ValueError):
    """The requested workload cannot be loaded."""


@dataclass
class Dataset:
    """Keys inserted to warm up, keys left for inserts, and keys to query."""

    exist_keys: list[int] = field(default_factory=list)
    nonexist_keys: list[int] = field(default_factory=list)
    bench_keys: list[int] = field(default_factory=list)


def _sample_bench(exist: list[int], count: int, rng: random.Random) -> list[int]:
    if count and not exist:
        raise ValueError("no existing keys to draw benchmark keys from")
    return [exist[rng.randrange(len(exist))] for _ in range(count)]


def _draw_non_negative(draw: Callable[[], float], count: int) -> list[int]:
    keys: list[int] = []
    while len(keys) < count:
        value = draw() * _SCALE
        if value < 0:
            continue
        keys.append(int(value))
    return keys


def sequential_data(config: BenchmarkConfig) -> Dataset:
    """Dense keys: 0..nkeys-1 exist, the next non_nkeys are for inserts."""
    return Dataset(
        exist_keys=list(range(config.nkeys)),
        nonexist_keys=list(range(config.nkeys, config.nkeys + config.non_nkeys)),
        bench_keys=list(range(config.bench_nkeys)),
    )


def normal_data(config: BenchmarkConfig, rng: random.Random | None = None) -> Dataset:
    """Keys drawn from N(4, 2) scaled by 10^12; negative draws are redrawn."""
    rng = rng or random.Random()
    draw = lambda: rng.gauss(4, 2)  # noqa: E731
    exist = _draw_non_negative(draw, config.nkeys)
    nonexist = _draw_non_negative(draw, config.non_nkeys)
    return Dataset(exist, nonexist, _sample_bench(exist, config.bench_nkeys, rng))


def lognormal_data(config: BenchmarkConfig, rng: random.Random | None = None) -> Dataset:
    """Keys drawn from lognormal(0, 2) scaled by 10^12.

    Insert keys are drawn only when the configuration has inserts.
    """
    rng = rng or random.Random()
    draw = lambda: rng.lognormvariate(0, 2)  # noqa: E731
    exist = _draw_non_negative(draw, config.nkeys)
    nonexist = (
        _draw_non_negative(draw, config.non_nkeys) if config.insert_ratio > 0 else []
    )
    return Dataset(exist, nonexist, _sample_bench(exist, config.bench_nkeys, rng))


def _read_u64s(stream: BinaryIO, count: int) -> list[int]:
    data = stream.read(_U64.size * count)
    usable = len(data) - len(data) % _U64.size
    return [value for (value,) in _U64.iter_unpack(data[:usable])]


def read_file_data(
    path: str | Path, config: BenchmarkConfig, rng: random.Random | None = None
) -> Dataset:
    """Read a file of little-endian u64 keys preceded by an 8-byte count.

    The first nkeys keys exist, the following non_nkeys are for inserts.
    """
    rng = rng or random.Random()
    with open(path, "rb") as stream:
        stream.seek(_U64.size)
        exist = _read_u64s(stream, config.nkeys)
        logger.info("Load exist_keys size: %d", len(exist))
        nonexist = _read_u64s(stream, config.non_nkeys)
        logger.info("Load non_exist_keys size: %d", len(nonexist))
    bench = _sample_bench(exist, config.bench_nkeys, rng)
    logger.info("Load bench_keys size (uniform): %d", len(bench))
    return Dataset(exist, nonexist, bench)


def read_file_data_with_no_duplicate(
    path: str | Path, config: BenchmarkConfig, rng: random.Random | None = None
) -> Dataset:
    """Like read_file_data, but reads half as many keys again, drops duplicates
    and shuffles what is left."""
    rng = rng or random.Random()
    with open(path, "rb") as stream:
        stream.seek(_U64.size)
        exist = sorted(set(_read_u64s(stream, 3 * config.nkeys // 2)))
        rng.shuffle(exist)
        logger.info("Load exist_keys size: %d", len(exist))
        nonexist = sorted(set(_read_u64s(stream, 3 * config.non_nkeys // 2)))
        rng.shuffle(nonexist)
        logger.info("Load non_exist_keys size: %d", len(nonexist))
    bench = _sample_bench(exist, config.bench_nkeys, rng)
    logger.info("Load bench_keys size (uniform): %d", len(bench))
    return Dataset(exist, nonexist, bench)


def load_data(
    config: BenchmarkConfig,
    rng: random.Random | None = None,
    dataset_dir: str | Path = "datasets",
) -> Dataset:
    """Load the key sets for the configured workload."""
    rng = rng or random.Random()
    try:
        workload = Workload(config.workloads)
    except ValueError:
        raise UnsupportedWorkload(f"WRONG benchmark {config.workloads}") from None

    if workload is Workload.NORMAL:
        data = sequential_data(config)
    elif workload is Workload.LOGNORMAL:
        data = lognormal_data(config, rng)
    elif workload in _SOSD_FILES:
        name, dedupe = _SOSD_FILES[workload]
        reader = read_file_data_with_no_duplicate if dedupe else read_file_data
        data = reader(Path(dataset_dir) / name, config, rng)
    elif workload is Workload.YCSB_E:
        raise UnsupportedWorkload("YCSB E (Scans) not supported in Outback")
    else:
        raise UnsupportedWorkload(
            f"{workload.name} needs a YCSB key generator, which is not available"
        )
    logger.info("==== LOAD %s =====", workload.name.lower())
    logger.info("Exist keys: %d", len(data.exist_keys))
    logger.info("nonExist keys: %d", len(data.nonexist_keys))
    return data