import random
import struct

import pytest

from kvbench.config import BenchmarkConfig, Workload
from kvbench.dataset import (
    Dataset,
    UnsupportedWorkload,
    load_data,
    lognormal_data,
    normal_data,
    read_file_data,
    read_file_data_with_no_duplicate,
    sequential_data,
)


def _write_keys(path, keys):
    with open(path, "wb") as out:
        out.write(struct.pack("<Q", len(keys)))
        for key in keys:
            out.write(struct.pack("<Q", key))


def test_sequential_data_layout():
    config = BenchmarkConfig(nkeys=5, non_nkeys=2, bench_nkeys=3)
    data = sequential_data(config)
    assert data.exist_keys == [0, 1, 2, 3, 4]
    assert data.nonexist_keys == [5, 6]
    assert data.bench_keys == [0, 1, 2]


def test_normal_data_sizes_and_invariants():
    config = BenchmarkConfig(nkeys=200, non_nkeys=50, bench_nkeys=30)
    data = normal_data(config, random.Random(7))
    assert len(data.exist_keys) == 200
    assert len(data.nonexist_keys) == 50
    assert len(data.bench_keys) == 30
    assert all(k >= 0 for k in data.exist_keys + data.nonexist_keys)
    assert set(data.bench_keys) <= set(data.exist_keys)


def test_normal_data_is_reproducible_with_seed():
    config = BenchmarkConfig(nkeys=20, non_nkeys=5, bench_nkeys=5)
    first = normal_data(config, random.Random(3))
    second = normal_data(config, random.Random(3))
    assert len(first.exist_keys) == 20
    assert len(first.nonexist_keys) == 5
    assert first.exist_keys == second.exist_keys
    assert first.nonexist_keys == second.nonexist_keys
    assert first.bench_keys == second.bench_keys
    other = normal_data(config, random.Random(4))
    assert other.exist_keys != first.exist_keys


def test_lognormal_skips_insert_keys_without_inserts():
    config = BenchmarkConfig(nkeys=50, non_nkeys=10, bench_nkeys=10, insert_ratio=0.0)
    data = lognormal_data(config, random.Random(1))
    assert data.nonexist_keys == []
    assert len(data.exist_keys) == 50
    assert all(k >= 0 for k in data.exist_keys)
    assert set(data.bench_keys) <= set(data.exist_keys)


def test_lognormal_draws_insert_keys_with_inserts():
    config = BenchmarkConfig(nkeys=50, non_nkeys=10, bench_nkeys=10, insert_ratio=0.5)
    data = lognormal_data(config, random.Random(1))
    assert len(data.nonexist_keys) == 10


def test_read_file_data_splits_file(tmp_path):
    path = tmp_path / "keys"
    keys = [10, 20, 30, 40, 50, 60]
    _write_keys(path, keys)
    config = BenchmarkConfig(nkeys=4, non_nkeys=2, bench_nkeys=8)
    data = read_file_data(path, config, random.Random(0))
    assert data.exist_keys == keys[:4]
    assert data.nonexist_keys == keys[4:]
    assert len(data.bench_keys) == 8
    assert set(data.bench_keys) <= set(keys[:4])


def test_read_file_data_stops_at_end_of_file(tmp_path):
    path = tmp_path / "keys"
    _write_keys(path, [1, 2, 3])
    config = BenchmarkConfig(nkeys=10, non_nkeys=5, bench_nkeys=1)
    data = read_file_data(path, config, random.Random(0))
    assert data.exist_keys == [1, 2, 3]
    assert data.nonexist_keys == []


def test_read_file_data_empty_file_cannot_sample(tmp_path):
    path = tmp_path / "keys"
    _write_keys(path, [])
    config = BenchmarkConfig(nkeys=10, non_nkeys=0, bench_nkeys=1)
    with pytest.raises(ValueError):
        read_file_data(path, config, random.Random(0))


def test_read_file_data_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_file_data(tmp_path / "absent", BenchmarkConfig(nkeys=1), random.Random(0))


def test_read_file_data_with_no_duplicate(tmp_path):
    path = tmp_path / "keys"
    exist_part = [5, 5, 7, 7, 9, 3]  # 3 * 4 // 2 = 6 keys
    insert_part = [100, 100, 200]  # 3 * 2 // 2 = 3 keys
    _write_keys(path, exist_part + insert_part)
    config = BenchmarkConfig(nkeys=4, non_nkeys=2, bench_nkeys=5)
    data = read_file_data_with_no_duplicate(path, config, random.Random(2))
    assert sorted(data.exist_keys) == sorted(set(exist_part))
    assert len(data.exist_keys) == len(set(data.exist_keys))
    assert sorted(data.nonexist_keys) == sorted(set(insert_part))
    assert set(data.bench_keys) <= set(exist_part)


def test_load_data_normal_is_sequential():
    config = BenchmarkConfig(nkeys=3, non_nkeys=1, bench_nkeys=2, workloads=Workload.NORMAL)
    data = load_data(config, random.Random(0))
    assert data == Dataset([0, 1, 2], [3], [0, 1])


def test_load_data_reads_book_file(tmp_path):
    _write_keys(tmp_path / "books_200M_uint64", [11, 22, 33])
    config = BenchmarkConfig(nkeys=2, non_nkeys=1, bench_nkeys=2, workloads=Workload.BOOK)
    data = load_data(config, random.Random(0), dataset_dir=tmp_path)
    assert data.exist_keys == [11, 22]
    assert data.nonexist_keys == [33]


def test_load_data_wiki_deduplicates(tmp_path):
    _write_keys(tmp_path / "wiki_ts_200M_uint64", [4, 4, 6])
    config = BenchmarkConfig(nkeys=2, non_nkeys=0, bench_nkeys=1, workloads=Workload.WIKI)
    data = load_data(config, random.Random(0), dataset_dir=tmp_path)
    assert sorted(data.exist_keys) == [4, 6]


def test_load_data_rejects_scan_workload():
    config = BenchmarkConfig(nkeys=2, workloads=Workload.YCSB_E)
    with pytest.raises(UnsupportedWorkload):
        load_data(config, random.Random(0))


def test_load_data_rejects_unknown_workload():
    config = BenchmarkConfig(nkeys=2)
    config.workloads = 99
    with pytest.raises(UnsupportedWorkload):
        load_data(config, random.Random(0))