# kvbench

Building blocks for benchmarking key-value stores with 64-bit keys and
values: benchmark configuration, key-set generation, throughput
reporting, and the index structures, request encodings and request
handlers that a benchmark client and server use.

The package depends only on the standard library.

## Modules

| Module | Contents |
| --- | --- |
| `kvbench.keys` | `XKey`, a 64-bit key with one-element feature vectors (`to_feature`, `to_feature_float`) |
| `kvbench.config` | `BenchmarkConfig`, the `Workload` and `RPCId` enums, `ReplyValue`, `ThreadParam`, `parse_workload`, `load_benchmark_config` |
| `kvbench.statics` | per-thread `Statics` counters, `format_value` and `report_thpt` |
| `kvbench.barrier` | `PBarrier`, a thread barrier that also counts the parties still to arrive |
| `kvbench.platform` | core and NIC choice for a two-socket machine with 24 cores per socket (`cpu_id`, `bind`, `choose_nic`) |
| `kvbench.dataset` | `Dataset` and the key-set loaders, `load_data`, `UnsupportedWorkload` |
| `kvbench.packed_data` | `PackedData`, a fixed-capacity array of key/length/value records, and `PackedStruct` |
| `kvbench.ludo_slot` | `LudoBuckets` and the cell bit-packing helpers |
| `kvbench.clusterhash` | `RdmaClusterHash`, a chained hash table with 16-entry header nodes, and `murmur_hash64a` |
| `kvbench.lru_cache` | `Cache`, an LRU cache with a soft size limit and an elastic margin |
| `kvbench.drtmr_client` | request encoders, `choose_operation` and `ClientWorker` |
| `kvbench.drtmr_server` | `ClusterHashServer`, the GET/PUT/UPDATE/DELETE/SCAN handlers over a cluster hash table |

## Configuration

`load_benchmark_config` parses an argument list such as
`["--workloads", "lognormal", "--nkeys", "1000"]` into a
`BenchmarkConfig`; with no argument it reads `sys.argv`. The options are
`--nkeys`, `--non_nkeys`, `--bench_nkeys`, `--workloads`, `--dists`,
`--zip_const`, `--nic_idx`, `--mem_threads`, `--threads`, `--coros`,
`--read_ratio`, `--insert_ratio`, `--update_ratio`, `--server_addr`,
`--start_threads` and `--seconds`.

Workload names are `ycsba` to `ycsbf`, `normal`, `lognormal`, `book`,
`osm`, `wiki` and `fb`; `parse_workload` raises `ValueError` for any
other name.

```python
from kvbench.config import Workload, parse_workload

assert parse_workload("ycsbc") is Workload.YCSB_C
```

## Key sets

`load_data(config, rng, dataset_dir)` returns a `Dataset` with three
lists: `exist_keys` (loaded before the run), `nonexist_keys` (kept back
for inserts) and `bench_keys` (queried during the run).

- `normal` gives dense keys: `0..nkeys-1` exist, the next `non_nkeys`
  are for inserts, and `0..bench_nkeys-1` are queried
  (`sequential_data`). `normal_data` draws keys from a normal
  distribution instead and can be called directly.
- `lognormal` draws keys from lognormal(0, 2) scaled by 10^12; insert
  keys are drawn only when `insert_ratio` is above 0.
- `book`, `osm` and `fb` read `books_200M_uint64`,
  `osm_cellids_200M_uint64` and `fb_200M_uint64` from `dataset_dir`
  with `read_file_data`; `wiki` reads `wiki_ts_200M_uint64` with
  `read_file_data_with_no_duplicate`, which reads half as many keys
  again, drops duplicates and shuffles. The files hold little-endian
  64-bit keys after an 8-byte count, which is skipped.

Benchmark keys for the random and file workloads are drawn uniformly
from the existing keys.

## Index structures

```python
from kvbench.ludo_slot import combine, to_addr, to_finger, to_length

cell = combine(0x15, 64, 1234)
assert (to_finger(cell), to_length(cell), to_addr(cell)) == (0x15, 64, 1234)
```

`RdmaClusterHash(length, entry_size)` hashes keys into `length / 16`
buckets and chains to overflow header nodes when a bucket's sixteen
entries are used; it raises `TableFull` when data or overflow nodes run
out. `update` overwrites the first eight bytes of a value, `get`
returns the value or `None`, `read` returns how many header nodes a
lookup visits, and `delete` leaves entries in place.

`Cache(max_size, elasticity, lock)` may grow to `max_size + elasticity`
entries and then evicts the least recently used back down to
`max_size`; `get` raises `KeyNotFound` for a missing key, `try_get`
returns `None`.

## Client and server logic

`ClusterHashServer.from_keys` loads keys into block storage and a
cluster hash table that maps each key to its record index.
`dispatch(rpc_id, args)` runs a handler and returns the packed
`ReplyValue`. `ClientWorker.run(send, count)` draws operations from the
configured ratios, calls `send(rpc_id, payload)` for each, and adds
throughput and latency to its `ThreadParam`.

```python
from kvbench.config import BenchmarkConfig, ReplyValue, RPCId, Workload
from kvbench.dataset import sequential_data
from kvbench.drtmr_client import ClientWorker, encode_get
from kvbench.drtmr_server import ClusterHashServer

config = BenchmarkConfig(workloads=Workload.NORMAL, nkeys=100, bench_nkeys=10)
dataset = sequential_data(config)
server = ClusterHashServer.from_keys(dataset.exist_keys)

reply = ReplyValue.unpack(server.dispatch(RPCId.GET, encode_get(5)))
assert reply.status and reply.val == 5

worker = ClientWorker(config, dataset)
worker.run(server.dispatch, 20)
assert worker.thread_param.throughput == 20
```

## What the package does not do

- There is no network transport and no server process: requests go
  through whatever `send` callable is given to `ClientWorker.run`.
- There is no YCSB key generator. `load_data` raises
  `UnsupportedWorkload` for every YCSB workload (and for YCSB E, which
  uses scans), and `ClientWorker` needs insert and remove key iterators
  supplied for YCSB workloads.
- The cluster hash table does not support removal or range scans; the
  DELETE and SCAN handlers reply without changing anything.
- There is no command-line program.

## Running the tests

Install the `test` extra and run `pytest` from the project root.