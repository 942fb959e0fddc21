import threading

import pytest

from kvbench.barrier import PBarrier


def test_rejects_non_positive():
    with pytest.raises(ValueError):
        PBarrier(0)
    with pytest.raises(ValueError):
        PBarrier(-3)


def test_done_counts_down():
    bar = PBarrier(2)
    assert bar.wait_num() == 2
    bar.done()
    assert bar.wait_num() == 1
    assert not bar.ready()
    bar.done()
    assert bar.ready()


def test_wait_releases_all_threads():
    n = 3
    bar = PBarrier(n)
    passed = []
    lock = threading.Lock()

    def worker(i):
        bar.wait()
        with lock:
            passed.append(i)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert sorted(passed) == list(range(n))
    assert bar.ready()