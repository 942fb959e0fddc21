import threading

import pytest

from kvbench.lru_cache import Cache, KeyNotFound


def test_default_limits():
    cache = Cache()
    assert cache.max_size == 1024
    assert cache.elasticity == 10
    assert cache.max_allowed_size() == 1034


def test_insert_and_get():
    cache = Cache(4, 1)
    cache.insert("a", 1)
    assert cache.get("a") == 1
    assert cache.try_get("a") == 1
    assert "a" in cache
    assert len(cache) == 1


def test_missing_key():
    cache = Cache(4, 1)
    assert cache.try_get("x") is None
    with pytest.raises(KeyNotFound):
        cache.get("x")
    with pytest.raises(KeyError):
        cache.get("x")


def test_insert_overwrites():
    cache = Cache(4, 1)
    cache.insert("a", 1)
    cache.insert("a", 2)
    assert cache.get("a") == 2
    assert len(cache) == 1


def test_prune_at_hard_limit_evicts_oldest():
    cache = Cache(2, 1)
    cache.insert("a", 1)
    cache.insert("b", 2)
    assert len(cache) == 2
    cache.insert("c", 3)
    assert len(cache) == 2
    assert "a" not in cache
    assert cache.get("b") == 2 and cache.get("c") == 3


def test_access_refreshes_recency():
    cache = Cache(2, 1)
    cache.insert("a", 1)
    cache.insert("b", 2)
    cache.get("a")
    cache.insert("c", 3)
    assert "a" in cache
    assert "b" not in cache


def test_unbounded_when_max_size_zero():
    cache = Cache(0, 0)
    for i in range(100):
        cache.insert(i, i)
    assert len(cache) == 100


def test_remove_and_clear():
    cache = Cache(4, 1)
    cache.insert(1, "x")
    cache.insert(2, "y")
    assert cache.remove(1) is True
    assert cache.remove(1) is False
    cache.clear()
    assert len(cache) == 0


def test_walk_most_recent_first():
    cache = Cache(4, 1)
    for key in ("a", "b", "c"):
        cache.insert(key, key.upper())
    cache.get("a")
    seen = []
    cache.walk(lambda k, v: seen.append((k, v)))
    assert seen == [("a", "A"), ("c", "C"), ("b", "B")]


def test_with_lock_from_threads():
    cache = Cache(0, 0, lock=threading.Lock())

    def fill(base):
        for i in range(200):
            cache.insert(base + i, i)

    threads = [threading.Thread(target=fill, args=(n * 1000,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(cache) == 800


def test_negative_limits_rejected():
    with pytest.raises(ValueError):
        Cache(-1, 0)