from app.utils.cache import LayoutCache


def test_get_loads_once_then_hits():
    cache = LayoutCache()
    calls = []

    def loader():
        calls.append(1)
        return 42

    key = LayoutCache.key_for(1, 3)
    assert cache.get(key, loader) == 42
    assert cache.get(key, loader) == 42
    assert len(calls) == 1
    stats = cache.get_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 50.0


def test_key_includes_instance_count():
    cache = LayoutCache()
    cache.set(LayoutCache.key_for(1, 2), "two")
    assert cache.get(LayoutCache.key_for(1, 3)) is None


def test_invalidate_drops_only_that_row():
    cache = LayoutCache()
    cache.set((1, 0), "a")
    cache.set((1, 1), "b")
    cache.set((2, 0), "c")

    cache.invalidate(1)

    assert cache.get((1, 0)) is None
    assert cache.get((1, 1)) is None
    assert cache.get((2, 0)) == "c"


def test_invalidate_all_clears_everything():
    cache = LayoutCache()
    cache.set((1, 0), "a")
    cache.set((2, 0), "b")
    cache.invalidate_all()
    assert len(cache) == 0
    assert cache.get_stats()["invalidations"] == 1


def test_lru_eviction():
    cache = LayoutCache(maxsize=2)
    cache.set((1, 0), "a")
    cache.set((2, 0), "b")
    cache.get((1, 0))  # touch so row 2 is the oldest
    cache.set((3, 0), "c")

    assert cache.get((2, 0)) is None
    assert cache.get((1, 0)) == "a"
    assert cache.get_stats()["evictions"] == 1


def test_disabled_cache_always_calls_loader():
    cache = LayoutCache(enabled=False)
    values = iter([1, 2])
    assert cache.get((1, 0), lambda: next(values)) == 1
    assert cache.get((1, 0), lambda: next(values)) == 2
    assert len(cache) == 0
    assert cache.get_stats()["enabled"] is False


def test_instances_do_not_share_state():
    first, second = LayoutCache(), LayoutCache()
    first.set((1, 0), "a")
    assert second.get((1, 0)) is None
