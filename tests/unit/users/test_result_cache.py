import threading

from app.services.users.result_cache import ResultCache


class TickClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_get_miss_then_hit():
    cache = ResultCache()

    assert cache.get("k") is None
    cache.set("k", "v")

    assert cache.get("k") == "v"
    assert (cache.hits, cache.misses) == (1, 1)


def test_entries_expire_after_ttl():
    clock = TickClock()
    cache = ResultCache(ttl_seconds=10, clock=clock)
    cache.set("k", "v")

    clock.now = 9.9
    assert cache.get("k") == "v"

    clock.now = 10.0
    assert cache.get("k") is None
    assert len(cache) == 0


def test_invalidate_all_clears_and_bumps_generation():
    cache = ResultCache()
    cache.set("a", 1)
    cache.set("b", 2)
    generation = cache.generation

    dropped = cache.invalidate_all()

    assert dropped == 2
    assert len(cache) == 0
    assert cache.generation == generation + 1


def test_stale_generation_write_is_dropped():
    cache = ResultCache()
    generation = cache.generation
    cache.invalidate_all()

    stored = cache.set("k", "stale", generation=generation)

    assert stored is False
    assert cache.get("k") is None


def test_get_or_compute_does_not_cache_result_computed_across_invalidation():
    cache = ResultCache()

    def compute():
        # A mutation lands while the query is being computed
        cache.invalidate_all()
        return "pre-mutation"

    assert cache.get_or_compute("k", compute) == "pre-mutation"
    assert cache.get("k") is None


def test_get_or_compute_only_computes_on_miss():
    cache = ResultCache()
    calls = []

    def compute():
        calls.append(1)
        return ["value"]

    first = cache.get_or_compute("k", compute)
    second = cache.get_or_compute("k", compute)

    assert first == second == ["value"]
    assert len(calls) == 1


def test_delete():
    cache = ResultCache()
    cache.set("k", "v")

    assert cache.delete("k") is True
    assert cache.delete("k") is False


def test_set_evicts_expired_entries_that_are_never_read_again():
    clock = TickClock()
    cache = ResultCache(ttl_seconds=300, clock=clock)

    for i in range(1000):
        cache.set(("filter", f"term-{i}"), i)
        clock.now += 10

    # Only entries written within the last 300 seconds survive
    assert len(cache) <= 31
    assert cache.get(("filter", "term-999")) == 999


def test_hit_and_miss_counts_are_exact_under_concurrent_reads():
    cache = ResultCache()
    cache.set("hot", "v")
    threads_count, reads_per_thread = 8, 2000
    start = threading.Barrier(threads_count)

    def reader(n):
        start.wait()
        for i in range(reads_per_thread):
            cache.get("hot" if i % 2 else f"cold-{n}")

    threads = [threading.Thread(target=reader, args=(n,)) for n in range(threads_count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    total = threads_count * reads_per_thread
    assert cache.hits + cache.misses == total
    assert cache.hits == total // 2
