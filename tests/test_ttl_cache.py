from __future__ import annotations

import threading

from weatherdesk.core.cache.ttl import TTLCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_get_returns_value_set_within_ttl() -> None:
    clock = FakeClock()
    cache = TTLCache(default_ttl_s=10, clock=clock)

    cache.set("weather:55.7558:37.6173", {"temp": -3})
    clock.advance(10)

    assert cache.get("weather:55.7558:37.6173") == {"temp": -3}


def test_get_after_ttl_returns_none_and_evicts() -> None:
    clock = FakeClock()
    cache = TTLCache(default_ttl_s=10, clock=clock)

    cache.set("k", "v", ttl_s=5)
    clock.advance(5.01)

    assert cache.get("k") is None
    assert cache.size == 0


def test_set_twice_resets_age() -> None:
    clock = FakeClock()
    cache = TTLCache(default_ttl_s=10, clock=clock)

    cache.set("k", "old")
    clock.advance(8)
    cache.set("k", "new")
    clock.advance(5)

    assert cache.get("k") == "new"


def test_delete_reports_whether_entry_existed() -> None:
    cache = TTLCache(default_ttl_s=10)
    cache.set("k", 1)

    assert cache.delete("k") is True
    assert cache.delete("k") is False


def test_clear_empties_store() -> None:
    cache = TTLCache(default_ttl_s=10)
    cache.set("a", 1)
    cache.set("b", 2)

    cache.clear()

    assert cache.size == 0
    assert cache.get("a") is None


def test_sweep_removes_only_expired_entries() -> None:
    clock = FakeClock()
    cache = TTLCache(default_ttl_s=60, clock=clock)
    cache.set("short", 1, ttl_s=5)
    cache.set("long", 2, ttl_s=120)
    clock.advance(30)

    removed = cache.sweep()

    assert removed == 1
    assert cache.size == 1
    assert cache.get("long") == 2


def test_get_or_set_computes_once_within_ttl() -> None:
    cache = TTLCache(default_ttl_s=10)
    counter = {"count": 0}

    def compute() -> bool:
        counter["count"] += 1
        return True

    first = cache.get_or_set("llm_ping:http://x", 10, compute)
    second = cache.get_or_set("llm_ping:http://x", 10, compute)

    assert first is True
    assert second is True
    assert counter["count"] == 1


def test_get_or_set_recomputes_after_expiry() -> None:
    clock = FakeClock()
    cache = TTLCache(default_ttl_s=10, clock=clock)
    values = iter([1, 2])

    assert cache.get_or_set("k", 10, lambda: next(values)) == 1
    clock.advance(11)
    assert cache.get_or_set("k", 10, lambda: next(values)) == 2


def test_get_or_set_does_not_block_other_keys_while_computing() -> None:
    cache = TTLCache(default_ttl_s=300)
    cache.set("weather:55.7558:37.6173", {"temp": -3})
    computing = threading.Event()
    release = threading.Event()

    def slow_ping() -> bool:
        computing.set()
        release.wait(timeout=5)
        return True

    pinger = threading.Thread(target=lambda: cache.get_or_set("llm_ping:http://llm.local", 10, slow_ping))
    pinger.start()
    assert computing.wait(timeout=5)

    seen: list[object] = []
    reader = threading.Thread(target=lambda: seen.append(cache.get("weather:55.7558:37.6173")))
    reader.start()
    reader.join(timeout=1)
    reader_finished = not reader.is_alive()

    release.set()
    pinger.join(timeout=5)
    reader.join(timeout=5)

    assert reader_finished
    assert seen == [{"temp": -3}]
    assert cache.get("llm_ping:http://llm.local") is True
