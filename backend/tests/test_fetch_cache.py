from __future__ import annotations

import pytest

from backend.app.client.cache import FetchCache


class CountingFetcher:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def __call__(self, endpoint: str) -> dict:
        self.calls.append(endpoint)
        return {"endpoint": endpoint, "call": len(self.calls)}


@pytest.fixture
def fetcher() -> CountingFetcher:
    return CountingFetcher()


def test_second_call_within_ttl_is_served_from_cache(clock, fetcher):
    cache = FetchCache(fetcher, clock=clock)

    first = cache.fetch("/x", ttl=1.0)
    clock.advance(0.5)
    second = cache.fetch("/x", ttl=1.0)

    assert first is second
    assert fetcher.calls == ["/x"]


def test_call_after_ttl_elapses_fetches_again(clock, fetcher):
    cache = FetchCache(fetcher, clock=clock)

    cache.fetch("/x", ttl=1.0)
    cache.fetch("/x", ttl=1.0)
    clock.advance(1.0)
    third = cache.fetch("/x", ttl=1.0)

    assert fetcher.calls == ["/x", "/x"]
    assert third["call"] == 2


def test_default_ttl_is_thirty_seconds(clock, fetcher):
    cache = FetchCache(fetcher, clock=clock)

    cache.fetch("/dashboard/stats")
    clock.advance(29.9)
    cache.fetch("/dashboard/stats")
    clock.advance(0.1)
    cache.fetch("/dashboard/stats")

    assert len(fetcher.calls) == 2


def test_different_ttls_share_one_timestamp(clock, fetcher):
    cache = FetchCache(fetcher, clock=clock)

    cache.fetch("/dashboard/stats", ttl=30.0)
    clock.advance(6.0)
    cache.fetch("/dashboard/stats", ttl=30.0)
    cache.fetch("/dashboard/stats", ttl=5.0)

    assert len(fetcher.calls) == 2


def test_errors_are_not_cached(clock):
    attempts = []

    def flaky(endpoint: str) -> str:
        attempts.append(endpoint)
        if len(attempts) == 1:
            raise RuntimeError("boom")
        return "ok"

    cache = FetchCache(flaky, clock=clock)

    with pytest.raises(RuntimeError):
        cache.fetch("/x")
    assert "/x" not in cache
    assert cache.fetch("/x") == "ok"
    assert len(attempts) == 2


def test_clear_and_invalidate(clock, fetcher):
    cache = FetchCache(fetcher, clock=clock)
    cache.fetch("/a")
    cache.fetch("/b")

    cache.invalidate("/a")
    assert "/a" not in cache and "/b" in cache

    cache.clear()
    assert len(cache) == 0
    cache.fetch("/b")
    assert fetcher.calls == ["/a", "/b", "/b"]


def test_least_recently_used_entry_is_evicted(clock, fetcher):
    cache = FetchCache(fetcher, max_entries=2, clock=clock)
    cache.fetch("/a")
    cache.fetch("/b")
    cache.fetch("/a")

    cache.fetch("/c")

    assert "/b" not in cache
    assert "/a" in cache and "/c" in cache
    assert len(cache) == 2


def test_max_entries_must_be_positive(fetcher):
    with pytest.raises(ValueError):
        FetchCache(fetcher, max_entries=0)
