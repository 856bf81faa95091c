"""Tests for the compiled-style LRU cache."""

import pytest
from hypothesis import given, strategies as st

from storefront.core.cache import LRUCache, Stats


def layer(color: str) -> dict[str, str]:
    return {"color": color, "padding": "8px"}


def test_stores_compiled_layers():
    cache = LRUCache[dict](max_size=3)

    cache.set("base:hero", layer("#111111"))
    cache.set("hover:hero", layer("#222222"))

    assert cache.get("base:hero") == layer("#111111")
    assert cache.get("hover:hero")["color"] == "#222222"
    assert len(cache) == 2


def test_evicts_least_recently_used():
    cache = LRUCache[dict](max_size=2)
    cache.set("base:a", layer("#aaaaaa"))
    cache.set("base:b", layer("#bbbbbb"))

    cache.get("base:a")
    cache.set("base:c", layer("#cccccc"))

    assert "base:a" in cache
    assert cache.get("base:b") is None
    assert cache.stats.evictions == 1


def test_overwrite_keeps_single_entry():
    cache = LRUCache[dict](max_size=4)

    cache.set("base:hero", layer("#000000"))
    cache.set("base:hero", layer("#ffffff"))

    assert cache.get("base:hero")["color"] == "#ffffff"
    assert len(cache) == 1


def test_contains_does_not_count_as_hit():
    cache = LRUCache[dict](max_size=4)
    cache.set("base:hero", layer("#000000"))

    assert "base:hero" in cache
    assert "base:missing" not in cache
    assert cache.stats.hits == 0

    cache.clear()
    assert len(cache) == 0
    assert cache.stats.size == 0


def test_stats():
    cache = LRUCache[dict](max_size=8)
    cache.set("base:hero", layer("#000000"))

    cache.get("base:hero")
    cache.get("base:other")

    assert cache.stats.hit_rate == 0.5
    assert cache.stats.to_dict() == {
        "size": 1,
        "max_size": 8,
        "hits": 1,
        "misses": 1,
        "evictions": 0,
        "hit_rate": 0.5,
    }
    assert Stats().hit_rate == 0.0


@pytest.mark.parametrize("size", [0, -1])
def test_rejects_non_positive_size(size):
    with pytest.raises(ValueError):
        LRUCache[dict](max_size=size)


@given(st.lists(st.text(min_size=1, max_size=12), max_size=60))
def test_size_bounded(keys):
    cache = LRUCache[int](max_size=5)
    for i, key in enumerate(keys):
        cache.set(key, i)

    assert len(cache) <= 5
    assert cache.stats.size == len(cache)
