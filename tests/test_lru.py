import pytest

from pixiu.lru import LRUCache


@pytest.mark.parametrize("capacity", [0, -1])
def test_non_positive_capacity_rejected(capacity):
    with pytest.raises(ValueError):
        LRUCache(capacity)


def test_add_and_get():
    cache = LRUCache(2)
    cache.add("a", 1)
    assert cache.get("a") == 1
    assert len(cache) == 1


def test_missing_key_returns_none():
    cache = LRUCache(2)
    assert cache.get("missing") is None


def test_evicts_least_recently_added():
    cache = LRUCache(2)
    cache.add("a", 1)
    cache.add("b", 2)
    cache.add("c", 3)
    assert "a" not in cache
    assert "b" in cache and "c" in cache
    assert len(cache) == 2


def test_get_refreshes_entry():
    cache = LRUCache(2)
    cache.add("a", 1)
    cache.add("b", 2)
    cache.get("a")
    cache.add("c", 3)
    assert "a" in cache
    assert "b" not in cache


def test_contains_does_not_refresh():
    cache = LRUCache(2)
    cache.add("a", 1)
    cache.add("b", 2)
    assert "a" in cache
    cache.add("c", 3)
    assert "a" not in cache


def test_overwrite_updates_value_and_refreshes():
    cache = LRUCache(2)
    cache.add("a", 1)
    cache.add("b", 2)
    cache.add("a", 10)
    cache.add("c", 3)
    assert cache.get("a") == 10
    assert "b" not in cache
    assert len(cache) == 2


def test_length_never_exceeds_capacity():
    cache = LRUCache(3)
    for key in range(20):
        cache.add(key, key)
        assert len(cache) <= 3
    assert [key in cache for key in (17, 18, 19)] == [True, True, True]