"""Tests for the TTL response cache."""

from __future__ import annotations

from gbif_explorer.cache import (
    DEFAULT_TTL,
    OCCURRENCE_TTL,
    SPECIES_TTL,
    ResponseCache,
    canonical_key,
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestCanonicalKey:
    def test_param_order_does_not_matter(self) -> None:
        assert canonical_key("occ", {"a": 1, "b": 2}) == canonical_key("occ", {"b": 2, "a": 1})

    def test_prefix_separates_namespaces(self) -> None:
        assert canonical_key("occ", {"q": "x"}) != canonical_key("suggest", {"q": "x"})

    def test_values_distinguish_keys(self) -> None:
        assert canonical_key("occ", {"offset": 0}) != canonical_key("occ", {"offset": 300})

    def test_repeated_values_as_list(self) -> None:
        assert canonical_key("occ", {"taxonKey": [1, 2]}) != canonical_key("occ", {"taxonKey": 1})

    def test_exposed_on_cache(self) -> None:
        assert ResponseCache.canonical_key("p", {"x": 1}) == canonical_key("p", {"x": 1})


class TestTtl:
    def test_ttl_constants(self) -> None:
        assert OCCURRENCE_TTL == 15 * 60
        assert SPECIES_TTL == 2 * 60
        assert DEFAULT_TTL == 5 * 60

    def test_value_available_before_expiry(self) -> None:
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        cache.set("k", {"v": 1}, ttl=60)
        clock.advance(59.999)
        assert cache.get("k") == {"v": 1}

    def test_value_gone_after_expiry(self) -> None:
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        cache.set("k", {"v": 1}, ttl=60)
        clock.advance(60.001)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_default_ttl(self) -> None:
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        cache.set("k", 1)
        clock.advance(DEFAULT_TTL - 1)
        assert cache.get("k") == 1
        clock.advance(2)
        assert cache.get("k") is None

    def test_set_replaces_and_resets_ttl(self) -> None:
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        cache.set("k", 1, ttl=10)
        clock.advance(8)
        cache.set("k", 2, ttl=10)
        clock.advance(8)
        assert cache.get("k") == 2


class TestResponseCache:
    def test_missing_key(self) -> None:
        assert ResponseCache().get("nope") is None

    def test_clear(self) -> None:
        cache = ResponseCache()
        cache.set("a", 1)
        cache.set("b", 2)
        assert len(cache) == 2
        cache.clear()
        assert len(cache) == 0
        assert cache.get("a") is None
