"""
tests/test_integration_resolver.py

Header-overlap matching, explicit key lookup and the header match cache.
"""

from __future__ import annotations

import pytest

from app.domain.errors import IngestionValidationError
from app.domain.integration import IntegrationConfig
from app.resolvers.integration_resolver import (
    HeaderMatchCache,
    IntegrationResolver,
    best_header_match,
    is_valid_integration_key,
)
from app.storage.memory_storage import InMemoryIngestionStore

TEN_COLUMNS = [f"c{index}" for index in range(10)]


def _config(name: str, columns: list[str], *, id: int = 1, is_active: bool = True) -> IntegrationConfig:
    return IntegrationConfig.from_mapping(
        id=id,
        name=name,
        platform_id=1,
        field_mapping={column: {"target": column} for column in columns},
        tables=("restaurants",),
        is_active=is_active,
    )


class _CountingStore(InMemoryIngestionStore):
    def __init__(self) -> None:
        super().__init__()
        self.header_lookups = 0

    def find_integration_by_headers(self, headers, *, threshold=0.7):
        self.header_lookups += 1
        return super().find_integration_by_headers(headers, threshold=threshold)


@pytest.fixture()
def counting_store() -> _CountingStore:
    store = _CountingStore()
    platform_id = store.add_platform("P")
    store.add_integration(
        name="ten_columns",
        platform_id=platform_id,
        field_mapping={column: {"target": column} for column in TEN_COLUMNS},
        tables=["restaurants"],
    )
    store.commit()
    return store


class TestBestHeaderMatch:
    def test_above_threshold_matches(self) -> None:
        config = _config("a", TEN_COLUMNS)
        assert best_header_match([config], TEN_COLUMNS[:8]) is config

    def test_exact_threshold_does_not_match(self) -> None:
        config = _config("a", TEN_COLUMNS)
        assert best_header_match([config], TEN_COLUMNS[:7]) is None

    def test_extra_headers_do_not_lower_score(self) -> None:
        config = _config("a", ["x", "y"])
        assert best_header_match([config], ["x", "y", "z", "w"]) is config

    def test_higher_score_wins(self) -> None:
        weaker = _config("weaker", ["a", "b", "c", "d", "e"], id=1)
        stronger = _config("stronger", ["a", "b", "c", "d"], id=2)
        assert best_header_match([weaker, stronger], ["a", "b", "c", "d"]) is stronger

    def test_tie_goes_to_first(self) -> None:
        first = _config("first", ["a", "b"], id=1)
        second = _config("second", ["a", "b"], id=2)
        assert best_header_match([first, second], ["a", "b"]) is first

    def test_inactive_and_empty_never_match(self) -> None:
        inactive = _config("inactive", ["a"], is_active=False)
        empty = _config("empty", [])
        assert best_header_match([inactive, empty], ["a"]) is None


class TestIntegrationKey:
    @pytest.mark.parametrize("key", ["deliveryplatform3_total_order", "abc_123"])
    def test_valid(self, key: str) -> None:
        assert is_valid_integration_key(key)

    @pytest.mark.parametrize("key", ["", "Upper", "with-dash", "semi;colon", "space here"])
    def test_invalid(self, key: str) -> None:
        assert not is_valid_integration_key(key)


class TestHeaderMatchCache:
    def test_key_ignores_order(self) -> None:
        cache = HeaderMatchCache()
        config = _config("a", ["x"])
        cache.put(["b", "a"], config)
        assert cache.get(["a", "b"]) is config
        assert len(cache) == 1
        cache.clear()
        assert cache.get(["a", "b"]) is None


class TestIntegrationResolver:
    def test_resolves_by_name(self, counting_store: _CountingStore) -> None:
        resolver = IntegrationResolver(counting_store)
        assert resolver.resolve([], "ten_columns").name == "ten_columns"
        assert counting_store.header_lookups == 0

    def test_unknown_name(self, counting_store: _CountingStore) -> None:
        with pytest.raises(IngestionValidationError, match="Integration not found: missing"):
            IntegrationResolver(counting_store).resolve_by_name("missing")

    def test_malformed_name(self, counting_store: _CountingStore) -> None:
        with pytest.raises(IngestionValidationError, match="Invalid integration key"):
            IntegrationResolver(counting_store).resolve_by_name("DROP TABLE")

    def test_header_match_is_cached(self, counting_store: _CountingStore) -> None:
        resolver = IntegrationResolver(counting_store)
        headers = list(reversed(TEN_COLUMNS))
        first = resolver.resolve(headers)
        second = resolver.resolve(TEN_COLUMNS)
        assert first is second
        assert counting_store.header_lookups == 1
        assert len(resolver.cache) == 1

    def test_miss_raises_and_is_not_cached(self, counting_store: _CountingStore) -> None:
        resolver = IntegrationResolver(counting_store)
        for _ in range(2):
            with pytest.raises(IngestionValidationError, match="Could not detect integration"):
                resolver.resolve(["unrelated"])
        assert counting_store.header_lookups == 2
        assert len(resolver.cache) == 0

    def test_threshold_is_configurable(self, counting_store: _CountingStore) -> None:
        resolver = IntegrationResolver(counting_store, threshold=0.5)
        assert resolver.resolve(TEN_COLUMNS[:6]).name == "ten_columns"
