"""
app/resolvers/integration_resolver.py

Picks the integration that applies to a file, from an explicit key or
from the file's header row.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Iterable, Sequence

from app.domain.errors import IngestionValidationError
from app.domain.integration import IntegrationConfig

if TYPE_CHECKING:
    from app.storage.base import IngestionStore

logger = logging.getLogger(__name__)

DEFAULT_MATCH_THRESHOLD = 0.7
INTEGRATION_KEY_PATTERN = re.compile(r"^[a-z0-9_]+$")


def best_header_match(
    integrations: Iterable[IntegrationConfig],
    headers: Sequence[str],
    *,
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> IntegrationConfig | None:
    """
    Return the integration whose mapped columns best cover ``headers``.

    The score is the fraction of an integration's configured source
    columns present in the header row. A candidate must score strictly
    above ``threshold`` and strictly above the best seen so far, so on a
    tie the earlier candidate wins. Inactive integrations and integrations
    with an empty mapping never match.
    """

    header_set = frozenset(headers)
    best: IntegrationConfig | None = None
    best_score = 0.0

    for integration in integrations:
        if not integration.is_active or not integration.field_mapping:
            continue
        score = integration.header_score(header_set)
        if score > threshold and score > best_score:
            best = integration
            best_score = score

    return best


def is_valid_integration_key(key: str) -> bool:
    return bool(INTEGRATION_KEY_PATTERN.match(key or ""))


class HeaderMatchCache:
    """
    Header row -> matched integration, keyed by the sorted header names.

    Only successful lookups are cached. Entries live as long as the cache
    object; create a fresh one when configuration may have changed.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, ...], IntegrationConfig] = {}

    @staticmethod
    def key_for(headers: Iterable[str]) -> tuple[str, ...]:
        return tuple(sorted(headers))

    def get(self, headers: Iterable[str]) -> IntegrationConfig | None:
        return self._entries.get(self.key_for(headers))

    def put(self, headers: Iterable[str], integration: IntegrationConfig) -> None:
        self._entries[self.key_for(headers)] = integration

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class IntegrationResolver:
    """
    Resolves integrations through the storage collaborator.
    """

    def __init__(
        self,
        store: IngestionStore,
        *,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        cache: HeaderMatchCache | None = None,
    ) -> None:
        self._store = store
        self._threshold = threshold
        self._cache = cache if cache is not None else HeaderMatchCache()

    @property
    def cache(self) -> HeaderMatchCache:
        return self._cache

    def resolve(
        self,
        headers: Sequence[str],
        integration_key: str | None = None,
    ) -> IntegrationConfig:
        """
        Resolve by explicit key when given, else by header overlap.

        Raises
        ------
        IngestionValidationError
            If the key is malformed, names no integration, or no active
            integration matches the headers.
        """

        if integration_key:
            return self.resolve_by_name(integration_key)
        return self.resolve_by_headers(headers)

    def resolve_by_name(self, integration_key: str) -> IntegrationConfig:
        if not is_valid_integration_key(integration_key):
            raise IngestionValidationError(
                "Invalid integration key",
                context={"integration_key": integration_key},
            )

        integration = self._store.find_integration_by_name(integration_key)
        if integration is None:
            raise IngestionValidationError(
                f"Integration not found: {integration_key}",
                context={"integration_key": integration_key},
            )
        return integration

    def resolve_by_headers(self, headers: Sequence[str]) -> IntegrationConfig:
        cached = self._cache.get(headers)
        if cached is not None:
            logger.debug("Header match cache hit for integration %s", cached.name)
            return cached

        integration = self._store.find_integration_by_headers(
            headers,
            threshold=self._threshold,
        )
        if integration is None:
            raise IngestionValidationError(
                "Could not detect integration",
                context={"headers": list(headers)},
            )

        self._cache.put(headers, integration)
        return integration
