"""
app/resolvers/status_resolver.py

Derives the order status of a mapped row.
"""

from __future__ import annotations

from typing import Any, Mapping

from app.domain.integration import IntegrationConfig


class StatusResolver:
    """
    Delegates to the source format variant bound to the integration.

    Integrations without a dedicated variant use the generic one, which
    always answers ``ACCEPTED``.
    """

    def resolve(self, record: Mapping[str, Any], integration: IntegrationConfig) -> str:
        return integration.source_format.resolve_status(dict(record))

    def apply(self, record: dict[str, Any], integration: IntegrationConfig) -> dict[str, Any]:
        """
        Set ``order_status`` on ``record`` when the integration writes orders.
        """

        if integration.targets_orders:
            record["order_status"] = self.resolve(record, integration)
        return record
