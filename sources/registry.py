"""
sources/registry.py

Selects the source format variant for an integration.
"""

from __future__ import annotations

from sources.base import BaseSourceFormat
from sources.business_segments import BusinessSegmentsFormat
from sources.generic import GenericFormat
from sources.order_history import OrderHistoryFormat
from sources.total_order import TotalOrderFormat


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_FORMATS: dict[str, BaseSourceFormat] = {
    "order_history":      OrderHistoryFormat(),
    "total_order":        TotalOrderFormat(),
    "business_segments":  BusinessSegmentsFormat(),
    "generic":            GenericFormat(),
}

# Integrations seeded before the ``source_format`` column existed.
_KNOWN_INTEGRATIONS: dict[str, str] = {
    "deliveryplatform1_order_history":      "order_history",
    "deliveryplatform3_total_order":        "total_order",
    "deliveryplatform2_business_segments":  "business_segments",
}


def available_formats() -> tuple[str, ...]:
    return tuple(sorted(_FORMATS))


def select_source_format(
    *,
    key: str | None = None,
    integration_name: str | None = None,
) -> BaseSourceFormat:
    """
    Resolve the variant for an integration.

    An explicit ``key`` wins, then the integration's well-known name, then
    the generic fallback. Variants are stateless and shared.

    Raises
    ------
    ValueError
        If ``key`` is given but names no registered variant.
    """

    if key:
        normalized = key.strip().lower()
        if normalized not in _FORMATS:
            supported = ", ".join(available_formats())
            raise ValueError(
                f"Unknown source format {key!r}. Supported formats: {supported}."
            )
        return _FORMATS[normalized]

    if integration_name and integration_name in _KNOWN_INTEGRATIONS:
        return _FORMATS[_KNOWN_INTEGRATIONS[integration_name]]

    return _FORMATS["generic"]
