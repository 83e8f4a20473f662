"""
sources/generic.py

Fallback format for integrations without a dedicated variant.
"""

from __future__ import annotations

from typing import Any

from app.domain.order import OrderStatus
from sources.base import BaseSourceFormat


class GenericFormat(BaseSourceFormat):
    """No fixups; every order is stored as accepted."""

    key = "generic"

    def resolve_status(self, record: dict[str, Any]) -> str:
        return OrderStatus.ACCEPTED
