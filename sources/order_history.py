"""
sources/order_history.py

Per-order history exports (one row per order with a completion flag and
the party that cancelled, if any).
"""

from __future__ import annotations

from typing import Any

from app.domain.order import OrderStatus
from sources.base import BaseSourceFormat


class OrderHistoryFormat(BaseSourceFormat):
    """
    Status rules, first match wins:

    1. ``order_status`` already produced by a column transform.
    2. ``cancelled_by``: ``"customer"`` cancelled the order, any other
       actor counts as the restaurant.
    3. ``completed_flag`` true -> COMPLETED, otherwise REJECTED.
    """

    key = "order_history"

    def resolve_status(self, record: dict[str, Any]) -> str:
        existing = record.get("order_status")
        if existing:
            return existing

        cancelled_by = record.get("cancelled_by")
        if cancelled_by:
            if cancelled_by == "customer":
                return OrderStatus.CANCELLED_CUSTOMER
            return OrderStatus.CANCELLED_RESTAURANT

        if record.get("completed_flag"):
            return OrderStatus.COMPLETED
        return OrderStatus.REJECTED
