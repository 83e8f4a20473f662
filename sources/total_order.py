"""
sources/total_order.py

Aggregate order exports carrying per-order cancellation counters and a
good/bad outcome column.
"""

from __future__ import annotations

from typing import Any

from app.domain.order import OrderStatus
from app.mappers.transforms import parse_leading_int
from sources.base import BaseSourceFormat


def _count(value: Any) -> int:
    if value is None or value == "":
        return 0
    return parse_leading_int(value) or 0


class TotalOrderFormat(BaseSourceFormat):
    """
    Customer cancellations are checked before partner cancellations, so a
    row with both counters set is a customer cancellation.
    """

    key = "total_order"

    def resolve_status(self, record: dict[str, Any]) -> str:
        if _count(record.get("customer_cancelled_count")) > 0:
            return OrderStatus.CANCELLED_CUSTOMER
        if _count(record.get("partner_cancelled_count")) > 0:
            return OrderStatus.CANCELLED_RESTAURANT

        raw_status = record.get("order_status_raw")
        outcome = raw_status.lower() if isinstance(raw_status, str) else None
        if outcome == "good":
            return OrderStatus.COMPLETED
        if outcome == "bad":
            return OrderStatus.REJECTED
        return OrderStatus.ACCEPTED
