"""
sources/business_segments.py

Business segment reports, which split the order timestamp into a date
column and a separate time-of-day column.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from app.domain.order import OrderStatus
from app.mappers.transforms import parse_delivery_platform2_datetime
from sources.base import BaseSourceFormat


class BusinessSegmentsFormat(BaseSourceFormat):
    key = "business_segments"

    def map_record(self, record: dict[str, Any]) -> dict[str, Any]:
        """
        Merge ``order_datetime`` (date) with ``order_time`` (``H:MM``).

        ``order_time`` never reaches persistence. When the two values do not
        combine into a real timestamp ``order_datetime`` becomes ``None``.
        """

        order_time = record.pop("order_time", None)
        order_date = record.get("order_datetime")
        if order_date and order_time:
            if isinstance(order_date, datetime):
                order_date = order_date.date().isoformat()
            record["order_datetime"] = parse_delivery_platform2_datetime(order_date, order_time)
        return record

    def resolve_status(self, record: dict[str, Any]) -> str:
        # Heuristic: a recorded prep time means the kitchen accepted it.
        if _is_positive(record.get("prep_time_minutes")):
            return OrderStatus.ACCEPTED
        return OrderStatus.COMPLETED


def _is_positive(value: Any) -> bool:
    """
    Numbers compare directly; text counts only when the whole trimmed
    string is a number, so ``"12"`` qualifies and ``"12 min"`` does not.
    """

    if isinstance(value, (int, float)):
        return value > 0
    if isinstance(value, str):
        try:
            return float(value.strip()) > 0
        except ValueError:
            return False
    return False
