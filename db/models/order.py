"""
db/models/order.py

Normalized orders, one row per platform order id.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.order import DELIVERY_TYPES, ORDER_STATUSES, DeliveryType
from db.base import Base, CreatedAtMixin, IntegerIdMixin


def _in_clause(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


class Order(IntegerIdMixin, CreatedAtMixin, Base):
    __tablename__ = "orders"

    platform_id: Mapped[int] = mapped_column(Integer, ForeignKey("platforms.id"), nullable=False)
    platform_order_id: Mapped[str] = mapped_column(String(100), nullable=False)
    restaurant_id: Mapped[int] = mapped_column(Integer, ForeignKey("restaurants.id"), nullable=False)
    order_status: Mapped[str] = mapped_column(String(32), nullable=False)
    delivery_type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=DeliveryType.UNKNOWN,
        server_default=DeliveryType.UNKNOWN,
    )
    order_value: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    basket_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    discount_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    order_datetime: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    restaurant_wait_time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_delivery_time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    courier_wait_time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    prep_time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    currency_code: Mapped[str] = mapped_column(String(3), nullable=False, default="GBP", server_default="GBP")
    auto_accept_status: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        UniqueConstraint("platform_id", "platform_order_id", name="uq_orders_platform_order_id"),
        CheckConstraint(_in_clause("order_status", ORDER_STATUSES), name="ck_orders_order_status"),
        CheckConstraint(_in_clause("delivery_type", DELIVERY_TYPES), name="ck_orders_delivery_type"),
        CheckConstraint("order_value >= 0", name="ck_orders_order_value_non_negative"),
        CheckConstraint("basket_size > 0", name="ck_orders_basket_size_positive"),
        CheckConstraint("discount_amount >= 0", name="ck_orders_discount_amount_non_negative"),
        CheckConstraint(
            "restaurant_wait_time_minutes >= 0 AND total_delivery_time_minutes >= 0 "
            "AND courier_wait_time_minutes >= 0 AND prep_time_minutes >= 0",
            name="ck_orders_wait_times_non_negative",
        ),
        Index("ix_orders_platform_id", "platform_id"),
        Index("ix_orders_restaurant_id", "restaurant_id"),
        Index("ix_orders_order_datetime", "order_datetime"),
        Index("ix_orders_order_status", "order_status"),
        Index("ix_orders_restaurant_datetime", "restaurant_id", "order_datetime"),
        Index("ix_orders_platform_status", "platform_id", "order_status"),
    )
