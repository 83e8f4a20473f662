"""
app/domain/order.py

Order-level value sets and the persistence payloads built per CSV row.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


class OrderStatus:
    """Closed set of order states stored on every order row."""

    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    REJECTED_CUSTOMER = "REJECTED_CUSTOMER"
    REJECTED_RESTAURANT = "REJECTED_RESTAURANT"
    CANCELLED_CUSTOMER = "CANCELLED_CUSTOMER"
    CANCELLED_RESTAURANT = "CANCELLED_RESTAURANT"
    COMPLETED = "COMPLETED"


ORDER_STATUSES: tuple[str, ...] = (
    OrderStatus.ACCEPTED,
    OrderStatus.REJECTED,
    OrderStatus.REJECTED_CUSTOMER,
    OrderStatus.REJECTED_RESTAURANT,
    OrderStatus.CANCELLED_CUSTOMER,
    OrderStatus.CANCELLED_RESTAURANT,
    OrderStatus.COMPLETED,
)

FAILED_ORDER_STATUSES: tuple[str, ...] = (
    OrderStatus.REJECTED,
    OrderStatus.REJECTED_CUSTOMER,
    OrderStatus.REJECTED_RESTAURANT,
    OrderStatus.CANCELLED_CUSTOMER,
    OrderStatus.CANCELLED_RESTAURANT,
)


class DeliveryType:
    """Closed set of fulfilment types; UNKNOWN is the fallback."""

    DELIVERY = "DELIVERY"
    COLLECTION = "COLLECTION"
    PICKUP = "PICKUP"
    UNKNOWN = "UNKNOWN"


DELIVERY_TYPES: tuple[str, ...] = (
    DeliveryType.DELIVERY,
    DeliveryType.COLLECTION,
    DeliveryType.PICKUP,
    DeliveryType.UNKNOWN,
)


@dataclass(frozen=True)
class OrderData:
    """
    Typed order payload passed to the storage collaborator.
    """

    platform_id: int
    platform_order_id: str
    restaurant_id: int
    order_status: str = OrderStatus.ACCEPTED
    delivery_type: str = DeliveryType.UNKNOWN
    order_value: float | None = None
    basket_size: float | None = None
    discount_amount: float | None = None
    order_datetime: datetime | None = None
    restaurant_wait_time_minutes: int | None = None
    total_delivery_time_minutes: int | None = None
    courier_wait_time_minutes: int | None = None
    prep_time_minutes: int | None = None
    currency_code: str = "GBP"
    auto_accept_status: str | None = None


@dataclass(frozen=True)
class RatingData:
    """
    Typed rating payload passed to the storage collaborator.
    """

    rating_value: float
    platform_order_id: str | None = None
    rating_type: str = "overall"
    comment: str | None = None
    rating_date: datetime | None = None
