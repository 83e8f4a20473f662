"""
app/seed_data.py

Platforms and integration configurations shipped with the project.

Integration field mappings use the persisted JSON form read by
:meth:`app.domain.integration.FieldSpec.from_dict`.
"""

from __future__ import annotations

from typing import Any

SEED_PLATFORMS: tuple[str, ...] = (
    "DeliveryPlatform1",
    "DeliveryPlatform3",
    "DeliveryPlatform2",
)

DELIVERYPLATFORM3_TOTAL_ORDER: dict[str, Any] = {
    "name": "deliveryplatform3_total_order",
    "platform": "DeliveryPlatform3",
    "source_format": "total_order",
    "tables": ["orders", "restaurants"],
    "field_mapping": {
        "Partner": {"target": "restaurant_name", "required": True},
        "Order Id": {"target": "platform_order_id", "required": True},
        "Order Status": {"target": "order_status_raw", "transform": "deliveryPlatform3OrderStatus"},
        "Total Order Status - Customer Cancelled": {"target": "customer_cancelled_count", "type": "number"},
        "Total Order Status - Partner Cancelled": {"target": "partner_cancelled_count", "type": "number"},
        "Order Datetime": {"target": "order_datetime", "type": "date", "transform": "parseDate"},
        "Total Total Order Value": {"target": "order_value", "type": "number"},
        "Total Applied Discount Amount": {"target": "discount_amount", "type": "number"},
        "Total Basket Size": {"target": "basket_size", "type": "number"},
        "Delivery/Collection": {
            "target": "delivery_type",
            "type": "enum",
            "enum_values": ["Delivery", "Collection"],
            "transform": "deliveryType",
        },
        "Average Courier Arrival to Collected": {
            "target": "total_delivery_time_minutes",
            "type": "number",
            "transform": "timeToMinutes",
        },
    },
    "is_active": True,
}

DELIVERYPLATFORM1_ORDER_HISTORY: dict[str, Any] = {
    "name": "deliveryplatform1_order_history",
    "platform": "DeliveryPlatform1",
    "source_format": "order_history",
    "tables": ["orders", "restaurants"],
    "field_mapping": {
        "Restaurant": {"target": "restaurant_name", "required": True},
        "External restaurant ID": {"target": "restaurant_external_id"},
        "Order ID": {"target": "platform_order_id", "required": True},
        "Order status": {
            "target": "order_status",
            "type": "enum",
            "enum_values": ["completed", "canceled"],
            "transform": "deliveryPlatform1OrderStatus",
            "required": True,
        },
        "Completed?": {"target": "completed_flag", "type": "boolean", "transform": "deliveryPlatform1Boolean"},
        "Cancelled by": {"target": "cancelled_by", "transform": "deliveryPlatform1CancelledBy"},
        "Ticket size": {"target": "order_value", "type": "number"},
        "Menu item count": {"target": "basket_size", "type": "number"},
        "Currency code": {"target": "currency_code"},
        "Time customer ordered": {"target": "order_datetime", "type": "date"},
        "Time to confirm": {"target": "prep_time_minutes", "type": "number", "transform": "timeToMinutes"},
        "Courier waiting time (restaurant)": {
            "target": "courier_wait_time_minutes",
            "type": "number",
            "transform": "timeToMinutes",
        },
        "Total delivery time": {
            "target": "total_delivery_time_minutes",
            "type": "number",
            "transform": "timeToMinutes",
        },
        "Total prep & hand-off time": {
            "target": "restaurant_wait_time_minutes",
            "type": "number",
            "transform": "timeToMinutes",
        },
        "Fulfilment Type": {
            "target": "delivery_type",
            "type": "enum",
            "enum_values": ["Delivery", "Pickup"],
            "transform": "deliveryType",
        },
    },
    "is_active": True,
}

DELIVERYPLATFORM1_RATING: dict[str, Any] = {
    "name": "deliveryplatform1_rating",
    "platform": "DeliveryPlatform1",
    "source_format": None,
    "tables": ["ratings"],
    "field_mapping": {
        "Restaurant": {"target": "restaurant_name", "required": True},
        "External restaurant ID": {"target": "restaurant_external_id"},
        "Order ID": {"target": "platform_order_id", "required": True},
        "Rating value": {"target": "rating_value", "type": "number", "required": True},
        "Rating date": {"target": "rating_date", "type": "date"},
        "Comment": {"target": "comment"},
    },
    "is_active": True,
}

DELIVERYPLATFORM2_BUSINESS_SEGMENTS: dict[str, Any] = {
    "name": "deliveryplatform2_business_segments",
    "platform": "DeliveryPlatform2",
    "source_format": "business_segments",
    "tables": ["orders", "restaurants"],
    "field_mapping": {
        "Partner Restaurant Name": {"target": "restaurant_name", "required": True},
        "Order Order ID": {"target": "platform_order_id", "required": True},
        # Two spaces before "Order Date" as exported.
        "Common Business Segments  Order Date": {"target": "order_datetime", "type": "date"},
        "Common Business Segments Order Minute5 of Day": {
            "target": "order_time",
            "transform": "parseDeliveryPlatform2Time",
        },
        "Order Order Value": {"target": "order_value", "type": "number"},
        "Order Auto Accept Status": {"target": "auto_accept_status", "transform": "deliveryPlatform2AcceptStatus"},
        "Logistics Restaurant Wait Time (All Riders, mins)": {
            "target": "restaurant_wait_time_minutes",
            "type": "number",
            "transform": "timeToMinutes",
        },
        "Order Rating": {"target": "rating_value", "type": "number"},
    },
    "is_active": True,
}

SEED_INTEGRATIONS: tuple[dict[str, Any], ...] = (
    DELIVERYPLATFORM3_TOTAL_ORDER,
    DELIVERYPLATFORM1_ORDER_HISTORY,
    DELIVERYPLATFORM1_RATING,
    DELIVERYPLATFORM2_BUSINESS_SEGMENTS,
)
