"""
app/repositories/order_repository.py

Idempotent writes for restaurants, orders and ratings.
"""

from __future__ import annotations

from dataclasses import asdict

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.domain.order import OrderData, RatingData
from db.models.order import Order
from db.models.rating import Rating
from db.models.restaurant import Restaurant

_ORDER_UPSERT_CONSTRAINT = "uq_orders_platform_order_id"


class OrderRepository:
    """
    Upserts keyed by each table's natural key.

    - restaurants: ``(platform_id, external_id)`` then ``(platform_id, name)``
    - orders: ``(platform_id, platform_order_id)``
    - ratings: ``(platform_id, platform_order_id, rating_type)``
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert_restaurant(
        self,
        *,
        name: str,
        platform_id: int,
        external_id: str | None = None,
    ) -> int:
        """
        Return the restaurant id, creating the row if needed.

        A match on external id refreshes the stored name; a match on name
        fills in the external id when one is supplied.
        """

        if not name or not name.strip():
            raise ValueError("Restaurant name is required and must be a non-empty string.")
        external = external_id.strip() if external_id and external_id.strip() else None

        if external is not None:
            by_external = self._session.execute(
                select(Restaurant)
                .where(Restaurant.platform_id == platform_id)
                .where(Restaurant.external_id == external)
            ).scalars().first()
            if by_external is not None:
                by_external.name = name
                self._session.flush()
                return by_external.id

        by_name = self._session.execute(
            select(Restaurant)
            .where(Restaurant.platform_id == platform_id)
            .where(Restaurant.name == name)
        ).scalars().first()
        if by_name is not None:
            if external is not None:
                by_name.external_id = external
                self._session.flush()
            return by_name.id

        restaurant = Restaurant(name=name, platform_id=platform_id, external_id=external)
        self._session.add(restaurant)
        self._session.flush()
        return restaurant.id

    def upsert_order(self, order: OrderData) -> int:
        values = asdict(order)
        stmt = insert(Order).values(**values)
        updatable = {
            key: getattr(stmt.excluded, key)
            for key in values
            if key not in ("platform_id", "platform_order_id")
        }
        stmt = stmt.on_conflict_do_update(
            constraint=_ORDER_UPSERT_CONSTRAINT,
            set_=updatable,
        ).returning(Order.id)
        return int(self._session.scalars(stmt).one())

    def upsert_rating(self, rating: RatingData, *, restaurant_id: int, platform_id: int) -> int:
        """
        Update value and comment of an existing rating for the same order and
        rating type, otherwise insert a new one.
        """

        if rating.platform_order_id:
            existing = self._session.execute(
                select(Rating)
                .where(Rating.platform_id == platform_id)
                .where(Rating.platform_order_id == rating.platform_order_id)
                .where(Rating.rating_type == rating.rating_type)
            ).scalars().first()
            if existing is not None:
                existing.rating_value = rating.rating_value
                existing.comment = rating.comment
                self._session.flush()
                return existing.id

        row = Rating(
            platform_order_id=rating.platform_order_id or None,
            restaurant_id=restaurant_id,
            platform_id=platform_id,
            rating_value=rating.rating_value,
            rating_type=rating.rating_type,
            comment=rating.comment,
            rating_date=rating.rating_date,
        )
        self._session.add(row)
        self._session.flush()
        return row.id
