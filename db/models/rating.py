"""
db/models/rating.py

Customer ratings attached to a restaurant and, usually, one order.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin, IntegerIdMixin


class Rating(IntegerIdMixin, CreatedAtMixin, Base):
    __tablename__ = "ratings"

    restaurant_id: Mapped[int] = mapped_column(Integer, ForeignKey("restaurants.id"), nullable=False)
    platform_id: Mapped[int] = mapped_column(Integer, ForeignKey("platforms.id"), nullable=False)
    platform_order_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    rating_value: Mapped[Decimal] = mapped_column(Numeric(3, 2), nullable=False)
    rating_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="overall",
        server_default="overall",
    )
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    rating_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    __table_args__ = (
        CheckConstraint("rating_value >= 0 AND rating_value <= 5", name="ck_ratings_rating_value_range"),
        Index(
            "uq_ratings_platform_order_type",
            "platform_id",
            "platform_order_id",
            "rating_type",
            unique=True,
            postgresql_where=text("platform_order_id IS NOT NULL"),
        ),
        Index("ix_ratings_restaurant_id", "restaurant_id"),
        Index("ix_ratings_platform_id", "platform_id"),
        Index("ix_ratings_restaurant_date", "restaurant_id", "rating_date"),
    )
