"""
db/models/restaurant.py

Restaurants as known to one platform.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin, IntegerIdMixin


class Restaurant(IntegerIdMixin, CreatedAtMixin, Base):
    __tablename__ = "restaurants"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    platform_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("platforms.id"),
        nullable=False,
    )
    external_id: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Platform-side restaurant identifier, when exported",
    )

    __table_args__ = (
        UniqueConstraint("platform_id", "name", name="uq_restaurants_platform_name"),
        Index(
            "uq_restaurants_platform_external_id",
            "platform_id",
            "external_id",
            unique=True,
            postgresql_where=text("external_id IS NOT NULL"),
        ),
        Index("ix_restaurants_platform_id", "platform_id"),
    )
