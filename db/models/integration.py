"""
db/models/integration.py

Persistent field-mapping configurations, one per export layout.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, IntegerIdMixin, TimestampMixin


class Integration(IntegerIdMixin, TimestampMixin, Base):
    __tablename__ = "integrations"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Integration key, e.g. deliveryplatform3_total_order",
    )
    platform_id: Mapped[int] = mapped_column(Integer, ForeignKey("platforms.id"), nullable=False)
    field_mapping: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        comment="Source column -> field spec",
    )
    tables: Mapped[list[str]] = mapped_column(
        ARRAY(Text),
        nullable=False,
        default=list,
        server_default="{}",
    )
    source_format: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Source format variant key; derived from name when empty",
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")

    __table_args__ = (
        Index("ix_integrations_is_active", "is_active"),
    )
