"""
db/models/platform.py

Delivery platforms that export order data.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin, IntegerIdMixin


class Platform(IntegerIdMixin, CreatedAtMixin, Base):
    __tablename__ = "platforms"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
