"""
app/repositories/integration_repository.py

Persistence helpers for platforms and integration configurations.
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.domain.errors import IntegrationConfigError
from app.domain.integration import IntegrationConfig
from db.models.integration import Integration
from db.models.platform import Platform


class IntegrationRepository:
    """
    Repository for platform and integration lookups and seeding upserts.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_active(self) -> list[Integration]:
        """
        Active integrations in id order, the order header matching scans.
        """

        stmt = (
            select(Integration)
            .where(Integration.is_active.is_(True))
            .order_by(Integration.id.asc())
        )
        return list(self._session.scalars(stmt).all())

    def get_active_by_name(self, name: str) -> Integration | None:
        stmt = (
            select(Integration)
            .where(Integration.name == name.strip())
            .where(Integration.is_active.is_(True))
        )
        return self._session.execute(stmt).scalars().first()

    def upsert_platform(self, name: str) -> int:
        """
        Insert the platform if missing and return its id.
        """

        normalized = name.strip()
        if not normalized:
            raise ValueError("Platform name is required and must be a non-empty string.")

        stmt = (
            insert(Platform)
            .values(name=normalized)
            .on_conflict_do_update(
                index_elements=[Platform.name],
                set_={"name": normalized},
            )
            .returning(Platform.id)
        )
        return int(self._session.scalars(stmt).one())

    def save(
        self,
        *,
        name: str,
        platform_id: int,
        field_mapping: dict[str, Any],
        tables: Sequence[str],
        is_active: bool = True,
        source_format: str | None = None,
    ) -> int:
        """
        Insert or update an integration keyed by name; returns its id.
        """

        values = {
            "name": name.strip(),
            "platform_id": platform_id,
            "field_mapping": field_mapping,
            "tables": list(tables),
            "is_active": is_active,
            "source_format": source_format,
        }
        stmt = insert(Integration).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Integration.name],
            set_={
                "platform_id": stmt.excluded.platform_id,
                "field_mapping": stmt.excluded.field_mapping,
                "tables": stmt.excluded.tables,
                "is_active": stmt.excluded.is_active,
                "source_format": stmt.excluded.source_format,
            },
        ).returning(Integration.id)
        return int(self._session.scalars(stmt).one())


def to_config(row: Integration) -> IntegrationConfig:
    """
    Convert a stored integration row.

    Raises:
        IntegrationConfigError: the row names an unknown source format or
            carries a field mapping entry that cannot be parsed.
    """

    try:
        return IntegrationConfig.from_mapping(
            id=row.id,
            name=row.name,
            platform_id=row.platform_id,
            field_mapping=row.field_mapping or {},
            tables=row.tables or (),
            is_active=row.is_active,
            source_format=row.source_format,
        )
    except ValueError as exc:
        raise IntegrationConfigError(
            "Integration configuration is invalid",
            context={"integration": row.name, "error": str(exc)},
        ) from exc
