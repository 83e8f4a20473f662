"""
In-process storage implementation used for dry runs and tests.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from app.domain.errors import IntegrationConfigError
from app.domain.ingestion import JobRecord, JobUpdate
from app.domain.integration import IntegrationConfig
from app.domain.order import OrderData, RatingData
from app.storage.base import IngestionStore


@dataclass
class StoredRestaurant:
    id: int
    name: str
    platform_id: int
    external_id: str | None = None


@dataclass
class StoredRating:
    id: int
    restaurant_id: int
    platform_id: int
    rating: RatingData


@dataclass
class StoredFile:
    integration_id: int
    file_path: str
    file_hash: str
    total_rows: int
    job_id: int | None


@dataclass
class _State:
    platforms: dict[str, int] = field(default_factory=dict)
    integrations: dict[int, IntegrationConfig] = field(default_factory=dict)
    restaurants: dict[int, StoredRestaurant] = field(default_factory=dict)
    orders: dict[tuple[int, str], tuple[int, OrderData]] = field(default_factory=dict)
    ratings: dict[int, StoredRating] = field(default_factory=dict)
    jobs: dict[int, JobRecord] = field(default_factory=dict)
    processed_files: dict[tuple[int, str], StoredFile] = field(default_factory=dict)
    next_ids: dict[str, int] = field(default_factory=dict)


class InMemoryIngestionStore(IngestionStore):
    """
    Dictionary-backed store honouring the same natural keys as PostgreSQL.

    Writes are staged; :meth:`commit` snapshots the state and
    :meth:`rollback` restores the last snapshot. Job creation commits,
    matching the database-backed store.
    """

    def __init__(self) -> None:
        self._state = _State()
        self._committed = _State()

    @classmethod
    def from_seed_data(cls) -> InMemoryIngestionStore:
        from app.seed_data import SEED_INTEGRATIONS, SEED_PLATFORMS

        store = cls()
        platform_ids = {name: store.add_platform(name) for name in SEED_PLATFORMS}
        for seed in SEED_INTEGRATIONS:
            store.add_integration(
                name=seed["name"],
                platform_id=platform_ids[seed["platform"]],
                field_mapping=seed["field_mapping"],
                tables=seed["tables"],
                is_active=seed.get("is_active", True),
                source_format=seed.get("source_format"),
            )
        store.commit()
        return store

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def add_platform(self, name: str) -> int:
        existing = self._state.platforms.get(name)
        if existing is not None:
            return existing
        platform_id = self._next_id("platforms")
        self._state.platforms[name] = platform_id
        return platform_id

    def add_integration(
        self,
        *,
        name: str,
        platform_id: int,
        field_mapping: Mapping[str, Mapping[str, Any]],
        tables: Sequence[str],
        is_active: bool = True,
        source_format: str | None = None,
    ) -> IntegrationConfig:
        """
        Insert or replace an integration keyed by name.
        """

        existing_id = next(
            (config.id for config in self._state.integrations.values() if config.name == name),
            None,
        )
        integration_id = existing_id if existing_id is not None else self._next_id("integrations")
        try:
            config = IntegrationConfig.from_mapping(
                id=integration_id,
                name=name,
                platform_id=platform_id,
                field_mapping=field_mapping,
                tables=tables,
                is_active=is_active,
                source_format=source_format,
            )
        except ValueError as exc:
            raise IntegrationConfigError(
                "Integration configuration is invalid",
                context={"integration": name, "error": str(exc)},
            ) from exc
        self._state.integrations[integration_id] = config
        return config

    # ------------------------------------------------------------------
    # IngestionStore
    # ------------------------------------------------------------------

    def list_active_integrations(self) -> list[IntegrationConfig]:
        return [
            config
            for _, config in sorted(self._state.integrations.items())
            if config.is_active
        ]

    def find_integration_by_name(self, name: str) -> IntegrationConfig | None:
        for config in self.list_active_integrations():
            if config.name == name:
                return config
        return None

    def is_file_already_processed(self, integration_id: int, file_hash: str) -> bool:
        return (integration_id, file_hash) in self._state.processed_files

    def create_job(self, integration_id: int, file_path: str, total_rows: int = 0) -> int:
        job_id = self._next_id("jobs")
        self._state.jobs[job_id] = JobRecord(
            id=job_id,
            integration_id=integration_id,
            file_path=file_path,
            total_rows=total_rows,
            started_at=_now(),
        )
        self.commit()
        return job_id

    def update_job(self, job_id: int, update: JobUpdate) -> None:
        job = self._state.jobs.get(job_id)
        if job is not None:
            job.apply(update, completed_at=_now())

    def record_processed_file(
        self,
        integration_id: int,
        file_path: str,
        file_hash: str,
        total_rows: int,
        job_id: int | None,
    ) -> None:
        self._state.processed_files.setdefault(
            (integration_id, file_hash),
            StoredFile(
                integration_id=integration_id,
                file_path=file_path,
                file_hash=file_hash,
                total_rows=total_rows,
                job_id=job_id,
            ),
        )

    def get_job(self, job_id: int) -> JobRecord | None:
        job = self._state.jobs.get(job_id)
        return replace(job) if job is not None else None

    def list_jobs(self, *, limit: int = 20, status: str | None = None) -> list[JobRecord]:
        jobs = [
            replace(job)
            for _, job in sorted(self._state.jobs.items(), reverse=True)
            if status is None or job.status == status
        ]
        return jobs[: max(1, limit)]

    def upsert_restaurant(self, name: str, platform_id: int, external_id: str | None = None) -> int:
        if not name or not name.strip():
            raise ValueError("Restaurant name is required and must be a non-empty string.")
        external = external_id.strip() if external_id and external_id.strip() else None

        candidates = [r for r in self._state.restaurants.values() if r.platform_id == platform_id]
        if external is not None:
            for restaurant in candidates:
                if restaurant.external_id == external:
                    restaurant.name = name
                    return restaurant.id

        for restaurant in candidates:
            if restaurant.name == name:
                if external is not None:
                    restaurant.external_id = external
                return restaurant.id

        restaurant_id = self._next_id("restaurants")
        self._state.restaurants[restaurant_id] = StoredRestaurant(
            id=restaurant_id,
            name=name,
            platform_id=platform_id,
            external_id=external,
        )
        return restaurant_id

    def upsert_order(self, order: OrderData) -> int:
        key = (order.platform_id, order.platform_order_id)
        existing = self._state.orders.get(key)
        order_id = existing[0] if existing is not None else self._next_id("orders")
        self._state.orders[key] = (order_id, order)
        return order_id

    def upsert_rating(self, rating: RatingData, restaurant_id: int, platform_id: int) -> int:
        if rating.platform_order_id:
            for stored in self._state.ratings.values():
                if (
                    stored.platform_id == platform_id
                    and stored.rating.platform_order_id == rating.platform_order_id
                    and stored.rating.rating_type == rating.rating_type
                ):
                    stored.rating = replace(
                        stored.rating,
                        rating_value=rating.rating_value,
                        comment=rating.comment,
                    )
                    return stored.id

        rating_id = self._next_id("ratings")
        self._state.ratings[rating_id] = StoredRating(
            id=rating_id,
            restaurant_id=restaurant_id,
            platform_id=platform_id,
            rating=rating,
        )
        return rating_id

    def commit(self) -> None:
        self._committed = copy.deepcopy(self._state)

    def rollback(self) -> None:
        self._state = copy.deepcopy(self._committed)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def restaurants(self) -> list[StoredRestaurant]:
        return list(self._state.restaurants.values())

    @property
    def orders(self) -> list[OrderData]:
        return [order for _, order in self._state.orders.values()]

    @property
    def ratings(self) -> list[StoredRating]:
        return list(self._state.ratings.values())

    @property
    def processed_files(self) -> list[StoredFile]:
        return list(self._state.processed_files.values())

    def _next_id(self, table: str) -> int:
        value = self._state.next_ids.get(table, 0) + 1
        self._state.next_ids[table] = value
        return value


def _now() -> datetime:
    return datetime.now(timezone.utc)
