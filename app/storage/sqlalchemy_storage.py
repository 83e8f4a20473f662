"""
SQLAlchemy-backed storage implementation for the ingestion engine.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.errors import IntegrationConfigError, StorageError
from app.domain.ingestion import JobRecord, JobUpdate
from app.domain.integration import IntegrationConfig
from app.domain.order import OrderData, RatingData
from app.repositories.integration_repository import IntegrationRepository, to_config
from app.repositories.order_repository import OrderRepository
from app.storage.base import IngestionStore
from db.models.ingestion_job import IngestionJob
from db.repositories.ingestion_job_repository import IngestionJobRepository
from db.repositories.processed_file_repository import ProcessedFileRepository

logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=Callable[..., Any])


def _wrap_storage_errors(operation: str) -> Callable[[_F], _F]:
    def decorator(func: _F) -> _F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except SQLAlchemyError as exc:
                raise StorageError(
                    f"Failed to {operation}",
                    context={"error": str(exc)},
                ) from exc

        return wrapper  # type: ignore[return-value]

    return decorator


def _to_record(job: IngestionJob) -> JobRecord:
    return JobRecord(
        id=job.id,
        integration_id=job.integration_id,
        file_path=job.file_path,
        status=job.status,
        total_rows=job.total_rows or 0,
        processed_rows=job.processed_rows or 0,
        inserted_rows=job.inserted_rows or 0,
        error_rows=job.error_rows or 0,
        error_message=job.error_message,
        started_at=job.started_at,
        completed_at=job.completed_at,
    )


class SQLAlchemyIngestionStore(IngestionStore):
    """
    Persist ingestion state through the repositories and one DB session.

    Job creation commits immediately so a failed run still leaves its job
    behind; row upserts only flush and become durable on :meth:`commit`.
    """

    def __init__(self, *, session: Session) -> None:
        self._session = session
        self._integrations = IntegrationRepository(session)
        self._orders = OrderRepository(session)
        self._jobs = IngestionJobRepository(session)
        self._ledger = ProcessedFileRepository(session)

    @_wrap_storage_errors("list integrations")
    def list_active_integrations(self) -> list[IntegrationConfig]:
        """
        Active integrations in id order; rows that fail to convert are
        logged and left out so the others stay detectable.
        """

        configs: list[IntegrationConfig] = []
        for row in self._integrations.list_active():
            try:
                configs.append(to_config(row))
            except IntegrationConfigError as exc:
                logger.warning(
                    "Skipping integration %s: %s (%s)",
                    row.name,
                    exc.message,
                    exc.context.get("error"),
                )
        return configs

    @_wrap_storage_errors("load integration")
    def find_integration_by_name(self, name: str) -> IntegrationConfig | None:
        row = self._integrations.get_active_by_name(name)
        return to_config(row) if row is not None else None

    @_wrap_storage_errors("check processed files")
    def is_file_already_processed(self, integration_id: int, file_hash: str) -> bool:
        return self._ledger.exists(integration_id=integration_id, file_hash=file_hash)

    @_wrap_storage_errors("create ingestion job")
    def create_job(self, integration_id: int, file_path: str, total_rows: int = 0) -> int:
        job = self._jobs.create_job(
            integration_id=integration_id,
            file_path=file_path,
            total_rows=total_rows,
        )
        self._session.commit()
        return job.id

    @_wrap_storage_errors("update ingestion job")
    def update_job(self, job_id: int, update: JobUpdate) -> None:
        self._jobs.apply_update(job_id=job_id, update=update)

    @_wrap_storage_errors("record processed file")
    def record_processed_file(
        self,
        integration_id: int,
        file_path: str,
        file_hash: str,
        total_rows: int,
        job_id: int | None,
    ) -> None:
        self._ledger.record(
            integration_id=integration_id,
            file_path=file_path,
            file_hash=file_hash,
            total_rows=total_rows,
            job_id=job_id,
        )

    @_wrap_storage_errors("load ingestion job")
    def get_job(self, job_id: int) -> JobRecord | None:
        job = self._jobs.get_job(job_id)
        return _to_record(job) if job is not None else None

    @_wrap_storage_errors("list ingestion jobs")
    def list_jobs(self, *, limit: int = 20, status: str | None = None) -> list[JobRecord]:
        return [_to_record(job) for job in self._jobs.list_jobs(limit=limit, status=status)]

    @_wrap_storage_errors("upsert restaurant")
    def upsert_restaurant(self, name: str, platform_id: int, external_id: str | None = None) -> int:
        return self._orders.upsert_restaurant(
            name=name,
            platform_id=platform_id,
            external_id=external_id,
        )

    @_wrap_storage_errors("upsert order")
    def upsert_order(self, order: OrderData) -> int:
        return self._orders.upsert_order(order)

    @_wrap_storage_errors("upsert rating")
    def upsert_rating(self, rating: RatingData, restaurant_id: int, platform_id: int) -> int:
        return self._orders.upsert_rating(
            rating,
            restaurant_id=restaurant_id,
            platform_id=platform_id,
        )

    @_wrap_storage_errors("commit")
    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
