"""
Storage layer interface consumed by the ingestion engine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from app.domain.ingestion import JobRecord, JobUpdate
from app.domain.integration import IntegrationConfig
from app.domain.order import OrderData, RatingData
from app.resolvers.integration_resolver import DEFAULT_MATCH_THRESHOLD, best_header_match


class IngestionStore(ABC):
    """
    Storage abstraction for integration lookup, job bookkeeping and
    idempotent row writes.

    Row writes are staged until :meth:`commit`; :meth:`rollback` discards
    whatever was staged since the last commit.
    """

    @abstractmethod
    def list_active_integrations(self) -> list[IntegrationConfig]:
        """
        Active integrations in a stable order (earliest first).
        """

    @abstractmethod
    def find_integration_by_name(self, name: str) -> IntegrationConfig | None:
        """
        Active integration with the given key, if any.
        """

    def find_integration_by_headers(
        self,
        headers: Sequence[str],
        *,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
    ) -> IntegrationConfig | None:
        return best_header_match(
            self.list_active_integrations(),
            headers,
            threshold=threshold,
        )

    @abstractmethod
    def is_file_already_processed(self, integration_id: int, file_hash: str) -> bool:
        """
        Whether the dedup ledger holds ``(integration_id, file_hash)``.
        """

    @abstractmethod
    def create_job(self, integration_id: int, file_path: str, total_rows: int = 0) -> int:
        """
        Create a pending job, make it durable, and return its id.
        """

    @abstractmethod
    def update_job(self, job_id: int, update: JobUpdate) -> None:
        """
        Apply terminal bookkeeping to a job.
        """

    @abstractmethod
    def record_processed_file(
        self,
        integration_id: int,
        file_path: str,
        file_hash: str,
        total_rows: int,
        job_id: int | None,
    ) -> None:
        """
        Add a dedup ledger entry.
        """

    @abstractmethod
    def get_job(self, job_id: int) -> JobRecord | None:
        """
        Read one job.
        """

    @abstractmethod
    def list_jobs(self, *, limit: int = 20, status: str | None = None) -> list[JobRecord]:
        """
        Most recent jobs first.
        """

    @abstractmethod
    def upsert_restaurant(self, name: str, platform_id: int, external_id: str | None = None) -> int:
        """
        Return the id of the restaurant, creating it when unknown.
        """

    @abstractmethod
    def upsert_order(self, order: OrderData) -> int:
        """
        Insert or update an order keyed by platform and platform order id.
        """

    @abstractmethod
    def upsert_rating(self, rating: RatingData, restaurant_id: int, platform_id: int) -> int:
        """
        Insert or update a rating keyed by platform, order id and type.
        """

    @abstractmethod
    def commit(self) -> None:
        """
        Make staged writes durable.
        """

    @abstractmethod
    def rollback(self) -> None:
        """
        Discard writes staged since the last commit.
        """
