"""
app/services/csv_ingestion_service.py

Service layer for the CSV ingestion workflow.

One call ingests one file end to end:

    1. hash the file content (SHA-256, streamed)
    2. read the header row and resolve the integration
    3. short-circuit when the dedup ledger already holds the hash
    4. create the ingestion job
    5. per data row: map fields, derive the order status, persist
    6. complete the job and add the ledger entry

A row failing a required field is skipped and counted. Any other row
failure aborts the file: pending row writes are rolled back and the job
is marked failed before the error propagates.
"""

from __future__ import annotations

import csv
import hashlib
import io
import logging
import math
from collections.abc import Iterator
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, BinaryIO

from app.config import IngestionSettings, get_ingestion_settings
from app.domain.errors import IngestionError, IngestionValidationError, ProcessingError
from app.domain.ingestion import IngestionJobStatus, IngestionSummary, JobUpdate, NormalizedRecord, RawRecord
from app.domain.integration import IntegrationConfig
from app.domain.order import DeliveryType, OrderData, OrderStatus, RatingData
from app.logging_utils import log_event
from app.mappers.field_mapper import FieldMapper
from app.resolvers.integration_resolver import HeaderMatchCache, IntegrationResolver, is_valid_integration_key
from app.resolvers.status_resolver import StatusResolver
from app.storage.base import IngestionStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def compute_file_hash(file_path: str | Path, *, chunk_size: int = 65536) -> str:
    """
    SHA-256 hex digest of the file's bytes, read in chunks.
    """

    digest = hashlib.sha256()
    with open(file_path, "rb") as handle:
        for chunk in iter(lambda: handle.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _as_number(value: Any) -> float | int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    return value


def _as_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_optional_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return _as_text(value)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CSVIngestionService:
    """
    Coordinates hashing, integration resolution, mapping and persistence.

    The service holds no per-run state apart from the header match cache,
    which lives as long as the service instance.
    """

    def __init__(
        self,
        *,
        settings: IngestionSettings | None = None,
        field_mapper: FieldMapper | None = None,
        status_resolver: StatusResolver | None = None,
        header_cache: HeaderMatchCache | None = None,
    ) -> None:
        self._settings = settings or IngestionSettings()
        self._field_mapper = field_mapper or FieldMapper()
        self._status_resolver = status_resolver or StatusResolver()
        self._header_cache = header_cache if header_cache is not None else HeaderMatchCache()

    @property
    def header_cache(self) -> HeaderMatchCache:
        return self._header_cache

    def process_file(
        self,
        file_path: str | Path,
        integration_key: str | None = None,
        *,
        store: IngestionStore,
        source_name: str | None = None,
    ) -> IngestionSummary:
        """
        Ingest one CSV file.

        Args:
            file_path:        Path of the file to read.
            integration_key:  Optional integration name; header detection
                              is used when omitted.
            store:            Storage collaborator (caller owns lifecycle).
            source_name:      Path recorded on the job and ledger entry;
                              defaults to ``file_path``.

        Raises:
            IngestionValidationError: before any job exists, for a bad path,
                key, header row or unresolvable integration.
            ProcessingError / StorageError: after the job was created; the
                job is marked failed first.
        """

        path = self._validate_path(file_path)
        if integration_key and not is_valid_integration_key(integration_key):
            raise IngestionValidationError(
                "Invalid integration key",
                context={"integration_key": integration_key},
            )

        recorded_path = source_name or str(file_path)
        log_event(
            logger,
            logging.INFO,
            "ingestion_started",
            file_path=recorded_path,
            integration_key=integration_key,
        )

        try:
            file_hash = compute_file_hash(path, chunk_size=self._settings.hash_chunk_size)
        except OSError as exc:
            raise IngestionValidationError(
                "File could not be read",
                context={"file_path": recorded_path, "error": str(exc)},
            ) from exc

        try:
            handle = open(path, "rb")
        except OSError as exc:
            raise IngestionValidationError(
                "File could not be read",
                context={"file_path": recorded_path, "error": str(exc)},
            ) from exc

        with handle:
            headers = self._read_headers(handle, recorded_path)

            resolver = IntegrationResolver(
                store,
                threshold=self._settings.match_threshold,
                cache=self._header_cache,
            )
            integration = resolver.resolve(headers, integration_key)
            if integration.id is None:
                raise IngestionValidationError(
                    "Integration has no id",
                    context={"integration": integration.name},
                )
            log_event(
                logger,
                logging.INFO,
                "integration_resolved",
                file_path=recorded_path,
                integration=integration.name,
                source_format=integration.source_format.key,
            )

            if store.is_file_already_processed(integration.id, file_hash):
                log_event(
                    logger,
                    logging.WARNING,
                    "duplicate_file_skipped",
                    file_path=recorded_path,
                    integration=integration.name,
                    file_hash=file_hash,
                )
                return IngestionSummary(
                    file_path=recorded_path,
                    file_hash=file_hash,
                    integration_name=integration.name,
                    processed=0,
                    skipped=0,
                    duplicate=True,
                )

            job_id = store.create_job(integration.id, recorded_path, 0)
            rows = io.TextIOWrapper(handle, encoding="utf-8", newline="")
            try:
                return self._stream(
                    reader=csv.reader(rows),
                    headers=headers,
                    integration=integration,
                    store=store,
                    job_id=job_id,
                    file_path=recorded_path,
                    file_hash=file_hash,
                )
            finally:
                rows.detach()

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def _stream(
        self,
        *,
        reader: Iterator[list[str]],
        headers: list[str],
        integration: IntegrationConfig,
        store: IngestionStore,
        job_id: int,
        file_path: str,
        file_hash: str,
    ) -> IngestionSummary:
        processed = 0
        skipped = 0
        total_rows = 0

        try:
            for row_number, record in self._iter_records(reader, headers, file_path):
                total_rows += 1
                try:
                    mapped = self._map_row(record, integration)
                    if mapped is None:
                        skipped += 1
                        continue
                    self._persist_record(mapped, integration, store)
                except IngestionError as exc:
                    raise exc.add_context(
                        row_number=row_number,
                        integration=integration.name,
                        file_path=file_path,
                    )
                except Exception as exc:
                    raise ProcessingError(
                        "Failed to process record",
                        context={
                            "row_number": row_number,
                            "integration": integration.name,
                            "file_path": file_path,
                            "error": str(exc),
                        },
                    ) from exc

                processed += 1
                if processed % self._settings.progress_log_interval == 0:
                    logger.info("%s records processed for %s", processed, file_path)

            store.update_job(
                job_id,
                JobUpdate(
                    status=IngestionJobStatus.COMPLETED,
                    total_rows=total_rows,
                    processed_rows=processed,
                    inserted_rows=processed,
                    error_rows=skipped,
                ),
            )
            store.record_processed_file(integration.id, file_path, file_hash, total_rows, job_id)
            store.commit()
        except Exception as exc:
            self._mark_failed(
                store=store,
                job_id=job_id,
                error=exc,
                processed=processed,
                skipped=skipped,
                total_rows=total_rows,
            )
            log_event(
                logger,
                logging.ERROR,
                "ingestion_failed",
                file_path=file_path,
                integration=integration.name,
                job_id=job_id,
                error=str(exc),
                processed=processed,
                skipped=skipped,
            )
            raise

        log_event(
            logger,
            logging.INFO,
            "ingestion_completed",
            file_path=file_path,
            integration=integration.name,
            job_id=job_id,
            processed=processed,
            skipped=skipped,
            total_rows=total_rows,
        )
        return IngestionSummary(
            file_path=file_path,
            file_hash=file_hash,
            integration_name=integration.name,
            processed=processed,
            skipped=skipped,
            total_rows=total_rows,
            job_id=job_id,
        )

    def _iter_records(
        self,
        reader: Iterator[list[str]],
        headers: list[str],
        file_path: str,
    ) -> Iterator[tuple[int, RawRecord]]:
        """
        Yield ``(line_number, record)``; cells missing from short rows are "".
        """

        row_number = 1
        try:
            for row in reader:
                row_number += 1
                cells = [cell.strip() for cell in row]
                cells.extend([""] * (len(headers) - len(cells)))
                yield row_number, dict(zip(headers, cells))
        except UnicodeDecodeError as exc:
            raise ProcessingError(
                "CSV must be UTF-8 encoded",
                context={"file_path": file_path, "row_number": row_number + 1},
            ) from exc
        except csv.Error as exc:
            raise ProcessingError(
                f"Invalid CSV format: {exc}",
                context={"file_path": file_path, "row_number": row_number + 1},
            ) from exc

    def _map_row(self, record: RawRecord, integration: IntegrationConfig) -> NormalizedRecord | None:
        mapped = self._field_mapper.map(record, integration)
        if mapped is None:
            return None
        return self._status_resolver.apply(mapped, integration)

    def _persist_record(
        self,
        record: NormalizedRecord,
        integration: IntegrationConfig,
        store: IngestionStore,
    ) -> None:
        platform_id = integration.platform_id

        restaurant_id: int | None = None
        restaurant_name = record.get("restaurant_name")
        if isinstance(restaurant_name, str) and restaurant_name:
            external_id = record.get("restaurant_external_id")
            restaurant_id = store.upsert_restaurant(
                restaurant_name,
                platform_id,
                external_id if isinstance(external_id, str) and external_id else None,
            )

        if integration.targets_orders:
            if restaurant_id is None:
                raise ProcessingError(
                    "Order row has no restaurant",
                    context={"platform_order_id": record.get("platform_order_id")},
                )
            order_datetime = record.get("order_datetime")
            store.upsert_order(
                OrderData(
                    platform_id=platform_id,
                    platform_order_id=_as_text(record["platform_order_id"]),
                    restaurant_id=restaurant_id,
                    order_status=record.get("order_status") or OrderStatus.ACCEPTED,
                    delivery_type=record.get("delivery_type") or DeliveryType.UNKNOWN,
                    order_value=_as_number(record.get("order_value")),
                    basket_size=_as_number(record.get("basket_size")),
                    discount_amount=_as_number(record.get("discount_amount")),
                    order_datetime=order_datetime if isinstance(order_datetime, datetime) else None,
                    restaurant_wait_time_minutes=_as_number(record.get("restaurant_wait_time_minutes")),
                    total_delivery_time_minutes=_as_number(record.get("total_delivery_time_minutes")),
                    courier_wait_time_minutes=_as_number(record.get("courier_wait_time_minutes")),
                    prep_time_minutes=_as_number(record.get("prep_time_minutes")),
                    currency_code=record.get("currency_code") or self._settings.default_currency,
                    auto_accept_status=_as_optional_text(record.get("auto_accept_status")),
                )
            )

        rating_value = _as_number(record.get("rating_value"))
        if integration.targets_ratings and rating_value is not None and restaurant_id:
            rating_date = record.get("rating_date")
            store.upsert_rating(
                RatingData(
                    rating_value=rating_value,
                    platform_order_id=_as_optional_text(record.get("platform_order_id")),
                    comment=_as_optional_text(record.get("comment")),
                    rating_date=rating_date if isinstance(rating_date, datetime) else None,
                ),
                restaurant_id,
                platform_id,
            )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _validate_path(self, file_path: str | Path) -> Path:
        if not file_path or not str(file_path).strip():
            raise IngestionValidationError("Invalid file path", context={"file_path": file_path})
        path = Path(file_path)
        if not path.is_file():
            raise IngestionValidationError("File not found", context={"file_path": str(file_path)})
        return path

    def _read_headers(self, handle: BinaryIO, file_path: str) -> list[str]:
        """
        Decode and parse the first line only; ``handle`` is left at the
        first data row, whose bytes are decoded later while streaming.
        """

        try:
            line = handle.readline().decode("utf-8-sig")
            first_row = next(csv.reader([line]), None)
        except UnicodeDecodeError as exc:
            raise IngestionValidationError(
                "CSV must be UTF-8 encoded",
                context={"file_path": file_path},
            ) from exc
        except csv.Error as exc:
            raise IngestionValidationError(
                f"Invalid CSV header: {exc}",
                context={"file_path": file_path},
            ) from exc

        headers = [cell.strip() for cell in first_row or []]
        if not any(headers):
            raise IngestionValidationError(
                "CSV header row is missing",
                context={"file_path": file_path},
            )
        return headers

    def _mark_failed(
        self,
        *,
        store: IngestionStore,
        job_id: int,
        error: Exception,
        processed: int,
        skipped: int,
        total_rows: int,
    ) -> None:
        message = error.message if isinstance(error, IngestionError) else str(error)
        try:
            store.rollback()
            store.update_job(
                job_id,
                JobUpdate(
                    status=IngestionJobStatus.FAILED,
                    total_rows=total_rows,
                    processed_rows=processed,
                    error_rows=skipped,
                    error_message=message or type(error).__name__,
                ),
            )
            store.commit()
        except Exception:
            logger.exception("Failed to mark ingestion job %s as failed", job_id)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_csv_ingestion_service() -> CSVIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """
    return CSVIngestionService(settings=get_ingestion_settings())
