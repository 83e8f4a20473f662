"""
tests/test_csv_ingestion_service.py

End-to-end tests for CSVIngestionService against the in-memory store.

No database and no network: every run reads a CSV from tmp_path and
asserts on what the store holds afterwards.

Coverage
--------
- Required-field skip counting and persisted rows
- Dedup by content hash across different paths
- Fatal transform errors: rollback and failed job bookkeeping
- Unexpected persistence failures wrapped as processing errors
- Validation errors raised before any job exists
- Seeded source formats (status derivation, ratings)
- RFC4180 quoting, BOM handling and short rows
- Non-UTF-8 bytes: header rejected up front, data rows fail the job
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from app.domain.errors import (
    IngestionValidationError,
    MalformedTimeError,
    ProcessingError,
)
from app.domain.ingestion import IngestionJobStatus
from app.domain.order import DeliveryType, OrderData, OrderStatus
from app.services.csv_ingestion_service import compute_file_hash
from app.storage.memory_storage import InMemoryIngestionStore

ORDERS_INTEGRATION = "test_orders"

HEADER = ["Restaurant", "Order ID", "Value", "Prep"]


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestEndToEnd:
    def test_one_processed_one_skipped(self, service, store, csv_file) -> None:
        path = csv_file(
            [
                HEADER,
                ["Pizza Place", "A1", "12.50", "0:15"],
                ["Pizza Place", "", "9.99", "0:10"],
            ]
        )

        summary = service.process_file(path, store=store)

        assert summary.integration_name == ORDERS_INTEGRATION
        assert summary.processed == 1
        assert summary.skipped == 1
        assert summary.total_rows == 2
        assert summary.duplicate is False
        assert summary.file_hash == compute_file_hash(path)

        assert [r.name for r in store.restaurants] == ["Pizza Place"]
        assert len(store.orders) == 1
        order = store.orders[0]
        assert order.platform_order_id == "A1"
        assert order.order_value == 12.5
        assert order.prep_time_minutes == 15
        assert order.order_status == OrderStatus.ACCEPTED
        assert order.delivery_type == DeliveryType.UNKNOWN
        assert order.currency_code == "GBP"

        assert len(store.processed_files) == 1
        ledger = store.processed_files[0]
        assert ledger.file_hash == summary.file_hash
        assert ledger.job_id == summary.job_id
        assert ledger.total_rows == 2

        job = store.get_job(summary.job_id)
        assert job.status == IngestionJobStatus.COMPLETED
        assert (job.total_rows, job.processed_rows, job.inserted_rows, job.error_rows) == (2, 1, 1, 1)
        assert job.completed_at is not None

    def test_summary_to_dict(self, service, store, csv_file) -> None:
        path = csv_file([HEADER, ["Pizza Place", "A1", "1", "1"]])
        payload = service.process_file(path, store=store).to_dict()
        assert payload["integration"] == ORDERS_INTEGRATION
        assert payload["processed"] == 1

    def test_source_name_is_recorded(self, service, store, csv_file) -> None:
        path = csv_file([HEADER, ["Pizza Place", "A1", "1", "1"]])
        summary = service.process_file(path, store=store, source_name="upload.csv")
        assert summary.file_path == "upload.csv"
        assert store.get_job(summary.job_id).file_path == "upload.csv"

    def test_reimport_updates_order_in_place(self, service, store, csv_file) -> None:
        service.process_file(csv_file([HEADER, ["Pizza Place", "A1", "10", "1"]], "first.csv"), store=store)
        service.process_file(csv_file([HEADER, ["Pizza Place", "A1", "15", "2"]], "second.csv"), store=store)
        assert len(store.orders) == 1
        assert store.orders[0].order_value == 15.0
        assert len(store.restaurants) == 1

    def test_header_match_is_cached_per_service(self, service, store, csv_file) -> None:
        service.process_file(csv_file([HEADER, ["P", "A1", "1", "1"]], "a.csv"), store=store)
        service.process_file(csv_file([HEADER, ["P", "A2", "1", "1"]], "b.csv"), store=store)
        assert len(service.header_cache) == 1


# ---------------------------------------------------------------------------
# Dedup
# ---------------------------------------------------------------------------


class TestDuplicateFiles:
    def test_same_content_under_another_path_is_skipped(self, service, store, csv_file) -> None:
        rows = [HEADER, ["Pizza Place", "A1", "12.50", "0:15"]]
        first = service.process_file(csv_file(rows, "monday.csv"), store=store)
        second = service.process_file(csv_file(rows, "copy-of-monday.csv"), store=store)

        assert first.duplicate is False
        assert second.duplicate is True
        assert second.processed == 0
        assert second.skipped == 0
        assert second.job_id is None
        assert second.file_hash == first.file_hash
        assert len(store.list_jobs()) == 1
        assert len(store.processed_files) == 1


# ---------------------------------------------------------------------------
# Failures after the job exists
# ---------------------------------------------------------------------------


class _FailingOrderStore(InMemoryIngestionStore):
    def upsert_order(self, order: OrderData) -> int:
        raise RuntimeError("disk full")


class TestFatalRowErrors:
    def test_malformed_time_fails_job_and_rolls_back(self, service, store, csv_file) -> None:
        path = csv_file(
            [
                HEADER,
                ["Pizza Place", "A1", "12.50", "0:15"],
                ["Pizza Place", "A2", "9.99", "12:75"],
            ]
        )

        with pytest.raises(MalformedTimeError) as excinfo:
            service.process_file(path, store=store)

        context = excinfo.value.context
        assert context["row_number"] == 3
        assert context["integration"] == ORDERS_INTEGRATION
        assert context["file_path"] == str(path)
        assert context["value"] == "12:75"

        assert store.orders == []
        assert store.restaurants == []
        assert store.processed_files == []

        [job] = store.list_jobs()
        assert job.status == IngestionJobStatus.FAILED
        assert job.error_message == "Invalid time values"
        assert job.processed_rows == 1
        assert job.total_rows == 2

    def test_unexpected_errors_are_wrapped(self, service, csv_file) -> None:
        failing = _FailingOrderStore.from_seed_data()
        path = csv_file(
            [
                ["Order Id", "Partner"],
                ["T1", "Burger Co"],
            ]
        )

        with pytest.raises(ProcessingError, match="Failed to process record") as excinfo:
            service.process_file(path, "deliveryplatform3_total_order", store=failing)

        assert excinfo.value.context["error"] == "disk full"
        assert excinfo.value.context["row_number"] == 2
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        [job] = failing.list_jobs()
        assert job.status == IngestionJobStatus.FAILED
        assert job.error_message == "Failed to process record"
        assert failing.restaurants == []


# ---------------------------------------------------------------------------
# Validation before any job exists
# ---------------------------------------------------------------------------


class TestValidationErrors:
    def test_missing_file(self, service, store, tmp_path: Path) -> None:
        with pytest.raises(IngestionValidationError, match="File not found"):
            service.process_file(tmp_path / "nope.csv", store=store)
        assert store.list_jobs() == []

    def test_blank_path(self, service, store) -> None:
        with pytest.raises(IngestionValidationError, match="Invalid file path"):
            service.process_file("  ", store=store)

    def test_malformed_key(self, service, store, csv_file) -> None:
        path = csv_file([HEADER, ["P", "A1", "1", "1"]])
        with pytest.raises(IngestionValidationError, match="Invalid integration key"):
            service.process_file(path, "Orders-2024", store=store)
        assert store.list_jobs() == []

    def test_unknown_key(self, service, store, csv_file) -> None:
        path = csv_file([HEADER, ["P", "A1", "1", "1"]])
        with pytest.raises(IngestionValidationError, match="Integration not found"):
            service.process_file(path, "no_such_integration", store=store)
        assert store.list_jobs() == []

    def test_undetectable_headers(self, service, store, csv_file) -> None:
        path = csv_file([["Foo", "Bar"], ["1", "2"]])
        with pytest.raises(IngestionValidationError, match="Could not detect integration"):
            service.process_file(path, store=store)
        assert store.list_jobs() == []

    def test_empty_file(self, service, store, tmp_path: Path) -> None:
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        with pytest.raises(IngestionValidationError, match="CSV header row is missing"):
            service.process_file(path, store=store)
        assert store.list_jobs() == []


# ---------------------------------------------------------------------------
# Seeded source formats
# ---------------------------------------------------------------------------


class TestSeededIntegrations:
    def test_total_order_customer_cancellation_wins(self, service, store, csv_file) -> None:
        path = csv_file(
            [
                [
                    "Partner",
                    "Order Id",
                    "Order Status",
                    "Total Order Status - Customer Cancelled",
                    "Total Order Status - Partner Cancelled",
                    "Order Datetime",
                    "Total Total Order Value",
                ],
                ["Burger Co", "T1", "good", "1", "1", "05/03/2024 14:30:15", "20.00"],
                ["Burger Co", "T2", "Good", "0", "0", "05/03/2024 15:00:00", "11"],
            ]
        )

        summary = service.process_file(path, "deliveryplatform3_total_order", store=store)

        assert summary.processed == 2
        orders = {order.platform_order_id: order for order in store.orders}
        assert orders["T1"].order_status == OrderStatus.CANCELLED_CUSTOMER
        assert orders["T1"].order_datetime == datetime(2024, 3, 5, 14, 30, 15)
        assert orders["T1"].order_value == 20.0
        assert orders["T2"].order_status == OrderStatus.COMPLETED

    def test_order_history_status_from_transform(self, service, store, csv_file) -> None:
        path = csv_file(
            [
                ["Restaurant", "Order ID", "Order status", "Cancelled by", "Fulfilment Type", "Time to confirm"],
                ["Noodle Bar", "H1", "canceled", "customer", "Pickup", "3"],
            ]
        )

        service.process_file(path, "deliveryplatform1_order_history", store=store)

        [order] = store.orders
        assert order.order_status == OrderStatus.REJECTED_CUSTOMER
        assert order.delivery_type == DeliveryType.PICKUP
        assert order.prep_time_minutes == 3

    def test_business_segments_recombine_timestamp(self, service, store, csv_file) -> None:
        path = csv_file(
            [
                [
                    "Partner Restaurant Name",
                    "Order Order ID",
                    "Common Business Segments  Order Date",
                    "Common Business Segments Order Minute5 of Day",
                    "Order Auto Accept Status",
                ],
                ["Curry House", "S1", "2024-03-05", "19:35", "0.95"],
            ]
        )

        service.process_file(path, "deliveryplatform2_business_segments", store=store)

        [order] = store.orders
        assert order.order_datetime == datetime(2024, 3, 5, 19, 35)
        assert order.auto_accept_status == "95%"
        assert order.order_status == OrderStatus.COMPLETED

    def test_ratings_are_stored(self, service, store, csv_file) -> None:
        path = csv_file(
            [
                ["Restaurant", "Order ID", "Rating value", "Comment"],
                ["Noodle Bar", "H1", "4", "Tasty"],
                ["Noodle Bar", "H2", "", "No score"],
            ]
        )

        summary = service.process_file(path, "deliveryplatform1_rating", store=store)

        assert summary.processed == 1
        assert summary.skipped == 1
        [stored] = store.ratings
        assert stored.rating.rating_value == 4.0
        assert stored.rating.platform_order_id == "H1"
        assert stored.rating.comment == "Tasty"
        assert stored.rating.rating_type == "overall"
        assert store.orders == []


# ---------------------------------------------------------------------------
# CSV dialect
# ---------------------------------------------------------------------------


class TestCsvDialect:
    def test_quoted_cells_bom_and_short_rows(self, service, store, tmp_path: Path) -> None:
        path = tmp_path / "quoted.csv"
        path.write_bytes(
            "\ufeffRestaurant,Order ID,Value,Prep\r\n"
            '"Pizza, Pasta ""&"" More",A1,  7.25  \r\n'.encode("utf-8")
        )

        summary = service.process_file(path, store=store)

        assert summary.integration_name == ORDERS_INTEGRATION
        [restaurant] = store.restaurants
        assert restaurant.name == 'Pizza, Pasta "&" More'
        [order] = store.orders
        assert order.order_value == 7.25
        assert order.prep_time_minutes is None


class TestEncoding:
    def _write_large_csv(self, path: Path, bad_row: int) -> Path:
        lines = [",".join(HEADER).encode("utf-8")]
        for index in range(1, 501):
            restaurant = b"Pizza \xffPlace" if index == bad_row else b"Pizza Place"
            lines.append(restaurant + f",A{index},12.50,0:15".encode("utf-8"))
        path.write_bytes(b"\n".join(lines) + b"\n")
        return path

    def test_invalid_bytes_in_early_row_fail_the_job(self, service, store, tmp_path: Path) -> None:
        path = self._write_large_csv(tmp_path / "latin1.csv", bad_row=3)
        assert path.stat().st_size > 8192

        with pytest.raises(ProcessingError, match="CSV must be UTF-8 encoded"):
            service.process_file(path, store=store)

        [job] = store.list_jobs()
        assert job.status == IngestionJobStatus.FAILED
        assert job.error_message == "CSV must be UTF-8 encoded"
        assert store.orders == []
        assert store.processed_files == []

    def test_invalid_bytes_late_in_file_fail_the_job_the_same_way(
        self, service, store, tmp_path: Path
    ) -> None:
        path = self._write_large_csv(tmp_path / "latin1_late.csv", bad_row=490)

        with pytest.raises(ProcessingError, match="CSV must be UTF-8 encoded"):
            service.process_file(path, store=store)

        [job] = store.list_jobs()
        assert job.status == IngestionJobStatus.FAILED
        assert store.orders == []

    def test_invalid_bytes_in_header_create_no_job(self, service, store, tmp_path: Path) -> None:
        path = tmp_path / "bad_header.csv"
        path.write_bytes(b"Restaurant,Order \xffID,Value,Prep\nPizza Place,A1,12.50,0:15\n")

        with pytest.raises(IngestionValidationError, match="CSV must be UTF-8 encoded"):
            service.process_file(path, store=store)
        assert store.list_jobs() == []
