"""
tests/test_api.py

HTTP routes exercised through FastAPI's TestClient with the storage and
analysis dependencies overridden; no database is touched.
"""

from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_analysis_service, get_ingestion_store
from app.main import create_app
from app.services.analysis_service import AnalysisReport, DailyOrders, PlatformStats
from app.services.csv_ingestion_service import CSVIngestionService, get_csv_ingestion_service

GOOD_CSV = b"Restaurant,Order ID,Value,Prep\nPizza Place,A1,12.50,0:15\nPizza Place,,9.99,0:10\n"


class _StubAnalysisService:
    def build_report(self) -> AnalysisReport:
        return AnalysisReport(
            orders_per_day=[DailyOrders(order_date=date(2024, 3, 5), order_count=2, avg_value=10.0, total_value=20.0)],
            platform_stats=[
                PlatformStats(
                    platform="DeliveryPlatform1",
                    restaurant_count=1,
                    order_count=2,
                    avg_order_value=10.0,
                    total_revenue=20.0,
                    failure_rate_percent=50.0,
                )
            ],
        )


@pytest.fixture()
def client(store):
    app = create_app(startup_checks=False)
    app.dependency_overrides[get_ingestion_store] = lambda: store
    app.dependency_overrides[get_csv_ingestion_service] = lambda: CSVIngestionService()
    app.dependency_overrides[get_analysis_service] = lambda: _StubAnalysisService()
    with TestClient(app) as test_client:
        yield test_client


def _upload(client: TestClient, content: bytes, *, filename: str = "orders.csv", content_type: str = "text/csv", **params):
    return client.post(
        "/ingestion/upload",
        files={"file": (filename, content, content_type)},
        params=params,
    )


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_upload_returns_summary(client: TestClient, store) -> None:
    response = _upload(client, GOOD_CSV)

    assert response.status_code == 200
    body = response.json()
    assert body["integration"] == "test_orders"
    assert body["processed"] == 1
    assert body["skipped"] == 1
    assert body["file_path"] == "orders.csv"
    assert body["duplicate"] is False
    assert len(store.orders) == 1


def test_upload_twice_is_duplicate(client: TestClient) -> None:
    _upload(client, GOOD_CSV, filename="a.csv")
    response = _upload(client, GOOD_CSV, filename="b.csv")
    assert response.status_code == 200
    assert response.json()["duplicate"] is True


def test_upload_with_explicit_key(client: TestClient) -> None:
    response = _upload(client, GOOD_CSV, integration_key="test_orders")
    assert response.status_code == 200
    assert response.json()["integration"] == "test_orders"


def test_non_csv_upload_is_rejected(client: TestClient) -> None:
    response = _upload(client, b"hello", filename="notes.txt", content_type="text/plain")
    assert response.status_code == 400
    assert response.json()["detail"] == "Only CSV files are allowed."


def test_undetectable_headers_are_bad_request(client: TestClient, store) -> None:
    response = _upload(client, b"Foo,Bar\n1,2\n")
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "VALIDATION_ERROR"
    assert detail["message"] == "Could not detect integration"
    assert store.list_jobs() == []


def test_malformed_value_is_unprocessable(client: TestClient, store) -> None:
    response = _upload(client, b"Restaurant,Order ID,Value,Prep\nPizza Place,A1,1,12:75\n")
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["code"] == "MALFORMED_TIME"
    assert detail["context"]["row_number"] == 2
    [job] = store.list_jobs()
    assert job.status == "failed"


def test_jobs_listing_and_lookup(client: TestClient) -> None:
    job_id = _upload(client, GOOD_CSV).json()["job_id"]

    listing = client.get("/ingestion/jobs", params={"status": "completed", "limit": 5})
    assert listing.status_code == 200
    jobs = listing.json()["jobs"]
    assert [job["id"] for job in jobs] == [job_id]
    assert jobs[0]["processed_rows"] == 1
    assert jobs[0]["error_rows"] == 1

    assert client.get("/ingestion/jobs", params={"status": "failed"}).json()["jobs"] == []

    single = client.get(f"/ingestion/jobs/{job_id}")
    assert single.status_code == 200
    assert single.json()["file_path"] == "orders.csv"


def test_unknown_job_is_not_found(client: TestClient) -> None:
    response = client.get("/ingestion/jobs/999")
    assert response.status_code == 404


def test_analysis_report(client: TestClient) -> None:
    response = client.get("/analysis")
    assert response.status_code == 200
    body = response.json()
    assert body["orders_per_day"][0]["order_date"] == "2024-03-05"
    assert body["platform_stats"][0]["failure_rate_percent"] == 50.0
    assert body["rating_stats"]["total_ratings"] == 0
    assert body["top_restaurants"] == []
