"""
tests/conftest.py

Shared fixtures: an in-memory store seeded with the bundled integrations
and a helper that writes CSV files under pytest's tmp_path.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence

import pytest

from app.config import IngestionSettings
from app.services.csv_ingestion_service import CSVIngestionService
from app.storage.memory_storage import InMemoryIngestionStore

ORDERS_INTEGRATION = "test_orders"

ORDERS_MAPPING = {
    "Restaurant": {"target": "restaurant_name", "required": True},
    "Order ID": {"target": "platform_order_id", "required": True},
    "Value": {"target": "order_value", "type": "number"},
    "Prep": {"target": "prep_time_minutes", "transform": "timeToMinutes"},
}


def write_csv(path: Path, rows: Sequence[Sequence[str]]) -> Path:
    lines = [",".join(row) for row in rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture()
def csv_file(tmp_path: Path) -> Callable[..., Path]:
    def _write(rows: Sequence[Sequence[str]], name: str = "export.csv") -> Path:
        return write_csv(tmp_path / name, rows)

    return _write


@pytest.fixture()
def store() -> InMemoryIngestionStore:
    """Store with one generic orders integration and the seed integrations."""
    memory = InMemoryIngestionStore.from_seed_data()
    platform_id = memory.add_platform("TestPlatform")
    memory.add_integration(
        name=ORDERS_INTEGRATION,
        platform_id=platform_id,
        field_mapping=ORDERS_MAPPING,
        tables=["orders", "restaurants"],
    )
    memory.commit()
    return memory


@pytest.fixture()
def service() -> CSVIngestionService:
    return CSVIngestionService(settings=IngestionSettings(progress_log_interval=1))
