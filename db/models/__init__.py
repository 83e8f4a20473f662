"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.ingestion_job import IngestionJob
from db.models.integration import Integration
from db.models.order import Order
from db.models.platform import Platform
from db.models.processed_file import ProcessedFile
from db.models.rating import Rating
from db.models.restaurant import Restaurant

__all__ = [
    "IngestionJob",
    "Integration",
    "Order",
    "Platform",
    "ProcessedFile",
    "Rating",
    "Restaurant",
]
