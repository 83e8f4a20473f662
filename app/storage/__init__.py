"""
app/storage package marker.
"""

from app.storage.base import IngestionStore
from app.storage.memory_storage import InMemoryIngestionStore
from app.storage.sqlalchemy_storage import SQLAlchemyIngestionStore

__all__ = [
    "InMemoryIngestionStore",
    "IngestionStore",
    "SQLAlchemyIngestionStore",
]
