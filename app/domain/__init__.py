"""
app/domain package marker.
"""

from app.domain.errors import (
    IngestionError,
    IngestionValidationError,
    IntegrationConfigError,
    MalformedDateError,
    MalformedNumericTimeError,
    MalformedTimeError,
    MalformedValueError,
    ProcessingError,
    StorageError,
)
from app.domain.ingestion import IngestionJobStatus, IngestionSummary, JobRecord, JobUpdate
from app.domain.integration import FieldSpec, FieldType, IntegrationConfig, TargetTable
from app.domain.order import DeliveryType, OrderData, OrderStatus, RatingData

__all__ = [
    "DeliveryType",
    "FieldSpec",
    "FieldType",
    "IngestionError",
    "IngestionJobStatus",
    "IngestionSummary",
    "IngestionValidationError",
    "IntegrationConfig",
    "IntegrationConfigError",
    "JobRecord",
    "JobUpdate",
    "MalformedDateError",
    "MalformedNumericTimeError",
    "MalformedTimeError",
    "MalformedValueError",
    "OrderData",
    "OrderStatus",
    "ProcessingError",
    "RatingData",
    "StorageError",
    "TargetTable",
]
