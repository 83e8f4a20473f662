"""
app/domain/errors.py

Exception hierarchy shared by the ingestion engine, storage and CLI.
"""

from __future__ import annotations

from typing import Any


class IngestionError(Exception):
    """
    Base class for every ingestion failure carrying structured context.
    """

    code = "INGESTION_ERROR"

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = dict(context or {})

    def add_context(self, **fields: Any) -> IngestionError:
        """
        Attach fields not already present and return the same error.
        """

        for key, value in fields.items():
            self.context.setdefault(key, value)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": {key: _render(value) for key, value in self.context.items()},
        }


class IngestionValidationError(IngestionError, ValueError):
    """
    Raised for bad input detected before any ingestion job exists.
    """

    code = "VALIDATION_ERROR"


class ProcessingError(IngestionError):
    """
    Raised when a data row cannot be mapped or persisted.
    """

    code = "PROCESSING_ERROR"


class MalformedValueError(ProcessingError):
    """
    Raised by a transform when a cell holds content it cannot interpret.
    """

    code = "MALFORMED_VALUE"


class MalformedTimeError(MalformedValueError):
    code = "MALFORMED_TIME"


class MalformedNumericTimeError(MalformedValueError):
    code = "MALFORMED_NUMERIC_TIME"


class MalformedDateError(MalformedValueError):
    code = "MALFORMED_DATE"


class StorageError(IngestionError):
    """
    Raised when the persistence collaborator fails.
    """

    code = "STORAGE_ERROR"


class IntegrationConfigError(StorageError):
    """
    Raised when a stored integration row cannot be turned into a config,
    e.g. an unknown source format or field type.
    """

    code = "INVALID_INTEGRATION_CONFIG"


def _render(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple)):
        return [_render(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _render(item) for key, item in value.items()}
    return str(value)
