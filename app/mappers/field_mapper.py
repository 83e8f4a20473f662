"""
app/mappers/field_mapper.py

Config-driven mapping of one raw CSV row onto the normalized schema.
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping

from app.domain.ingestion import NormalizedRecord
from app.domain.integration import FieldSpec, FieldType, IntegrationConfig
from app.mappers.transforms import TransformLibrary, default_transform_library, parse_generic_datetime, parse_leading_float

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_TRUTHY = frozenset({"on", "true", "1"})


class FieldMapper:
    """
    Applies an integration's field mapping to raw records.

    Per column, in configuration order:

    1. an empty cell with a configured default takes the default as-is;
    2. otherwise a named transform, when configured, produces the value;
    3. otherwise the value is coerced by the column's declared type.

    A required column that ends up ``None`` or ``""`` rejects the whole row.
    Malformed-value errors raised by transforms propagate to the caller.
    """

    def __init__(self, transforms: TransformLibrary | None = None) -> None:
        self._transforms = transforms or default_transform_library()

    @property
    def transforms(self) -> TransformLibrary:
        return self._transforms

    def map(
        self,
        record: Mapping[str, str],
        integration: IntegrationConfig,
    ) -> NormalizedRecord | None:
        """
        Map one raw record, or return ``None`` when the row must be skipped.
        """

        result: NormalizedRecord = {"platform_id": integration.platform_id}

        for column, spec in integration.field_mapping.items():
            value = self.map_value(record.get(column, ""), spec)
            if spec.required and (value is None or value == ""):
                return None
            result[spec.target] = value

        result = integration.source_format.map_record(result)

        if integration.targets_orders and not result.get("platform_order_id"):
            return None
        return result

    def map_value(self, raw: str | None, spec: FieldSpec) -> Any:
        if not raw and spec.has_default:
            return spec.default

        if spec.transform:
            return self._transforms.apply(raw or "", spec.transform)

        if spec.type == FieldType.NUMBER:
            return _coerce_number(raw)
        if spec.type == FieldType.BOOLEAN:
            return _coerce_boolean(raw)
        if spec.type == FieldType.DATE:
            return parse_generic_datetime(raw) if raw else None
        if spec.type == FieldType.ENUM:
            return _coerce_enum(raw, spec.enum_values)
        return raw.strip() or None if raw else None


def _coerce_number(raw: str | None) -> float | None:
    if not raw:
        return None
    number = parse_leading_float(_NON_NUMERIC.sub("", raw))
    if math.isnan(number):
        return None
    return number


def _coerce_boolean(raw: str | None) -> bool:
    if not raw:
        return False
    return raw.lower() in _TRUTHY


def _coerce_enum(raw: str | None, enum_values: tuple[str, ...] | None) -> str | None:
    if not enum_values:
        return raw
    lowered = (raw or "").lower()
    for candidate in enum_values:
        if candidate.lower() == lowered:
            return candidate
    return raw
