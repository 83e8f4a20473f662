"""
app/domain/integration.py

Integration configuration as consumed by the ingestion engine.

An integration binds one export layout (its CSV header names) to the
normalized schema. The persisted JSON form of a field mapping is::

    {
        "Order ID": {"target": "platform_order_id", "required": true},
        "Ticket size": {"target": "order_value", "type": "number"},
        "Time to confirm": {"target": "prep_time_minutes", "transform": "timeToMinutes"}
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Sequence

if TYPE_CHECKING:
    from sources.base import BaseSourceFormat


class FieldType:
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    ENUM = "enum"


FIELD_TYPES: frozenset[str] = frozenset(
    {FieldType.STRING, FieldType.NUMBER, FieldType.BOOLEAN, FieldType.DATE, FieldType.ENUM}
)


class TargetTable:
    ORDERS = "orders"
    RESTAURANTS = "restaurants"
    RATINGS = "ratings"


@dataclass(frozen=True)
class FieldSpec:
    """
    One source column's mapping rule.

    ``has_default`` distinguishes "no default configured" from a configured
    default of ``None``.
    """

    target: str
    type: str = FieldType.STRING
    enum_values: tuple[str, ...] | None = None
    transform: str | None = None
    required: bool = False
    default: Any = None
    has_default: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> FieldSpec:
        target = payload.get("target")
        if not isinstance(target, str) or not target.strip():
            raise ValueError(f"Field mapping entry is missing a target: {dict(payload)!r}")

        raw_type = payload.get("type") or FieldType.STRING
        field_type = str(raw_type).strip().lower()
        if field_type not in FIELD_TYPES:
            raise ValueError(f"Unsupported field type {raw_type!r} for target {target!r}.")

        raw_enum = payload.get("enum_values")
        enum_values = tuple(str(item) for item in raw_enum) if raw_enum else None

        transform = payload.get("transform")
        return cls(
            target=target.strip(),
            type=field_type,
            enum_values=enum_values,
            transform=str(transform) if transform else None,
            required=bool(payload.get("required", False)),
            default=payload.get("default"),
            has_default="default" in payload,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"target": self.target}
        if self.type != FieldType.STRING:
            payload["type"] = self.type
        if self.enum_values:
            payload["enum_values"] = list(self.enum_values)
        if self.transform:
            payload["transform"] = self.transform
        if self.required:
            payload["required"] = True
        if self.has_default:
            payload["default"] = self.default
        return payload


@dataclass(frozen=True)
class IntegrationConfig:
    """
    Read-only view of one integration, with its source format bound once.
    """

    name: str
    platform_id: int
    field_mapping: dict[str, FieldSpec]
    tables: tuple[str, ...] = ()
    is_active: bool = True
    id: int | None = None
    source_format: BaseSourceFormat = field(default_factory=lambda: _select_source_format(None, None))

    @classmethod
    def from_mapping(
        cls,
        *,
        name: str,
        platform_id: int,
        field_mapping: Mapping[str, Mapping[str, Any]],
        tables: Sequence[str] = (),
        is_active: bool = True,
        id: int | None = None,
        source_format: str | None = None,
    ) -> IntegrationConfig:
        """
        Build a config from its persisted JSON shape.
        """

        return cls(
            id=id,
            name=name,
            platform_id=platform_id,
            field_mapping={
                str(column): FieldSpec.from_dict(spec)
                for column, spec in field_mapping.items()
            },
            tables=tuple(tables or ()),
            is_active=is_active,
            source_format=_select_source_format(source_format, name),
        )

    @property
    def targets_orders(self) -> bool:
        return TargetTable.ORDERS in self.tables

    @property
    def targets_ratings(self) -> bool:
        return TargetTable.RATINGS in self.tables

    def header_score(self, headers: Sequence[str] | frozenset[str]) -> float:
        """
        Fraction of configured source columns present in ``headers``.
        """

        keys = list(self.field_mapping.keys())
        if not keys:
            return 0.0
        header_set = set(headers)
        return sum(1 for key in keys if key in header_set) / len(keys)


def _select_source_format(key: str | None, integration_name: str | None) -> BaseSourceFormat:
    from sources.registry import select_source_format

    return select_source_format(key=key, integration_name=integration_name)
