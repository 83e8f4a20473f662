"""
app/mappers/transforms.py

Named value transforms referenced from integration field mappings.

Every transform takes one raw cell string and returns a typed value.
Transforms are looked up by name through :class:`TransformLibrary`; an
unregistered name returns the raw value unchanged so that configuration
can name transforms this build does not know about.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterator, Mapping
from datetime import datetime, timezone
from typing import Any

from app.domain.errors import MalformedDateError, MalformedNumericTimeError, MalformedTimeError
from app.domain.order import DeliveryType, OrderStatus

Transform = Callable[[str], Any]

_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_UK_DATETIME = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})\s+(\d{1,2}):(\d{2}):(\d{2})$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_HOUR_MINUTE = re.compile(r"^(\d{1,2}):(\d{2})$")

DATETIME_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d %Y",
    "%B %d, %Y",
    "%a, %d %b %Y %H:%M:%S",
)


# ---------------------------------------------------------------------------
# Number helpers
# ---------------------------------------------------------------------------


def parse_leading_float(value: Any) -> float:
    """
    Parse the numeric prefix of ``value``; NaN when there is none.

    ``"5.5min"`` parses as 5.5, ``"abc"`` and ``""`` as NaN.
    """

    text = str(value) if value is not None else ""
    stripped = text.strip()
    if stripped in {"Infinity", "+Infinity"}:
        return math.inf
    if stripped == "-Infinity":
        return -math.inf
    match = _LEADING_FLOAT.match(text)
    if match is None:
        return math.nan
    return float(match.group(1))


def parse_leading_int(value: Any) -> int | None:
    text = str(value) if value is not None else ""
    match = _LEADING_INT.match(text)
    if match is None:
        return None
    return int(match.group(1))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return math.floor(value + 0.5)


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


# ---------------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------------


def _to_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_generic_datetime(value: Any) -> datetime | None:
    """
    Best-effort datetime parse: ISO 8601 first, then common export formats.

    Returns ``None`` when nothing matches. Timezone-aware results are
    converted to naive UTC.
    """

    if _is_blank(value):
        return None
    raw = str(value).strip()

    normalized = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    try:
        return _to_naive(datetime.fromisoformat(normalized))
    except ValueError:
        pass

    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    return None


# ---------------------------------------------------------------------------
# Generic transforms
# ---------------------------------------------------------------------------


def exists_or_empty(value: str) -> str:
    return value or ""


def exists_or_default(value: str, default: str = "unknown") -> str:
    return value or default


def parse_boolean(value: str, true_value: str = "1") -> bool:
    return value == true_value


def parse_percentage(value: str) -> str:
    """
    Render a fraction as a whole percentage: ``"0.42"`` -> ``"42%"``.
    """

    number = parse_leading_float(value)
    if math.isnan(number):
        return "unknown"
    if math.isinf(number):
        return f"{'-' if number < 0 else ''}Infinity%"
    return f"{round_half_up(number * 100)}%"


def time_to_minutes(value: str) -> int | None:
    """
    Convert ``H:M``, ``H:M:S`` or a plain number of minutes to whole minutes.

    Blank input yields ``None``. Minutes and seconds must lie in 0..59;
    hours only need to be non-negative, so durations past 24h are kept.
    """

    if _is_blank(value):
        return None

    if ":" in value:
        parts = value.split(":")
        if len(parts) < 2 or len(parts) > 3:
            raise MalformedTimeError(
                "Invalid time format",
                context={"value": value, "expected_format": "HH:MM or HH:MM:SS"},
            )

        hours = parse_leading_int(parts[0]) or 0
        minutes = parse_leading_int(parts[1]) or 0
        seconds = parse_leading_int(parts[2]) or 0 if len(parts) == 3 else 0

        if hours < 0 or minutes < 0 or minutes > 59 or seconds < 0 or seconds > 59:
            raise MalformedTimeError(
                "Invalid time values",
                context={"value": value, "hours": hours, "minutes": minutes, "seconds": seconds},
            )
        return hours * 60 + minutes + round_half_up(seconds / 60)

    number = parse_leading_float(value)
    if math.isnan(number) or number < 0 or math.isinf(number):
        raise MalformedNumericTimeError("Invalid numeric time value", context={"value": value})
    return round_half_up(number)


def parse_date(value: str) -> datetime | None:
    """
    Parse ``DD/MM/YYYY HH:MM:SS`` exports, falling back to generic parsing.
    """

    if _is_blank(value):
        return None

    match = _UK_DATETIME.match(value)
    if match:
        day, month, year, hour, minute, second = (int(part) for part in match.groups())
        components = {
            "value": value,
            "day": day,
            "month": month,
            "year": year,
            "hour": hour,
            "minute": minute,
            "second": second,
        }
        if (
            day < 1
            or day > 31
            or month < 1
            or month > 12
            or hour > 23
            or minute > 59
            or second > 59
        ):
            raise MalformedDateError("Invalid date/time components", context=components)
        try:
            return datetime(year, month, day, hour, minute, second)
        except ValueError as exc:
            raise MalformedDateError("Invalid date", context=components) from exc

    parsed = parse_generic_datetime(value)
    if parsed is None:
        raise MalformedDateError("Invalid date format", context={"value": value})
    return parsed


def parse_delivery_platform2_time(value: str) -> str:
    # Combined with the order date once the whole row is mapped.
    return value or ""


def parse_delivery_platform2_datetime(date_value: Any, time_value: Any) -> datetime | None:
    """
    Combine a ``YYYY-M-D`` date and an ``H:MM`` time; ``None`` when either
    side is missing or the combination is not a real timestamp.
    """

    if not date_value or not time_value:
        return None

    date_match = _ISO_DATE.match(str(date_value))
    if date_match is None:
        return None
    time_match = _HOUR_MINUTE.match(str(time_value))
    if time_match is None:
        return None

    year, month, day = (int(part) for part in date_match.groups())
    hour, minute = (int(part) for part in time_match.groups())
    try:
        return datetime(year, month, day, hour, minute, 0)
    except ValueError:
        return None


def delivery_type(value: str) -> str:
    return {
        "delivery": DeliveryType.DELIVERY,
        "collection": DeliveryType.COLLECTION,
        "pickup": DeliveryType.PICKUP,
    }.get((value or "").lower(), DeliveryType.UNKNOWN)


# ---------------------------------------------------------------------------
# Source-specific transforms
# ---------------------------------------------------------------------------


def delivery_platform1_order_status(value: str) -> str:
    return {
        "completed": OrderStatus.COMPLETED,
        "canceled": OrderStatus.REJECTED_CUSTOMER,
    }.get((value or "").lower(), OrderStatus.REJECTED)


def delivery_platform1_boolean(value: str) -> bool:
    return parse_boolean(value, "1")


def delivery_platform1_cancelled_by(value: str) -> str:
    return exists_or_empty(value)


def delivery_platform3_order_status(value: str) -> str:
    return exists_or_empty(value)


def delivery_platform2_accept_status(value: str) -> str:
    if (value or "").lower() == "on":
        return "accepted"
    if not math.isnan(parse_leading_float(value)):
        return parse_percentage(value)
    return exists_or_default(value)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

DEFAULT_TRANSFORMS: dict[str, Transform] = {
    "existsOrEmpty": exists_or_empty,
    "existsOrDefault": exists_or_default,
    "parseBoolean": parse_boolean,
    "parsePercentage": parse_percentage,
    "timeToMinutes": time_to_minutes,
    "parseDate": parse_date,
    "parseDeliveryPlatform2Time": parse_delivery_platform2_time,
    # Single-column form; the two-column combination runs as a record fixup.
    "parseDeliveryPlatform2DateTime": parse_date,
    "deliveryType": delivery_type,
    "deliveryPlatform1OrderStatus": delivery_platform1_order_status,
    "deliveryPlatform1Boolean": delivery_platform1_boolean,
    "deliveryPlatform1CancelledBy": delivery_platform1_cancelled_by,
    "deliveryPlatform3OrderStatus": delivery_platform3_order_status,
    "deliveryPlatform2AcceptStatus": delivery_platform2_accept_status,
}


class TransformLibrary:
    """
    Name -> transform registry used by the field mapper.
    """

    def __init__(self, transforms: Mapping[str, Transform] | None = None) -> None:
        self._transforms: dict[str, Transform] = dict(
            DEFAULT_TRANSFORMS if transforms is None else transforms
        )

    def register(self, name: str, transform: Transform) -> None:
        self._transforms[name] = transform

    def apply(self, value: str, transform_name: str) -> Any:
        """
        Run the named transform; unknown names return ``value`` unchanged.
        """

        transform = self._transforms.get(transform_name)
        if transform is None:
            return value
        return transform(value)

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._transforms))

    def __contains__(self, name: object) -> bool:
        return name in self._transforms

    def __iter__(self) -> Iterator[str]:
        return iter(self._transforms)


def default_transform_library() -> TransformLibrary:
    return TransformLibrary()
