"""
app/services/analysis_service.py

Read-only reporting over the normalized order and rating tables.

Query design
------------
Every section is one aggregate SQL statement; nothing is computed per row
in Python beyond rounding and type conversion. Failure rate is the share of
orders in any ``REJECTED*`` or ``CANCELLED*`` status, as a percentage with
two decimals.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import Float, case, cast, distinct, extract, func, select
from sqlalchemy.orm import Session

from app.config import AnalysisSettings
from app.domain.order import FAILED_ORDER_STATUSES
from db.models.order import Order
from db.models.platform import Platform
from db.models.rating import Rating
from db.models.restaurant import Restaurant

logger = logging.getLogger(__name__)

HIGH_RATING_THRESHOLD = 4.0
LOW_RATING_THRESHOLD = 2.0


# ---------------------------------------------------------------------------
# Report rows
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DailyOrders:
    order_date: date
    order_count: int
    avg_value: float
    total_value: float


@dataclass(frozen=True)
class OrderValueSummary:
    total_orders: int = 0
    avg_order_value: float = 0.0
    total_revenue: float = 0.0


@dataclass(frozen=True)
class RestaurantPerformance:
    restaurant_name: str
    platform: str
    order_count: int
    total_revenue: float
    avg_order_value: float
    failure_rate_percent: float


@dataclass(frozen=True)
class PlatformStats:
    platform: str
    restaurant_count: int
    order_count: int
    avg_order_value: float
    total_revenue: float
    failure_rate_percent: float


@dataclass(frozen=True)
class HourlyOrders:
    hour: int
    order_count: int
    avg_value: float


@dataclass(frozen=True)
class RatingStats:
    total_ratings: int = 0
    avg_rating: float = 0.0
    min_rating: float = 0.0
    max_rating: float = 0.0
    high_ratings: int = 0
    low_ratings: int = 0


@dataclass(frozen=True)
class AnalysisReport:
    orders_per_day: list[DailyOrders] = field(default_factory=list)
    order_value_summary: OrderValueSummary = field(default_factory=OrderValueSummary)
    top_restaurants: list[RestaurantPerformance] = field(default_factory=list)
    worst_failure_rate: list[RestaurantPerformance] = field(default_factory=list)
    platform_stats: list[PlatformStats] = field(default_factory=list)
    hourly_orders: list[HourlyOrders] = field(default_factory=list)
    rating_stats: RatingStats = field(default_factory=RatingStats)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        for row in payload["orders_per_day"]:
            row["order_date"] = row["order_date"].isoformat()
        return payload


def _float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, Decimal):
        return float(value)
    return float(value)


def _rate(failed: Any, total: Any) -> float:
    total_count = int(total or 0)
    if total_count == 0:
        return 0.0
    return round(int(failed or 0) / total_count * 100, 2)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class AnalysisService:
    """
    Builds the ``analyse`` report.

    Parameters
    ----------
    session:
        Active SQLAlchemy session. The caller controls its lifecycle.
    settings:
        Row limits for the ranked sections.
    """

    def __init__(self, session: Session, settings: AnalysisSettings | None = None) -> None:
        self._session = session
        self._settings = settings or AnalysisSettings()

    def build_report(self) -> AnalysisReport:
        report = AnalysisReport(
            orders_per_day=self.orders_per_day(),
            order_value_summary=self.order_value_summary(),
            top_restaurants=self.top_restaurants_by_revenue(),
            worst_failure_rate=self.highest_failure_rate_restaurants(),
            platform_stats=self.platform_stats(),
            hourly_orders=self.hourly_orders(),
            rating_stats=self.rating_stats(),
        )
        logger.info(
            "Analysis report built days=%s restaurants=%s platforms=%s",
            len(report.orders_per_day),
            len(report.top_restaurants),
            len(report.platform_stats),
        )
        return report

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def orders_per_day(self) -> list[DailyOrders]:
        """
        Latest ``top_n`` order dates with count, average and total value.
        """

        order_date = func.date(Order.order_datetime).label("order_date")
        stmt = (
            select(
                order_date,
                func.count(Order.id),
                func.avg(Order.order_value),
                func.sum(Order.order_value),
            )
            .where(Order.order_datetime.is_not(None))
            .group_by(order_date)
            .order_by(order_date.desc())
            .limit(self._settings.top_n)
        )
        return [
            DailyOrders(
                order_date=row[0],
                order_count=int(row[1]),
                avg_value=_float(row[2]),
                total_value=_float(row[3]),
            )
            for row in self._session.execute(stmt).all()
        ]

    def order_value_summary(self) -> OrderValueSummary:
        stmt = select(
            func.count(Order.id),
            func.avg(Order.order_value),
            func.sum(Order.order_value),
        ).where(Order.order_value.is_not(None))
        row = self._session.execute(stmt).one()
        return OrderValueSummary(
            total_orders=int(row[0] or 0),
            avg_order_value=_float(row[1]),
            total_revenue=_float(row[2]),
        )

    def top_restaurants_by_revenue(self) -> list[RestaurantPerformance]:
        stmt = self._restaurant_performance_query().order_by(
            func.coalesce(func.sum(Order.order_value), 0).desc()
        ).limit(self._settings.top_n)
        return self._restaurant_rows(stmt)

    def highest_failure_rate_restaurants(self) -> list[RestaurantPerformance]:
        """
        Restaurants with at least ``min_orders_for_failure_rank`` orders,
        highest failure share first, lower revenue breaking ties.
        """

        failed = self._failed_count()
        total = func.count(Order.id)
        stmt = (
            self._restaurant_performance_query()
            .having(total >= self._settings.min_orders_for_failure_rank)
            .order_by(
                (cast(failed, Float) / total).desc(),
                func.coalesce(func.sum(Order.order_value), 0).asc(),
            )
            .limit(max(1, self._settings.top_n // 2))
        )
        return self._restaurant_rows(stmt)

    def platform_stats(self) -> list[PlatformStats]:
        stmt = (
            select(
                Platform.name,
                func.count(distinct(Restaurant.id)),
                func.count(Order.id),
                func.avg(Order.order_value),
                func.coalesce(func.sum(Order.order_value), 0),
                self._failed_count(),
            )
            .select_from(Platform)
            .outerjoin(Restaurant, Restaurant.platform_id == Platform.id)
            .outerjoin(Order, Order.restaurant_id == Restaurant.id)
            .group_by(Platform.id, Platform.name)
            .order_by(func.coalesce(func.sum(Order.order_value), 0).desc())
        )
        return [
            PlatformStats(
                platform=row[0],
                restaurant_count=int(row[1]),
                order_count=int(row[2]),
                avg_order_value=_float(row[3]),
                total_revenue=_float(row[4]),
                failure_rate_percent=_rate(row[5], row[2]),
            )
            for row in self._session.execute(stmt).all()
        ]

    def hourly_orders(self) -> list[HourlyOrders]:
        hour = extract("hour", Order.order_datetime).label("hour")
        stmt = (
            select(hour, func.count(Order.id), func.avg(Order.order_value))
            .where(Order.order_datetime.is_not(None))
            .group_by(hour)
            .order_by(hour)
        )
        return [
            HourlyOrders(hour=int(row[0]), order_count=int(row[1]), avg_value=_float(row[2]))
            for row in self._session.execute(stmt).all()
        ]

    def rating_stats(self) -> RatingStats:
        stmt = select(
            func.count(Rating.id),
            func.avg(Rating.rating_value),
            func.min(Rating.rating_value),
            func.max(Rating.rating_value),
            func.count(case((Rating.rating_value >= HIGH_RATING_THRESHOLD, 1))),
            func.count(case((Rating.rating_value <= LOW_RATING_THRESHOLD, 1))),
        ).where(Rating.rating_value.is_not(None))
        row = self._session.execute(stmt).one()
        return RatingStats(
            total_ratings=int(row[0] or 0),
            avg_rating=round(_float(row[1]), 2),
            min_rating=_float(row[2]),
            max_rating=_float(row[3]),
            high_ratings=int(row[4] or 0),
            low_ratings=int(row[5] or 0),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _failed_count() -> Any:
        return func.count(case((Order.order_status.in_(FAILED_ORDER_STATUSES), 1)))

    def _restaurant_performance_query(self) -> Any:
        return (
            select(
                Restaurant.name,
                Platform.name,
                func.count(Order.id),
                func.coalesce(func.sum(Order.order_value), 0),
                func.coalesce(func.avg(Order.order_value), 0),
                self._failed_count(),
            )
            .select_from(Restaurant)
            .join(Platform, Restaurant.platform_id == Platform.id)
            .join(Order, Order.restaurant_id == Restaurant.id)
            .group_by(Restaurant.id, Restaurant.name, Platform.name)
        )

    def _restaurant_rows(self, stmt: Any) -> list[RestaurantPerformance]:
        return [
            RestaurantPerformance(
                restaurant_name=row[0],
                platform=row[1],
                order_count=int(row[2]),
                total_revenue=_float(row[3]),
                avg_order_value=_float(row[4]),
                failure_rate_percent=_rate(row[5], row[2]),
            )
            for row in self._session.execute(stmt).all()
        ]
