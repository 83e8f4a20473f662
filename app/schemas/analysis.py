"""
app/schemas/analysis.py

Response schemas for the analysis report endpoint.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class DailyOrdersResponse(BaseModel):
    order_date: date
    order_count: int = Field(..., ge=0)
    avg_value: float
    total_value: float


class OrderValueSummaryResponse(BaseModel):
    total_orders: int = Field(default=0, ge=0)
    avg_order_value: float = 0.0
    total_revenue: float = 0.0


class RestaurantPerformanceResponse(BaseModel):
    restaurant_name: str
    platform: str
    order_count: int = Field(..., ge=0)
    total_revenue: float
    avg_order_value: float
    failure_rate_percent: float = Field(..., ge=0, le=100)


class PlatformStatsResponse(BaseModel):
    platform: str
    restaurant_count: int = Field(..., ge=0)
    order_count: int = Field(..., ge=0)
    avg_order_value: float
    total_revenue: float
    failure_rate_percent: float = Field(..., ge=0, le=100)


class HourlyOrdersResponse(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    order_count: int = Field(..., ge=0)
    avg_value: float


class RatingStatsResponse(BaseModel):
    total_ratings: int = Field(default=0, ge=0)
    avg_rating: float = 0.0
    min_rating: float = 0.0
    max_rating: float = 0.0
    high_ratings: int = Field(default=0, ge=0)
    low_ratings: int = Field(default=0, ge=0)


class AnalysisReportResponse(BaseModel):
    """
    API response model for the ``analyse`` report.
    """

    orders_per_day: list[DailyOrdersResponse] = Field(default_factory=list)
    order_value_summary: OrderValueSummaryResponse = Field(default_factory=OrderValueSummaryResponse)
    top_restaurants: list[RestaurantPerformanceResponse] = Field(default_factory=list)
    worst_failure_rate: list[RestaurantPerformanceResponse] = Field(default_factory=list)
    platform_stats: list[PlatformStatsResponse] = Field(default_factory=list)
    hourly_orders: list[HourlyOrdersResponse] = Field(default_factory=list)
    rating_stats: RatingStatsResponse = Field(default_factory=RatingStatsResponse)
