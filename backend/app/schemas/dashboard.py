"""Dashboard schema definitions."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel


class SpendingPoint(BaseModel):
    """Spending for one day or month."""

    key: str  # YYYY-MM-DD or YYYY-MM
    label: str
    amount: float


class DaySpending(BaseModel):
    day: int
    amount: float


class ItemSpending(BaseModel):
    name: str
    amount: float


class ItemShare(BaseModel):
    name: str
    amount: float
    share: float


class CategorySpending(BaseModel):
    category: str
    amount: float


class PricePoint(BaseModel):
    purchase: int
    date: str
    price: float


class DashboardResponse(BaseModel):
    """Response payload for the dashboard overview."""

    # KPIs
    totalSpent: float
    currentMonthSpending: float
    averagePerPurchase: float
    purchaseCount: int

    # Time series
    dailySpending: List[SpendingPoint]
    monthlySpending: List[SpendingPoint]

    # Item and category analytics
    topItems: List[ItemSpending]
    topItemShares: List[ItemShare]
    categorySpending: List[CategorySpending]


class MonthRef(BaseModel):
    year: int
    month: int


class MonthSpendingResponse(BaseModel):
    """Day-by-day spending for one month, with navigation targets."""

    year: int
    month: int
    label: str
    total: float
    days: List[DaySpending]
    previous: MonthRef
    next: MonthRef


class PriceProgressionResponse(BaseModel):
    itemId: str
    points: List[PricePoint]
