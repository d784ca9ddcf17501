"""Dashboard analytics routes."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from grocery_tracker.services import aggregation
from grocery_tracker.services.aggregation import MonthCursor
from grocery_tracker.services.gateway import RemoteGateway

from ..config import get_gateway
from ..schemas.dashboard import (
    CategorySpending,
    DashboardResponse,
    DaySpending,
    ItemShare,
    ItemSpending,
    MonthRef,
    MonthSpendingResponse,
    PricePoint,
    PriceProgressionResponse,
    SpendingPoint,
)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse, summary="Get dashboard analytics")
async def get_dashboard(gateway: RemoteGateway = Depends(get_gateway)):
    """Fetch aggregated spending figures over all of the user's purchases."""
    purchases = gateway.list_purchases()
    summary = aggregation.build_dashboard(
        purchases, gateway.list_items(), gateway.list_categories()
    )

    return DashboardResponse(
        totalSpent=summary.total_spent,
        currentMonthSpending=summary.current_month_spending,
        averagePerPurchase=summary.average_per_purchase,
        purchaseCount=summary.purchase_count,
        dailySpending=[
            SpendingPoint(key=p.key, label=p.label, amount=p.amount) for p in summary.daily_spending
        ],
        monthlySpending=[
            SpendingPoint(key=p.key, label=p.label, amount=p.amount)
            for p in summary.monthly_spending
        ],
        topItems=[ItemSpending(name=e.name, amount=e.amount) for e in summary.top_items],
        topItemShares=[
            ItemShare(name=e.name, amount=e.amount, share=e.share) for e in summary.top_item_shares
        ],
        categorySpending=[
            CategorySpending(category=e.category, amount=e.amount)
            for e in summary.category_spending
        ],
    )


@router.get(
    "/month/{year}/{month}",
    response_model=MonthSpendingResponse,
    summary="Get day-by-day spending for one month",
)
async def get_month_spending(year: int, month: int, gateway: RemoteGateway = Depends(get_gateway)):
    if not 1 <= month <= 12:
        raise HTTPException(status_code=400, detail="month must be between 1 and 12")

    current = MonthCursor.current()
    cursor = MonthCursor(year, month)
    if (cursor.year, cursor.month) > (current.year, current.month):
        cursor = current

    days = aggregation.month_spending_by_day(gateway.list_purchases(), cursor)
    previous, following = cursor.previous(), cursor.next(date.today())

    return MonthSpendingResponse(
        year=cursor.year,
        month=cursor.month,
        label=cursor.label,
        total=round(sum(entry.amount for entry in days), 2),
        days=[DaySpending(day=entry.day, amount=entry.amount) for entry in days],
        previous=MonthRef(year=previous.year, month=previous.month),
        next=MonthRef(year=following.year, month=following.month),
    )


@router.get(
    "/price-progression/{item_id}",
    response_model=PriceProgressionResponse,
    summary="Get the unit price history of one item",
)
async def get_price_progression(item_id: str, gateway: RemoteGateway = Depends(get_gateway)):
    points = aggregation.price_progression(gateway.list_purchases(), item_id)
    return PriceProgressionResponse(
        itemId=item_id,
        points=[PricePoint(purchase=p.purchase, date=p.date, price=p.price) for p in points],
    )
