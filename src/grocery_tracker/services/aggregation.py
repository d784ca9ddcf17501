"""Dashboard statistics derived from the purchase collection.

Every function is a pure function of its inputs. Sums are accumulated
unrounded; values are rounded to cents only when results are returned.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from grocery_tracker.constants import (
    DAILY_SPENDING_DAYS,
    TOP_ITEMS_LIMIT,
    TOP_ITEMS_SHARE_LIMIT,
    UNCATEGORIZED,
)
from grocery_tracker.domain.models import Category, Item, Purchase


def _money(value: float) -> float:
    return round(value, 2)


@dataclass(slots=True)
class SpendingPoint:
    """Spending for one day (``YYYY-MM-DD``) or month (``YYYY-MM``)."""

    key: str
    label: str
    amount: float


@dataclass(slots=True)
class DaySpending:
    day: int
    amount: float


@dataclass(slots=True)
class ItemSpending:
    name: str
    amount: float


@dataclass(slots=True)
class ItemShare:
    name: str
    amount: float
    share: float  # fraction of the displayed slice, 0..1


@dataclass(slots=True)
class PricePoint:
    purchase: int  # 1-based index among purchases containing the item
    date: str
    price: float


@dataclass(slots=True)
class CategorySpending:
    category: str
    amount: float


@dataclass(slots=True)
class DashboardSummary:
    total_spent: float
    current_month_spending: float
    average_per_purchase: float
    purchase_count: int
    daily_spending: List[SpendingPoint] = field(default_factory=list)
    monthly_spending: List[SpendingPoint] = field(default_factory=list)
    top_items: List[ItemSpending] = field(default_factory=list)
    top_item_shares: List[ItemShare] = field(default_factory=list)
    category_spending: List[CategorySpending] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class MonthCursor:
    """A calendar month that can be stepped backwards and (up to now) forwards."""

    year: int
    month: int

    @classmethod
    def current(cls, today: Optional[date] = None) -> "MonthCursor":
        today = today or date.today()
        return cls(today.year, today.month)

    def previous(self) -> "MonthCursor":
        if self.month == 1:
            return MonthCursor(self.year - 1, 12)
        return MonthCursor(self.year, self.month - 1)

    def next(self, today: Optional[date] = None) -> "MonthCursor":
        """Advance one month, never past the current real month."""
        if self.month == 12:
            candidate = MonthCursor(self.year + 1, 1)
        else:
            candidate = MonthCursor(self.year, self.month + 1)
        limit = MonthCursor.current(today)
        if (candidate.year, candidate.month) > (limit.year, limit.month):
            return limit
        return candidate

    def contains(self, moment: datetime) -> bool:
        return moment.year == self.year and moment.month == self.month

    @property
    def label(self) -> str:
        return date(self.year, self.month, 1).strftime("%B %Y")


def _sorted_totals(totals: Dict[str, float]) -> List[Tuple[str, float]]:
    # sorted() is stable: ties keep first-seen order
    return sorted(totals.items(), key=lambda entry: entry[1], reverse=True)


def daily_spending(
    purchases: Iterable[Purchase], days: int = DAILY_SPENDING_DAYS
) -> List[SpendingPoint]:
    """Per-day totals for the most recent ``days`` days that have purchases."""
    totals: Dict[str, float] = defaultdict(float)
    for purchase in purchases:
        totals[purchase.day_key] += purchase.total_amount or 0

    points = [
        SpendingPoint(
            key=day_key,
            label=date.fromisoformat(day_key).strftime("%b %d"),
            amount=_money(amount),
        )
        for day_key, amount in sorted(totals.items())
    ]
    return points[-days:] if days > 0 else []


def monthly_spending(purchases: Iterable[Purchase]) -> List[SpendingPoint]:
    """Per-month totals over the whole history, oldest first."""
    totals: Dict[str, float] = defaultdict(float)
    for purchase in purchases:
        totals[purchase.month_key] += purchase.total_amount or 0

    return [
        SpendingPoint(
            key=month_key,
            label=datetime.strptime(month_key, "%Y-%m").strftime("%b %Y"),
            amount=_money(amount),
        )
        for month_key, amount in sorted(totals.items())
    ]


def month_spending_by_day(
    purchases: Iterable[Purchase], cursor: MonthCursor
) -> List[DaySpending]:
    """Day-of-month totals for the month under ``cursor``."""
    totals: Dict[int, float] = defaultdict(float)
    for purchase in purchases:
        if cursor.contains(purchase.date):
            totals[purchase.date.day] += purchase.total_amount or 0

    return [DaySpending(day=day, amount=_money(amount)) for day, amount in sorted(totals.items())]


def top_spending_items(
    purchases: Iterable[Purchase], limit: int = TOP_ITEMS_LIMIT
) -> List[ItemSpending]:
    """Items ranked by total spent, keyed by the name snapshot on each line."""
    totals: Dict[str, float] = defaultdict(float)
    for purchase in purchases:
        for line in purchase.items:
            totals[line.item_name] += line.total_price or 0

    return [
        ItemSpending(name=name, amount=_money(amount))
        for name, amount in _sorted_totals(totals)[:limit]
    ]


def top_item_shares(
    top_items: Sequence[ItemSpending], limit: int = TOP_ITEMS_SHARE_LIMIT
) -> List[ItemShare]:
    """Proportional slice of the leading items, for pie-style display."""
    leading = list(top_items[:limit])
    slice_total = sum(entry.amount for entry in leading)
    return [
        ItemShare(
            name=entry.name,
            amount=entry.amount,
            share=round(entry.amount / slice_total, 4) if slice_total else 0.0,
        )
        for entry in leading
    ]


def price_progression(purchases: Iterable[Purchase], item_id: str) -> List[PricePoint]:
    """Unit price of one item across the purchases that contain it.

    One point per purchase, taken from the first matching line in insertion
    order. Purchases on the same date keep their stored order.
    """
    if not item_id:
        return []

    points: List[PricePoint] = []
    for purchase in sorted(purchases, key=lambda p: p.date):
        line = purchase.find_line(item_id)
        if line is None:
            continue
        points.append(
            PricePoint(
                purchase=len(points) + 1,
                date=purchase.date.strftime("%b %d"),
                price=_money(line.unit_price),
            )
        )
    return points


def category_spending(
    purchases: Iterable[Purchase],
    items: Iterable[Item],
    categories: Iterable[Category] = (),
) -> List[CategorySpending]:
    """Spending per category of the item behind each line.

    An item's ``category`` may hold a category id or, in older data, the
    category name itself. Lines whose item is gone or untagged count as
    Uncategorized.
    """
    category_names = {category.id: category.name for category in categories}
    item_categories: Dict[str, Optional[str]] = {item.id: item.category for item in items}

    totals: Dict[str, float] = defaultdict(float)
    for purchase in purchases:
        for line in purchase.items:
            reference = item_categories.get(line.item_id)
            if reference:
                name = category_names.get(reference, reference)
            else:
                name = UNCATEGORIZED
            totals[name] += line.total_price or 0

    return [
        CategorySpending(category=name, amount=_money(amount))
        for name, amount in _sorted_totals(totals)
    ]


def total_spent(purchases: Iterable[Purchase]) -> float:
    return sum(purchase.total_amount or 0 for purchase in purchases)


def average_per_purchase(purchases: Sequence[Purchase]) -> float:
    """Mean purchase total; 0 when there are no purchases."""
    count = len(purchases)
    return total_spent(purchases) / count if count > 0 else 0.0


def month_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Inclusive start and end of the calendar month containing ``now``."""
    now = now or datetime.now()
    last_day = calendar.monthrange(now.year, now.month)[1]
    start = datetime(now.year, now.month, 1)
    end = datetime(now.year, now.month, last_day, 23, 59, 59, 999999)
    return start, end


def current_month_spending(
    purchases: Iterable[Purchase], now: Optional[datetime] = None
) -> float:
    start, end = month_bounds(now)
    return sum(
        purchase.total_amount or 0
        for purchase in purchases
        if start <= purchase.date <= end
    )


def build_dashboard(
    purchases: Sequence[Purchase],
    items: Iterable[Item] = (),
    categories: Iterable[Category] = (),
    now: Optional[datetime] = None,
) -> DashboardSummary:
    """Compute every dashboard figure in one pass over the inputs."""
    top_items = top_spending_items(purchases)
    return DashboardSummary(
        total_spent=_money(total_spent(purchases)),
        current_month_spending=_money(current_month_spending(purchases, now)),
        average_per_purchase=_money(average_per_purchase(purchases)),
        purchase_count=len(purchases),
        daily_spending=daily_spending(purchases),
        monthly_spending=monthly_spending(purchases),
        top_items=top_items,
        top_item_shares=top_item_shares(top_items),
        category_spending=category_spending(purchases, items, categories),
    )
