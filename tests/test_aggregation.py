from datetime import date, datetime, timedelta

import pytest

from grocery_tracker.domain.models import Category, Item, Purchase
from grocery_tracker.services.aggregation import (
    MonthCursor,
    average_per_purchase,
    build_dashboard,
    category_spending,
    current_month_spending,
    daily_spending,
    month_bounds,
    month_spending_by_day,
    monthly_spending,
    price_progression,
    top_item_shares,
    top_spending_items,
)


def make_purchase(when, *lines):
    return Purchase(
        date=when,
        items=[
            {"itemId": item_id, "itemName": name, "quantity": qty, "unitPrice": price}
            for item_id, name, qty, price in lines
        ],
    )


@pytest.fixture
def purchases():
    return [
        make_purchase(datetime(2024, 3, 1, 9), ("milk", "Milk", 2, 1.0), ("bread", "Bread", 1, 1.0)),
        make_purchase(datetime(2024, 3, 15, 12), ("milk", "Milk", 3, 1.0)),
        make_purchase(datetime(2024, 4, 2, 8), ("apple", "Apple", 4, 0.5)),
    ]


def test_top_items_are_ranked_by_amount(purchases):
    top = top_spending_items(purchases[:2])
    assert [(entry.name, entry.amount) for entry in top] == [("Milk", 5.0), ("Bread", 1.0)]


def test_top_items_respect_limit(purchases):
    assert len(top_spending_items(purchases, limit=1)) == 1


def test_top_item_shares_sum_to_one(purchases):
    shares = top_item_shares(top_spending_items(purchases))
    assert sum(entry.share for entry in shares) == pytest.approx(1.0, abs=1e-3)


def test_top_item_shares_of_zero_spending():
    shares = top_item_shares(top_spending_items([make_purchase(datetime(2024, 1, 1), ("x", "X", 1, 0.0))]))
    assert shares[0].share == 0.0


def test_average_of_no_purchases_is_zero():
    assert average_per_purchase([]) == 0.0


def test_average_per_purchase(purchases):
    assert average_per_purchase(purchases) == pytest.approx(8.0 / 3)


def test_month_bounds_cover_whole_month():
    start, end = month_bounds(datetime(2024, 2, 10))
    assert start == datetime(2024, 2, 1)
    assert end == datetime(2024, 2, 29, 23, 59, 59, 999999)


def test_current_month_spending_includes_both_ends():
    edge = [
        make_purchase(datetime(2024, 2, 29, 23, 59), ("a", "A", 1, 8.0)),
        make_purchase(datetime(2024, 3, 1, 0, 0), ("a", "A", 1, 1.0)),
        make_purchase(datetime(2024, 3, 31, 23, 59, 59), ("a", "A", 1, 2.0)),
        make_purchase(datetime(2024, 4, 1, 0, 0), ("a", "A", 1, 4.0)),
    ]
    assert current_month_spending(edge, now=datetime(2024, 3, 20)) == pytest.approx(3.0)


def test_daily_spending_keeps_last_days():
    start = datetime(2024, 1, 1, 12)
    history = [make_purchase(start + timedelta(days=n), ("a", "A", 1, 1.0)) for n in range(40)]

    points = daily_spending(history)

    assert len(points) == 30
    assert points[0].key == "2024-01-11"
    assert points[-1].key == "2024-02-09"
    assert points[-1].label == "Feb 09"


def test_daily_spending_merges_same_day(purchases):
    extra = make_purchase(datetime(2024, 3, 1, 20), ("bread", "Bread", 1, 2.0))
    points = daily_spending([*purchases, extra])
    assert points[0].key == "2024-03-01"
    assert points[0].amount == pytest.approx(5.0)


def test_monthly_spending(purchases):
    points = monthly_spending(purchases)
    assert [(p.key, p.label, p.amount) for p in points] == [
        ("2024-03", "Mar 2024", 6.0),
        ("2024-04", "Apr 2024", 2.0),
    ]


def test_month_spending_by_day(purchases):
    days = month_spending_by_day(purchases, MonthCursor(2024, 3))
    assert [(d.day, d.amount) for d in days] == [(1, 3.0), (15, 3.0)]


def test_month_cursor_steps_over_year_boundary():
    assert MonthCursor(2024, 1).previous() == MonthCursor(2023, 12)
    assert MonthCursor(2023, 12).next(today=date(2024, 6, 1)) == MonthCursor(2024, 1)


def test_month_cursor_does_not_pass_current_month():
    today = date(2024, 6, 15)
    assert MonthCursor(2024, 6).next(today=today) == MonthCursor(2024, 6)
    assert MonthCursor(2024, 6).label == "June 2024"


def test_price_progression_orders_by_date():
    history = [
        make_purchase(datetime(2024, 3, 10), ("milk", "Milk", 1, 1.3)),
        make_purchase(datetime(2024, 3, 1), ("milk", "Milk", 1, 1.1), ("milk", "Milk", 1, 9.9)),
        make_purchase(datetime(2024, 3, 5), ("bread", "Bread", 1, 2.0)),
    ]
    points = price_progression(history, "milk")
    assert [(p.purchase, p.date, p.price) for p in points] == [
        (1, "Mar 01", 1.1),
        (2, "Mar 10", 1.3),
    ]


def test_price_progression_without_item_is_empty(purchases):
    assert price_progression(purchases, "") == []
    assert price_progression(purchases, "unknown") == []


def test_category_spending_resolves_ids_and_names(purchases):
    fruits = Category(name="Fruits")
    items = [
        Item(id="apple", name="Apple", category=fruits.id),
        Item(id="milk", name="Milk", category="Dairy"),
    ]
    totals = {entry.category: entry.amount for entry in category_spending(purchases, items, [fruits])}
    assert totals == {"Dairy": 5.0, "Fruits": 2.0, "Uncategorized": 1.0}


def test_build_dashboard(purchases):
    summary = build_dashboard(purchases, now=datetime(2024, 4, 20))
    assert summary.total_spent == pytest.approx(8.0)
    assert summary.current_month_spending == pytest.approx(2.0)
    assert summary.purchase_count == 3
    assert summary.top_items[0].name == "Milk"
    assert [entry.category for entry in summary.category_spending] == ["Uncategorized"]


def test_build_dashboard_empty():
    summary = build_dashboard([])
    assert summary.total_spent == 0
    assert summary.average_per_purchase == 0
    assert summary.daily_spending == []
    assert summary.top_items == []
