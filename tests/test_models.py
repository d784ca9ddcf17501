from datetime import datetime

import pytest
from pydantic import ValidationError

from grocery_tracker.domain.models import Category, Item, Purchase, PurchaseLineItem


def test_line_total_is_filled_in():
    line = PurchaseLineItem(itemId="milk", itemName="Milk", quantity=3, unitPrice=1.25)
    assert line.total_price == pytest.approx(3.75)


def test_line_total_mismatch_is_rejected():
    with pytest.raises(ValidationError):
        PurchaseLineItem(itemId="milk", quantity=2, unitPrice=1.0, totalPrice=5.0)


def test_line_total_within_tolerance_is_accepted():
    line = PurchaseLineItem(itemId="milk", quantity=3, unitPrice=0.1, totalPrice=0.3)
    assert line.total_price == pytest.approx(0.3)


def test_quantity_must_be_positive():
    with pytest.raises(ValidationError):
        PurchaseLineItem(itemId="milk", quantity=0, unitPrice=1.0)


def test_purchase_total_is_sum_of_lines():
    purchase = Purchase(
        date="2024-03-01",
        items=[
            {"itemId": "a", "itemName": "A", "quantity": 2, "unitPrice": 1.5},
            {"itemId": "b", "itemName": "B", "quantity": 1, "unitPrice": 0.7},
        ],
    )
    assert purchase.total_amount == pytest.approx(3.7)
    assert purchase.day_key == "2024-03-01"
    assert purchase.month_key == "2024-03"


def test_purchase_requires_a_line():
    with pytest.raises(ValidationError):
        Purchase(date="2024-03-01", items=[])


def test_purchase_total_mismatch_is_rejected():
    with pytest.raises(ValidationError):
        Purchase(
            date="2024-03-01",
            items=[{"itemId": "a", "unitPrice": 1.0}],
            totalAmount=9.0,
        )


def test_timestamp_drops_timezone():
    purchase = Purchase(date="2024-03-01T10:00:00Z", items=[{"itemId": "a", "unitPrice": 1.0}])
    assert purchase.date.tzinfo is None


def test_find_line_returns_first_match():
    purchase = Purchase(
        date=datetime(2024, 3, 1),
        items=[
            {"itemId": "a", "unitPrice": 1.0},
            {"itemId": "a", "unitPrice": 2.0},
        ],
    )
    assert purchase.find_line("a").unit_price == 1.0
    assert purchase.find_line("missing") is None


def test_remote_integer_ids_become_strings():
    item = Item.model_validate({"id": 42, "name": "Milk", "category": 7})
    assert item.id == "42"
    assert item.category == "7"


def test_aliases_round_trip_through_dump():
    category = Category(name="Dairy", created_at=datetime(2024, 1, 1))
    dumped = category.model_dump(mode="json", by_alias=True)
    assert dumped["createdAt"].startswith("2024-01-01")
    assert Category.model_validate(dumped).id == category.id


def test_pfand_detection_is_case_insensitive():
    assert Category(name="pfand").is_pfand
    assert not Category(name="Fruits").is_pfand
