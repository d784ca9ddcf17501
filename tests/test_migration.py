import logging
from datetime import datetime

import httpx
import pytest

from grocery_tracker.domain.errors import AuthenticationError, MigrationAlreadyCompletedError
from grocery_tracker.domain.models import Category, Item, LocalSnapshot, Market, Purchase
from grocery_tracker.services.migration import (
    has_existing_data,
    migrate_local_store,
    migrate_snapshot,
)


@pytest.fixture
def snapshot():
    fruits = Category(id="c1", name="Fruits")
    return LocalSnapshot(
        categories=[fruits],
        markets=[Market(id="m1", name="Corner Shop", location="Main St")],
        items=[
            Item(id="i1", name="Apple", category="c1"),
            Item(id="i2", name="Water"),
            Item(id="i3", name="Bottle", category="deleted-category"),
        ],
        purchases=[
            Purchase(
                id="p1",
                date=datetime(2024, 3, 1, 10),
                market_id="m1",
                market_name="Corner Shop",
                items=[
                    {"itemId": "i1", "itemName": "Apple", "quantity": 3, "unitPrice": 0.5},
                    {"itemId": "gone", "itemName": "Gone", "quantity": 1, "unitPrice": 1.0},
                ],
            )
        ],
    )


def _category_names(fake_supabase):
    return {str(row["id"]): row["name"] for row in fake_supabase.rows("categories")}


def test_items_keep_their_category(gateway, fake_supabase, snapshot):
    report = migrate_snapshot(snapshot, gateway)

    names = _category_names(fake_supabase)
    items = {row["name"]: names[str(row["category_id"])] for row in fake_supabase.rows("items")}
    assert items == {"Apple": "Fruits", "Water": "Pfand", "Bottle": "Pfand"}
    assert report.categories.migrated == 2
    assert report.items.migrated == 3


def test_purchases_reference_remote_ids(gateway, fake_supabase, snapshot):
    report = migrate_snapshot(snapshot, gateway)

    market_id = fake_supabase.rows("markets")[0]["id"]
    apple_id = next(row["id"] for row in fake_supabase.rows("items") if row["name"] == "Apple")
    header = fake_supabase.rows("purchases")[0]
    lines = fake_supabase.rows("purchase_items")

    assert header["market_id"] == str(market_id)
    assert header["total_amount"] == pytest.approx(2.5)
    assert [(line["item_id"], line["quantity"]) for line in lines] == [(str(apple_id), 3)]
    assert report.purchases.migrated == 1
    assert report.purchase_items.migrated == 1
    assert report.purchase_items.skipped == 1


def test_existing_remote_names_are_reused(gateway, fake_supabase, snapshot):
    existing = gateway.add_category("Fruits")

    report = migrate_snapshot(snapshot, gateway)

    apple = next(row for row in fake_supabase.rows("items") if row["name"] == "Apple")
    assert str(apple["category_id"]) == existing.id
    assert report.categories.duplicates == 1
    assert report.categories.migrated == 1


def test_failed_market_does_not_stop_migration(gateway, fake_supabase, snapshot):
    fake_supabase.fail("markets", "insert")

    report = migrate_snapshot(snapshot, gateway)

    assert report.markets.failed == 1
    assert fake_supabase.rows("purchases")[0]["market_id"] is None
    assert report.purchases.migrated == 1


def test_unauthenticated_migration_writes_nothing(anonymous_gateway, fake_supabase, snapshot):
    with pytest.raises(AuthenticationError):
        migrate_snapshot(snapshot, anonymous_gateway)
    assert fake_supabase.tables == {}


def test_local_store_is_migrated_once(store, gateway, fake_supabase):
    store.add_item("Milk")
    store.load_categories()

    report = migrate_local_store(store, gateway)
    assert report.items.migrated == 1
    assert store.migration_completed()

    with pytest.raises(MigrationAlreadyCompletedError):
        migrate_local_store(store, gateway)

    rerun = migrate_local_store(store, gateway, force=True)
    assert rerun.items.duplicates == 1
    assert len(fake_supabase.rows("items")) == 1


def test_has_existing_data(gateway, anonymous_gateway):
    assert not has_existing_data(gateway)
    gateway.add_category("Dairy")
    assert has_existing_data(gateway)
    assert not has_existing_data(anonymous_gateway)


def test_report_as_dict(gateway, snapshot):
    summary = migrate_snapshot(snapshot, gateway).as_dict()
    assert set(summary) == {"categories", "markets", "items", "purchases", "purchase_items"}
    assert summary["markets"] == {"migrated": 1, "duplicates": 0, "failed": 0, "skipped": 0}


def test_items_tagged_by_category_name(gateway, fake_supabase):
    snapshot = LocalSnapshot(
        categories=[Category(name="Fruits")],
        items=[Item(id="apple", name="Apple", category="Fruits")],
    )

    migrate_snapshot(snapshot, gateway)

    apple = fake_supabase.rows("items")[0]
    assert str(apple["category_id"]) == gateway.find_id_by_name("categories", "Fruits")


def test_transport_error_skips_only_that_purchase(gateway, fake_supabase, snapshot):
    second = snapshot.purchases[0].model_copy(update={"id": "p2", "date": datetime(2024, 3, 2, 10)})
    snapshot.purchases.append(second)
    fake_supabase.fail(
        "purchases",
        "insert",
        predicate=lambda payload: payload["date"].startswith("2024-03-01"),
        error=httpx.ConnectError("connection reset"),
    )

    report = migrate_snapshot(snapshot, gateway)

    assert report.purchases.failed == 1
    assert report.purchases.migrated == 1
    assert [row["date"] for row in fake_supabase.rows("purchases")] == ["2024-03-02T10:00:00"]
    assert report.purchase_items.migrated == 1


def test_transport_error_on_item_is_counted(gateway, fake_supabase, snapshot):
    fake_supabase.fail(
        "items",
        "insert",
        predicate=lambda payload: payload["name"] == "Water",
        error=httpx.ReadTimeout("timed out"),
    )

    report = migrate_snapshot(snapshot, gateway)

    assert report.items.failed == 1
    assert report.items.migrated == 2
    assert report.purchases.migrated == 1


def test_failures_are_logged_as_warning(gateway, fake_supabase, snapshot, caplog):
    fake_supabase.fail("markets", "insert")

    with caplog.at_level(logging.INFO, logger="grocery_tracker"):
        report = migrate_snapshot(snapshot, gateway)

    assert report.has_failures
    summary = [r for r in caplog.records if r.getMessage().startswith("Migration completed")]
    assert summary[-1].levelno == logging.WARNING
    assert "with failures" in summary[-1].getMessage()


def test_clean_run_is_logged_as_success(gateway, snapshot, caplog):
    with caplog.at_level(logging.INFO, logger="grocery_tracker"):
        report = migrate_snapshot(snapshot, gateway)

    assert not report.has_failures
    summary = [r for r in caplog.records if r.getMessage().startswith("Migration completed")]
    assert summary[-1].levelno == logging.INFO
