"""
Application Constants

Reserved names, storage keys and dashboard limits shared by the local store,
the remote gateway and the aggregation engine.
"""

from __future__ import annotations

from dataclasses import dataclass

# Deposit-return packaging, always present and never deletable
PFAND_CATEGORY_NAME = "Pfand"
PFAND_CATEGORY_ID = "pfand"

UNCATEGORIZED = "Uncategorized"

# Current version of the persisted purchase envelope
PURCHASES_SCHEMA_VERSION = 2

# Dashboard limits
DAILY_SPENDING_DAYS = 30
TOP_ITEMS_LIMIT = 10
TOP_ITEMS_SHARE_LIMIT = 5

# Allowed drift between stored and recomputed totals
TOTAL_TOLERANCE = 0.005

MIGRATION_FLAG_KEY = "groceryMigrationCompleted"


@dataclass(frozen=True, slots=True)
class StorageKeys:
    """Names of the keys holding each entity collection."""

    categories: str
    items: str
    markets: str
    purchases: str

    def all(self) -> tuple[str, str, str, str]:
        return (self.categories, self.items, self.markets, self.purchases)


CAMEL_CASE_KEYS = StorageKeys(
    categories="groceryCategories",
    items="groceryItems",
    markets="groceryMarkets",
    purchases="groceryPurchases",
)

HYPHENATED_KEYS = StorageKeys(
    categories="grocery-categories",
    items="grocery-items",
    markets="grocery-markets",
    purchases="grocery-purchases",
)
