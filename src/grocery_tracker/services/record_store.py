"""Local record store: typed collections over the sqlite key-value file."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel

from grocery_tracker.constants import (
    CAMEL_CASE_KEYS,
    HYPHENATED_KEYS,
    MIGRATION_FLAG_KEY,
    PFAND_CATEGORY_ID,
    PFAND_CATEGORY_NAME,
    StorageKeys,
)
from grocery_tracker.db.db_manager import DBManager
from grocery_tracker.domain.errors import (
    DuplicateNameError,
    NotFoundError,
    ReservedCategoryError,
    ValidationError,
)
from grocery_tracker.domain.models import (
    Category,
    Item,
    LocalSnapshot,
    Market,
    Purchase,
    PurchaseDraft,
    PurchaseLineItem,
)
from grocery_tracker.logging_config import get_logger
from grocery_tracker.services.normalizer import encode_purchases, normalize_purchases

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _clean_name(name: Optional[str], kind: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(f"Please enter a {kind} name")
    return cleaned


def _name_taken(name: str, existing: List, exclude_id: Optional[str] = None) -> bool:
    lowered = name.lower()
    return any(
        entry.name.lower() == lowered and entry.id != exclude_id for entry in existing
    )


def pfand_category() -> Category:
    return Category(id=PFAND_CATEGORY_ID, name=PFAND_CATEGORY_NAME, created_at=datetime.now())


class LocalRecordStore:
    """Single-user persistence for categories, items, markets and purchases.

    Each collection lives under one key and is rewritten wholesale on every
    mutation.
    """

    def __init__(self, db: DBManager, keys: StorageKeys = CAMEL_CASE_KEYS) -> None:
        self.db = db
        self.keys = keys

    @classmethod
    def open(cls, db_path: str, keys: StorageKeys = CAMEL_CASE_KEYS) -> "LocalRecordStore":
        return cls(DBManager(db_path), keys=keys)

    # --- generic load/save ---
    def _load(self, key: str, model: Type[ModelT]) -> List[ModelT]:
        raw = self.db.get_value(key, default=[])
        return [model.model_validate(entry) for entry in raw or []]

    def _save(self, key: str, records: List[BaseModel]) -> None:
        self.db.set_value(key, [record.model_dump(mode="json", by_alias=True) for record in records])

    def adopt_hyphenated_keys(self, legacy: StorageKeys = HYPHENATED_KEYS) -> List[str]:
        """Copy collections saved under older hyphenated keys to the current keys.

        A collection is only copied when the current key holds nothing.
        Returns the current keys that were filled.
        """
        adopted = []
        for old_key, new_key in zip(legacy.all(), self.keys.all()):
            if old_key == new_key or not self.db.has_key(old_key):
                continue
            if self.db.get_value(new_key):
                continue
            self.db.set_value(new_key, self.db.get_value(old_key))
            adopted.append(new_key)
        if adopted:
            logger.info("Adopted hyphenated collections into %s", ", ".join(adopted))
        return adopted

    # --- categories ---
    def load_categories(self) -> List[Category]:
        """Return all categories, creating Pfand first if it is missing."""
        categories = self._load(self.keys.categories, Category)
        if not any(category.is_pfand for category in categories):
            categories.insert(0, pfand_category())
            self._save(self.keys.categories, categories)
        return categories

    def add_category(self, name: str) -> Category:
        cleaned = _clean_name(name, "category")
        if cleaned.lower() == PFAND_CATEGORY_NAME.lower():
            raise ReservedCategoryError("Pfand category already exists")
        categories = self.load_categories()
        if _name_taken(cleaned, categories):
            raise DuplicateNameError("category", cleaned)

        category = Category(name=cleaned)
        categories.append(category)
        self._save(self.keys.categories, categories)
        return category

    def rename_category(self, category_id: str, name: str) -> Category:
        cleaned = _clean_name(name, "category")
        categories = self.load_categories()
        category = self._find(categories, category_id, "category")
        if category.is_pfand:
            raise ReservedCategoryError("Cannot rename the Pfand category")
        if cleaned.lower() == PFAND_CATEGORY_NAME.lower():
            raise ReservedCategoryError("Pfand category already exists")
        if _name_taken(cleaned, categories, exclude_id=category.id):
            raise DuplicateNameError("category", cleaned)

        category.name = cleaned
        self._save(self.keys.categories, categories)
        return category

    def delete_category(self, category_id: str) -> None:
        categories = self.load_categories()
        category = self._find(categories, category_id, "category")
        if category.is_pfand:
            raise ReservedCategoryError("Cannot delete the Pfand category")
        self._save(
            self.keys.categories, [entry for entry in categories if entry.id != category_id]
        )

    # --- items ---
    def load_items(self) -> List[Item]:
        return self._load(self.keys.items, Item)

    def add_item(self, name: str, category: Optional[str] = None) -> Item:
        cleaned = _clean_name(name, "item")
        items = self.load_items()
        if _name_taken(cleaned, items):
            raise DuplicateNameError("item", cleaned)

        item = Item(name=cleaned, category=category or None)
        items.append(item)
        self._save(self.keys.items, items)
        return item

    def rename_item(self, item_id: str, name: str) -> Item:
        cleaned = _clean_name(name, "item")
        items = self.load_items()
        item = self._find(items, item_id, "item")
        if _name_taken(cleaned, items, exclude_id=item.id):
            raise DuplicateNameError("item", cleaned)

        item.name = cleaned
        self._save(self.keys.items, items)
        return item

    def delete_item(self, item_id: str) -> None:
        items = self.load_items()
        self._find(items, item_id, "item")
        # Purchases keep their itemName snapshots
        self._save(self.keys.items, [item for item in items if item.id != item_id])

    # --- markets ---
    def load_markets(self) -> List[Market]:
        return self._load(self.keys.markets, Market)

    def add_market(self, name: str, location: Optional[str] = None) -> Market:
        cleaned = _clean_name(name, "market")
        markets = self.load_markets()
        if _name_taken(cleaned, markets):
            raise DuplicateNameError("market", cleaned)

        market = Market(name=cleaned, location=(location or "").strip() or None)
        markets.append(market)
        self._save(self.keys.markets, markets)
        return market

    def rename_market(self, market_id: str, name: str) -> Market:
        cleaned = _clean_name(name, "market")
        markets = self.load_markets()
        market = self._find(markets, market_id, "market")
        if _name_taken(cleaned, markets, exclude_id=market.id):
            raise DuplicateNameError("market", cleaned)

        market.name = cleaned
        self._save(self.keys.markets, markets)
        return market

    def delete_market(self, market_id: str) -> None:
        markets = self.load_markets()
        self._find(markets, market_id, "market")
        self._save(self.keys.markets, [market for market in markets if market.id != market_id])

    # --- purchases ---
    def load_purchases(self) -> List[Purchase]:
        """Load purchases, upgrading and re-saving older stored shapes."""
        raw = self.db.get_value(self.keys.purchases)
        normalized = normalize_purchases(raw)
        if raw is not None and normalized.upgraded:
            logger.info(
                "Upgrading stored purchases from %s format", normalized.source_format.value
            )
            self.save_purchases(normalized.purchases)
        return normalized.purchases

    def save_purchases(self, purchases: List[Purchase]) -> None:
        self.db.set_value(self.keys.purchases, encode_purchases(purchases))

    def add_purchase(self, draft: PurchaseDraft) -> Purchase:
        """Persist a draft as a purchase, snapshotting item and market names."""
        if not draft.lines:
            raise ValidationError("Please add at least one item to the purchase")

        items = {item.id: item for item in self.load_items()}
        market_name = None
        if draft.market_id:
            markets = {market.id: market for market in self.load_markets()}
            market = markets.get(draft.market_id)
            if market is None:
                raise ValidationError(f"Unknown market: {draft.market_id}")
            market_name = market.name

        lines = []
        for line in draft.lines:
            item = items.get(line.item_id)
            if item is None:
                raise ValidationError(f"Unknown item: {line.item_id}")
            lines.append(
                PurchaseLineItem(
                    item_id=item.id,
                    item_name=item.name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
            )

        purchase = Purchase(
            date=draft.date,
            market_id=draft.market_id,
            market_name=market_name,
            items=lines,
        )
        purchases = self.load_purchases()
        purchases.append(purchase)
        self.save_purchases(purchases)
        return purchase

    def delete_purchase(self, purchase_id: str) -> None:
        purchases = self.load_purchases()
        self._find(purchases, purchase_id, "purchase")
        self.save_purchases([purchase for purchase in purchases if purchase.id != purchase_id])

    # --- migration support ---
    def snapshot(self) -> LocalSnapshot:
        return LocalSnapshot(
            categories=self._load(self.keys.categories, Category),
            items=self.load_items(),
            markets=self.load_markets(),
            purchases=self.load_purchases(),
        )

    def migration_completed(self) -> bool:
        return bool(self.db.get_value(MIGRATION_FLAG_KEY, default=False))

    def mark_migration_completed(self) -> None:
        self.db.set_value(MIGRATION_FLAG_KEY, True)

    @staticmethod
    def _find(records: List[ModelT], record_id: str, kind: str) -> ModelT:
        for record in records:
            if record.id == record_id:
                return record
        raise NotFoundError(kind, record_id)
