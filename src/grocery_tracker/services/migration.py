"""One-shot transfer of local records into the remote gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, List, Optional, Tuple

from grocery_tracker.constants import PFAND_CATEGORY_NAME
from grocery_tracker.domain.errors import (
    AuthenticationError,
    DuplicateNameError,
    MigrationAlreadyCompletedError,
)
from grocery_tracker.domain.models import Category, LocalSnapshot
from grocery_tracker.logging_config import get_logger
from grocery_tracker.services.gateway import RemoteGateway
from grocery_tracker.services.record_store import LocalRecordStore, pfand_category

logger = get_logger(__name__)


@dataclass(slots=True)
class EntityCounts:
    migrated: int = 0
    duplicates: int = 0
    failed: int = 0
    skipped: int = 0


@dataclass(slots=True)
class MigrationReport:
    """Per-entity outcome of a migration run."""

    categories: EntityCounts = field(default_factory=EntityCounts)
    markets: EntityCounts = field(default_factory=EntityCounts)
    items: EntityCounts = field(default_factory=EntityCounts)
    purchases: EntityCounts = field(default_factory=EntityCounts)
    purchase_items: EntityCounts = field(default_factory=EntityCounts)

    def _sections(self) -> Tuple[Tuple[str, EntityCounts], ...]:
        return (
            ("categories", self.categories),
            ("markets", self.markets),
            ("items", self.items),
            ("purchases", self.purchases),
            ("purchase_items", self.purchase_items),
        )

    @property
    def has_failures(self) -> bool:
        return any(counts.failed for _, counts in self._sections())

    def as_dict(self) -> Dict[str, Dict[str, int]]:
        return {
            name: {
                "migrated": counts.migrated,
                "duplicates": counts.duplicates,
                "failed": counts.failed,
                "skipped": counts.skipped,
            }
            for name, counts in self._sections()
        }


def _insert_tolerant(
    insert: Callable[[], str],
    *,
    gateway: RemoteGateway,
    table: str,
    name: str,
    counts: EntityCounts,
) -> Optional[str]:
    """Run one insert; duplicates resolve to the existing remote row."""
    try:
        remote_id = insert()
    except DuplicateNameError:
        counts.duplicates += 1
        remote_id = gateway.find_id_by_name(table, name)
        logger.info("Skipping duplicate %s %r (remote id %s)", table, name, remote_id)
        return remote_id
    except AuthenticationError:
        raise
    except Exception as exc:
        # includes transport errors raised by the HTTP client
        counts.failed += 1
        logger.error("Error migrating %s %r: %s", table, name, exc)
        return None
    counts.migrated += 1
    return remote_id


def _categories_with_pfand(categories: List[Category]) -> List[Category]:
    if any(category.name == PFAND_CATEGORY_NAME for category in categories):
        return list(categories)
    return [pfand_category(), *categories]


def migrate_snapshot(snapshot: LocalSnapshot, gateway: RemoteGateway) -> MigrationReport:
    """Copy every local record into the gateway, preserving references.

    Categories, markets, items and purchases are migrated in that order since
    each step needs the remote ids minted by the previous ones. Per-record
    failures are logged and counted; nothing is rolled back.
    """
    user_id = gateway.require_user()
    logger.info("Starting migration for user %s", user_id)
    report = MigrationReport()

    category_map: Dict[str, str] = {}
    for category in _categories_with_pfand(snapshot.categories):
        remote_id = _insert_tolerant(
            partial(gateway.insert_category, category.name),
            gateway=gateway,
            table="categories",
            name=category.name,
            counts=report.categories,
        )
        if remote_id is not None:
            category_map[category.id] = remote_id
            category_map[category.name] = remote_id
    pfand_remote_id = category_map.get(PFAND_CATEGORY_NAME)

    market_map: Dict[str, str] = {}
    for market in snapshot.markets:
        remote_id = _insert_tolerant(
            partial(gateway.insert_market, market.name, market.location),
            gateway=gateway,
            table="markets",
            name=market.name,
            counts=report.markets,
        )
        if remote_id is not None:
            market_map[market.id] = remote_id

    item_map: Dict[str, str] = {}
    for item in snapshot.items:
        category_id = category_map.get(item.category or "", pfand_remote_id)
        remote_id = _insert_tolerant(
            partial(gateway.insert_item, item.name, category_id),
            gateway=gateway,
            table="items",
            name=item.name,
            counts=report.items,
        )
        if remote_id is not None:
            item_map[item.id] = remote_id

    for purchase in snapshot.purchases:
        try:
            purchase_id = gateway.insert_purchase(
                date=purchase.date,
                total_amount=purchase.total_amount or 0,
                market_id=market_map.get(purchase.market_id or ""),
            )
        except AuthenticationError:
            raise
        except Exception as exc:
            report.purchases.failed += 1
            logger.error("Error migrating purchase %s: %s", purchase.id, exc)
            continue
        report.purchases.migrated += 1

        for line in purchase.items:
            item_id = item_map.get(line.item_id)
            if item_id is None:
                report.purchase_items.skipped += 1
                logger.debug("Skipping line for unmigrated item %s", line.item_id)
                continue
            try:
                gateway.insert_purchase_item(purchase_id, line, item_id)
            except AuthenticationError:
                raise
            except Exception as exc:
                report.purchase_items.failed += 1
                logger.error("Error migrating purchase item of %s: %s", purchase.id, exc)
                continue
            report.purchase_items.migrated += 1

    if report.has_failures:
        logger.warning("Migration completed with failures: %s", report.as_dict())
    else:
        logger.info("Migration completed successfully: %s", report.as_dict())
    return report


def migrate_local_store(
    store: LocalRecordStore, gateway: RemoteGateway, *, force: bool = False
) -> MigrationReport:
    """Migrate the local store once; later runs need ``force``.

    Purchases have no natural key, so a second run would duplicate them.
    """
    if store.migration_completed() and not force:
        raise MigrationAlreadyCompletedError("Local data was already migrated")
    report = migrate_snapshot(store.snapshot(), gateway)
    store.mark_migration_completed()
    return report


def has_existing_data(gateway: RemoteGateway) -> bool:
    """True when the user already owns remote categories."""
    try:
        return gateway.count_categories() > 0
    except AuthenticationError:
        return False
