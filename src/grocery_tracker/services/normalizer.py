"""Purchase collection decoding and legacy-format upgrades."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List

from grocery_tracker.constants import PURCHASES_SCHEMA_VERSION
from grocery_tracker.domain.errors import SchemaError
from grocery_tracker.domain.models import LegacyPurchaseRecord, Purchase, PurchaseLineItem
from grocery_tracker.logging_config import get_logger

logger = get_logger(__name__)


class PurchaseFormat(Enum):
    """Shapes a persisted purchase collection can take."""

    EMPTY = "empty"
    LEGACY = "legacy"  # bare list, one item per record
    UNVERSIONED = "unversioned"  # bare list of multi-item purchases
    CURRENT = "current"  # versioned envelope


@dataclass(slots=True)
class NormalizedPurchases:
    purchases: List[Purchase]
    source_format: PurchaseFormat

    @property
    def upgraded(self) -> bool:
        """True when the stored form differs from the current envelope."""
        return self.source_format is not PurchaseFormat.CURRENT


def detect_format(raw: Any) -> PurchaseFormat:
    """Classify a raw deserialized purchase collection."""
    if raw is None:
        return PurchaseFormat.EMPTY
    if isinstance(raw, dict):
        version = raw.get("version")
        if version != PURCHASES_SCHEMA_VERSION:
            raise SchemaError(f"Unsupported purchase collection version: {version!r}")
        if not isinstance(raw.get("records"), list):
            raise SchemaError("Purchase envelope has no records list")
        return PurchaseFormat.CURRENT
    if isinstance(raw, list):
        if not raw:
            return PurchaseFormat.EMPTY
        first = raw[0]
        # The first record decides for the whole collection
        if isinstance(first, dict) and "itemId" in first and "items" not in first:
            return PurchaseFormat.LEGACY
        return PurchaseFormat.UNVERSIONED
    raise SchemaError(f"Unexpected purchase collection type: {type(raw).__name__}")


def convert_legacy_purchases(records: List[LegacyPurchaseRecord]) -> List[Purchase]:
    """Group one-item records into one purchase per calendar day.

    Days keep the order in which they first appear; the first record of a day
    provides the purchase date and creation time.
    """
    grouped: Dict[str, Dict[str, Any]] = {}
    for record in records:
        day_key = record.day_key
        if day_key not in grouped:
            grouped[day_key] = {
                "id": f"converted-{day_key}-{uuid.uuid4().hex[:12]}",
                "date": record.date,
                "createdAt": record.created_at or record.date,
                "items": [],
                "totalAmount": 0.0,
            }
        group = grouped[day_key]
        group["items"].append(
            PurchaseLineItem(
                item_id=record.item_id,
                item_name=record.item_name,
                quantity=1,
                unit_price=record.amount,
                total_price=record.amount,
            )
        )
        group["totalAmount"] += record.amount

    return [Purchase.model_validate(group) for group in grouped.values()]


def normalize_purchases(raw: Any) -> NormalizedPurchases:
    """Decode any known purchase collection shape into current purchases."""
    source_format = detect_format(raw)

    if source_format is PurchaseFormat.EMPTY:
        purchases: List[Purchase] = []
    elif source_format is PurchaseFormat.LEGACY:
        legacy = [LegacyPurchaseRecord.model_validate(record) for record in raw]
        purchases = convert_legacy_purchases(legacy)
        logger.info(
            "Converted %d legacy purchase records into %d purchases",
            len(legacy),
            len(purchases),
        )
    elif source_format is PurchaseFormat.UNVERSIONED:
        purchases = [Purchase.model_validate(record) for record in raw]
    elif source_format is PurchaseFormat.CURRENT:
        purchases = [Purchase.model_validate(record) for record in raw["records"]]
    else:  # pragma: no cover
        raise SchemaError(f"Unhandled purchase format: {source_format}")

    return NormalizedPurchases(purchases=purchases, source_format=source_format)


def encode_purchases(purchases: List[Purchase]) -> Dict[str, Any]:
    """Serialize purchases into the current versioned envelope."""
    return {
        "version": PURCHASES_SCHEMA_VERSION,
        "records": [
            purchase.model_dump(mode="json", by_alias=True) for purchase in purchases
        ],
    }
