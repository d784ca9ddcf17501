"""Domain exports."""

from .errors import (
    AuthenticationError,
    DuplicateNameError,
    GatewayError,
    GroceryTrackerError,
    MigrationAlreadyCompletedError,
    NotFoundError,
    ReservedCategoryError,
    SchemaError,
    ValidationError,
)
from .models import (
    Category,
    Item,
    LegacyPurchaseRecord,
    LocalSnapshot,
    Market,
    Purchase,
    PurchaseDraft,
    PurchaseLineDraft,
    PurchaseLineItem,
)

__all__ = [
    "AuthenticationError",
    "DuplicateNameError",
    "GatewayError",
    "GroceryTrackerError",
    "MigrationAlreadyCompletedError",
    "NotFoundError",
    "ReservedCategoryError",
    "SchemaError",
    "ValidationError",
    "Category",
    "Item",
    "LegacyPurchaseRecord",
    "LocalSnapshot",
    "Market",
    "Purchase",
    "PurchaseDraft",
    "PurchaseLineDraft",
    "PurchaseLineItem",
]
