"""API schema exports."""

from .catalog import DeleteResponse, ItemCreateRequest, MarketCreateRequest, NameRequest
from .migration import MigrationRequest, MigrationResponse, MigrationStatusResponse
from .purchase import PurchaseCreateRequest, PurchaseLineRequest

__all__ = [
    "DeleteResponse",
    "ItemCreateRequest",
    "MarketCreateRequest",
    "NameRequest",
    "MigrationRequest",
    "MigrationResponse",
    "MigrationStatusResponse",
    "PurchaseCreateRequest",
    "PurchaseLineRequest",
]
