"""Service layer exports."""

from .gateway import RemoteGateway
from .migration import MigrationReport, has_existing_data, migrate_local_store, migrate_snapshot
from .normalizer import encode_purchases, normalize_purchases
from .record_store import LocalRecordStore

__all__ = [
    "RemoteGateway",
    "MigrationReport",
    "has_existing_data",
    "migrate_local_store",
    "migrate_snapshot",
    "encode_purchases",
    "normalize_purchases",
    "LocalRecordStore",
]
