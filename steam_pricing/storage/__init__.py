"""
Storage modules for price record persistence.
"""

from steam_pricing.storage.models import CatalogEntry, PriceRecord
from steam_pricing.storage.record_store import RecordStore, SqliteRecordStore

__all__ = [
    "CatalogEntry",
    "PriceRecord",
    "RecordStore",
    "SqliteRecordStore",
]
