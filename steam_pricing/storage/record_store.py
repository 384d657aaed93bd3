"""
Price record storage.

Keeps the live ``PriceRecord`` objects in memory, keyed by item id, and
mirrors every field write into a SQLite table so prices survive restarts.
"""

import logging
import sqlite3
import threading
import uuid
from abc import ABC, abstractmethod
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional

from steam_pricing.pricing.currency import Currency
from steam_pricing.pricing.rounding import round_amount
from steam_pricing.storage.models import BASE_PRICE_FIELD, CatalogEntry, PriceRecord

logger = logging.getLogger(__name__)

# Default database location
DEFAULT_DB_PATH = "data/prices.sqlite3"

PRICE_FIELDS = (BASE_PRICE_FIELD,) + tuple(c.value for c in Currency)


class RecordStore(ABC):
    """Key-value persistence of price records, keyed by item id."""

    @abstractmethod
    def get(self, item_id: str) -> Optional[PriceRecord]:
        """Return the live record handle for ``item_id``, or None."""

    @abstractmethod
    def set_field(self, record_key: str, field_name: str, value) -> bool:
        """Persist one field of a record. Returns False on a storage fault."""

    @abstractmethod
    def reset_all(self, entries: Iterable[CatalogEntry]) -> int:
        """Drop every record and repopulate from a catalog snapshot."""

    @abstractmethod
    def __len__(self) -> int:
        ...

    def close(self) -> None:
        """Release any resources held by the store."""


def new_record_key() -> str:
    """Generate a unique internal record key."""
    return uuid.uuid4().hex


def _validate_field(field_name: str) -> None:
    if field_name not in PRICE_FIELDS:
        raise ValueError(f"Unknown price field: {field_name!r}")


class SqliteRecordStore(RecordStore):
    """
    SQLite-backed record store.

    Records are loaded into memory at construction; ``get`` hands out the
    live objects so their guards are shared by all callers. The connection
    is shared between threads and serialized by ``_db_lock``, which is only
    held for the duration of a single statement batch.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH) -> None:
        """
        Initialize the store.

        Args:
            db_path: SQLite file path, or ":memory:".
        """
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self._db_lock = threading.Lock()
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._records: dict[str, PriceRecord] = {}

        self._ensure_schema()
        self._load_records()

    def _ensure_schema(self) -> None:
        currency_columns = ",\n".join(
            f"                \"{c.value}\" TEXT NOT NULL DEFAULT '0.00'" for c in Currency
        )
        with self._db_lock, self._conn:
            self._conn.execute(
                f"""
            CREATE TABLE IF NOT EXISTS prices (
                record_key TEXT PRIMARY KEY,
                item_id TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL DEFAULT '',
                base_price INTEGER NOT NULL DEFAULT 0,
{currency_columns}
            )
        """
            )

    def _load_records(self) -> None:
        columns = ", ".join(f'"{c.value}"' for c in Currency)
        with self._db_lock:
            rows = self._conn.execute(
                f"SELECT record_key, item_id, name, base_price, {columns} FROM prices"
            ).fetchall()

        for row in rows:
            record_key, item_id, name, base_price = row[:4]
            prices = {
                currency: round_amount(Decimal(value))
                for currency, value in zip(Currency, row[4:])
            }
            self._records[item_id] = PriceRecord(
                item_id=item_id,
                record_key=record_key,
                name=name,
                base_price=int(base_price),
                converted_prices=prices,
            )
        if rows:
            logger.info(f"Loaded {len(rows)} price records from {self.db_path}")

    def get(self, item_id: str) -> Optional[PriceRecord]:
        return self._records.get(str(item_id))

    def set_field(self, record_key: str, field_name: str, value) -> bool:
        """
        Persist one field of a record.

        Args:
            record_key: Internal record key.
            field_name: "base_price" or a currency code.
            value: New value (int cents or Decimal amount).

        Returns:
            bool: True if the row was written.

        Raises:
            ValueError: If ``field_name`` is not a price field.
        """
        _validate_field(field_name)
        stored = int(value) if field_name == BASE_PRICE_FIELD else str(round_amount(value))

        try:
            with self._db_lock, self._conn:
                cursor = self._conn.execute(
                    f'UPDATE prices SET "{field_name}" = ? WHERE record_key = ?',
                    (stored, record_key),
                )
        except sqlite3.Error as e:
            logger.error(f"Failed to persist {field_name} for record {record_key}: {e}")
            return False

        if cursor.rowcount != 1:
            logger.error(f"No stored row for record {record_key} while writing {field_name}")
            return False
        return True

    def reset_all(self, entries: Iterable[CatalogEntry]) -> int:
        """
        Replace all records with fresh, zeroed ones.

        Duplicate item ids keep their first entry.

        Args:
            entries: Catalog snapshot.

        Returns:
            int: Number of records created.
        """
        records: dict[str, PriceRecord] = {}
        for entry in entries:
            item_id = str(entry.item_id)
            if item_id in records:
                continue
            records[item_id] = PriceRecord(
                item_id=item_id,
                record_key=new_record_key(),
                name=entry.name or "",
            )

        rows = [(r.record_key, r.item_id, r.name) for r in records.values()]
        with self._db_lock, self._conn:
            self._conn.execute("DELETE FROM prices")
            self._conn.executemany(
                "INSERT INTO prices (record_key, item_id, name) VALUES (?, ?, ?)",
                rows,
            )
            self._records = records

        logger.info(f"Reset record store with {len(records)} records")
        return len(records)

    def __len__(self) -> int:
        return len(self._records)

    def close(self) -> None:
        """Close the database connection."""
        with self._db_lock:
            self._conn.close()
