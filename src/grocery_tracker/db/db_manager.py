import json
import sqlite3
from typing import Any, Optional

from grocery_tracker.db.setup_db import setup_database
from grocery_tracker.logging_config import get_logger

logger = get_logger(__name__)


class DBManager:
    """Key-value access to the local sqlite file.

    Every value is one JSON document rewritten wholesale on save, so the last
    writer wins.
    """

    def __init__(self, db_path: str):
        self.db_path = str(db_path)
        setup_database(self.db_path)

    def execute_query(self, query: str, params: tuple = (), fetch: Optional[str] = None):
        """Generic executor; errors are logged and re-raised."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)

                if fetch == "one":
                    return cursor.fetchone()
                elif fetch == "all":
                    return cursor.fetchall()

                conn.commit()
                return None
        except sqlite3.OperationalError as e:
            logger.error("Operational error on %s: %s", self.db_path, e)
            raise

    # --- key-value ---
    def get_value(self, key: str, default: Any = None) -> Any:
        row = self.execute_query("SELECT value FROM records WHERE key=?", (key,), fetch="one")
        if row is None:
            return default
        return json.loads(row[0])

    def set_value(self, key: str, value: Any) -> None:
        query = (
            "INSERT INTO records (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at"
        )
        self.execute_query(query, (key, json.dumps(value, ensure_ascii=False)))
    def has_key(self, key: str) -> bool:
        row = self.execute_query("SELECT 1 FROM records WHERE key=?", (key,), fetch="one")
        return row is not None
