import os
import sqlite3

from grocery_tracker.logging_config import get_logger

logger = get_logger(__name__)

DATABASE_FILE = os.path.join(os.getcwd(), "grocery.db")


def setup_database(db_path: str = DATABASE_FILE) -> None:
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    # One row per collection key, value is a JSON document
    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS records (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
    """
    )

    conn.commit()
    conn.close()
    logger.debug("Database '%s' and tables created/verified successfully.", db_path)


if __name__ == "__main__":
    setup_database()
