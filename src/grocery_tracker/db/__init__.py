"""Local sqlite persistence."""

from .db_manager import DBManager
from .setup_db import setup_database

__all__ = ["DBManager", "setup_database"]
