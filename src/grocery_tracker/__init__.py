"""
Grocery Tracker Package

A personal grocery-expense tracker that provides:
- Local record storage for categories, items, markets and purchases
- Upgrades of older purchase records to the current multi-item shape
- Dashboard statistics (daily/monthly spending, top items, price history)
- A Supabase-backed remote store and a one-shot local-to-remote migration

Main Components:
- domain/: Pydantic models and the error hierarchy
- services/: Record store, normalizer, aggregation, gateway, migration
- cli.py: Command line entry point

Usage:
    grocery-tracker summary --db grocery.db
    uvicorn backend.app.main:app
"""

__version__ = "0.1.0"
__author__ = "Grocery Tracker Team"

from . import constants
from . import domain
from . import services

__all__ = ["constants", "domain", "services"]
