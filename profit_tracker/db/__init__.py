"""
Database package - SQLite only.
"""

from .models import (
    User, Store, StoreCreate, StoreUpdate, Order, AdAccount, AdAccountCreate,
    AdSpend, AdSpendCreate, AdPlatform, SyncHistory, SyncStatus, Snapshot,
    generate_uuid
)
from .sqlite import SQLiteDatabase, PersistenceError

__all__ = [
    "SQLiteDatabase",
    "PersistenceError",
    "User",
    "Store",
    "StoreCreate",
    "StoreUpdate",
    "Order",
    "AdAccount",
    "AdAccountCreate",
    "AdSpend",
    "AdSpendCreate",
    "AdPlatform",
    "SyncHistory",
    "SyncStatus",
    "Snapshot",
    "generate_uuid",
]
