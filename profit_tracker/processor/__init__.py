"""
Processor package for sync operations.
"""

from .rules import (
    normalize_order,
    estimate_cost,
    calculate_profit,
    parse_amount,
    DEFAULT_COST_RATIO
)
from .sync import sync_store, SyncError
from .runner import (
    run_store_sync,
    run_due_stores,
    is_syncing,
    SyncResult,
    SyncInProgressError,
    SYNC_FAILED_MESSAGE
)

__all__ = [
    "normalize_order",
    "estimate_cost",
    "calculate_profit",
    "parse_amount",
    "DEFAULT_COST_RATIO",
    "sync_store",
    "SyncError",
    "run_store_sync",
    "run_due_stores",
    "is_syncing",
    "SyncResult",
    "SyncInProgressError",
    "SYNC_FAILED_MESSAGE",
]
