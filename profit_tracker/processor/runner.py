"""
Runner for executing store syncs.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Set

from ..config import Settings, settings as default_settings
from ..db import SQLiteDatabase, Store, SyncHistory
from .sync import sync_store, SyncError, ClientFactory

logger = logging.getLogger(__name__)


SYNC_FAILED_MESSAGE = "Failed to sync store. Please check your connection."

# Stores with a sync in flight in this process
_syncing: Set[str] = set()


class SyncInProgressError(Exception):
    """A sync for this store is already running."""
    pass


@dataclass
class SyncResult:
    """Result of a store sync."""
    store: Store
    run: Optional[SyncHistory]
    error: Optional[str]

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def records_synced(self) -> int:
        return self.run.records_synced if self.run else 0


def is_syncing(store_id: str) -> bool:
    return store_id in _syncing


async def run_store_sync(
    store: Store,
    db: SQLiteDatabase,
    config: Settings = default_settings,
    client_factory: Optional[ClientFactory] = None
) -> SyncResult:
    """
    Run sync for a single store with error handling.

    Failures come back as a generic message; the details are in sync_history.

    Raises:
        SyncInProgressError: If the store is already syncing
    """
    if store.id in _syncing:
        raise SyncInProgressError(f"Store '{store.name}' is already syncing")

    _syncing.add(store.id)
    try:
        run = await sync_store(store, db, config, client_factory)
        return SyncResult(store=store, run=run, error=None)
    except SyncError as e:
        logger.error(f"Sync failed for '{store.name}': {e}")
        return SyncResult(store=store, run=None, error=SYNC_FAILED_MESSAGE)
    finally:
        _syncing.discard(store.id)


async def run_due_stores(
    db: SQLiteDatabase,
    config: Settings = default_settings,
    client_factory: Optional[ClientFactory] = None
) -> List[SyncResult]:
    """Sync every auto-sync store whose last sync is older than its frequency, one at a time."""
    stores = await db.get_stores_due_for_sync()

    if not stores:
        logger.info("No stores due for sync")
        return []

    logger.info(f"Starting sync for {len(stores)} stores")

    results = []
    for store in stores:
        try:
            results.append(await run_store_sync(store, db, config, client_factory))
        except SyncInProgressError as e:
            logger.warning(str(e))

    successful = sum(1 for r in results if r.success)
    failed = len(results) - successful

    logger.info(f"Sync completed: {successful} successful, {failed} failed")

    return results
