"""
Sync processor for a single store.
"""

import logging
import traceback
from datetime import datetime
from typing import Callable, Optional

from ..config import Settings, settings as default_settings
from ..db import SQLiteDatabase, Store, SyncHistory
from ..woocommerce import WooCommerceClient
from .rules import normalize_order

logger = logging.getLogger(__name__)


ClientFactory = Callable[[Store], WooCommerceClient]


class SyncError(Exception):
    """Error during sync process."""
    pass


def default_client_factory(store: Store, config: Settings = default_settings) -> WooCommerceClient:
    return WooCommerceClient(
        store.url,
        store.consumer_key,
        store.consumer_secret,
        timeout=config.woo_request_timeout
    )


async def sync_store(
    store: Store,
    db: SQLiteDatabase,
    config: Settings = default_settings,
    client_factory: Optional[ClientFactory] = None
) -> SyncHistory:
    """
    Import a store's orders.

    A pending sync_history row is written before the first remote call and
    always ends as either success (with a count) or failed (with a message).

    Raises:
        SyncError: After the failure has been recorded
    """
    run_id = await db.mark_sync_started(store.id)
    logger.info(f"Starting sync for store '{store.name}' (run: {run_id})")

    records_synced = 0
    client = None

    try:
        if client_factory is not None:
            client = client_factory(store)
        else:
            client = default_client_factory(store, config)

        for page in range(1, config.sync_max_pages + 1):
            remote_orders = await client.fetch_orders(page=page, per_page=config.orders_page_size)
            logger.info(f"Fetched {len(remote_orders)} orders (page {page})")

            for remote in remote_orders:
                order = normalize_order(remote, store.id, cost_ratio=config.order_cost_ratio)
                await db.upsert_order(order)
                records_synced += 1

            if len(remote_orders) < config.orders_page_size:
                break

        await db.touch_store_last_sync(store.id, datetime.utcnow())
        await db.mark_sync_completed(run_id, records_synced)

        logger.info(f"Sync completed for '{store.name}': {records_synced} orders")

        return await db.get_sync_run(run_id)

    except Exception as e:
        logger.error(f"Sync failed for store '{store.name}': {e}")
        logger.debug(traceback.format_exc())

        await db.mark_sync_failed(run_id, str(e) or type(e).__name__)
        raise SyncError(f"Sync failed: {e}") from e

    finally:
        if client:
            await client.close()
