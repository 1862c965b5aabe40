"""
Store management routes.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..auth import AuthContext
from ..config import settings
from ..db import PersistenceError, SQLiteDatabase, Store, StoreCreate, StoreUpdate
from ..dependencies import get_db, get_window, require_user
from ..metrics import DateWindow, filter_orders, store_ad_spend, store_stats
from ..processor import is_syncing
from ..woocommerce import client as woocommerce
from ..woocommerce.client import normalize_base_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stores", tags=["stores"])

CONNECTION_FAILED = "Could not connect to WooCommerce store. Please check your credentials."


def store_public(store: Store) -> dict:
    """Store fields safe to send to the browser."""
    data = store.model_dump(exclude={"consumer_secret"})
    data["syncing"] = is_syncing(store.id)
    return data


async def get_owned_store(db: SQLiteDatabase, store_id: str, user: AuthContext) -> Store:
    store = await db.get_store(store_id)
    if not store or store.user_id != user.user_id:
        raise HTTPException(status_code=404, detail="Store not found")
    return store


@router.get("")
async def list_stores(user: AuthContext = Depends(require_user)):
    """List the user's stores."""
    stores = await get_db().get_stores(user.user_id)
    return [store_public(store) for store in stores]


@router.post("", status_code=201)
async def create_store(body: StoreCreate, user: AuthContext = Depends(require_user)):
    """Connect a new store. The connection is tested before anything is saved."""
    db = get_db()
    url = normalize_base_url(body.url)

    if not await woocommerce.test_connection(
        url, body.consumer_key, body.consumer_secret, timeout=settings.woo_request_timeout
    ):
        raise HTTPException(status_code=400, detail=CONNECTION_FAILED)

    store = Store(
        user_id=user.user_id,
        name=body.name,
        url=url,
        consumer_key=body.consumer_key,
        consumer_secret=body.consumer_secret,
        auto_sync_enabled=body.auto_sync_enabled,
        sync_frequency_hours=body.sync_frequency_hours
    )

    try:
        await db.create_store(store)
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to add store. Please try again.")

    logger.info(f"Store '{store.name}' added ({store.id})")
    return store_public(store)


@router.patch("/{store_id}")
async def update_store(store_id: str, body: StoreUpdate, user: AuthContext = Depends(require_user)):
    """Update a store. Changed credentials are tested before saving."""
    db = get_db()
    store = await get_owned_store(db, store_id, user)

    update_data = body.model_dump(exclude_none=True)
    if "url" in update_data:
        update_data["url"] = normalize_base_url(update_data["url"])

    if {"url", "consumer_key", "consumer_secret"} & update_data.keys():
        ok = await woocommerce.test_connection(
            update_data.get("url", store.url),
            update_data.get("consumer_key", store.consumer_key),
            update_data.get("consumer_secret", store.consumer_secret),
            timeout=settings.woo_request_timeout
        )
        if not ok:
            raise HTTPException(status_code=400, detail=CONNECTION_FAILED)

    try:
        store = await db.update_store(store_id, **update_data)
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to update store. Please try again.")

    return store_public(store)


@router.delete("/{store_id}")
async def delete_store(store_id: str, user: AuthContext = Depends(require_user)):
    """Delete a store and its orders."""
    db = get_db()
    store = await get_owned_store(db, store_id, user)

    try:
        await db.delete_store(store.id)
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to delete store.")

    logger.info(f"Store '{store.name}' deleted ({store.id})")
    return {"message": "Store deleted successfully.", "store_id": store.id}


@router.get("/{store_id}/stats")
async def get_store_stats(
    store_id: str,
    window: DateWindow = Depends(get_window),
    user: AuthContext = Depends(require_user)
):
    """Revenue, profit and order count for one store in the window, plus its ad spend."""
    db = get_db()
    store = await get_owned_store(db, store_id, user)
    snapshot = await db.load_all(user.user_id)

    stats = store_stats(filter_orders(snapshot.orders, window), store.id)
    return {
        "store_id": store.id,
        "revenue": stats.revenue,
        "profit": stats.profit,
        "orders": stats.orders,
        "ad_spend": store_ad_spend(snapshot.ad_spends, store.id),
    }
