"""
Sync trigger and history API routes.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from typing import Optional

from ..auth import AuthContext
from ..config import settings
from ..db import PersistenceError, SyncStatus
from ..dependencies import get_db, require_user
from ..processor import SyncInProgressError, run_store_sync
from .stores import get_owned_store

router = APIRouter(prefix="/api/sync", tags=["sync"])


class SyncResponse(BaseModel):
    message: str
    store_id: Optional[str] = None
    records_synced: int = 0
    success: bool


@router.get("/history")
async def sync_history(
    store_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    user: AuthContext = Depends(require_user)
):
    """List sync attempts, newest first."""
    db = get_db()

    status_filter = None
    if status and status != "all":
        try:
            status_filter = SyncStatus(status)
        except ValueError:
            pass

    limit = 25
    runs = await db.get_sync_history(
        user.user_id,
        store_id=store_id if store_id and store_id != "all" else None,
        status=status_filter,
        limit=limit + 1,
        offset=(page - 1) * limit
    )

    return {
        "runs": runs[:limit],
        "page": page,
        "has_prev": page > 1,
        "has_next": len(runs) > limit
    }


@router.post("/{store_id}", response_model=SyncResponse)
async def sync_single_store(store_id: str, user: AuthContext = Depends(require_user)):
    """Import a store's orders and wait for the result."""
    db = get_db()
    store = await get_owned_store(db, store_id, user)

    try:
        result = await run_store_sync(store, db, settings)
    except SyncInProgressError:
        raise HTTPException(status_code=409, detail=f"'{store.name}' is already syncing")
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to sync store. Please try again.")

    if not result.success:
        return SyncResponse(message=result.error, store_id=store.id, success=False)

    return SyncResponse(
        message=f"Synced {result.records_synced} orders from {store.name}",
        store_id=store.id,
        records_synced=result.records_synced,
        success=True
    )
