"""
Order history routes.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ..auth import AuthContext
from ..dependencies import get_db, get_window, require_user
from ..metrics import DateWindow, filter_orders
from ..reports import SortField, content_disposition, export_filename, orders_to_csv, search_orders
from .stores import get_owned_store

router = APIRouter(prefix="/api/orders", tags=["orders"])


async def _find_orders(
    user: AuthContext,
    window: DateWindow,
    store_id: Optional[str],
    search: Optional[str],
    status: Optional[str],
    sort_by: SortField,
    order: str
):
    db = get_db()
    store = await get_owned_store(db, store_id, user) if store_id else None

    snapshot = await db.load_all(user.user_id)
    orders = filter_orders(snapshot.orders, window)
    if store:
        orders = [o for o in orders if o.store_id == store.id]

    return store, search_orders(orders, search, status, sort_by, descending=(order != "asc"))


@router.get("")
async def list_orders(
    window: DateWindow = Depends(get_window),
    store_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    sort_by: SortField = Query(SortField.DATE),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    user: AuthContext = Depends(require_user)
):
    _, orders = await _find_orders(user, window, store_id, search, status, sort_by, order)
    return orders


@router.get("/export")
async def export_orders(
    window: DateWindow = Depends(get_window),
    store_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    sort_by: SortField = Query(SortField.DATE),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    user: AuthContext = Depends(require_user)
):
    """Download the filtered order list as CSV."""
    store, orders = await _find_orders(user, window, store_id, search, status, sort_by, order)
    filename = export_filename(store.name if store else None, date.today())

    return Response(
        content=orders_to_csv(orders),
        media_type="text/csv",
        headers={"Content-Disposition": content_disposition(filename)}
    )
