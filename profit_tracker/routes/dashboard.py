"""
Dashboard metrics routes.
"""

from fastapi import APIRouter, Depends

from ..auth import AuthContext
from ..dependencies import get_db, get_window, require_user
from ..metrics import (
    DateWindow, ScenarioInput, calculate_scenario, daily_series, filter_orders,
    kpis, spend_by_account, store_ad_spend, store_stats, totals
)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("")
async def dashboard(
    window: DateWindow = Depends(get_window),
    user: AuthContext = Depends(require_user)
):
    """Totals, KPIs, daily chart data and per-store / per-account rollups for the window."""
    snapshot = await get_db().load_all(user.user_id)
    windowed_orders = filter_orders(snapshot.orders, window)
    account_spend = spend_by_account(snapshot.ad_spends)

    return {
        "window": {"from": window.start, "to": window.end},
        "totals": totals(snapshot.orders, snapshot.ad_spends, window),
        "kpis": kpis(snapshot.orders, snapshot.ad_spends, window),
        "daily": daily_series(snapshot.orders, snapshot.ad_spends, window),
        "stores": [
            {
                "store_id": store.id,
                "name": store.name,
                "last_sync_at": store.last_sync_at,
                "revenue": stats.revenue,
                "profit": stats.profit,
                "orders": stats.orders,
                "ad_spend": store_ad_spend(snapshot.ad_spends, store.id),
            }
            for store in snapshot.stores
            for stats in [store_stats(windowed_orders, store.id)]
        ],
        "ad_accounts": [
            {
                "id": account.id,
                "name": account.name,
                "platform": account.platform,
                "total_spend": account_spend.get(account.id, 0.0),
            }
            for account in snapshot.ad_accounts
        ],
    }


@router.post("/calculator")
async def profit_calculator(body: ScenarioInput, user: AuthContext = Depends(require_user)):
    """What-if profit for given revenue, costs, ad spend and fees."""
    return calculate_scenario(body)
