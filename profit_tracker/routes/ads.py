"""
Ad account and ad spend routes.
"""

from fastapi import APIRouter, Depends, HTTPException

from ..auth import AuthContext
from ..db import AdAccount, AdAccountCreate, AdSpend, AdSpendCreate, PersistenceError
from ..dependencies import get_db, require_user
from ..metrics import ad_account_spend
from .stores import get_owned_store

router = APIRouter(prefix="/api", tags=["ads"])


@router.get("/ad-accounts")
async def list_ad_accounts(user: AuthContext = Depends(require_user)):
    """Ad accounts with their total spend."""
    snapshot = await get_db().load_all(user.user_id)
    return [
        {**account.model_dump(), "total_spend": ad_account_spend(snapshot.ad_spends, account.id)}
        for account in snapshot.ad_accounts
    ]


@router.post("/ad-accounts", status_code=201)
async def create_ad_account(body: AdAccountCreate, user: AuthContext = Depends(require_user)):
    account = AdAccount(user_id=user.user_id, name=body.name, platform=body.platform)
    try:
        await get_db().create_ad_account(account)
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to add ad account. Please try again.")
    return account


@router.get("/ad-spend")
async def list_ad_spend(user: AuthContext = Depends(require_user)):
    snapshot = await get_db().load_all(user.user_id)
    return snapshot.ad_spends


@router.post("/ad-spend", status_code=201)
async def create_ad_spend(body: AdSpendCreate, user: AuthContext = Depends(require_user)):
    """Record spend for an ad account, optionally attributed to a store."""
    db = get_db()

    account = await db.get_ad_account(body.ad_account_id)
    if not account or account.user_id != user.user_id:
        raise HTTPException(status_code=404, detail="Ad account not found")

    if body.store_id:
        await get_owned_store(db, body.store_id, user)

    spend = AdSpend(
        ad_account_id=account.id,
        store_id=body.store_id,
        spend_date=body.spend_date,
        amount=body.amount
    )
    try:
        await db.create_ad_spend(spend)
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to add ad spend. Please try again.")
    return spend
