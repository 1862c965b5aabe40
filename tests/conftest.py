"""
Shared fixtures.
"""

from datetime import date, datetime
from typing import Callable, List

import httpx
import pytest
import pytest_asyncio

from profit_tracker.db import AdSpend, Order, SQLiteDatabase, Store, User


def remote_order_payload(
    order_id: int,
    total: str = "100.00",
    date_created: str = "2024-03-05T10:00:00",
    status: str = "completed",
    items: int = 1,
    email: str = None,
) -> dict:
    """An order as the WooCommerce REST API returns it."""
    payload = {
        "id": order_id,
        "date_created": date_created,
        "status": status,
        "total": total,
        "line_items": [
            {"id": i, "name": f"Item {i}", "quantity": 1, "total": "10.00", "meta_data": []}
            for i in range(1, items + 1)
        ],
    }
    if email is not None:
        payload["billing"] = {"email": email}
    return payload


def orders_transport(pages: List[List[dict]], seen: list = None) -> httpx.MockTransport:
    """Serve the given pages from /orders; anything past the last page is empty."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.path.endswith("/system_status"):
            return httpx.Response(200, json={"environment": {}})
        page = int(request.url.params.get("page", "1"))
        body = pages[page - 1] if page <= len(pages) else []
        return httpx.Response(200, json=body)

    return httpx.MockTransport(handler)


def make_order(
    store_id: str,
    woo_order_id: str,
    total: float,
    cost: float,
    profit: float,
    order_date: datetime,
    **kwargs
) -> Order:
    return Order(
        store_id=store_id,
        woo_order_id=woo_order_id,
        total=total,
        cost=cost,
        profit=profit,
        order_date=order_date,
        status=kwargs.pop("status", "completed"),
        **kwargs
    )


def make_spend(amount: float, spend_date: date, account_id: str = "acct-1", store_id: str = None) -> AdSpend:
    return AdSpend(ad_account_id=account_id, store_id=store_id, spend_date=spend_date, amount=amount)


@pytest_asyncio.fixture
async def db(tmp_path):
    database = SQLiteDatabase(str(tmp_path / "test.db"))
    await database.initialize()
    yield database
    await database.close()


@pytest_asyncio.fixture
async def user(db) -> User:
    return await db.create_user(User(email="owner@example.com", password_hash="x"))


@pytest_asyncio.fixture
async def store(db, user) -> Store:
    return await db.create_store(Store(
        user_id=user.id,
        name="Main Shop",
        url="https://shop.example.com",
        consumer_key="ck_test",
        consumer_secret="cs_test",
    ))


@pytest.fixture
def client_factory() -> Callable:
    """Build a client_factory serving fixed pages of orders."""
    from profit_tracker.woocommerce import WooCommerceClient

    def build(pages: List[List[dict]], seen: list = None):
        transport = orders_transport(pages, seen)
        return lambda store: WooCommerceClient(
            store.url, store.consumer_key, store.consumer_secret, transport=transport
        )

    return build
