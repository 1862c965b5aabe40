"""
Tests for the store sync process.
"""

import httpx
import pytest

from profit_tracker.config import Settings
from profit_tracker.db import SyncStatus
from profit_tracker.processor import (
    SYNC_FAILED_MESSAGE,
    SyncError,
    SyncInProgressError,
    run_due_stores,
    run_store_sync,
    sync_store,
)
from profit_tracker.processor import runner
from profit_tracker.woocommerce import WooCommerceClient

from .conftest import remote_order_payload


def config(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSyncStore:
    """Tests for sync_store."""

    @pytest.mark.asyncio
    async def test_imports_orders_and_records_success(self, db, user, store, client_factory):
        pages = [[remote_order_payload(1, total="100.00"), remote_order_payload(2, total="50.00")]]

        run = await sync_store(store, db, config(), client_factory(pages))

        assert run.status == SyncStatus.SUCCESS
        assert run.records_synced == 2
        orders = await db.get_orders(store.id)
        assert sorted(o.total for o in orders) == [50.0, 100.0]
        assert sorted(o.profit for o in orders) == [35.0, 70.0]
        assert (await db.get_store(store.id)).last_sync_at is not None

    @pytest.mark.asyncio
    async def test_resync_does_not_duplicate(self, db, user, store, client_factory):
        pages = [[remote_order_payload(1), remote_order_payload(2)]]

        await sync_store(store, db, config(), client_factory(pages))
        await sync_store(store, db, config(), client_factory(pages))

        assert len(await db.get_orders(store.id)) == 2
        history = await db.get_sync_history(user.id)
        assert [r.status for r in history] == [SyncStatus.SUCCESS, SyncStatus.SUCCESS]

    @pytest.mark.asyncio
    async def test_uses_configured_cost_ratio(self, db, store, client_factory):
        pages = [[remote_order_payload(1, total="100.00")]]

        await sync_store(store, db, config(order_cost_ratio=0.4), client_factory(pages))

        order = (await db.get_orders(store.id))[0]
        assert order.cost == 40.0
        assert order.profit == 60.0

    @pytest.mark.asyncio
    async def test_remote_error_marks_run_failed(self, db, user, store):
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        factory = lambda s: WooCommerceClient(s.url, s.consumer_key, s.consumer_secret, transport=transport)

        with pytest.raises(SyncError):
            await sync_store(store, db, config(), factory)

        history = await db.get_sync_history(user.id)
        assert len(history) == 1
        assert history[0].status == SyncStatus.FAILED
        assert "503" in history[0].error_message
        assert (await db.get_store(store.id)).last_sync_at is None

    @pytest.mark.asyncio
    async def test_failure_partway_leaves_single_failed_run(self, db, user, store, client_factory):
        pages = [[remote_order_payload(1), remote_order_payload(2, total="not-a-number")]]

        with pytest.raises(SyncError):
            await sync_store(store, db, config(), client_factory(pages))

        history = await db.get_sync_history(user.id)
        assert len(history) == 1
        assert history[0].status == SyncStatus.FAILED
        assert history[0].completed_at is not None

    @pytest.mark.asyncio
    async def test_fetches_following_pages_until_short_page(self, db, store, client_factory):
        seen = []
        pages = [
            [remote_order_payload(1), remote_order_payload(2)],
            [remote_order_payload(3)],
        ]

        run = await sync_store(store, db, config(orders_page_size=2, sync_max_pages=5), client_factory(pages, seen))

        assert run.records_synced == 3
        assert [r.url.params["page"] for r in seen] == ["1", "2"]

    @pytest.mark.asyncio
    async def test_single_page_by_default(self, db, store, client_factory):
        seen = []
        pages = [[remote_order_payload(1), remote_order_payload(2)], [remote_order_payload(3)]]

        run = await sync_store(store, db, config(orders_page_size=2), client_factory(pages, seen))

        assert run.records_synced == 2
        assert len(seen) == 1


class TestRunStoreSync:
    """Tests for run_store_sync."""

    @pytest.mark.asyncio
    async def test_failure_is_generic(self, db, store):
        transport = httpx.MockTransport(lambda request: httpx.Response(401))
        factory = lambda s: WooCommerceClient(s.url, s.consumer_key, s.consumer_secret, transport=transport)

        result = await run_store_sync(store, db, config(), factory)

        assert result.success is False
        assert result.error == SYNC_FAILED_MESSAGE
        assert not runner.is_syncing(store.id)

    @pytest.mark.asyncio
    async def test_success(self, db, store, client_factory):
        result = await run_store_sync(store, db, config(), client_factory([[remote_order_payload(7)]]))

        assert result.success is True
        assert result.records_synced == 1

    @pytest.mark.asyncio
    async def test_rejects_concurrent_sync_of_same_store(self, db, store, client_factory):
        runner._syncing.add(store.id)
        try:
            with pytest.raises(SyncInProgressError):
                await run_store_sync(store, db, config(), client_factory([[]]))
        finally:
            runner._syncing.discard(store.id)

        assert (await db.get_sync_history(store.user_id)) == []


class TestRunDueStores:

    @pytest.mark.asyncio
    async def test_syncs_only_auto_sync_stores(self, db, user, store, client_factory):
        assert await run_due_stores(db, config(), client_factory([[]])) == []

        await db.update_store(store.id, auto_sync_enabled=True)
        results = await run_due_stores(db, config(), client_factory([[remote_order_payload(1)]]))

        assert [r.store.id for r in results] == [store.id]
        assert results[0].success
