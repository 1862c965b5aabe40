"""
SQLite database implementation.
Simple and direct - no abstraction layers.
"""

import aiosqlite
from contextlib import asynccontextmanager
from datetime import date, datetime, timedelta
from typing import AsyncIterator, List, Optional
import logging
import os

from .models import (
    User, Store, Order, AdAccount, AdSpend, SyncHistory, SyncStatus,
    AdPlatform, Snapshot, generate_uuid
)

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """A write to the database failed."""
    pass


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO timestamp, dropping timezone info to avoid comparison issues."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None)
    return parsed


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.replace(tzinfo=None)
    return value.isoformat()


class SQLiteDatabase:
    """SQLite database for all operations."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
            await self._connection.execute("PRAGMA foreign_keys = ON")
        return self._connection

    @asynccontextmanager
    async def _write(self, action: str) -> AsyncIterator[aiosqlite.Connection]:
        """Run a write and commit it; SQLite errors become PersistenceError."""
        conn = await self._get_connection()
        try:
            yield conn
            await conn.commit()
        except aiosqlite.Error as e:
            await conn.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e

    async def initialize(self) -> None:
        """Create database tables."""
        conn = await self._get_connection()

        await conn.executescript("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE COLLATE NOCASE,
                password_hash TEXT NOT NULL,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS stores (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                name TEXT NOT NULL,
                url TEXT NOT NULL,
                consumer_key TEXT NOT NULL,
                consumer_secret TEXT NOT NULL,
                last_sync_at TEXT,
                auto_sync_enabled INTEGER NOT NULL DEFAULT 0,
                sync_frequency_hours INTEGER NOT NULL DEFAULT 24,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
            );

            CREATE TABLE IF NOT EXISTS orders (
                id TEXT PRIMARY KEY,
                store_id TEXT NOT NULL,
                woo_order_id TEXT NOT NULL,
                order_date TEXT NOT NULL,
                total REAL NOT NULL DEFAULT 0,
                cost REAL NOT NULL DEFAULT 0,
                profit REAL NOT NULL DEFAULT 0,
                status TEXT NOT NULL,
                shipping_cost REAL NOT NULL DEFAULT 0,
                tax REAL NOT NULL DEFAULT 0,
                discount REAL NOT NULL DEFAULT 0,
                customer_email TEXT,
                items_count INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (store_id) REFERENCES stores(id) ON DELETE CASCADE,
                UNIQUE(store_id, woo_order_id)
            );

            CREATE TABLE IF NOT EXISTS ad_accounts (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                name TEXT NOT NULL,
                platform TEXT NOT NULL,
                created_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
            );

            CREATE TABLE IF NOT EXISTS ad_spend (
                id TEXT PRIMARY KEY,
                ad_account_id TEXT NOT NULL,
                store_id TEXT,
                date TEXT NOT NULL,
                amount REAL NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (ad_account_id) REFERENCES ad_accounts(id) ON DELETE CASCADE,
                FOREIGN KEY (store_id) REFERENCES stores(id) ON DELETE SET NULL
            );

            CREATE TABLE IF NOT EXISTS sync_history (
                id TEXT PRIMARY KEY,
                store_id TEXT NOT NULL,
                sync_type TEXT NOT NULL DEFAULT 'orders',
                status TEXT NOT NULL DEFAULT 'pending',
                records_synced INTEGER NOT NULL DEFAULT 0,
                error_message TEXT,
                started_at TEXT NOT NULL,
                completed_at TEXT,
                FOREIGN KEY (store_id) REFERENCES stores(id) ON DELETE CASCADE
            );

            CREATE INDEX IF NOT EXISTS idx_stores_user_id ON stores(user_id);
            CREATE INDEX IF NOT EXISTS idx_orders_store_id ON orders(store_id);
            CREATE INDEX IF NOT EXISTS idx_orders_order_date ON orders(order_date DESC);
            CREATE INDEX IF NOT EXISTS idx_ad_accounts_user_id ON ad_accounts(user_id);
            CREATE INDEX IF NOT EXISTS idx_ad_spend_account_id ON ad_spend(ad_account_id);
            CREATE INDEX IF NOT EXISTS idx_sync_history_store_id ON sync_history(store_id);
            CREATE INDEX IF NOT EXISTS idx_sync_history_started_at ON sync_history(started_at DESC);
        """)
        await conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    # ===== Helper Methods =====

    def _row_to_user(self, row: aiosqlite.Row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=_parse_datetime(row["created_at"])
        )

    def _row_to_store(self, row: aiosqlite.Row) -> Store:
        """Convert a database row to a Store model."""
        return Store(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            url=row["url"],
            consumer_key=row["consumer_key"],
            consumer_secret=row["consumer_secret"],
            last_sync_at=_parse_datetime(row["last_sync_at"]),
            auto_sync_enabled=bool(row["auto_sync_enabled"]),
            sync_frequency_hours=row["sync_frequency_hours"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"])
        )

    def _row_to_order(self, row: aiosqlite.Row) -> Order:
        return Order(
            id=row["id"],
            store_id=row["store_id"],
            woo_order_id=row["woo_order_id"],
            order_date=_parse_datetime(row["order_date"]),
            total=row["total"],
            cost=row["cost"],
            profit=row["profit"],
            status=row["status"],
            shipping_cost=row["shipping_cost"],
            tax=row["tax"],
            discount=row["discount"],
            customer_email=row["customer_email"],
            items_count=row["items_count"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"])
        )

    def _row_to_ad_account(self, row: aiosqlite.Row) -> AdAccount:
        return AdAccount(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            platform=AdPlatform(row["platform"]),
            created_at=_parse_datetime(row["created_at"])
        )

    def _row_to_ad_spend(self, row: aiosqlite.Row) -> AdSpend:
        return AdSpend(
            id=row["id"],
            ad_account_id=row["ad_account_id"],
            store_id=row["store_id"],
            spend_date=date.fromisoformat(row["date"]),
            amount=row["amount"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"])
        )

    def _row_to_sync(self, row: aiosqlite.Row) -> SyncHistory:
        """Convert a database row to a SyncHistory model."""
        return SyncHistory(
            id=row["id"],
            store_id=row["store_id"],
            sync_type=row["sync_type"],
            status=SyncStatus(row["status"]),
            records_synced=row["records_synced"],
            error_message=row["error_message"],
            started_at=_parse_datetime(row["started_at"]),
            completed_at=_parse_datetime(row["completed_at"])
        )

    # ===== User Operations =====

    async def create_user(self, user: User) -> User:
        async with self._write("create user") as conn:
            await conn.execute(
                "INSERT INTO users (id, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
                (user.id, user.email, user.password_hash, _format_datetime(user.created_at))
            )
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM users WHERE email = ?", (email,))
        row = await cursor.fetchone()
        return self._row_to_user(row) if row else None

    # ===== Store Operations =====

    async def get_stores(self, user_id: str) -> List[Store]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM stores WHERE user_id = ? ORDER BY name", (user_id,)
        )
        rows = await cursor.fetchall()
        return [self._row_to_store(row) for row in rows]

    async def get_store(self, store_id: str) -> Optional[Store]:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM stores WHERE id = ?", (store_id,))
        row = await cursor.fetchone()
        return self._row_to_store(row) if row else None

    async def get_auto_sync_stores(self) -> List[Store]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM stores WHERE auto_sync_enabled = 1 ORDER BY name"
        )
        rows = await cursor.fetchall()
        return [self._row_to_store(row) for row in rows]

    async def get_stores_due_for_sync(self, now: Optional[datetime] = None) -> List[Store]:
        """Auto-sync stores never synced, or last synced longer ago than their frequency."""
        now = now or datetime.utcnow()
        return [
            store for store in await self.get_auto_sync_stores()
            if store.last_sync_at is None
            or now - store.last_sync_at >= timedelta(hours=store.sync_frequency_hours)
        ]

    async def create_store(self, store: Store) -> Store:
        async with self._write("create store") as conn:
            await conn.execute(
                """
                INSERT INTO stores (id, user_id, name, url, consumer_key, consumer_secret,
                                    last_sync_at, auto_sync_enabled, sync_frequency_hours,
                                    created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    store.id,
                    store.user_id,
                    store.name,
                    store.url,
                    store.consumer_key,
                    store.consumer_secret,
                    _format_datetime(store.last_sync_at),
                    int(store.auto_sync_enabled),
                    store.sync_frequency_hours,
                    _format_datetime(store.created_at),
                    _format_datetime(store.updated_at)
                )
            )
        return store

    async def update_store(self, store_id: str, **kwargs) -> Optional[Store]:
        if not kwargs:
            return await self.get_store(store_id)

        updates = []
        values = []

        columns = {
            "name", "url", "consumer_key", "consumer_secret",
            "auto_sync_enabled", "sync_frequency_hours"
        }

        for key, value in kwargs.items():
            if key in columns:
                updates.append(f"{key} = ?")
                if key == "auto_sync_enabled":
                    values.append(int(value))
                else:
                    values.append(value)

        updates.append("updated_at = ?")
        values.append(_format_datetime(datetime.utcnow()))
        values.append(store_id)

        async with self._write("update store") as conn:
            await conn.execute(f"UPDATE stores SET {', '.join(updates)} WHERE id = ?", values)

        return await self.get_store(store_id)

    async def touch_store_last_sync(self, store_id: str, synced_at: Optional[datetime] = None) -> None:
        now = _format_datetime(synced_at or datetime.utcnow())
        async with self._write("update store sync time") as conn:
            await conn.execute(
                "UPDATE stores SET last_sync_at = ?, updated_at = ? WHERE id = ?",
                (now, now, store_id)
            )

    async def delete_store(self, store_id: str) -> bool:
        """Delete a store; its orders and sync history go with it."""
        async with self._write("delete store") as conn:
            cursor = await conn.execute("DELETE FROM stores WHERE id = ?", (store_id,))
        return cursor.rowcount > 0

    # ===== Order Operations =====

    async def upsert_order(self, order: Order) -> None:
        """Insert an order, or overwrite the existing row for the same (store, remote id)."""
        now = _format_datetime(datetime.utcnow())
        async with self._write("save order") as conn:
            await conn.execute(
                """
                INSERT INTO orders (id, store_id, woo_order_id, order_date, total, cost, profit,
                                    status, shipping_cost, tax, discount, customer_email,
                                    items_count, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(store_id, woo_order_id) DO UPDATE SET
                    order_date = excluded.order_date,
                    total = excluded.total,
                    cost = excluded.cost,
                    profit = excluded.profit,
                    status = excluded.status,
                    shipping_cost = excluded.shipping_cost,
                    tax = excluded.tax,
                    discount = excluded.discount,
                    customer_email = excluded.customer_email,
                    items_count = excluded.items_count,
                    updated_at = excluded.updated_at
                """,
                (
                    order.id,
                    order.store_id,
                    order.woo_order_id,
                    _format_datetime(order.order_date),
                    order.total,
                    order.cost,
                    order.profit,
                    order.status,
                    order.shipping_cost,
                    order.tax,
                    order.discount,
                    order.customer_email,
                    order.items_count,
                    now,
                    now
                )
            )

    async def get_orders(self, store_id: str) -> List[Order]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM orders WHERE store_id = ? ORDER BY order_date DESC", (store_id,)
        )
        rows = await cursor.fetchall()
        return [self._row_to_order(row) for row in rows]

    # ===== Ad Operations =====

    async def get_ad_account(self, account_id: str) -> Optional[AdAccount]:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM ad_accounts WHERE id = ?", (account_id,))
        row = await cursor.fetchone()
        return self._row_to_ad_account(row) if row else None

    async def create_ad_account(self, account: AdAccount) -> AdAccount:
        async with self._write("create ad account") as conn:
            await conn.execute(
                "INSERT INTO ad_accounts (id, user_id, name, platform, created_at) VALUES (?, ?, ?, ?, ?)",
                (
                    account.id,
                    account.user_id,
                    account.name,
                    account.platform.value,
                    _format_datetime(account.created_at)
                )
            )
        return account

    async def create_ad_spend(self, spend: AdSpend) -> AdSpend:
        async with self._write("create ad spend") as conn:
            await conn.execute(
                """
                INSERT INTO ad_spend (id, ad_account_id, store_id, date, amount, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    spend.id,
                    spend.ad_account_id,
                    spend.store_id,
                    spend.spend_date.isoformat(),
                    spend.amount,
                    _format_datetime(spend.created_at),
                    _format_datetime(spend.updated_at)
                )
            )
        return spend

    # ===== Sync History Operations =====

    async def mark_sync_started(self, store_id: str, sync_type: str = "orders") -> str:
        """Record a pending sync run and return its id."""
        run = SyncHistory(id=generate_uuid(), store_id=store_id, sync_type=sync_type)
        async with self._write("record sync start") as conn:
            await conn.execute(
                """
                INSERT INTO sync_history (id, store_id, sync_type, status, records_synced,
                                          error_message, started_at, completed_at)
                VALUES (?, ?, ?, ?, 0, NULL, ?, NULL)
                """,
                (run.id, run.store_id, run.sync_type, run.status.value, _format_datetime(run.started_at))
            )
        return run.id

    async def mark_sync_completed(self, run_id: str, records_synced: int) -> None:
        async with self._write("record sync success") as conn:
            await conn.execute(
                """
                UPDATE sync_history SET status = ?, records_synced = ?, completed_at = ?
                WHERE id = ? AND status = ?
                """,
                (
                    SyncStatus.SUCCESS.value,
                    records_synced,
                    _format_datetime(datetime.utcnow()),
                    run_id,
                    SyncStatus.PENDING.value
                )
            )

    async def mark_sync_failed(self, run_id: str, error_message: str) -> None:
        async with self._write("record sync failure") as conn:
            await conn.execute(
                """
                UPDATE sync_history SET status = ?, error_message = ?, completed_at = ?
                WHERE id = ? AND status = ?
                """,
                (
                    SyncStatus.FAILED.value,
                    error_message,
                    _format_datetime(datetime.utcnow()),
                    run_id,
                    SyncStatus.PENDING.value
                )
            )

    async def get_sync_run(self, run_id: str) -> Optional[SyncHistory]:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM sync_history WHERE id = ?", (run_id,))
        row = await cursor.fetchone()
        return self._row_to_sync(row) if row else None

    async def get_sync_history(
        self,
        user_id: str,
        store_id: Optional[str] = None,
        status: Optional[SyncStatus] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[SyncHistory]:
        conn = await self._get_connection()

        query = """
            SELECT sync_history.* FROM sync_history
            JOIN stores ON stores.id = sync_history.store_id
            WHERE stores.user_id = ?
        """
        params: list = [user_id]

        if store_id:
            query += " AND sync_history.store_id = ?"
            params.append(store_id)

        if status:
            query += " AND sync_history.status = ?"
            params.append(status.value)

        query += " ORDER BY sync_history.started_at DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()
        return [self._row_to_sync(row) for row in rows]

    # ===== Snapshot =====

    async def load_all(self, user_id: str) -> Snapshot:
        """Load everything a user owns: stores, their orders, ad accounts and ad spend."""
        conn = await self._get_connection()

        cursor = await conn.execute(
            "SELECT * FROM stores WHERE user_id = ? ORDER BY name", (user_id,)
        )
        stores = [self._row_to_store(row) for row in await cursor.fetchall()]

        cursor = await conn.execute(
            """
            SELECT orders.* FROM orders
            JOIN stores ON stores.id = orders.store_id
            WHERE stores.user_id = ?
            ORDER BY orders.order_date DESC
            """,
            (user_id,)
        )
        orders = [self._row_to_order(row) for row in await cursor.fetchall()]

        cursor = await conn.execute(
            "SELECT * FROM ad_accounts WHERE user_id = ? ORDER BY name", (user_id,)
        )
        ad_accounts = [self._row_to_ad_account(row) for row in await cursor.fetchall()]

        cursor = await conn.execute(
            """
            SELECT ad_spend.* FROM ad_spend
            JOIN ad_accounts ON ad_accounts.id = ad_spend.ad_account_id
            WHERE ad_accounts.user_id = ?
            ORDER BY ad_spend.date DESC
            """,
            (user_id,)
        )
        ad_spends = [self._row_to_ad_spend(row) for row in await cursor.fetchall()]

        return Snapshot(
            stores=stores,
            orders=orders,
            ad_accounts=ad_accounts,
            ad_spends=ad_spends
        )
