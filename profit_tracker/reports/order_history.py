"""
Order history: search, sort and CSV export.
"""

import csv
import io
from enum import Enum
from typing import Iterable, List, Optional
from urllib.parse import quote

from ..db import Order


CSV_HEADERS = ["Order ID", "Date", "Status", "Items", "Total", "Cost", "Profit", "Customer"]


class SortField(str, Enum):
    DATE = "date"
    TOTAL = "total"
    PROFIT = "profit"


def search_orders(
    orders: Iterable[Order],
    search: Optional[str] = None,
    status: Optional[str] = None,
    sort_by: SortField = SortField.DATE,
    descending: bool = True
) -> List[Order]:
    """
    Filter orders by search term and status, then sort.

    The search term matches the WooCommerce order id or the customer email,
    case-insensitively. A status of None or "all" matches everything.
    """
    term = (search or "").strip().lower()

    def matches(order: Order) -> bool:
        if term and term not in order.woo_order_id.lower() and not (
            order.customer_email and term in order.customer_email.lower()
        ):
            return False
        if status and status != "all" and order.status != status:
            return False
        return True

    if sort_by == SortField.TOTAL:
        key = lambda o: o.total
    elif sort_by == SortField.PROFIT:
        key = lambda o: o.profit
    else:
        key = lambda o: o.order_date

    return sorted((o for o in orders if matches(o)), key=key, reverse=descending)


def orders_to_csv(orders: Iterable[Order]) -> str:
    """Render orders as CSV, one row per order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for order in orders:
        writer.writerow([
            order.woo_order_id,
            order.order_date.strftime("%Y-%m-%d %H:%M:%S"),
            order.status,
            order.items_count or 0,
            order.total,
            order.cost,
            order.profit,
            order.customer_email or "",
        ])
    return buffer.getvalue()


def export_filename(store_name: Optional[str], day) -> str:
    """orders_<store>_<YYYY-MM-DD>.csv"""
    name = "".join(ch for ch in (store_name or "") if ch.isprintable())
    name = name.replace(" ", "_").replace('"', "").replace("\\", "") or "all"
    return f"orders_{name}_{day.strftime('%Y-%m-%d')}.csv"


def content_disposition(filename: str) -> str:
    """
    Attachment header value for a possibly non-ASCII filename.

    filename= is an ASCII fallback; filename* (RFC 5987) carries the UTF-8 name.
    """
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f'attachment; filename="{fallback}"; filename*=UTF-8\'\'{quote(filename, safe="")}'
