"""
Reports package.
"""

from .order_history import (
    SortField, search_orders, orders_to_csv, export_filename, content_disposition, CSV_HEADERS
)

__all__ = [
    "SortField",
    "search_orders",
    "orders_to_csv",
    "export_filename",
    "content_disposition",
    "CSV_HEADERS",
]
