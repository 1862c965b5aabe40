"""
WooCommerce API module.
"""

from profit_tracker.woocommerce.client import (
    WooCommerceClient,
    WooCommerceClientError,
    RemoteFetchError,
    RemoteOrder,
    RemoteLineItem,
    fetch_orders,
    test_connection,
)

__all__ = [
    "WooCommerceClient",
    "WooCommerceClientError",
    "RemoteFetchError",
    "RemoteOrder",
    "RemoteLineItem",
    "fetch_orders",
    "test_connection",
]
