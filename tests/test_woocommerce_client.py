"""
Tests for the WooCommerce client.
"""

import httpx
import pytest

from profit_tracker.woocommerce import RemoteFetchError, WooCommerceClient
from profit_tracker.woocommerce.client import normalize_base_url

from .conftest import orders_transport, remote_order_payload


def client_with(handler) -> WooCommerceClient:
    return WooCommerceClient(
        "https://shop.example.com/", "ck_key", "cs_secret",
        transport=httpx.MockTransport(handler)
    )


class TestFetchOrders:
    """Tests for fetch_orders."""

    @pytest.mark.asyncio
    async def test_requests_versioned_path_with_credentials(self):
        seen = []
        transport = orders_transport([[remote_order_payload(1), remote_order_payload(2)]], seen)

        async with WooCommerceClient("https://shop.example.com", "ck_key", "cs_secret",
                                     transport=transport) as client:
            orders = await client.fetch_orders(page=1, per_page=50)

        assert [o.id for o in orders] == [1, 2]
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/wp-json/wc/v3/orders"
        assert request.url.params["page"] == "1"
        assert request.url.params["per_page"] == "50"
        assert request.url.params["consumer_key"] == "ck_key"
        assert request.url.params["consumer_secret"] == "cs_secret"

    @pytest.mark.asyncio
    async def test_non_success_status_raises(self):
        client = client_with(lambda request: httpx.Response(401, json={"code": "woocommerce_rest_cannot_view"}))

        with pytest.raises(RemoteFetchError) as exc_info:
            await client.fetch_orders()
        await client.close()

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_network_error_raises_fetch_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = client_with(handler)

        with pytest.raises(RemoteFetchError):
            await client.fetch_orders()
        await client.close()

    @pytest.mark.asyncio
    async def test_unexpected_payload_raises(self):
        client = client_with(lambda request: httpx.Response(200, json={"orders": []}))

        with pytest.raises(RemoteFetchError):
            await client.fetch_orders()
        await client.close()


class TestConnectionCheck:
    """Tests for test_connection."""

    @pytest.mark.asyncio
    async def test_success(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        client = client_with(handler)
        assert await client.test_connection() is True
        await client.close()

        assert seen[0].url.path == "/wp-json/wc/v3/system_status"
        assert seen[0].url.params["consumer_key"] == "ck_key"

    @pytest.mark.asyncio
    async def test_non_success_is_false(self):
        client = client_with(lambda request: httpx.Response(500))

        assert await client.test_connection() is False
        await client.close()

    @pytest.mark.asyncio
    async def test_network_error_is_false(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        client = client_with(handler)

        assert await client.test_connection() is False
        await client.close()


class TestNormalizeBaseUrl:

    def test_strips_trailing_slash(self):
        assert normalize_base_url("https://shop.example.com/") == "https://shop.example.com"

    def test_adds_scheme(self):
        assert normalize_base_url("shop.example.com") == "https://shop.example.com"

    def test_keeps_http(self):
        assert normalize_base_url("http://localhost:8000") == "http://localhost:8000"
