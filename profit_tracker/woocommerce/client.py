"""
WooCommerce REST API client.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)


ORDERS_PATH = "/wp-json/wc/v3/orders"
SYSTEM_STATUS_PATH = "/wp-json/wc/v3/system_status"


class WooCommerceClientError(Exception):
    """Base exception for WooCommerce client errors."""
    pass


class RemoteFetchError(WooCommerceClientError):
    """The storefront did not return a usable order listing."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RemoteMetaData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str
    value: Any = None


class RemoteLineItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""
    quantity: int = 0
    total: str = "0"
    meta_data: List[RemoteMetaData] = []


class RemoteBilling(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None


class RemoteOrder(BaseModel):
    """An order as returned by GET /wp-json/wc/v3/orders."""
    model_config = ConfigDict(extra="ignore")

    id: int
    date_created: datetime
    status: str
    total: str
    line_items: List[RemoteLineItem] = []
    shipping_total: str = "0"
    total_tax: str = "0"
    discount_total: str = "0"
    billing: Optional[RemoteBilling] = None


def normalize_base_url(url: str) -> str:
    """Strip trailing slashes and default the scheme to https."""
    url = url.strip().rstrip("/")
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url


class WooCommerceClient:
    """
    Async HTTP client for the WooCommerce REST API (v3).

    Credentials are passed as query parameters. One page is fetched per
    call; callers iterate pages themselves.
    """

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        base_url: str,
        consumer_key: str,
        consumer_secret: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize WooCommerce client.

        Args:
            base_url: Store URL (e.g., "https://shop.example.com")
            consumer_key: REST API consumer key (ck_...)
            consumer_secret: REST API consumer secret (cs_...)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = normalize_base_url(base_url)
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.timeout = timeout
        self._transport = transport

        self._client: Optional[httpx.AsyncClient] = None

    def _auth_params(self) -> Dict[str, str]:
        return {
            "consumer_key": self.consumer_key,
            "consumer_secret": self.consumer_secret,
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=10.0),
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def fetch_orders(self, page: int = 1, per_page: int = 100) -> List[RemoteOrder]:
        """
        Fetch one page of orders.

        Args:
            page: 1-based page number
            per_page: Orders per page (WooCommerce caps this at 100)

        Returns:
            Orders in the order the storefront returned them

        Raises:
            RemoteFetchError: On a non-2xx status, transport failure,
                or a payload that is not a list of orders
        """
        client = await self._get_client()
        params = {"page": str(page), "per_page": str(per_page), **self._auth_params()}

        try:
            response = await client.get(f"{self.base_url}{ORDERS_PATH}", params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise RemoteFetchError(f"Failed to fetch orders: {e}") from e

        if not response.is_success:
            raise RemoteFetchError(
                f"Failed to fetch orders: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteFetchError("Failed to fetch orders: response is not JSON") from e

        if not isinstance(payload, list):
            raise RemoteFetchError("Failed to fetch orders: unexpected response shape")

        try:
            orders = [RemoteOrder.model_validate(item) for item in payload]
        except ValidationError as e:
            raise RemoteFetchError(f"Failed to fetch orders: invalid order data ({e.error_count()} errors)") from e

        logger.debug(f"Fetched {len(orders)} orders from {self.base_url} (page {page})")
        return orders

    async def test_connection(self) -> bool:
        """
        Check that the store answers the system status endpoint.

        Never raises; any failure is reported as False.
        """
        try:
            client = await self._get_client()
            response = await client.get(
                f"{self.base_url}{SYSTEM_STATUS_PATH}", params=self._auth_params()
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.info(f"Connection test failed for {self.base_url}: {e}")
            return False

        if not response.is_success:
            logger.info(f"Connection test failed for {self.base_url}: HTTP {response.status_code}")
        return response.is_success

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


async def fetch_orders(
    base_url: str,
    consumer_key: str,
    consumer_secret: str,
    page: int = 1,
    per_page: int = 100,
) -> List[RemoteOrder]:
    """Fetch a single page of orders with a short-lived client."""
    async with WooCommerceClient(base_url, consumer_key, consumer_secret) as client:
        return await client.fetch_orders(page=page, per_page=per_page)


async def test_connection(
    base_url: str,
    consumer_key: str,
    consumer_secret: str,
    timeout: float = 30.0
) -> bool:
    """Connectivity check with a short-lived client."""
    async with WooCommerceClient(base_url, consumer_key, consumer_secret, timeout=timeout) as client:
        return await client.test_connection()
