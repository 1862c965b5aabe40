"""
Business rules for turning WooCommerce orders into profit records.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from ..db import Order
from ..woocommerce import RemoteOrder


# Share of an order total booked as cost when no real cost data exists.
# Placeholder model; overridden by Settings.order_cost_ratio.
DEFAULT_COST_RATIO = Decimal("0.30")

CENTS = Decimal("0.01")


def parse_amount(value: Optional[str]) -> Decimal:
    """
    Parse a WooCommerce money string ("123.45") to a Decimal.

    Missing or empty values count as zero.

    Raises:
        ValueError: If the value is not a number
    """
    if value is None or str(value).strip() == "":
        return Decimal("0")
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {value!r}") from e


def estimate_cost(
    total: Decimal,
    cost_ratio: Union[Decimal, float, str] = DEFAULT_COST_RATIO
) -> Decimal:
    """
    Estimate cost of goods as a fixed share of the order total.

    Args:
        total: Order total
        cost_ratio: Share of the total treated as cost (0.3 = 30%)

    Returns:
        Cost rounded half-up to cents
    """
    ratio = Decimal(str(cost_ratio))
    return (total * ratio).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_profit(total: Decimal, cost: Decimal) -> Decimal:
    return total - cost


def normalize_order(
    remote: RemoteOrder,
    store_id: str,
    cost_ratio: Union[Decimal, float, str] = DEFAULT_COST_RATIO
) -> Order:
    """
    Map a remote order to the local order record.

    Args:
        remote: Order as returned by the WooCommerce API
        store_id: Local id of the store the order came from
        cost_ratio: Cost estimate ratio (see estimate_cost)

    Returns:
        Order ready for upsert, keyed by (store_id, woo_order_id)
    """
    total = parse_amount(remote.total)
    cost = estimate_cost(total, cost_ratio)
    profit = calculate_profit(total, cost)

    email = None
    if remote.billing and remote.billing.email:
        email = remote.billing.email.strip() or None

    return Order(
        store_id=store_id,
        woo_order_id=str(remote.id),
        order_date=remote.date_created,
        total=float(total),
        cost=float(cost),
        profit=float(profit),
        status=remote.status,
        shipping_cost=float(parse_amount(remote.shipping_total)),
        tax=float(parse_amount(remote.total_tax)),
        discount=float(parse_amount(remote.discount_total)),
        customer_email=email,
        items_count=len(remote.line_items)
    )
