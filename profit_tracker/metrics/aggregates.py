"""
Profit, revenue and ad spend aggregation over a date window.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from ..db import AdSpend, Order
from ..processor.rules import CENTS
from .window import DateWindow, UNBOUNDED, filter_ad_spends, filter_orders


@dataclass
class Totals:
    revenue: float = 0.0
    cost: float = 0.0
    profit: float = 0.0
    ad_spend: float = 0.0
    net_profit: float = 0.0
    order_count: int = 0
    avg_order_value: float = 0.0
    profit_margin: float = 0.0
    roas: float = 0.0


@dataclass
class DailyPoint:
    date: date
    label: str
    revenue: float = 0.0
    profit: float = 0.0
    ad_spend: float = 0.0
    net_profit: float = 0.0


@dataclass
class KpiMetrics:
    avg_order_value: float = 0.0
    avg_order_value_change: float = 0.0
    profit_margin: float = 0.0
    profit_margin_change: float = 0.0
    conversion_value: float = 0.0
    conversion_value_change: float = 0.0
    roas: float = 0.0
    roas_change: float = 0.0


@dataclass
class StoreStats:
    store_id: str
    revenue: float = 0.0
    profit: float = 0.0
    orders: int = 0


def money(value: float) -> float:
    """Round a summed amount to cents (half up)."""
    return float(Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP))


def money_sum(values: Iterable[float]) -> float:
    return money(sum((Decimal(str(v)) for v in values), Decimal("0")))


def average_order_value(revenue: float, order_count: int) -> float:
    return revenue / order_count if order_count > 0 else 0.0


def profit_margin(profit: float, revenue: float) -> float:
    """Profit as a percentage of revenue; 0 when there is no revenue."""
    return profit / revenue * 100 if revenue > 0 else 0.0


def return_on_ad_spend(revenue: float, ad_spend: float) -> float:
    """Revenue per unit of ad spend; 0 when nothing was spent."""
    return revenue / ad_spend if ad_spend > 0 else 0.0


def percent_change(current: float, previous: float) -> float:
    return (current - previous) / previous * 100 if previous > 0 else 0.0


def totals(
    orders: Iterable[Order],
    ad_spends: Iterable[AdSpend],
    window: DateWindow = UNBOUNDED,
    today: Optional[date] = None
) -> Totals:
    """Sum orders and ad spend falling inside the window."""
    orders = filter_orders(orders, window, today)
    spends = filter_ad_spends(ad_spends, window, today)

    revenue = money_sum(o.total for o in orders)
    cost = money_sum(o.cost for o in orders)
    profit = money_sum(o.profit for o in orders)
    ad_spend = money_sum(s.amount for s in spends)

    return Totals(
        revenue=revenue,
        cost=cost,
        profit=profit,
        ad_spend=ad_spend,
        net_profit=money(profit - ad_spend),
        order_count=len(orders),
        avg_order_value=average_order_value(revenue, len(orders)),
        profit_margin=profit_margin(profit, revenue),
        roas=return_on_ad_spend(revenue, ad_spend)
    )


def daily_series(
    orders: Iterable[Order],
    ad_spends: Iterable[AdSpend],
    window: DateWindow = UNBOUNDED,
    today: Optional[date] = None
) -> List[DailyPoint]:
    """
    Per-day revenue, profit and ad spend for charting.

    Only days with at least one order or spend get a point. Points are
    ordered by date, so windows spanning a new year sort correctly.
    """
    buckets: Dict[date, DailyPoint] = {}

    def bucket(day: date) -> DailyPoint:
        if day not in buckets:
            buckets[day] = DailyPoint(date=day, label=day.strftime("%b %d"))
        return buckets[day]

    for order in filter_orders(orders, window, today):
        point = bucket(order.order_date.date())
        point.revenue += order.total
        point.profit += order.profit

    for spend in filter_ad_spends(ad_spends, window, today):
        bucket(spend.spend_date).ad_spend += spend.amount

    series = sorted(buckets.values(), key=lambda p: p.date)
    for point in series:
        point.revenue = money(point.revenue)
        point.profit = money(point.profit)
        point.ad_spend = money(point.ad_spend)
        point.net_profit = money(point.profit - point.ad_spend)
    return series


def kpis(
    orders: Iterable[Order],
    ad_spends: Iterable[AdSpend],
    window: DateWindow = UNBOUNDED,
    today: Optional[date] = None
) -> KpiMetrics:
    """
    Headline KPIs with change against the preceding period of equal length.

    Changes are 0 unless the window has both a start and an end.
    """
    orders = list(orders)
    ad_spends = list(ad_spends)

    current = totals(orders, ad_spends, window, today)
    metrics = KpiMetrics(
        avg_order_value=current.avg_order_value,
        profit_margin=current.profit_margin,
        conversion_value=current.avg_order_value,
        roas=current.roas
    )

    previous_window = window.previous()
    if previous_window is None:
        return metrics

    previous = totals(orders, ad_spends, previous_window, today)
    metrics.avg_order_value_change = percent_change(current.avg_order_value, previous.avg_order_value)
    metrics.profit_margin_change = percent_change(current.profit_margin, previous.profit_margin)
    metrics.conversion_value_change = metrics.avg_order_value_change
    metrics.roas_change = percent_change(current.roas, previous.roas)
    return metrics


def store_stats(orders: Iterable[Order], store_id: str) -> StoreStats:
    """Revenue, profit and order count for one store (pass windowed orders)."""
    stats = StoreStats(store_id=store_id)
    for order in orders:
        if order.store_id == store_id:
            stats.revenue += order.total
            stats.profit += order.profit
            stats.orders += 1
    stats.revenue = money(stats.revenue)
    stats.profit = money(stats.profit)
    return stats


def ad_account_spend(ad_spends: Iterable[AdSpend], account_id: str) -> float:
    return money_sum(s.amount for s in ad_spends if s.ad_account_id == account_id)


def store_ad_spend(ad_spends: Iterable[AdSpend], store_id: str) -> float:
    return money_sum(s.amount for s in ad_spends if s.store_id == store_id)


def spend_by_account(ad_spends: Iterable[AdSpend]) -> Dict[str, float]:
    spend: Dict[str, float] = defaultdict(float)
    for s in ad_spends:
        spend[s.ad_account_id] += s.amount
    return {account_id: money(total) for account_id, total in spend.items()}
