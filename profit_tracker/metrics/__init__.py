"""
Metrics package: windowed totals, daily series and KPIs.
"""

from .window import DateWindow, UNBOUNDED, filter_by_window, filter_orders, filter_ad_spends
from .aggregates import (
    Totals,
    DailyPoint,
    KpiMetrics,
    StoreStats,
    totals,
    daily_series,
    kpis,
    store_stats,
    ad_account_spend,
    store_ad_spend,
    spend_by_account,
)
from .calculator import ScenarioInput, ScenarioResult, calculate_scenario

__all__ = [
    "DateWindow",
    "UNBOUNDED",
    "filter_by_window",
    "filter_orders",
    "filter_ad_spends",
    "Totals",
    "DailyPoint",
    "KpiMetrics",
    "StoreStats",
    "totals",
    "daily_series",
    "kpis",
    "store_stats",
    "ad_account_spend",
    "store_ad_spend",
    "spend_by_account",
    "ScenarioInput",
    "ScenarioResult",
    "calculate_scenario",
]
