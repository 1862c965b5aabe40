"""
Tests for windowed metrics.
"""

from datetime import date, datetime, time

import pytest

from profit_tracker.metrics import (
    DateWindow,
    ScenarioInput,
    ad_account_spend,
    calculate_scenario,
    daily_series,
    filter_orders,
    kpis,
    store_ad_spend,
    store_stats,
    totals,
)

from .conftest import make_order, make_spend


D = date(2024, 3, 5)
D1 = date(2024, 3, 6)


def at(day: date, hour: int = 12) -> datetime:
    return datetime.combine(day, time(hour))


class TestDateWindow:
    """Tests for window filtering."""

    def test_inclusive_at_start_of_first_day(self):
        order = make_order("s", "1", 10, 3, 7, datetime(2024, 3, 5, 0, 0, 0))

        assert filter_orders([order], DateWindow(D, D1)) == [order]

    def test_inclusive_at_end_of_last_day(self):
        order = make_order("s", "1", 10, 3, 7, datetime(2024, 3, 6, 23, 59, 59, 999999))

        assert filter_orders([order], DateWindow(D, D1)) == [order]

    def test_excludes_just_outside(self):
        before = make_order("s", "1", 10, 3, 7, datetime(2024, 3, 4, 23, 59, 59))
        after = make_order("s", "2", 10, 3, 7, datetime(2024, 3, 7, 0, 0, 0))

        assert filter_orders([before, after], DateWindow(D, D1)) == []

    def test_no_start_includes_everything(self):
        old = make_order("s", "1", 10, 3, 7, datetime(2001, 1, 1))
        future = make_order("s", "2", 10, 3, 7, datetime(2099, 1, 1))

        assert len(filter_orders([old, future], DateWindow())) == 2

    def test_missing_end_means_end_of_today(self):
        today = date(2024, 3, 10)
        late_today = make_order("s", "1", 10, 3, 7, datetime(2024, 3, 10, 23, 0))
        tomorrow = make_order("s", "2", 10, 3, 7, datetime(2024, 3, 11, 1, 0))

        result = filter_orders([late_today, tomorrow], DateWindow(D, None), today=today)

        assert result == [late_today]

    def test_previous_period_has_same_length(self):
        window = DateWindow(date(2024, 3, 11), date(2024, 3, 20))

        assert window.previous() == DateWindow(date(2024, 3, 1), date(2024, 3, 10))

    def test_previous_period_needs_both_ends(self):
        assert DateWindow(D, None).previous() is None
        assert DateWindow().previous() is None


class TestTotals:
    """Tests for totals."""

    def test_two_day_scenario(self):
        orders = [
            make_order("s", "1", 100, 30, 70, at(D)),
            make_order("s", "2", 50, 15, 35, at(D1)),
        ]
        spends = [make_spend(20, D)]

        result = totals(orders, spends, DateWindow(D, D1))

        assert result.revenue == 150
        assert result.cost == 45
        assert result.profit == 105
        assert result.ad_spend == 20
        assert result.net_profit == 85
        assert result.order_count == 2

    def test_empty_inputs_guard_division(self):
        result = totals([], [], DateWindow(D, D1))

        assert result.profit_margin == 0
        assert result.roas == 0
        assert result.avg_order_value == 0

    def test_net_profit_is_profit_minus_spend(self):
        orders = [make_order("s", "1", 80, 24, 56, at(D))]
        spends = [make_spend(100, D), make_spend(7.5, D1)]

        for window in (DateWindow(), DateWindow(D, D), DateWindow(D1, D1)):
            result = totals(orders, spends, window)
            assert result.net_profit == pytest.approx(result.profit - result.ad_spend)

    def test_margin_and_roas(self):
        orders = [make_order("s", "1", 200, 60, 140, at(D))]
        spends = [make_spend(50, D)]

        result = totals(orders, spends, DateWindow(D, D))

        assert result.profit_margin == pytest.approx(70.0)
        assert result.roas == pytest.approx(4.0)
        assert result.avg_order_value == pytest.approx(200.0)

    def test_spend_outside_window_is_ignored(self):
        spends = [make_spend(20, D), make_spend(99, date(2024, 4, 1))]

        assert totals([], spends, DateWindow(D, D1)).ad_spend == 20

    def test_money_sums_are_rounded_to_cents(self):
        orders = [make_order("s", str(i), 0.1, 0.03, 0.07, at(D)) for i in range(3)]
        spends = [make_spend(0.1, D), make_spend(0.2, D)]

        result = totals(orders, spends, DateWindow(D, D))

        assert result.revenue == 0.3
        assert result.cost == 0.09
        assert result.profit == 0.21
        assert result.ad_spend == 0.3
        assert result.net_profit == -0.09


class TestDailySeries:
    """Tests for daily_series."""

    def test_buckets_by_day_with_net_profit(self):
        orders = [
            make_order("s", "1", 100, 30, 70, at(D, 9)),
            make_order("s", "2", 20, 6, 14, at(D, 18)),
            make_order("s", "3", 50, 15, 35, at(D1)),
        ]
        spends = [make_spend(20, D)]

        series = daily_series(orders, spends, DateWindow(D, D1))

        assert [p.date for p in series] == [D, D1]
        assert series[0].label == "Mar 05"
        assert series[0].revenue == 120
        assert series[0].profit == 84
        assert series[0].ad_spend == 20
        assert series[0].net_profit == 64
        assert series[1].net_profit == 35

    def test_sorted_across_year_boundary(self):
        orders = [
            make_order("s", "1", 10, 3, 7, at(date(2025, 1, 2))),
            make_order("s", "2", 10, 3, 7, at(date(2024, 12, 30))),
        ]

        series = daily_series(orders, [], DateWindow(date(2024, 12, 28), date(2025, 1, 3)))

        assert [p.label for p in series] == ["Dec 30", "Jan 02"]

    def test_daily_money_is_rounded_to_cents(self):
        orders = [make_order("s", str(i), 0.1, 0.03, 0.07, at(D)) for i in range(3)]

        point = daily_series(orders, [make_spend(0.1, D), make_spend(0.2, D)], DateWindow(D, D))[0]

        assert point.revenue == 0.3
        assert point.ad_spend == 0.3
        assert point.net_profit == -0.09

    def test_day_with_only_spend(self):
        series = daily_series([], [make_spend(12, D)], DateWindow(D, D))

        assert len(series) == 1
        assert series[0].revenue == 0
        assert series[0].net_profit == -12


class TestKpis:
    """Tests for kpis."""

    def test_changes_against_previous_period(self):
        previous_day = date(2024, 3, 4)
        orders = [
            make_order("s", "1", 100, 30, 70, at(previous_day)),
            make_order("s", "2", 150, 45, 105, at(D)),
        ]
        spends = [make_spend(50, previous_day), make_spend(50, D)]

        result = kpis(orders, spends, DateWindow(D, D))

        assert result.avg_order_value == 150
        assert result.avg_order_value_change == pytest.approx(50.0)
        assert result.conversion_value_change == pytest.approx(50.0)
        assert result.profit_margin_change == pytest.approx(0.0)
        assert result.roas == pytest.approx(3.0)
        assert result.roas_change == pytest.approx(50.0)

    def test_no_changes_without_end_date(self):
        orders = [make_order("s", "1", 100, 30, 70, at(D))]

        result = kpis(orders, [], DateWindow(D, None), today=D1)

        assert result.avg_order_value == 100
        assert result.avg_order_value_change == 0
        assert result.roas_change == 0

    def test_empty_previous_period_reports_zero_change(self):
        orders = [make_order("s", "1", 100, 30, 70, at(D))]

        result = kpis(orders, [], DateWindow(D, D))

        assert result.avg_order_value_change == 0
        assert result.profit_margin_change == 0


class TestRollups:
    """Tests for per-store and per-account sums."""

    def test_store_stats(self):
        orders = [
            make_order("a", "1", 100, 30, 70, at(D)),
            make_order("a", "2", 10, 3, 7, at(D)),
            make_order("b", "3", 999, 0, 999, at(D)),
        ]

        stats = store_stats(orders, "a")

        assert (stats.revenue, stats.profit, stats.orders) == (110, 77, 2)

    def test_ad_account_and_store_spend(self):
        spends = [
            make_spend(10, D, account_id="fb", store_id="a"),
            make_spend(5, D1, account_id="fb"),
            make_spend(7, D, account_id="g", store_id="a"),
        ]

        assert ad_account_spend(spends, "fb") == 15
        assert store_ad_spend(spends, "a") == 17
        assert store_ad_spend(spends, "missing") == 0


class TestCalculator:
    """Tests for the what-if calculator."""

    def test_scenario(self):
        result = calculate_scenario(ScenarioInput(
            revenue=1000, cost=300, ad_spend=200, shipping_cost=50, transaction_fee_percent=3
        ))

        assert result.transaction_fee == pytest.approx(30)
        assert result.total_costs == pytest.approx(580)
        assert result.gross_profit == pytest.approx(700)
        assert result.net_profit == pytest.approx(420)
        assert result.profit_margin == pytest.approx(42)
        assert result.roas == pytest.approx(5)
        assert result.break_even == pytest.approx(580)

    def test_zero_revenue_and_spend(self):
        result = calculate_scenario(ScenarioInput())

        assert result.profit_margin == 0
        assert result.roas == 0
