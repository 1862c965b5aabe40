"""
What-if profit calculator.
"""

from dataclasses import dataclass

from pydantic import BaseModel, Field

from .aggregates import return_on_ad_spend


class ScenarioInput(BaseModel):
    revenue: float = Field(default=0, ge=0)
    cost: float = Field(default=0, ge=0)
    ad_spend: float = Field(default=0, ge=0)
    shipping_cost: float = Field(default=0, ge=0)
    transaction_fee_percent: float = Field(default=0, ge=0, le=100)


@dataclass
class ScenarioResult:
    gross_profit: float
    net_profit: float
    profit_margin: float
    roas: float
    break_even: float
    total_costs: float
    transaction_fee: float


def calculate_scenario(scenario: ScenarioInput) -> ScenarioResult:
    """
    Profit for a hypothetical month.

    The transaction fee is a percentage of revenue. Margin here is net
    margin (after ads, shipping and fees), unlike the dashboard's gross margin.
    """
    fee = scenario.revenue * scenario.transaction_fee_percent / 100
    total_costs = scenario.cost + scenario.ad_spend + scenario.shipping_cost + fee
    net_profit = scenario.revenue - total_costs

    return ScenarioResult(
        gross_profit=scenario.revenue - scenario.cost,
        net_profit=net_profit,
        profit_margin=net_profit / scenario.revenue * 100 if scenario.revenue > 0 else 0.0,
        roas=return_on_ad_spend(scenario.revenue, scenario.ad_spend),
        break_even=total_costs,
        total_costs=total_costs,
        transaction_fee=fee
    )
