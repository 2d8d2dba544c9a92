import pandas as pd
import pytest

from revenue_simulator.types import (
    BusinessType,
    ChannelShare,
    ConfigurationError,
    CostInputs,
    MonthlyResult,
    SimulationResult,
    SubscriptionMonth,
    UnitEconomicsInputs,
    round_half_up,
)


def test_input_defaults():
    assert CostInputs().fixed_costs == 8_000_000
    assert UnitEconomicsInputs().unit_cost == 65_000
    assert BusinessType("b2c-platform") is BusinessType.MARKETPLACE


def test_configuration_error_is_value_error():
    assert issubclass(ConfigurationError, ValueError)


def test_to_frame_indexed_by_month_without_channels():
    share = ChannelShare(name="ads", percentage=0.5, cost_per_visitor=10.0, visitors=5, cost=50)
    month = SubscriptionMonth(
        month="2024-01",
        revenue=100.0,
        customers=2,
        total_costs=80.0,
        net_profit=20.0,
        profit_margin=0.2,
        visitors=10,
        signups=4,
        paid_customers=2,
        churned_customers=0,
        mrr=100.0,
        channel_spend=50,
        channels=(share,),
    )
    result = SimulationResult(business_type=BusinessType.SUBSCRIPTION, monthly={"2024-01": month})
    df = result.to_frame()
    assert list(df.index) == ["2024-01"]
    assert "channels" not in df.columns
    assert df.loc["2024-01", "signups"] == 4


def test_to_frame_empty():
    assert SimulationResult(business_type=BusinessType.SUBSCRIPTION).to_frame().empty
    row = MonthlyResult("2024-01", 1.0, 1, 1.0, 0.0, 0.0)
    assert isinstance(SimulationResult(BusinessType.HYBRID, {"2024-01": row}).to_frame(), pd.DataFrame)


@pytest.mark.parametrize(
    "value, expected",
    [(2.5, 3), (3.5, 4), (0.5, 1), (-2.5, -2), (2.4999, 2), (7.0, 7), (0.0, 0)],
)
def test_round_half_up_sends_ties_up(value, expected):
    assert round_half_up(value) == expected


def test_as_dict_exclusions_belong_to_the_month_class():
    row = MonthlyResult("2024-01", 1.0, 1, 1.0, 0.0, 0.0)
    assert MonthlyResult.flat_exclude == ()
    assert SubscriptionMonth.flat_exclude == ("channels",)
    assert set(row.as_dict()) == {"month", "revenue", "customers", "total_costs", "net_profit", "profit_margin"}
