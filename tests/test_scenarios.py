import pytest

from revenue_simulator.dispatch import run_simulation
from revenue_simulator.scenarios import SCENARIOS, build_scenario_request, run_scenarios
from revenue_simulator.types import (
    CostInputs,
    MarketplaceInputs,
    SimulationRequest,
    SubscriptionInputs,
    UnitEconomicsInputs,
)


def _request(business_type, **inputs):
    return SimulationRequest(business_type=business_type, cost_inputs=CostInputs(), start_month="2024-01", **inputs)


def test_optimistic_subscription():
    req = build_scenario_request(_request("saas", subscription=SubscriptionInputs()), "optimistic")
    sub = req.subscription
    assert sub.monthly_visitors == 12_000
    assert sub.visitor_to_signup_rate == pytest.approx(0.06)
    assert sub.signup_to_paid_rate == pytest.approx(0.24)
    assert sub.monthly_churn_rate == pytest.approx(0.024)
    assert sub.monthly_price == 55_000
    assert sub.annual_price == 550_000
    assert req.cost_inputs.marketing_cost == 2_400_000
    assert req.cost_inputs.payment_fee_rate == 0.03


def test_pessimistic_unit_economics():
    req = build_scenario_request(_request("manufacturing", unit_economics=UnitEconomicsInputs()), "pessimistic")
    unit = req.unit_economics
    assert unit.monthly_sales == 800
    assert unit.unit_price == 90_000
    assert unit.material_cost_per_unit == 33_000
    assert unit.labor_cost_per_unit == 22_000
    assert unit.shipping_cost_per_unit == 5_000
    assert req.cost_inputs.personnel_cost == 4_000_000


def test_multiplied_inputs_round_half_up():
    sub = SubscriptionInputs(monthly_visitors=10.5, monthly_price=2.5)
    request = SimulationRequest(
        business_type="saas", cost_inputs=CostInputs(marketing_cost=4.5), start_month="2024-01", subscription=sub
    )
    req = build_scenario_request(request, "realistic")
    assert req.subscription.monthly_visitors == 11
    assert req.subscription.monthly_price == 3
    assert req.cost_inputs.marketing_cost == 5


def test_marketplace_adjustments():
    req = build_scenario_request(_request("b2c-platform", marketplace=MarketplaceInputs()), "optimistic")
    market = req.marketplace
    assert market.monthly_visitors == 60_000
    assert market.visitor_to_buyer_rate == pytest.approx(0.024)
    assert market.average_order_value == 33_000
    assert market.take_rate == pytest.approx(0.11)
    assert market.refund_rate == pytest.approx(0.04)


def test_hybrid_uses_subset_of_adjustments():
    req = build_scenario_request(
        _request("hybrid", subscription=SubscriptionInputs(), unit_economics=UnitEconomicsInputs()), "optimistic"
    )
    assert req.subscription.monthly_visitors == 12_000
    assert req.subscription.monthly_price == 50_000
    assert req.unit_economics.unit_price == 110_000
    assert req.unit_economics.material_cost_per_unit == 30_000


def test_unknown_scenario():
    with pytest.raises(ValueError):
        build_scenario_request(_request("saas", subscription=SubscriptionInputs()), "apocalyptic")


def test_run_scenarios():
    request = _request("saas", subscription=SubscriptionInputs())
    results = run_scenarios(request)
    assert list(results) == list(SCENARIOS)
    assert results["optimistic"].summary.total_revenue > results["realistic"].summary.total_revenue
    assert results["realistic"].summary.total_revenue > results["pessimistic"].summary.total_revenue
    assert results["realistic"].summary.total_revenue == run_simulation(request).summary.total_revenue
