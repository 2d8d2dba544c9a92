import pytest

from revenue_simulator.dispatch import merge_results, run, run_simulation, validate_request
from revenue_simulator.model import simulate_subscription, simulate_unit_economics
from revenue_simulator.periods import month_keys
from revenue_simulator.types import (
    BusinessType,
    ConfigurationError,
    CostInputs,
    GrowthRate,
    GrowthRateSettings,
    HybridMonth,
    MarketplaceInputs,
    ModelSettings,
    QuarterlyDetailedSettings,
    QuarterlyMetrics,
    SimulationRequest,
    SubscriptionInputs,
    UnitEconomicsInputs,
)

COSTS = CostInputs()


def test_run_routes_by_business_type():
    result = run("saas", COSTS, "2024-03", 6, subscription=SubscriptionInputs())
    assert result.business_type is BusinessType.SUBSCRIPTION
    assert list(result.monthly) == month_keys("2024-03", 6)

    market = run(BusinessType.MARKETPLACE, COSTS, "2024-03", marketplace=MarketplaceInputs())
    assert len(market.monthly) == 12
    assert market.summary.total_gmv > 0


def test_run_is_deterministic():
    kwargs = dict(subscription=SubscriptionInputs(), unit_economics=UnitEconomicsInputs())
    assert run("hybrid", COSTS, "2024-01", 12, **kwargs) == run("hybrid", COSTS, "2024-01", 12, **kwargs)


def test_missing_model_inputs_fail_fast():
    with pytest.raises(ConfigurationError, match="subscription"):
        run("saas", COSTS, "2024-01")
    with pytest.raises(ConfigurationError, match="unit_economics"):
        run("hybrid", COSTS, "2024-01", subscription=SubscriptionInputs())
    with pytest.raises(ConfigurationError):
        run("b2c-platform", COSTS, "2024-01", subscription=SubscriptionInputs())


@pytest.mark.parametrize(
    "overrides",
    [
        {"business_type": "retail"},
        {"start_month": "2024-13"},
        {"months": 0},
        {"settings": ModelSettings(growth=GrowthRateSettings(quarterly_rates=(GrowthRate(1, 2024, -1.5),)))},
        {"settings": ModelSettings(growth=GrowthRateSettings(quarterly_rates=(GrowthRate(5, 2024, 0.1),)))},
        {
            "settings": ModelSettings(
                growth=GrowthRateSettings(quarterly_rates=(GrowthRate(1, 2024, 0.1), GrowthRate(1, 2024, 0.2)))
            )
        },
        {
            "settings": ModelSettings(
                quarterly=QuarterlyDetailedSettings(
                    use_detailed_settings=True,
                    quarterly_metrics=(QuarterlyMetrics(quarter=2, year=2024), QuarterlyMetrics(quarter=2, year=2024)),
                )
            )
        },
    ],
)
def test_invalid_requests_are_rejected(overrides):
    fields = dict(
        business_type="saas", cost_inputs=COSTS, start_month="2024-01", subscription=SubscriptionInputs()
    )
    fields.update(overrides)
    with pytest.raises(ConfigurationError):
        run_simulation(SimulationRequest(**fields))


def test_validate_request_coerces_business_type():
    request = SimulationRequest(
        business_type="manufacturing", cost_inputs=COSTS, start_month="2024-01", unit_economics=UnitEconomicsInputs()
    )
    assert validate_request(request).business_type is BusinessType.UNIT_ECONOMICS
    # total collapse is allowed
    ok = SimulationRequest(
        business_type="saas",
        cost_inputs=COSTS,
        start_month="2024-01",
        subscription=SubscriptionInputs(),
        settings=ModelSettings(growth=GrowthRateSettings(quarterly_rates=(GrowthRate(1, 2024, -1.0),))),
    )
    assert validate_request(ok).business_type is BusinessType.SUBSCRIPTION


def test_hybrid_equals_sum_of_parts():
    sub_inputs = SubscriptionInputs()
    unit_inputs = UnitEconomicsInputs(monthly_sales=800)
    hybrid = run("hybrid", COSTS, "2024-10", 6, subscription=sub_inputs, unit_economics=unit_inputs)
    sub = simulate_subscription(sub_inputs, COSTS, "2024-10", 6)
    unit = simulate_unit_economics(unit_inputs, COSTS, "2024-10", 6)

    assert hybrid.business_type is BusinessType.HYBRID
    assert list(hybrid.monthly) == list(sub.monthly)
    for key, month in hybrid.monthly.items():
        s, u = sub.monthly[key], unit.monthly[key]
        assert isinstance(month, HybridMonth)
        assert month.revenue == s.revenue + u.revenue
        assert month.customers == s.customers + u.customers
        assert month.total_costs == s.total_costs + u.total_costs
        assert month.net_profit == s.net_profit + u.net_profit
        assert month.profit_margin == month.net_profit / month.revenue
        assert month.mrr == s.mrr
        assert month.sales == u.sales
        assert month.cost_of_goods_sold == u.cost_of_goods_sold

    summary = hybrid.summary
    assert summary.total_revenue == sub.summary.total_revenue + unit.summary.total_revenue
    assert summary.net_profit == sub.summary.net_profit + unit.summary.net_profit
    assert summary.mrr == sub.summary.mrr
    assert summary.ltv == sub.summary.ltv
    assert summary.cac == sub.summary.cac


def test_merge_results_zero_revenue_margin():
    sub = simulate_subscription(SubscriptionInputs(monthly_visitors=0), COSTS, "2024-01", 2)
    unit = simulate_unit_economics(UnitEconomicsInputs(monthly_sales=0), COSTS, "2024-01", 2)
    merged = merge_results(sub, unit)
    assert all(m.profit_margin == 0.0 for m in merged.monthly.values())
    assert merged.summary.average_profit_margin == 0.0
