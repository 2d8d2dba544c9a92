import pytest

from revenue_simulator.growth import (
    GrowthValues,
    apply_growth_rate,
    apply_growth_rates,
    growth_rate_factor,
    growth_rate_summary,
)
from revenue_simulator.types import GrowthRate, GrowthRateSettings


def test_empty_schedule_is_a_no_op():
    settings = GrowthRateSettings()
    assert all(growth_rate_factor(i, settings, 2024) == 1.0 for i in range(36))
    values = GrowthValues(revenue=100.0, customers=10.0, orders=5.0)
    assert apply_growth_rates(values, 4, settings, 2024) == values


def test_factor_matches_quarter_and_year():
    settings = GrowthRateSettings(quarterly_rates=(GrowthRate(quarter=2, year=2024, growth_rate=0.1),))
    assert growth_rate_factor(0, settings, 2024) == 1.0
    assert growth_rate_factor(3, settings, 2024) == pytest.approx(1.1)
    assert growth_rate_factor(5, settings, 2024) == pytest.approx(1.1)
    # Q2 of the following year is a different entry
    assert growth_rate_factor(15, settings, 2024) == 1.0


def test_total_collapse():
    settings = GrowthRateSettings(quarterly_rates=(GrowthRate(1, 2024, -1.0),))
    assert growth_rate_factor(0, settings, 2024) == 0.0


def test_axes_gated_by_flags():
    settings = GrowthRateSettings(
        quarterly_rates=(GrowthRate(1, 2024, 0.5),),
        apply_to_revenue=True,
        apply_to_customers=False,
        apply_to_orders=False,
    )
    grown = apply_growth_rates(GrowthValues(revenue=100.0, customers=50.0, orders=10.0), 0, settings, 2024)
    assert grown.revenue == pytest.approx(150.0)
    assert grown.customers == 50.0
    assert grown.orders == 10.0

    no_orders = apply_growth_rates(GrowthValues(revenue=1.0, customers=1.0), 0, settings, 2024)
    assert no_orders.orders is None

    assert apply_growth_rate(100.0, 0, settings, 2024, enabled=False) == 100.0
    assert apply_growth_rate(100.0, 0, settings, 2024, enabled=True) == pytest.approx(150.0)


def test_growth_rate_summary():
    settings = GrowthRateSettings(
        quarterly_rates=(GrowthRate(3, 2024, 0.3), GrowthRate(1, 2024, 0.1, "launch"))
    )
    summary = growth_rate_summary(settings)
    assert summary["total_quarters"] == 2
    assert summary["average_growth_rate"] == pytest.approx(0.2)
    assert [q["quarter"] for q in summary["quarters"]] == [1, 3]
    assert growth_rate_summary(GrowthRateSettings())["average_growth_rate"] == 0.0
