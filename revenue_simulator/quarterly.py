"""Quarter-level substitution of absolute input values.

Overrides replace the raw input for every month of a configured quarter
before growth rates or funnels are applied. Fields left as ``None`` in an
override bundle keep the base value.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional

from revenue_simulator.periods import quarter_and_year
from revenue_simulator.types import BusinessType, QuarterlyDetailedSettings, QuarterlyMetrics


@dataclass(frozen=True)
class MonthMetrics:
    """Per-month driving values of a model before growth is applied."""

    visitors: Optional[float] = None
    sales: Optional[float] = None
    conversion_rate: Optional[float] = None
    paid_conversion_rate: Optional[float] = None
    price: Optional[float] = None
    annual_price: Optional[float] = None
    churn_rate: Optional[float] = None
    refund_rate: Optional[float] = None
    take_rate: Optional[float] = None
    marketing_cost: Optional[float] = None
    personnel_cost: Optional[float] = None
    other_fixed_costs: Optional[float] = None
    material_cost_per_unit: Optional[float] = None
    labor_cost_per_unit: Optional[float] = None
    shipping_cost_per_unit: Optional[float] = None


def find_quarterly_metrics(
    settings: QuarterlyDetailedSettings, month_index: int, base_year: int
) -> Optional[QuarterlyMetrics]:
    quarter, year = quarter_and_year(month_index, base_year)
    for metrics in settings.quarterly_metrics:
        if metrics.quarter == quarter and metrics.year == year:
            return metrics
    return None


def _present(**values: Optional[float]) -> dict[str, float]:
    return {k: v for k, v in values.items() if v is not None}


def apply_quarterly_overrides(
    month_index: int,
    settings: QuarterlyDetailedSettings,
    business_type: BusinessType,
    base: MonthMetrics,
    base_year: int,
) -> MonthMetrics:
    if not settings.use_detailed_settings:
        return base
    override = find_quarterly_metrics(settings, month_index, base_year)
    if override is None:
        return base

    rates = override.conversion_rates
    pricing = override.pricing
    if business_type is BusinessType.MARKETPLACE:
        conversion = _present(conversion_rate=rates.visitor_to_buyer)
        price = _present(price=pricing.average_order_value)
    elif business_type is BusinessType.UNIT_ECONOMICS:
        conversion = {}
        price = _present(price=pricing.unit_price)
    else:
        conversion = _present(conversion_rate=rates.visitor_to_signup, paid_conversion_rate=rates.signup_to_paid)
        price = _present(price=pricing.monthly_price, annual_price=pricing.annual_price)

    costs = override.costs
    metrics = override.metrics
    changes = {
        **conversion,
        **price,
        **_present(
            marketing_cost=costs.marketing_cost,
            personnel_cost=costs.personnel_cost,
            other_fixed_costs=costs.other_fixed_costs,
            material_cost_per_unit=costs.material_cost_per_unit,
            labor_cost_per_unit=costs.labor_cost_per_unit,
            shipping_cost_per_unit=costs.shipping_cost_per_unit,
            visitors=metrics.monthly_visitors,
            sales=metrics.monthly_sales,
            churn_rate=metrics.churn_rate,
            refund_rate=metrics.refund_rate,
            take_rate=metrics.take_rate,
        ),
    }
    return replace(base, **changes) if changes else base


def is_quarterly_override_applicable(
    settings: QuarterlyDetailedSettings, month_index: int, base_year: int
) -> bool:
    if not settings.use_detailed_settings:
        return False
    return find_quarterly_metrics(settings, month_index, base_year) is not None


def analyze_quarterly_coverage(settings: QuarterlyDetailedSettings, total_months: int, base_year: int) -> dict:
    """How many of the simulated quarters carry an override bundle."""
    total_quarters = math.ceil(total_months / 3)
    if not settings.use_detailed_settings:
        return {
            "total_quarters": total_quarters,
            "configured_quarters": 0,
            "coverage_rate": 0.0,
            "missing_quarters": [],
        }

    missing: list[tuple[int, int]] = []
    configured = 0
    for i in range(total_quarters):
        quarter, year = quarter_and_year(i * 3, base_year)
        if find_quarterly_metrics(settings, i * 3, base_year) is None:
            missing.append((quarter, year))
        else:
            configured += 1
    return {
        "total_quarters": total_quarters,
        "configured_quarters": configured,
        "coverage_rate": configured / total_quarters if total_quarters else 0.0,
        "missing_quarters": missing,
    }
