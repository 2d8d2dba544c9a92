from dataclasses import dataclass
from typing import Optional

from revenue_simulator.periods import quarter_and_year
from revenue_simulator.types import GrowthRate, GrowthRateSettings


@dataclass(frozen=True)
class GrowthValues:
    revenue: float = 0.0
    customers: float = 0.0
    orders: Optional[float] = None


def _find_rate(settings: GrowthRateSettings, quarter: int, year: int) -> Optional[GrowthRate]:
    # First match wins; duplicates are rejected when a request is validated
    for rate in settings.quarterly_rates:
        if rate.quarter == quarter and rate.year == year:
            return rate
    return None


def growth_rate_factor(month_index: int, settings: GrowthRateSettings, base_year: int) -> float:
    """Multiplier for ``month_index`` (0-based from the simulation start).

    Returns ``1 + growth_rate`` for the matching (quarter, year) entry and
    ``1.0`` when the schedule has no entry for that quarter.
    """
    if not settings.quarterly_rates:
        return 1.0
    quarter, year = quarter_and_year(month_index, base_year)
    rate = _find_rate(settings, quarter, year)
    if rate is None:
        return 1.0
    return 1.0 + rate.growth_rate


def apply_growth_rate(
    value: float, month_index: int, settings: GrowthRateSettings, base_year: int, enabled: bool
) -> float:
    if not enabled:
        return value
    return value * growth_rate_factor(month_index, settings, base_year)


def apply_growth_rates(
    values: GrowthValues, month_index: int, settings: GrowthRateSettings, base_year: int
) -> GrowthValues:
    """Scale each axis independently, gated by the matching ``apply_to_*`` flag."""
    factor = growth_rate_factor(month_index, settings, base_year)
    revenue = values.revenue * factor if settings.apply_to_revenue else values.revenue
    customers = values.customers * factor if settings.apply_to_customers else values.customers
    orders = values.orders
    if orders is not None and settings.apply_to_orders:
        orders = orders * factor
    return GrowthValues(revenue=revenue, customers=customers, orders=orders)


def growth_rate_summary(settings: GrowthRateSettings) -> dict:
    quarters = sorted(settings.quarterly_rates, key=lambda r: (r.year, r.quarter))
    average = sum(r.growth_rate for r in quarters) / len(quarters) if quarters else 0.0
    return {
        "total_quarters": len(quarters),
        "average_growth_rate": average,
        "quarters": [
            {"quarter": r.quarter, "year": r.year, "growth_rate": r.growth_rate, "description": r.description}
            for r in quarters
        ],
    }
