from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping

from revenue_simulator.cost_structure import revenue_buckets
from revenue_simulator.types import BusinessType, MonthlyResult, round_half_up

PROJECTION_FACTORS = (0.5, 1.0, 2.0, 3.0)
# Projected cost ratios never drop below this floor
MIN_PROJECTED_COST_RATIO = 0.5
NETWORK_EFFECT_FACTOR = 1.2


@dataclass(frozen=True)
class RevenueScale:
    min_revenue: float
    max_revenue: float
    average_revenue: float
    average_costs: float
    cost_ratio: float
    efficiency: str  # "high", "medium" or "low"


@dataclass(frozen=True)
class ProjectedEfficiency:
    revenue: float
    cost_ratio: float
    savings: float


@dataclass(frozen=True)
class OperatingScale:
    min_revenue: float
    max_revenue: float
    cost_ratio: float


@dataclass(frozen=True)
class ScaleEconomicsAnalysis:
    revenue_scales: tuple[RevenueScale, ...]
    projected_efficiency: tuple[ProjectedEfficiency, ...]
    scale_economics_index: float  # 0..1, higher means costs fall faster with scale
    optimal_operating_scale: OperatingScale
    business_specific_metrics: dict[str, float] = field(default_factory=dict)


def _efficiency(cost_ratio: float) -> str:
    if cost_ratio < 0.6:
        return "high"
    if cost_ratio < 0.8:
        return "medium"
    return "low"


def _specific_metrics(months: list[MonthlyResult], business_type: BusinessType, optimal: OperatingScale, index: float):
    in_range = [m for m in months if optimal.min_revenue <= m.revenue <= optimal.max_revenue]

    def average(attr: str) -> int:
        if not in_range:
            return 0
        return round_half_up(sum(getattr(m, attr, 0) or 0 for m in in_range) / len(in_range))

    if business_type is BusinessType.SUBSCRIPTION:
        return {"optimal_customer_count": average("customers"), "customer_acquisition_efficiency": index}
    if business_type is BusinessType.UNIT_ECONOMICS:
        return {"optimal_production_volume": average("production"), "production_efficiency": index}
    if business_type is BusinessType.MARKETPLACE:
        return {
            "optimal_transaction_volume": average("orders"),
            "network_efficiency_factor": index * NETWORK_EFFECT_FACTOR,
        }
    return {}


def analyze_scale_economics(
    monthly: Mapping[str, MonthlyResult], business_type: BusinessType
) -> ScaleEconomicsAnalysis:
    """Cost ratio by revenue bucket and a projection of how it falls with scale.

    Projected ratios follow ``r0 * 0.9 ** log2(1 + factor)`` where ``r0`` is
    the lowest-revenue bucket's ratio, floored at 50%.
    """
    months = list(monthly.values())
    if not months:
        return ScaleEconomicsAnalysis(
            revenue_scales=(),
            projected_efficiency=(),
            scale_economics_index=0.0,
            optimal_operating_scale=OperatingScale(0.0, 0.0, 0.0),
        )

    scales = []
    for row in revenue_buckets(months).itertuples():
        # a zero-revenue bucket counts as fully cost-bound
        ratio = row.total_costs / row.revenue if row.revenue > 0 else 1.0
        scales.append(
            RevenueScale(
                min_revenue=float(row.min_revenue),
                max_revenue=float(row.max_revenue),
                average_revenue=float(row.revenue),
                average_costs=float(row.total_costs),
                cost_ratio=float(ratio),
                efficiency=_efficiency(ratio),
            )
        )

    first_ratio = scales[0].cost_ratio
    if len(scales) >= 2 and first_ratio > 0:
        index = min(1.0, max(0.0, (first_ratio - scales[-1].cost_ratio) / first_ratio))
    else:
        index = 0.0

    last_revenue = months[-1].revenue
    projected = []
    for factor in PROJECTION_FACTORS:
        revenue = last_revenue * factor
        ratio = max(MIN_PROJECTED_COST_RATIO, first_ratio * 0.9 ** math.log2(1 + factor))
        projected.append(ProjectedEfficiency(revenue=revenue, cost_ratio=ratio, savings=revenue * (first_ratio - ratio)))

    best = min(scales, key=lambda s: s.cost_ratio)
    optimal = OperatingScale(min_revenue=best.min_revenue, max_revenue=best.max_revenue, cost_ratio=best.cost_ratio)

    return ScaleEconomicsAnalysis(
        revenue_scales=tuple(scales),
        projected_efficiency=tuple(projected),
        scale_economics_index=index,
        optimal_operating_scale=optimal,
        business_specific_metrics=_specific_metrics(months, BusinessType(business_type), optimal, index),
    )
