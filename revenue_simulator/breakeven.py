from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Optional

import numpy as np

from revenue_simulator.types import UNBOUNDED, MonthlyResult, SummaryResult, round_half_up

# Share of total cost treated as fixed when no fixed-cost base is given
DEFAULT_FIXED_COST_SHARE = 0.7
DEFAULT_VARIABLE_COST_RATIO = 0.3


@dataclass(frozen=True)
class BreakEvenAnalysis:
    break_even_month: int  # 1-based, 0 = not reached
    break_even_revenue: float
    break_even_customers: float
    monthly_break_even_revenue: float
    annual_break_even_revenue: float
    total_fixed_costs: float
    variable_cost_ratio: float
    contribution_margin_ratio: float
    revenue_gap_to_break_even: float


def _break_even_revenue(fixed_costs: float, contribution_margin_ratio: float) -> float:
    if contribution_margin_ratio <= 0:
        return UNBOUNDED
    return fixed_costs / contribution_margin_ratio


def analyze_break_even(
    monthly: Mapping[str, MonthlyResult],
    fixed_costs: Optional[float] = None,
    variable_cost_ratio: Optional[float] = None,
) -> BreakEvenAnalysis:
    """Find the first month where cumulative contribution covers fixed costs.

    Cumulative profit starts at ``-fixed_costs`` and each month adds
    ``revenue * (1 - variable_cost_ratio)``. The fixed-cost base defaults to
    70% of the last month's total costs.
    """
    months = list(monthly.values())
    if not months:
        return BreakEvenAnalysis(
            break_even_month=0,
            break_even_revenue=0.0,
            break_even_customers=0,
            monthly_break_even_revenue=0.0,
            annual_break_even_revenue=0.0,
            total_fixed_costs=0.0,
            variable_cost_ratio=DEFAULT_VARIABLE_COST_RATIO,
            contribution_margin_ratio=1.0 - DEFAULT_VARIABLE_COST_RATIO,
            revenue_gap_to_break_even=0.0,
        )

    fixed = months[-1].total_costs * DEFAULT_FIXED_COST_SHARE if fixed_costs is None else fixed_costs
    ratio = DEFAULT_VARIABLE_COST_RATIO if variable_cost_ratio is None else variable_cost_ratio
    margin_ratio = 1.0 - ratio
    monthly_be = _break_even_revenue(fixed, margin_ratio)

    revenue = np.array([m.revenue for m in months], dtype=float)
    cumulative_profit = -fixed + np.cumsum(revenue * margin_ratio)
    reached = np.flatnonzero(cumulative_profit >= 0)

    if reached.size:
        idx = int(reached[0])
        return BreakEvenAnalysis(
            break_even_month=idx + 1,
            break_even_revenue=float(revenue[: idx + 1].sum()),
            break_even_customers=months[idx].customers,
            monthly_break_even_revenue=monthly_be,
            annual_break_even_revenue=monthly_be * 12,
            total_fixed_costs=fixed,
            variable_cost_ratio=ratio,
            contribution_margin_ratio=margin_ratio,
            revenue_gap_to_break_even=0.0,
        )

    deficit = abs(float(cumulative_profit[-1]))
    return BreakEvenAnalysis(
        break_even_month=0,
        break_even_revenue=0.0,
        break_even_customers=0,
        monthly_break_even_revenue=monthly_be,
        annual_break_even_revenue=monthly_be * 12,
        total_fixed_costs=fixed,
        variable_cost_ratio=ratio,
        contribution_margin_ratio=margin_ratio,
        revenue_gap_to_break_even=deficit / margin_ratio if margin_ratio > 0 else UNBOUNDED,
    )


def analyze_break_even_from_summary(
    summary: SummaryResult, months: int, fixed_cost_share: float = DEFAULT_FIXED_COST_SHARE
) -> BreakEvenAnalysis:
    """Proportional break-even estimate from run totals alone."""
    fixed = summary.total_costs * fixed_cost_share
    if summary.total_revenue > 0:
        ratio = (summary.total_costs - fixed) / summary.total_revenue
    else:
        ratio = DEFAULT_VARIABLE_COST_RATIO
    margin_ratio = 1.0 - ratio
    monthly_be = _break_even_revenue(fixed / months, margin_ratio) if months > 0 else 0.0

    reached = summary.net_profit >= 0 and margin_ratio > 0
    month = 0
    if reached and summary.total_revenue > 0:
        needed = fixed / margin_ratio
        month = min(math.ceil(months * needed / summary.total_revenue), months)

    if reached:
        gap = 0.0
    elif margin_ratio > 0:
        gap = abs(summary.net_profit) / margin_ratio
    else:
        gap = UNBOUNDED

    return BreakEvenAnalysis(
        break_even_month=month,
        break_even_revenue=fixed / margin_ratio if reached else 0.0,
        break_even_customers=round_half_up(summary.total_customers * month / months) if reached and months > 0 else 0,
        monthly_break_even_revenue=monthly_be,
        annual_break_even_revenue=monthly_be * 12,
        total_fixed_costs=fixed,
        variable_cost_ratio=ratio,
        contribution_margin_ratio=margin_ratio,
        revenue_gap_to_break_even=gap,
    )
