from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import pandas as pd

from revenue_simulator.types import CostInputs, MonthlyResult

# Share of marketing spend treated as a fixed cost
DEFAULT_FIXED_MARKETING_RATIO = 0.5


@dataclass(frozen=True)
class FixedCosts:
    personnel: float
    marketing: float
    other: float
    total: float


@dataclass(frozen=True)
class VariableCosts:
    cost_of_goods_sold: float
    payment: float
    shipping: float
    other: float  # residual plus the variable share of marketing
    total: float


@dataclass(frozen=True)
class ScaleBucket:
    revenue: float
    cost_ratio: float


@dataclass(frozen=True)
class CostStructureAnalysis:
    fixed_costs: FixedCosts
    variable_costs: VariableCosts
    total_costs: float
    fixed_cost_ratio: float
    variable_cost_ratio: float
    cost_to_revenue_ratio: float
    scale_efficiency: tuple[ScaleBucket, ...]


@dataclass(frozen=True)
class Department:
    name: str
    headcount: int
    average_salary: float  # per month


@dataclass(frozen=True)
class DepartmentCost:
    name: str
    headcount: int
    average_salary: float
    total_cost: float


@dataclass(frozen=True)
class HRCostAnalysis:
    department_costs: tuple[DepartmentCost, ...]
    total_hr_cost: float
    hr_to_revenue_ratio: float
    total_headcount: int
    revenue_per_employee: float


DEFAULT_DEPARTMENTS = (
    Department("Engineering", 3, 7_000_000),
    Department("Sales/Marketing", 2, 6_000_000),
    Department("Operations/Support", 1, 5_000_000),
    Department("Executive", 1, 10_000_000),
)


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def revenue_buckets(months: Sequence[MonthlyResult]) -> pd.DataFrame:
    """Up to four buckets of months sorted by revenue.

    Each bucket holds ``max(1, n // 4)`` months; the last bucket also takes
    the remainder. Fewer than four months give fewer buckets. Columns are
    the bucket's mean ``revenue`` and ``total_costs`` plus its
    ``min_revenue`` and ``max_revenue``.
    """
    columns = ["revenue", "total_costs", "min_revenue", "max_revenue"]
    if not months:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame(
        {"revenue": [m.revenue for m in months], "total_costs": [m.total_costs for m in months]}
    ).sort_values("revenue", kind="mergesort", ignore_index=True)

    n = len(df)
    step = max(1, n // 4)
    rows = []
    for i in range(4):
        start = i * step
        end = n - 1 if i == 3 else min((i + 1) * step - 1, n - 1)
        if start <= end:
            segment = df.iloc[start : end + 1]
            rows.append(
                {
                    "revenue": segment["revenue"].mean(),
                    "total_costs": segment["total_costs"].mean(),
                    "min_revenue": segment["revenue"].min(),
                    "max_revenue": segment["revenue"].max(),
                }
            )
    return pd.DataFrame(rows, columns=columns)


def scale_efficiency(months: Sequence[MonthlyResult]) -> tuple[ScaleBucket, ...]:
    buckets = revenue_buckets(months)
    return tuple(
        ScaleBucket(revenue=float(row.revenue), cost_ratio=_ratio(float(row.total_costs), float(row.revenue)))
        for row in buckets.itertuples()
    )


def analyze_cost_structure(
    monthly: Mapping[str, MonthlyResult],
    cost_inputs: CostInputs,
    fixed_marketing_ratio: float = DEFAULT_FIXED_MARKETING_RATIO,
) -> CostStructureAnalysis:
    """Split the run's total cost into fixed and variable parts.

    Fixed and marketing amounts come from ``cost_inputs`` scaled by the
    number of months. Whatever the identified items do not explain is
    counted as other variable cost (never negative).
    """
    months = list(monthly.values())
    if not months:
        return CostStructureAnalysis(
            fixed_costs=FixedCosts(0.0, 0.0, 0.0, 0.0),
            variable_costs=VariableCosts(0.0, 0.0, 0.0, 0.0, 0.0),
            total_costs=0.0,
            fixed_cost_ratio=0.0,
            variable_cost_ratio=0.0,
            cost_to_revenue_ratio=0.0,
            scale_efficiency=(),
        )

    n = len(months)
    total_revenue = sum(m.revenue for m in months)
    total_costs = sum(m.total_costs for m in months)

    personnel = cost_inputs.personnel_cost * n
    fixed_marketing = cost_inputs.marketing_cost * n * fixed_marketing_ratio
    other_fixed = cost_inputs.other_fixed_costs * n
    total_fixed = personnel + fixed_marketing + other_fixed

    variable_marketing = cost_inputs.marketing_cost * n * (1.0 - fixed_marketing_ratio)
    cogs = sum(getattr(m, "cost_of_goods_sold", 0.0) for m in months)
    payment_fees = total_revenue * cost_inputs.payment_fee_rate
    shipping = 0.0
    if cost_inputs.shipping_cost_per_unit:
        shipping = sum(getattr(m, "sales", 0.0) for m in months) * cost_inputs.shipping_cost_per_unit

    identified = total_fixed + variable_marketing + cogs + payment_fees + shipping
    residual = max(0.0, total_costs - identified)
    total_variable = variable_marketing + cogs + payment_fees + shipping + residual

    return CostStructureAnalysis(
        fixed_costs=FixedCosts(personnel=personnel, marketing=fixed_marketing, other=other_fixed, total=total_fixed),
        variable_costs=VariableCosts(
            cost_of_goods_sold=cogs,
            payment=payment_fees,
            shipping=shipping,
            other=residual + variable_marketing,
            total=total_variable,
        ),
        total_costs=total_costs,
        fixed_cost_ratio=_ratio(total_fixed, total_costs),
        variable_cost_ratio=_ratio(total_variable, total_costs),
        cost_to_revenue_ratio=_ratio(total_costs, total_revenue),
        scale_efficiency=scale_efficiency(months),
    )


def analyze_hr_costs(
    monthly: Mapping[str, MonthlyResult], departments: Optional[Sequence[Department]] = None
) -> HRCostAnalysis:
    months = list(monthly.values())
    if not months:
        return HRCostAnalysis(
            department_costs=(), total_hr_cost=0.0, hr_to_revenue_ratio=0.0, total_headcount=0, revenue_per_employee=0.0
        )

    roster = DEFAULT_DEPARTMENTS if departments is None else departments
    costs = tuple(
        DepartmentCost(
            name=d.name,
            headcount=d.headcount,
            average_salary=d.average_salary,
            total_cost=d.headcount * d.average_salary * len(months),
        )
        for d in roster
    )
    total_revenue = sum(m.revenue for m in months)
    total_hr = sum(c.total_cost for c in costs)
    headcount = sum(c.headcount for c in costs)
    return HRCostAnalysis(
        department_costs=costs,
        total_hr_cost=total_hr,
        hr_to_revenue_ratio=_ratio(total_hr, total_revenue),
        total_headcount=headcount,
        revenue_per_employee=_ratio(total_revenue, headcount),
    )
