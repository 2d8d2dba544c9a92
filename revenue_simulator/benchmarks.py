"""Static industry benchmarks and comparison of a simulation run against them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from revenue_simulator.types import BusinessType, SimulationRequest, SimulationResult, round_half_up


@dataclass(frozen=True)
class IndustryBenchmark:
    industry: str
    business_type: BusinessType
    stage: str  # "startup", "growth" or "mature"
    monthly_churn: float
    annual_churn: float
    gross_margin: float
    net_margin: float
    cost_to_revenue_ratio: float
    monthly_revenue_growth: float
    customer_growth: float
    ltv: float
    cac: float
    ltv_cac_ratio: float
    payback_period_months: int
    revenue_per_employee: float
    hr_to_revenue_ratio: float
    visitor_to_signup: Optional[float] = None
    signup_to_paid: Optional[float] = None
    visitor_to_buyer: Optional[float] = None
    buyer_to_repeat: Optional[float] = None


@dataclass(frozen=True)
class MetricComparison:
    metric: str
    current: float
    benchmark: float
    difference: float
    status: str  # "above" is better than the benchmark, "below" is worse
    recommendation: str


@dataclass(frozen=True)
class BenchmarkComparison:
    benchmark: Optional[IndustryBenchmark]
    comparisons: tuple[MetricComparison, ...]
    overall_score: int  # 0..100
    strengths: tuple[str, ...]
    improvements: tuple[str, ...]


INDUSTRY_BENCHMARKS: tuple[IndustryBenchmark, ...] = (
    IndustryBenchmark(
        industry="SaaS",
        business_type=BusinessType.SUBSCRIPTION,
        stage="startup",
        visitor_to_signup=0.03,
        signup_to_paid=0.15,
        monthly_churn=0.05,
        annual_churn=0.45,
        gross_margin=0.80,
        net_margin=-0.20,
        cost_to_revenue_ratio=1.20,
        monthly_revenue_growth=0.20,
        customer_growth=0.15,
        ltv=2400,
        cac=800,
        ltv_cac_ratio=3.0,
        payback_period_months=8,
        revenue_per_employee=50_000_000,
        hr_to_revenue_ratio=0.60,
    ),
    IndustryBenchmark(
        industry="SaaS",
        business_type=BusinessType.SUBSCRIPTION,
        stage="growth",
        visitor_to_signup=0.05,
        signup_to_paid=0.20,
        monthly_churn=0.03,
        annual_churn=0.30,
        gross_margin=0.85,
        net_margin=0.10,
        cost_to_revenue_ratio=0.90,
        monthly_revenue_growth=0.15,
        customer_growth=0.12,
        ltv=4800,
        cac=1200,
        ltv_cac_ratio=4.0,
        payback_period_months=6,
        revenue_per_employee=80_000_000,
        hr_to_revenue_ratio=0.45,
    ),
    IndustryBenchmark(
        industry="Manufacturing/Distribution",
        business_type=BusinessType.UNIT_ECONOMICS,
        stage="startup",
        monthly_churn=0.02,
        annual_churn=0.20,
        gross_margin=0.40,
        net_margin=0.05,
        cost_to_revenue_ratio=0.95,
        monthly_revenue_growth=0.10,
        customer_growth=0.08,
        ltv=1200,
        cac=200,
        ltv_cac_ratio=6.0,
        payback_period_months=4,
        revenue_per_employee=30_000_000,
        hr_to_revenue_ratio=0.25,
    ),
    IndustryBenchmark(
        industry="B2C Platform",
        business_type=BusinessType.MARKETPLACE,
        stage="startup",
        visitor_to_buyer=0.02,
        buyer_to_repeat=0.25,
        monthly_churn=0.10,
        annual_churn=0.70,
        gross_margin=0.15,
        net_margin=-0.30,
        cost_to_revenue_ratio=1.30,
        monthly_revenue_growth=0.25,
        customer_growth=0.20,
        ltv=200,
        cac=150,
        ltv_cac_ratio=1.3,
        payback_period_months=12,
        revenue_per_employee=40_000_000,
        hr_to_revenue_ratio=0.50,
    ),
)


def get_industry_benchmark(business_type: BusinessType, stage: str = "startup") -> Optional[IndustryBenchmark]:
    return next(
        (b for b in INDUSTRY_BENCHMARKS if b.business_type == business_type and b.stage == stage),
        None,
    )


def all_benchmarks() -> tuple[IndustryBenchmark, ...]:
    return INDUSTRY_BENCHMARKS


def _status(difference: float, tolerance: float) -> str:
    if abs(difference) < tolerance:
        return "similar"
    return "above" if difference > 0 else "below"


def _compare(
    metric: str,
    current: float,
    benchmark: float,
    tolerance: float,
    advice: str,
    lower_is_better: bool = False,
) -> MetricComparison:
    difference = current - benchmark
    status = _status(-difference if lower_is_better else difference, tolerance)
    recommendation = {
        "above": "Better than the industry benchmark.",
        "below": advice,
        "similar": "In line with the industry average.",
    }[status]
    return MetricComparison(metric, current, benchmark, difference, status, recommendation)


def _current_churn(request: SimulationRequest) -> Optional[float]:
    if request.business_type == BusinessType.SUBSCRIPTION and request.subscription is not None:
        return request.subscription.monthly_churn_rate
    if request.business_type == BusinessType.MARKETPLACE and request.marketplace is not None:
        # refund rate doubles as the churn proxy, as in marketplace LTV
        return request.marketplace.refund_rate
    return None


def compare_with_benchmarks(
    result: SimulationResult, request: SimulationRequest, stage: str = "startup"
) -> BenchmarkComparison:
    """Score a run against the benchmark for its business type and stage.

    Each metric is rated ``above``, ``below`` or ``similar``; the score gives
    100 points per ``above`` and 50 per ``similar``, averaged over metrics.
    """
    business_type = BusinessType(result.business_type)
    benchmark = get_industry_benchmark(business_type, stage)
    if benchmark is None:
        return BenchmarkComparison(None, (), 0, (), ())

    # (comparison, strength label, improvement label)
    rated: list[tuple[MetricComparison, str, str]] = []
    summary = result.summary

    if business_type is BusinessType.SUBSCRIPTION and benchmark.visitor_to_signup and request.subscription:
        rated.append(
            (
                _compare(
                    "visitor_to_signup_rate",
                    request.subscription.visitor_to_signup_rate,
                    benchmark.visitor_to_signup,
                    0.01,
                    "Optimize landing pages to lift signup conversion.",
                ),
                "High conversion rate",
                "Improve conversion rate",
            )
        )

    churn = _current_churn(request)
    if churn is not None:
        rated.append(
            (
                _compare(
                    "monthly_churn_rate",
                    churn,
                    benchmark.monthly_churn,
                    0.01,
                    "Invest in retention to bring churn down.",
                    lower_is_better=True,
                ),
                "Low churn",
                "Improve customer retention",
            )
        )

    margin = summary.net_profit / summary.total_revenue if summary.total_revenue > 0 else 0.0
    rated.append(
        (
            _compare(
                "net_margin",
                margin,
                benchmark.net_margin,
                0.05,
                "Review cost structure or pricing to improve profitability.",
            ),
            "Strong profitability",
            "Improve profitability",
        )
    )

    if business_type is BusinessType.SUBSCRIPTION and summary.ltv and summary.cac:
        rated.append(
            (
                _compare(
                    "ltv_cac_ratio",
                    summary.ltv / summary.cac,
                    benchmark.ltv_cac_ratio,
                    0.5,
                    "Raise LTV or lower CAC.",
                ),
                "Healthy unit economics",
                "Improve unit economics",
            )
        )

    comparisons = tuple(c for c, _, _ in rated)
    above = sum(c.status == "above" for c in comparisons)
    similar = sum(c.status == "similar" for c in comparisons)
    return BenchmarkComparison(
        benchmark=benchmark,
        comparisons=comparisons,
        # half-up rounding
        overall_score=round_half_up((above * 100 + similar * 50) / len(comparisons)),
        strengths=tuple(s for c, s, _ in rated if c.status == "above"),
        improvements=tuple(i for c, _, i in rated if c.status == "below"),
    )
