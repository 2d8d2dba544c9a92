from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Iterable, Optional

from streamlit.logger import get_logger

from revenue_simulator.model import simulate_marketplace, simulate_subscription, simulate_unit_economics
from revenue_simulator.periods import parse_start_month
from revenue_simulator.types import (
    DEFAULT_MONTHS,
    BusinessType,
    ConfigurationError,
    CostInputs,
    HybridMonth,
    HybridSummary,
    MarketplaceInputs,
    ModelSettings,
    SimulationRequest,
    SimulationResult,
    SubscriptionInputs,
    UnitEconomicsInputs,
)

logger = get_logger(__name__)

_REQUIRED_INPUTS = {
    BusinessType.SUBSCRIPTION: ("subscription",),
    BusinessType.UNIT_ECONOMICS: ("unit_economics",),
    BusinessType.MARKETPLACE: ("marketplace",),
    BusinessType.HYBRID: ("subscription", "unit_economics"),
}


def _rejected(message: str) -> ConfigurationError:
    logger.warning(f"Rejected simulation request: {message}")
    return ConfigurationError(message)


def _check_schedule(name: str, entries: Iterable) -> None:
    keys = []
    for entry in entries:
        if not 1 <= entry.quarter <= 4:
            raise _rejected(f"{name}: quarter must be between 1 and 4, got {entry.quarter}")
        keys.append((entry.quarter, entry.year))
    duplicates = sorted(k for k, n in Counter(keys).items() if n > 1)
    if duplicates:
        listed = ", ".join(f"Q{q} {y}" for q, y in duplicates)
        raise _rejected(f"{name}: duplicate entries for {listed}")


def validate_request(request: SimulationRequest) -> SimulationRequest:
    """Check a request before any month is simulated.

    Returns the request with ``business_type`` coerced to :class:`BusinessType`.
    Raises :class:`ConfigurationError` for anything the simulators cannot run.
    """
    try:
        business_type = BusinessType(request.business_type)
    except ValueError:
        raise _rejected(f"Unsupported business type: {request.business_type!r}") from None

    missing = [name for name in _REQUIRED_INPUTS[business_type] if getattr(request, name) is None]
    if missing:
        raise _rejected(f"{business_type.value} simulation requires {' and '.join(missing)} inputs")

    try:
        parse_start_month(request.start_month)
    except ConfigurationError as exc:
        raise _rejected(str(exc)) from exc

    if request.months < 1:
        raise _rejected(f"months must be at least 1, got {request.months}")

    growth = request.settings.growth
    for rate in growth.quarterly_rates:
        if rate.growth_rate < -1:
            raise _rejected(f"growth rate for Q{rate.quarter} {rate.year} is below -100%: {rate.growth_rate}")
    _check_schedule("growth rates", growth.quarterly_rates)
    _check_schedule("quarterly overrides", request.settings.quarterly.quarterly_metrics)

    return replace(request, business_type=business_type)


def merge_results(subscription: SimulationResult, unit_economics: SimulationResult) -> SimulationResult:
    """Combine a subscription and a unit-economics run month by month.

    Shared figures are summed and the margin is recomputed from the sums.
    Model-specific fields come from their own side; MRR, ARR, LTV and CAC in
    the summary come from the subscription run only.
    """
    monthly: dict[str, HybridMonth] = {}
    for key, sub in subscription.monthly.items():
        unit = unit_economics.monthly[key]
        revenue = sub.revenue + unit.revenue
        net_profit = sub.net_profit + unit.net_profit
        monthly[key] = HybridMonth(
            month=key,
            revenue=revenue,
            customers=sub.customers + unit.customers,
            total_costs=sub.total_costs + unit.total_costs,
            net_profit=net_profit,
            profit_margin=net_profit / revenue if revenue > 0 else 0.0,
            visitors=sub.visitors,
            signups=sub.signups,
            paid_customers=sub.paid_customers,
            mrr=sub.mrr,
            sales=unit.sales,
            production=unit.production,
            cost_of_goods_sold=unit.cost_of_goods_sold,
            gross_margin=unit.gross_margin,
        )

    sub_summary = subscription.summary
    unit_summary = unit_economics.summary
    total_revenue = sub_summary.total_revenue + unit_summary.total_revenue
    net_profit = sub_summary.net_profit + unit_summary.net_profit
    summary = HybridSummary(
        total_revenue=total_revenue,
        total_customers=sub_summary.total_customers + unit_summary.total_customers,
        total_costs=sub_summary.total_costs + unit_summary.total_costs,
        net_profit=net_profit,
        average_profit_margin=net_profit / total_revenue if total_revenue > 0 else 0.0,
        mrr=sub_summary.mrr,
        arr=sub_summary.arr,
        ltv=sub_summary.ltv,
        cac=sub_summary.cac,
        total_sales=unit_summary.total_sales,
    )
    return SimulationResult(business_type=BusinessType.HYBRID, monthly=monthly, summary=summary)


def run_simulation(request: SimulationRequest) -> SimulationResult:
    request = validate_request(request)
    business_type = request.business_type
    logger.info(f"Running {business_type.value} simulation from {request.start_month} for {request.months} months")

    args = (request.cost_inputs, request.start_month, request.months, request.settings)
    if business_type is BusinessType.SUBSCRIPTION:
        result = simulate_subscription(request.subscription, *args)
    elif business_type is BusinessType.UNIT_ECONOMICS:
        result = simulate_unit_economics(request.unit_economics, *args)
    elif business_type is BusinessType.MARKETPLACE:
        result = simulate_marketplace(request.marketplace, *args)
    else:
        result = merge_results(
            simulate_subscription(request.subscription, *args),
            simulate_unit_economics(request.unit_economics, *args),
        )

    logger.info(
        f"Finished {business_type.value} simulation: revenue={result.summary.total_revenue:.0f} "
        f"net_profit={result.summary.net_profit:.0f}"
    )
    return result


def run(
    business_type: BusinessType | str,
    cost_inputs: CostInputs,
    start_month: str,
    months: int = DEFAULT_MONTHS,
    *,
    subscription: Optional[SubscriptionInputs] = None,
    unit_economics: Optional[UnitEconomicsInputs] = None,
    marketplace: Optional[MarketplaceInputs] = None,
    settings: ModelSettings = ModelSettings(),
) -> SimulationResult:
    """Simulate ``months`` months of the given business type from ``start_month``."""
    return run_simulation(
        SimulationRequest(
            business_type=business_type,
            cost_inputs=cost_inputs,
            start_month=start_month,
            months=months,
            subscription=subscription,
            unit_economics=unit_economics,
            marketplace=marketplace,
            settings=settings,
        )
    )
