"""Optimistic / realistic / pessimistic variants of a simulation request."""

from __future__ import annotations

from dataclasses import dataclass, replace

from streamlit.logger import get_logger

from revenue_simulator.dispatch import run_simulation, validate_request
from revenue_simulator.types import BusinessType, SimulationRequest, SimulationResult, round_half_up

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScenarioAdjustments:
    volume: float  # visitors, sales and fixed costs
    conversion: float  # funnel conversion rates
    retention: float  # churn and refund rates
    price: float  # prices and take rate
    unit_cost: float  # per-unit material and labor


SCENARIOS: dict[str, ScenarioAdjustments] = {
    "optimistic": ScenarioAdjustments(volume=1.2, conversion=1.2, retention=0.8, price=1.1, unit_cost=0.9),
    "realistic": ScenarioAdjustments(volume=1.0, conversion=1.0, retention=1.0, price=1.0, unit_cost=1.0),
    "pessimistic": ScenarioAdjustments(volume=0.8, conversion=0.8, retention=1.2, price=0.9, unit_cost=1.1),
}


def build_scenario_request(request: SimulationRequest, scenario: str) -> SimulationRequest:
    """Scale the inputs of ``request`` for the named scenario.

    Fixed costs move with the volume multiplier. Hybrid requests get the
    volume, conversion and churn adjustments on the subscription side and
    volume and price on the unit-economics side only.
    """
    if scenario not in SCENARIOS:
        raise ValueError(f"Unknown scenario {scenario!r}; expected one of {sorted(SCENARIOS)}")
    adj = SCENARIOS[scenario]
    request = validate_request(request)
    hybrid = request.business_type is BusinessType.HYBRID

    costs = request.cost_inputs
    changes: dict[str, object] = {
        "cost_inputs": replace(
            costs,
            marketing_cost=round_half_up(costs.marketing_cost * adj.volume),
            personnel_cost=round_half_up(costs.personnel_cost * adj.volume),
            other_fixed_costs=round_half_up(costs.other_fixed_costs * adj.volume),
        )
    }

    sub = request.subscription
    if sub is not None and request.business_type in (BusinessType.SUBSCRIPTION, BusinessType.HYBRID):
        fields = {
            "monthly_visitors": round_half_up(sub.monthly_visitors * adj.volume),
            "visitor_to_signup_rate": sub.visitor_to_signup_rate * adj.conversion,
            "signup_to_paid_rate": sub.signup_to_paid_rate * adj.conversion,
            "monthly_churn_rate": sub.monthly_churn_rate * adj.retention,
        }
        if not hybrid:
            fields["monthly_price"] = round_half_up(sub.monthly_price * adj.price)
            fields["annual_price"] = round_half_up(sub.annual_price * adj.price)
        changes["subscription"] = replace(sub, **fields)

    unit = request.unit_economics
    if unit is not None and request.business_type in (BusinessType.UNIT_ECONOMICS, BusinessType.HYBRID):
        fields = {
            "monthly_sales": round_half_up(unit.monthly_sales * adj.volume),
            "unit_price": round_half_up(unit.unit_price * adj.price),
        }
        if not hybrid:
            fields["material_cost_per_unit"] = round_half_up(unit.material_cost_per_unit * adj.unit_cost)
            fields["labor_cost_per_unit"] = round_half_up(unit.labor_cost_per_unit * adj.unit_cost)
        changes["unit_economics"] = replace(unit, **fields)

    market = request.marketplace
    if market is not None and request.business_type is BusinessType.MARKETPLACE:
        changes["marketplace"] = replace(
            market,
            monthly_visitors=round_half_up(market.monthly_visitors * adj.volume),
            visitor_to_buyer_rate=market.visitor_to_buyer_rate * adj.conversion,
            average_order_value=round_half_up(market.average_order_value * adj.price),
            take_rate=market.take_rate * adj.price,
            refund_rate=market.refund_rate * adj.retention,
        )

    return replace(request, **changes)


def run_scenarios(request: SimulationRequest) -> dict[str, SimulationResult]:
    """Run every scenario in :data:`SCENARIOS` for ``request``."""
    results = {}
    for name in SCENARIOS:
        logger.info(f"Running {name} scenario")
        results[name] = run_simulation(build_scenario_request(request, name))
    return results
