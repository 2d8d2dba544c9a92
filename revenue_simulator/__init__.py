from revenue_simulator.dispatch import run, run_simulation
from revenue_simulator.model import simulate_marketplace, simulate_subscription, simulate_unit_economics
from revenue_simulator.scenarios import run_scenarios
from revenue_simulator.types import (
    BusinessType,
    ConfigurationError,
    CostInputs,
    MarketplaceInputs,
    ModelSettings,
    SimulationRequest,
    SimulationResult,
    SubscriptionInputs,
    UnitEconomicsInputs,
)

__all__ = [
    "BusinessType",
    "ConfigurationError",
    "CostInputs",
    "MarketplaceInputs",
    "ModelSettings",
    "SimulationRequest",
    "SimulationResult",
    "SubscriptionInputs",
    "UnitEconomicsInputs",
    "run",
    "run_scenarios",
    "run_simulation",
    "simulate_marketplace",
    "simulate_subscription",
    "simulate_unit_economics",
]
