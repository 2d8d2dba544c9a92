from dataclasses import dataclass
from typing import Optional, Sequence

from revenue_simulator.types import CustomFunnel, FunnelStep


@dataclass(frozen=True)
class FunnelStepValue:
    step: FunnelStep
    value: float
    cumulative_rate: float


def _active_steps(funnels: Sequence[CustomFunnel], active_funnel_id: Optional[str]) -> list[FunnelStep]:
    """Steps of the active funnel in ``order``; empty when there is none."""
    if not active_funnel_id or not funnels:
        return []
    funnel = next((f for f in funnels if f.id == active_funnel_id), None)
    if funnel is None or not funnel.is_active:
        return []
    return sorted(funnel.steps, key=lambda s: s.order)


def convert(
    base_volume: float,
    funnels: Sequence[CustomFunnel],
    active_funnel_id: Optional[str] = None,
    fallback_rate: float = 1.0,
) -> float:
    """Push ``base_volume`` through the active funnel.

    Without an active funnel (missing id, unknown id, inactive or stepless
    funnel) the volume is converted at ``fallback_rate`` instead.
    """
    steps = _active_steps(funnels, active_funnel_id)
    if not steps:
        return base_volume * fallback_rate
    value = base_volume
    for step in steps:
        value *= step.conversion_rate
    return value


def conversion_rate(funnels: Sequence[CustomFunnel], active_funnel_id: Optional[str] = None) -> float:
    rate = 1.0
    for step in _active_steps(funnels, active_funnel_id):
        rate *= step.conversion_rate
    return rate


def funnel_step_values(
    base_volume: float, funnels: Sequence[CustomFunnel], active_funnel_id: Optional[str] = None
) -> list[FunnelStepValue]:
    values: list[FunnelStepValue] = []
    value = base_volume
    cumulative = 1.0
    for step in _active_steps(funnels, active_funnel_id):
        value *= step.conversion_rate
        cumulative *= step.conversion_rate
        values.append(FunnelStepValue(step=step, value=value, cumulative_rate=cumulative))
    return values


def _efficiency_rating(total_rate: float) -> str:
    if total_rate >= 0.10:
        return "excellent"
    if total_rate >= 0.05:
        return "good"
    if total_rate >= 0.02:
        return "average"
    return "poor"


def analyze_funnel_efficiency(funnels: Sequence[CustomFunnel], active_funnel_id: Optional[str] = None) -> dict:
    steps = _active_steps(funnels, active_funnel_id)
    if not steps:
        return {
            "total_conversion_rate": 1.0,
            "step_count": 0,
            "average_step_conversion_rate": 1.0,
            "weakest_step": None,
            "strongest_step": None,
            "efficiency": "excellent",
        }

    total = conversion_rate(funnels, active_funnel_id)
    return {
        "total_conversion_rate": total,
        "step_count": len(steps),
        "average_step_conversion_rate": sum(s.conversion_rate for s in steps) / len(steps),
        # min/max keep the first step on ties
        "weakest_step": min(steps, key=lambda s: s.conversion_rate),
        "strongest_step": max(steps, key=lambda s: s.conversion_rate),
        "efficiency": _efficiency_rating(total),
    }
