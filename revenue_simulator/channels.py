from dataclasses import dataclass, replace
from typing import Sequence

from revenue_simulator.types import ChannelInfo, ChannelShare, round_half_up


@dataclass(frozen=True)
class ChannelAllocation:
    channels: tuple[ChannelShare, ...]
    total_cost: int
    total_visitors: float


def allocate(total_visitors: float, channels: Sequence[ChannelInfo]) -> ChannelAllocation:
    """Split visitors across acquisition channels by their percentage.

    Percentages are used as given. When they do not sum to 1 the per-channel
    visitor counts will not add up to ``total_visitors``.
    """
    shares = []
    for channel in channels:
        visitors = round_half_up(total_visitors * channel.percentage)
        shares.append(
            ChannelShare(
                name=channel.name,
                percentage=channel.percentage,
                cost_per_visitor=channel.cost_per_visitor,
                visitors=visitors,
                cost=round_half_up(visitors * channel.cost_per_visitor),
            )
        )
    return ChannelAllocation(
        channels=tuple(shares),
        total_cost=sum(s.cost for s in shares),
        total_visitors=total_visitors,
    )


def normalize_percentages(channels: Sequence[ChannelInfo]) -> tuple[ChannelInfo, ...]:
    total = sum(c.percentage for c in channels)
    if total <= 0:
        return tuple(channels)
    return tuple(replace(c, percentage=c.percentage / total) for c in channels)
