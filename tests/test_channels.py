import pytest

from revenue_simulator.channels import allocate, normalize_percentages
from revenue_simulator.types import ChannelInfo


def test_allocate_rounds_visitors_and_cost():
    allocation = allocate(
        1000,
        [ChannelInfo("search", 0.6, cost_per_visitor=1.5), ChannelInfo("social", 0.4, cost_per_visitor=0.25)],
    )
    search, social = allocation.channels
    assert (search.visitors, search.cost) == (600, 900)
    assert (social.visitors, social.cost) == (400, 100)
    assert allocation.total_cost == 1000
    assert allocation.total_visitors == 1000


def test_percentages_are_not_normalized():
    allocation = allocate(1000, [ChannelInfo("a", 0.6), ChannelInfo("b", 0.3)])
    assert sum(c.visitors for c in allocation.channels) == 900
    assert allocation.total_cost == 0


def test_normalize_percentages():
    normalized = normalize_percentages([ChannelInfo("a", 0.6), ChannelInfo("b", 0.2)])
    assert [c.percentage for c in normalized] == pytest.approx([0.75, 0.25])
    zero = [ChannelInfo("a", 0.0)]
    assert normalize_percentages(zero) == tuple(zero)


def test_allocate_rounds_half_visitors_up():
    allocation = allocate(5, [ChannelInfo("referral", 0.5, cost_per_visitor=0.5)])
    share = allocation.channels[0]
    # 2.5 visitors round to 3, and 3 * 0.5 = 1.5 rounds to 2
    assert (share.visitors, share.cost) == (3, 2)
