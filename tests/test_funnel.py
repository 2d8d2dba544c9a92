import pytest

from revenue_simulator.funnel import analyze_funnel_efficiency, conversion_rate, convert, funnel_step_values
from revenue_simulator.types import CustomFunnel, FunnelStep

FUNNEL = CustomFunnel(
    id="main",
    name="Main",
    steps=(
        FunnelStep(order=2, conversion_rate=0.5, name="trial"),
        FunnelStep(order=1, conversion_rate=0.2, name="signup"),
    ),
)


def test_fallback_without_active_funnel():
    assert convert(1000, [], None, 0.05) == pytest.approx(50.0)
    assert convert(1000, [FUNNEL], None, 0.05) == pytest.approx(50.0)
    assert convert(1000, [FUNNEL], "missing", 0.05) == pytest.approx(50.0)
    inactive = CustomFunnel(id="main", steps=FUNNEL.steps, is_active=False)
    assert convert(1000, [inactive], "main", 0.05) == pytest.approx(50.0)
    assert convert(1000, [CustomFunnel(id="empty", steps=())], "empty", 0.05) == pytest.approx(50.0)
    assert convert(1000, []) == 1000


def test_active_funnel_compounds_steps():
    assert convert(1000, [FUNNEL], "main", 0.05) == pytest.approx(100.0)
    assert conversion_rate([FUNNEL], "main") == pytest.approx(0.1)
    assert conversion_rate([FUNNEL], None) == 1.0


def test_zero_step_collapses_funnel():
    dead = CustomFunnel(id="dead", steps=(FunnelStep(1, 0.4), FunnelStep(2, 0.0)))
    assert convert(1000, [dead], "dead", 0.05) == 0.0


def test_step_values_follow_order():
    values = funnel_step_values(1000, [FUNNEL], "main")
    assert [v.step.name for v in values] == ["signup", "trial"]
    assert values[0].value == pytest.approx(200.0)
    assert values[1].value == pytest.approx(100.0)
    assert values[1].cumulative_rate == pytest.approx(0.1)
    assert funnel_step_values(1000, [], None) == []


@pytest.mark.parametrize(
    "rates, rating",
    [((0.5, 0.2), "excellent"), ((0.5, 0.1), "good"), ((0.2, 0.1), "average"), ((0.1, 0.1), "poor")],
)
def test_efficiency_rating(rates, rating):
    funnel = CustomFunnel(id="f", steps=tuple(FunnelStep(i, r) for i, r in enumerate(rates)))
    assert analyze_funnel_efficiency([funnel], "f")["efficiency"] == rating


def test_efficiency_details():
    analysis = analyze_funnel_efficiency([FUNNEL], "main")
    assert analysis["step_count"] == 2
    assert analysis["average_step_conversion_rate"] == pytest.approx(0.35)
    assert analysis["weakest_step"].name == "signup"
    assert analysis["strongest_step"].name == "trial"
    assert analyze_funnel_efficiency([], None)["step_count"] == 0
