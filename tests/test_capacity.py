import math

import pytest

from abcalc.capacity import calculate_max_experiments, power_for_effect, z_value
from abcalc.errors import InvalidInput


def test_default_plan():
    plan = calculate_max_experiments(
        daily_visitors=10000,
        conversion_rate=3,
        mde=10,
        confidence_level=95,
        target_power=80,
    )

    assert 53000 < plan.sample_size_per_variant < 53300
    assert plan.total_sample_size == plan.sample_size_per_variant * 2
    assert plan.annual_visitors == 3_650_000
    assert plan.max_experiments == math.floor(plan.annual_visitors / plan.total_sample_size)
    assert plan.max_parallel_experiments == plan.max_experiments
    assert plan.achieved_power == pytest.approx(80, abs=0.5)
    assert plan.false_negative_risk == pytest.approx(100 - plan.achieved_power)
    assert plan.false_positive_risk == pytest.approx(5)
    assert plan.annual_false_positives == pytest.approx(plan.max_experiments * 0.05)


def test_parallel_testing_raises_capacity():
    plan = calculate_max_experiments(10000, 3, 10, parallel_percentage=50)
    assert plan.max_parallel_experiments == math.floor(plan.max_experiments * 1.5)


def test_mde_risk_table():
    plan = calculate_max_experiments(10000, 3, 10)
    assert [row.mde for row in plan.mde_risk] == list(range(1, 31))
    risks = [row.false_negative_risk for row in plan.mde_risk]
    assert all(a >= b for a, b in zip(risks, risks[1:]))
    assert plan.mde_risk[9].false_negative_risk == pytest.approx(plan.false_negative_risk)


def test_z_value_uses_round_values():
    assert z_value(0.975) == 1.96
    assert z_value(1 - 0.05 / 2) == 1.96
    assert z_value(0.99) == pytest.approx(2.326, abs=1e-3)


def test_power_for_effect():
    assert power_for_effect(1.96 + 0.84, 0.05) == pytest.approx(0.7995, abs=1e-3)


@pytest.mark.parametrize(
    "args",
    [
        (0, 3, 10),
        (1000, 0, 10),
        (1000, 3, 0),
        (1000, 95, 10),
    ],
)
def test_invalid_inputs(args):
    with pytest.raises(InvalidInput):
        calculate_max_experiments(*args)
