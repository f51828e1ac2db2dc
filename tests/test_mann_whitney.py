import math

import pytest

from abcalc.data_generator import AOV_DEMO_CONTROL, AOV_DEMO_VARIANT
from abcalc.errors import InvalidInput
from abcalc.mann_whitney import average_ranks, compare_aov, mann_whitney_u


def test_average_ranks_share_ties():
    assert average_ranks([3, 1, 2, 2]) == {1: 1.0, 2: 2.5, 3: 4.0}
    assert average_ranks([5, 5, 5]) == {5: 2.0}


def test_demo_aov_groups():
    res = mann_whitney_u(AOV_DEMO_CONTROL, AOV_DEMO_VARIANT)
    std_dev_u = math.sqrt(10 * 10 * 21 / 12)

    # 60..95 appear in both groups and take average ranks
    assert res.u1 == pytest.approx(32.0)
    assert res.u2 == pytest.approx(68.0)
    assert res.u == pytest.approx(32.0)
    assert res.z == pytest.approx((32 - 50) / std_dev_u)
    assert res.critical_u == pytest.approx(50 - 1.959964 * std_dev_u, abs=1e-3)
    assert res.p == pytest.approx(0.1736, abs=1e-3)
    assert res.significant is False


def test_u_values_sum_to_product_of_sizes():
    group1 = [12.5, 40.0, 40.0, 7.25, 99.0, 13.0]
    group2 = [40.0, 8.0, 61.5, 13.0]
    res = mann_whitney_u(group1, group2)
    assert res.u1 + res.u2 == pytest.approx(len(group1) * len(group2))


def test_separated_groups_are_significant():
    res = mann_whitney_u(list(range(1, 11)), list(range(11, 21)))
    assert res.u == 0
    assert res.p < 0.001
    assert res.significant is True


def test_is_deterministic():
    assert mann_whitney_u([3, 1, 4, 1, 5], [9, 2, 6]) == mann_whitney_u([3, 1, 4, 1, 5], [9, 2, 6])


@pytest.mark.parametrize("group1, group2", [([], [1.0]), ([1.0], [])])
def test_empty_group(group1, group2):
    with pytest.raises(InvalidInput):
        mann_whitney_u(group1, group2)


def test_compare_aov_summary():
    res = compare_aov(AOV_DEMO_CONTROL, AOV_DEMO_VARIANT)
    assert res.control_mean == pytest.approx(72.5)
    assert res.variant_mean == pytest.approx(82.5)
    assert res.percent_difference == pytest.approx(10 / 72.5 * 100)

    out = res.to_dict()
    assert out["u"] == pytest.approx(32.0)
    assert out["significant"] is False
