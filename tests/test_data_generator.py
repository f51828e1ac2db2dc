import random

from abcalc.data_generator import (
    generate_ab_test_demo_data,
    generate_aov_demo_data,
    generate_duration_demo_data,
)
from abcalc.duration import calculate_test_metrics
from abcalc.random_utils import make_rng, seed_from_string
from abcalc.statistics import analyze


def test_ab_demo_data_is_plausible():
    for seed in range(20):
        demo = generate_ab_test_demo_data(seed)
        for arm in (demo.control, demo.variant):
            assert 500 <= arm.participants <= 1000
            assert 0 < arm.conversions <= arm.participants
        assert 0.09 <= demo.control.rate <= 0.21
        # runs through the calculator without validation errors
        analyze(demo)


def test_ab_demo_data_is_reproducible():
    assert generate_ab_test_demo_data("demo") == generate_ab_test_demo_data("demo")


def test_duration_demo_data_feeds_planner():
    for seed in range(20):
        kwargs = generate_duration_demo_data(seed)
        assert 1000 <= kwargs["daily_visitors"] < 10000
        assert 0.01 <= kwargs["conversion_rate"] <= 0.1
        assert 2 <= kwargs["number_of_variations"] < 7
        assert (kwargs["custom_mde"] is not None) == (kwargs["test_objective"] == "custom")
        calculate_test_metrics(**kwargs)


def test_aov_demo_data_returns_copies():
    control, variant = generate_aov_demo_data()
    control.append(1.0)
    assert len(generate_aov_demo_data()[0]) == 10
    assert len(variant) == 10


def test_seed_from_string_is_stable():
    assert seed_from_string("abc") == 96354
    assert seed_from_string("") == 0
    assert seed_from_string("a much longer seed string") >= 0


def test_make_rng():
    existing = random.Random(1)
    assert make_rng(existing) is existing
    assert make_rng("x").random() == make_rng("x").random()
    assert make_rng(3).random() == random.Random(3).random()
