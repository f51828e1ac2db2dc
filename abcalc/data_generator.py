from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .duration import TEST_OBJECTIVES
from .random_utils import Seed, make_rng
from .statistics import TestComparison

AOV_DEMO_CONTROL: List[float] = [50, 55, 60, 65, 70, 75, 80, 85, 90, 95]
AOV_DEMO_VARIANT: List[float] = [60, 65, 70, 75, 80, 85, 90, 95, 100, 105]


def generate_ab_test_demo_data(seed: Seed = None) -> TestComparison:
    """Random but plausible A/B counts for the calculator's demo button.

    - 500-1000 participants per arm.
    - Control converts at 10-20%, the variant 5-15% better.
    """
    rng = make_rng(seed)

    participants_a = rng.randint(500, 1000)
    participants_b = rng.randint(500, 1000)

    rate_a = rng.randint(10, 20) / 100
    rate_b = rate_a * (1 + rng.randint(5, 15) / 100)

    return TestComparison.from_counts(
        participants_a,
        round(participants_a * rate_a),
        participants_b,
        round(participants_b * rate_b),
    )


def generate_duration_demo_data(seed: Seed = None) -> Dict[str, Any]:
    """Keyword arguments for duration.calculate_test_metrics."""
    rng = make_rng(seed)
    objective = TEST_OBJECTIVES[int(rng.random() * len(TEST_OBJECTIVES))]

    return {
        "daily_visitors": int(rng.random() * (10000 - 1000) + 1000),
        "conversion_rate": round(rng.random() * (10 - 1) + 1, 2) / 100,
        "number_of_variations": int(rng.random() * (7 - 2) + 2),
        "test_objective": objective,
        "custom_mde": round(rng.random() * (20 - 1) + 1, 2) / 100 if objective == "custom" else None,
    }


def generate_aov_demo_data() -> Tuple[List[float], List[float]]:
    return list(AOV_DEMO_CONTROL), list(AOV_DEMO_VARIANT)
