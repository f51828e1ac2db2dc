from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Dict, List, Literal, Optional, Sequence, Union

import pandas as pd

from .config import PLANNER_DEFAULTS
from .errors import InvalidInput

logger = logging.getLogger(__name__)

TestObjective = Literal["derisk", "increase", "decrease", "custom", "unknown"]

TEST_OBJECTIVES: Sequence[str] = ("derisk", "increase", "decrease", "custom", "unknown")

# Only these levels are offered in the planner, so they are looked up, not computed.
Z_SIGNIFICANCE: Dict[float, float] = {
    0.9: 1.645,
    0.95: 1.96,
    0.99: 2.576,
}

Z_POWER: Dict[float, float] = {
    0.8: 0.84,
    0.85: 1.04,
    0.9: 1.28,
}


@dataclass(frozen=True)
class SampleSizePlan:
    sample_size_per_variation: int
    total_sample_size: int
    duration_in_days: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class WeeklyMDE:
    week: int
    mde: float  # percent of the baseline conversion rate
    visitors_per_variant: int

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


CalculationResult = Union[SampleSizePlan, List[WeeklyMDE]]


def lookup_z_values(significance_level: float, statistical_power: float) -> tuple:
    try:
        z_alpha = Z_SIGNIFICANCE[significance_level]
    except KeyError:
        raise InvalidInput(
            f"Unsupported significance level {significance_level}; "
            f"choose one of {sorted(Z_SIGNIFICANCE)}"
        ) from None
    try:
        z_beta = Z_POWER[statistical_power]
    except KeyError:
        raise InvalidInput(
            f"Unsupported statistical power {statistical_power}; choose one of {sorted(Z_POWER)}"
        ) from None
    return z_alpha, z_beta


def effect_size(
    test_objective: str,
    conversion_rate: float,
    custom_mde: Optional[float] = None,
) -> float:
    """Absolute difference in conversion rate the test should be able to detect."""
    if test_objective == "derisk":
        return PLANNER_DEFAULTS["derisk_delta"]
    if test_objective == "increase":
        return 0.1 * conversion_rate
    if test_objective == "decrease":
        return 0.05 * conversion_rate
    if test_objective == "custom":
        return (custom_mde or PLANNER_DEFAULTS["custom_mde"]) * conversion_rate
    raise InvalidInput(f"Invalid test objective: {test_objective!r}")


def calculate_weekly_mde(
    daily_visitors: float,
    conversion_rate: float,
    z_alpha: float,
    z_beta: float,
    number_of_variations: int,
    weeks: int = PLANNER_DEFAULTS["weeks"],
) -> List[WeeklyMDE]:
    """Smallest detectable relative effect after each of the first `weeks` weeks."""
    results: List[WeeklyMDE] = []
    variance_term = 2 * (z_alpha + z_beta) ** 2 * conversion_rate * (1 - conversion_rate)

    for week in range(1, weeks + 1):
        visitors_per_variant = int(math.floor(week * 7 * daily_visitors / number_of_variations))
        if visitors_per_variant <= 0:
            raise InvalidInput(
                f"Not enough daily visitors to fill {number_of_variations} variations in week {week}"
            )
        mde = math.sqrt(variance_term / visitors_per_variant)
        results.append(
            WeeklyMDE(
                week=week,
                mde=mde / conversion_rate * 100,
                visitors_per_variant=visitors_per_variant,
            )
        )
    return results


def calculate_test_metrics(
    daily_visitors: float,
    conversion_rate: float,
    test_objective: TestObjective,
    custom_mde: Optional[float] = None,
    significance_level: float = PLANNER_DEFAULTS["significance_level"],
    statistical_power: float = PLANNER_DEFAULTS["statistical_power"],
    number_of_variations: int = PLANNER_DEFAULTS["number_of_variations"],
) -> CalculationResult:
    """Sample size and duration for a test, or a weekly MDE table when the MDE is unknown.

    conversion_rate is a fraction (0.025 for 2.5%); custom_mde is relative
    (0.1 for a 10% lift).
    """
    if daily_visitors <= 0:
        raise InvalidInput("Daily visitors must be greater than zero.")
    if not (0 < conversion_rate < 1):
        raise InvalidInput("Conversion rate must be between 0 and 1.")
    if number_of_variations < 2:
        raise InvalidInput("A test needs at least two variations.")
    if test_objective not in TEST_OBJECTIVES:
        raise InvalidInput(f"Invalid test objective: {test_objective!r}")
    if custom_mde is not None and custom_mde < 0:
        raise InvalidInput("Custom MDE cannot be negative.")

    z_alpha, z_beta = lookup_z_values(significance_level, statistical_power)

    if test_objective == "unknown":
        return calculate_weekly_mde(daily_visitors, conversion_rate, z_alpha, z_beta, number_of_variations)

    delta = effect_size(test_objective, conversion_rate, custom_mde)
    sample_size_per_variation = int(
        math.ceil((z_alpha + z_beta) ** 2 * 2 * conversion_rate * (1 - conversion_rate) / delta ** 2)
    )
    total_sample_size = sample_size_per_variation * number_of_variations
    duration_in_days = int(math.ceil(total_sample_size / daily_visitors))

    logger.debug(
        "Planner objective=%s delta=%.6f -> %d per variation, %d days",
        test_objective,
        delta,
        sample_size_per_variation,
        duration_in_days,
    )
    return SampleSizePlan(
        sample_size_per_variation=sample_size_per_variation,
        total_sample_size=total_sample_size,
        duration_in_days=duration_in_days,
    )


def weekly_mde_frame(rows: List[WeeklyMDE]) -> pd.DataFrame:
    cols = ["week", "mde", "visitors_per_variant"]
    if not rows:
        return pd.DataFrame(columns=cols)
    return pd.DataFrame([r.to_dict() for r in rows])[cols]
