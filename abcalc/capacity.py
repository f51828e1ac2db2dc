"""
How many experiments a site can run in a year.

Inputs follow the capacity form and are all percentages (conversion rate,
MDE, confidence level, power, share of tests run in parallel).
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Dict, List

from .distributions import normal_cdf, normal_quantile
from .errors import InvalidInput

# Round values used on the capacity form; anything else goes through the quantile function.
COMMON_Z = {
    0.975: 1.96,
    0.95: 1.645,
    0.9: 1.28,
    0.8: 0.84,
}


@dataclass(frozen=True)
class MDERisk:
    mde: int
    false_negative_risk: float


@dataclass(frozen=True)
class CapacityPlan:
    sample_size_per_variant: int
    total_sample_size: int
    annual_visitors: float
    max_experiments: int
    max_parallel_experiments: int
    achieved_power: float
    false_positive_risk: float
    false_negative_risk: float
    annual_false_positives: float
    mde_risk: List[MDERisk] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def z_value(probability: float) -> float:
    rounded = round(probability, 10)
    if rounded in COMMON_Z:
        return COMMON_Z[rounded]
    return normal_quantile(probability)


def power_for_effect(standardized_effect: float, alpha: float) -> float:
    return normal_cdf(standardized_effect - z_value(1 - alpha / 2))


def _standardized_effect(p1: float, mde_pct: float, sample_size_per_variant: int) -> float:
    p2 = p1 * (1 + mde_pct / 100)
    p_avg = (p1 + p2) / 2
    return abs(p2 - p1) / math.sqrt(p_avg * (1 - p_avg) * 2 / sample_size_per_variant)


def mde_risk_table(
    sample_size_per_variant: int,
    baseline_rate: float,
    alpha: float,
    max_mde: int = 30,
) -> List[MDERisk]:
    """False-negative risk (%) for MDEs of 1..max_mde percent at a fixed sample size."""
    rows = []
    for mde_pct in range(1, max_mde + 1):
        power = power_for_effect(_standardized_effect(baseline_rate, mde_pct, sample_size_per_variant), alpha)
        rows.append(MDERisk(mde=mde_pct, false_negative_risk=100 - power * 100))
    return rows


def calculate_max_experiments(
    daily_visitors: float,
    conversion_rate: float,
    mde: float,
    confidence_level: float = 95,
    target_power: float = 80,
    parallel_percentage: float = 0,
) -> CapacityPlan:
    if daily_visitors <= 0:
        raise InvalidInput("Daily visitors must be greater than zero.")
    if not (0 < conversion_rate < 100):
        raise InvalidInput("Conversion rate must be between 0 and 100%.")
    if mde <= 0:
        raise InvalidInput("MDE must be greater than zero.")
    if not (0 < confidence_level < 100) or not (0 < target_power < 100):
        raise InvalidInput("Confidence level and power must be between 0 and 100%.")
    if parallel_percentage < 0:
        raise InvalidInput("Parallel percentage cannot be negative.")

    alpha = (100 - confidence_level) / 100
    z_alpha = z_value(1 - alpha / 2)
    z_beta = z_value(target_power / 100)

    p1 = conversion_rate / 100
    p2 = p1 * (1 + mde / 100)
    if p2 >= 1:
        raise InvalidInput("Conversion rate plus MDE must stay below 100%.")
    p_avg = (p1 + p2) / 2

    per_variant = int(math.ceil((z_alpha + z_beta) ** 2 * p_avg * (1 - p_avg) * 2 / (p2 - p1) ** 2))
    total = per_variant * 2
    annual_visitors = daily_visitors * 365
    max_tests = int(math.floor(annual_visitors / total))

    max_parallel = max_tests
    if parallel_percentage > 0:
        max_parallel = int(math.floor(max_tests * (1 + parallel_percentage / 100)))

    achieved = power_for_effect(_standardized_effect(p1, mde, per_variant), alpha)

    return CapacityPlan(
        sample_size_per_variant=per_variant,
        total_sample_size=total,
        annual_visitors=annual_visitors,
        max_experiments=max_tests,
        max_parallel_experiments=max_parallel,
        achieved_power=achieved * 100,
        false_positive_risk=alpha * 100,
        false_negative_risk=100 - achieved * 100,
        annual_false_positives=max_tests * alpha,
        mde_risk=mde_risk_table(per_variant, p1, alpha),
    )
