from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Dict, List, Union

from .config import STATS_DEFAULTS
from .distributions import chi_square_sf, normal_cdf, normal_distribution_curve, normal_quantile
from .errors import InvalidInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProportionSample:
    participants: int
    conversions: int

    @property
    def rate(self) -> float:
        return conversion_rate(self.conversions, self.participants)


@dataclass(frozen=True)
class TestComparison:
    __test__ = False

    control: ProportionSample
    variant: ProportionSample

    @classmethod
    def from_counts(
        cls,
        participants_a: int,
        conversions_a: int,
        participants_b: int,
        conversions_b: int,
    ) -> "TestComparison":
        return cls(
            control=ProportionSample(participants_a, conversions_a),
            variant=ProportionSample(participants_b, conversions_b),
        )


@dataclass(frozen=True)
class FrequentistResult:
    rate_a: float
    rate_b: float
    z_score: float
    confidence: float
    p_value: float
    lift: float
    standard_error_a: float
    standard_error_b: float
    required_sample_size: Union[int, float]
    observed_power: float
    srm_p_value: float

    @property
    def srm_detected(self) -> bool:
        return self.srm_p_value < STATS_DEFAULTS["srm_alpha"]

    def to_dict(self) -> Dict[str, object]:
        out = asdict(self)
        if math.isinf(self.required_sample_size):
            out["required_sample_size"] = None
        return out


def validate_sample(sample: ProportionSample, label: str) -> None:
    if sample.participants <= 0:
        raise InvalidInput(f"Number of participants in {label} must be greater than zero.")
    if sample.conversions < 0:
        raise InvalidInput(f"Number of conversions in {label} cannot be negative.")
    if sample.conversions > sample.participants:
        raise InvalidInput(
            f"Number of conversions in {label} cannot be greater than the number of participants."
        )


def validate_comparison(comparison: TestComparison) -> None:
    validate_sample(comparison.control, "variation A")
    validate_sample(comparison.variant, "variation B")


def conversion_rate(conversions: int, participants: int) -> float:
    if participants <= 0:
        raise InvalidInput("participants must be > 0")
    return conversions / participants


def z_score(rate_a: float, rate_b: float, n_a: int, n_b: int) -> float:
    """Pooled two-proportion z statistic; 0.0 when the pooled variance is zero."""
    pooled = (rate_a * n_a + rate_b * n_b) / (n_a + n_b)
    variance = pooled * (1 - pooled) * (1 / n_a + 1 / n_b)
    if variance == 0:
        logger.warning("Pooled variance is zero (pooled rate %.4f); reporting z = 0", pooled)
        return 0.0
    return (rate_b - rate_a) / math.sqrt(variance)


def p_value(z: float) -> float:
    return 2 * (1 - normal_cdf(abs(z)))


def confidence(z: float) -> float:
    return 1 - p_value(z)


def lift(rate_a: float, rate_b: float) -> float:
    """Relative change of B over A.

    Undefined for a zero baseline rate, which is reported as InvalidInput
    rather than an infinite lift.
    """
    if rate_a == 0:
        raise InvalidInput("Lift is undefined when variation A has a conversion rate of zero.")
    return (rate_b - rate_a) / rate_a


def standard_error(rate: float, n: int) -> float:
    if n <= 0:
        raise InvalidInput("n must be > 0")
    return math.sqrt(rate * (1 - rate) / n)


def required_sample_size(
    rate_a: float,
    rate_b: float,
    power: float = STATS_DEFAULTS["power"],
    alpha: float = STATS_DEFAULTS["alpha"],
) -> Union[int, float]:
    """Per-group sample size to detect rate_a -> rate_b; math.inf when they are equal."""
    if rate_a == rate_b:
        return math.inf

    z_alpha = normal_quantile(1 - alpha / 2)
    z_beta = normal_quantile(power)
    p = (rate_a + rate_b) / 2
    q = 1 - p
    return int(math.ceil(((z_alpha + z_beta) ** 2 * p * q * 2) / (rate_a - rate_b) ** 2))


def observed_power(z: float) -> float:
    """Approximate post-hoc power at the fixed 1.96 threshold (not alpha-aware)."""
    return 1 - normal_cdf(STATS_DEFAULTS["observed_power_z"] - abs(z))


def srm_p_value(participants_a: int, participants_b: int) -> float:
    """Chi-square goodness-of-fit p-value against an expected 50/50 split."""
    total = participants_a + participants_b
    if total <= 0:
        raise InvalidInput("Total participants must be > 0")

    expected_ratio = 0.5
    observed_a = participants_a / total
    observed_b = participants_b / total
    chi_squared = total * (
        (observed_a - expected_ratio) ** 2 / expected_ratio
        + (observed_b - expected_ratio) ** 2 / expected_ratio
    )
    return chi_square_sf(chi_squared, 1)


def analyze(
    comparison: TestComparison,
    power: float = STATS_DEFAULTS["power"],
    alpha: float = STATS_DEFAULTS["alpha"],
) -> FrequentistResult:
    """Two-proportion z-test with lift, standard errors, power and SRM check."""
    validate_comparison(comparison)
    a, b = comparison.control, comparison.variant

    rate_a = a.rate
    rate_b = b.rate
    z = z_score(rate_a, rate_b, a.participants, b.participants)
    srm = srm_p_value(a.participants, b.participants)

    result = FrequentistResult(
        rate_a=rate_a,
        rate_b=rate_b,
        z_score=z,
        confidence=confidence(z),
        p_value=p_value(z),
        lift=lift(rate_a, rate_b),
        standard_error_a=standard_error(rate_a, a.participants),
        standard_error_b=standard_error(rate_b, b.participants),
        required_sample_size=required_sample_size(rate_a, rate_b, power=power, alpha=alpha),
        observed_power=observed_power(z),
        srm_p_value=srm,
    )

    logger.debug("Frequentist test %s -> z=%.4f p=%.4f", comparison, z, result.p_value)
    if result.srm_detected:
        logger.warning(
            "Sample ratio mismatch detected (p = %.6f, split %d/%d)",
            srm,
            a.participants,
            b.participants,
        )
    return result


def conversion_rate_curves(result: FrequentistResult, steps: int = 100) -> Dict[str, List[List[float]]]:
    """Normal approximations of both rates (+-4 SE) and of the lift (+-8 combined SE).

    Arms with zero standard error (rate of exactly 0 or 1) get an empty curve.
    """
    def curve(mean: float, se: float, width: float) -> List[List[float]]:
        if se <= 0:
            return []
        return normal_distribution_curve(mean, se, mean - width * se, mean + width * se, steps)

    combined_se = math.sqrt(result.standard_error_a ** 2 + result.standard_error_b ** 2)
    return {
        "distribution_a": curve(result.rate_a, result.standard_error_a, 4),
        "distribution_b": curve(result.rate_b, result.standard_error_b, 4),
        "improvement": curve(result.lift, combined_se, 8),
    }


def generate_recommendation(
    result: FrequentistResult,
    threshold: float = STATS_DEFAULTS["significance_threshold"],
) -> str:
    conf_pct = result.confidence * 100
    lift_pct = result.lift * 100

    if result.confidence <= threshold:
        return (
            f"You cannot make a conclusive decision. The {conf_pct:.2f}% confidence level does not "
            f"meet the typical {threshold * 100:.0f}% threshold for statistical significance. This "
            f"means we can't rule out that the observed difference of {lift_pct:.2f}% might be due "
            "to random variation."
        )

    if result.lift > 0:
        return (
            f"You can deploy variation B with confidence. The {conf_pct:.2f}% confidence level "
            f"indicates strong evidence that the observed improvement of {lift_pct:.2f}% is not due "
            f"to random chance. This surpasses the common threshold of {threshold * 100:.0f}% "
            "confidence used in A/B testing."
        )

    return (
        f"You should NOT deploy variation B. The {conf_pct:.2f}% confidence level indicates strong "
        f"evidence that variation B performs worse than A, with a decrease of {lift_pct:.2f}%. "
        "This negative impact is statistically significant."
    )
