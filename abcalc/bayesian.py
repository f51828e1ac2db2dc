"""
Beta-Binomial A/B test.

Both arms share one Beta prior; posteriors are compared by Monte Carlo
(the default, matching the dashboard) or by numerical integration when a
deterministic answer is needed.
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .config import BAYES_DEFAULTS
from .distributions import beta_pdf
from .errors import InvalidInput
from .random_utils import Seed, make_rng
from .statistics import ProportionSample, TestComparison, validate_comparison

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BetaPrior:
    alpha: float = BAYES_DEFAULTS["prior_alpha"]
    beta: float = BAYES_DEFAULTS["prior_beta"]

    @property
    def mean(self) -> float:
        return self.alpha / (self.alpha + self.beta)

    @property
    def variance(self) -> float:
        total = self.alpha + self.beta
        return self.alpha * self.beta / (total * total * (total + 1))

    def sample(self, rng: random.Random) -> float:
        return rng.betavariate(self.alpha, self.beta)

    def to_dict(self) -> Dict[str, float]:
        return {"alpha": self.alpha, "beta": self.beta}


@dataclass(frozen=True)
class PosteriorPair:
    posterior_a: BetaPrior
    posterior_b: BetaPrior


@dataclass(frozen=True)
class BayesianResult:
    probability_b_greater_a: float
    expected_lift: float
    hdi_lower: float
    hdi_upper: float
    posterior_a: BetaPrior
    posterior_b: BetaPrior
    iterations: int = field(default=BAYES_DEFAULTS["iterations"])

    def to_dict(self) -> Dict[str, object]:
        return {
            "probability_b_greater_a": self.probability_b_greater_a,
            "expected_lift": self.expected_lift,
            "hdi_lower": self.hdi_lower,
            "hdi_upper": self.hdi_upper,
            "posterior_a": self.posterior_a.to_dict(),
            "posterior_b": self.posterior_b.to_dict(),
            "iterations": self.iterations,
        }


def validate_prior(prior: BetaPrior) -> None:
    if prior.alpha <= 0 or prior.beta <= 0:
        raise InvalidInput("Prior alpha and beta must both be greater than zero.")


def posterior(prior: BetaPrior, sample: ProportionSample) -> BetaPrior:
    return BetaPrior(
        alpha=prior.alpha + sample.conversions,
        beta=prior.beta + sample.participants - sample.conversions,
    )


def posteriors(comparison: TestComparison, prior: BetaPrior) -> PosteriorPair:
    return PosteriorPair(
        posterior_a=posterior(prior, comparison.control),
        posterior_b=posterior(prior, comparison.variant),
    )


def sample_differences(
    posterior_a: BetaPrior,
    posterior_b: BetaPrior,
    iterations: int,
    rng: random.Random,
) -> List[float]:
    """Draw `iterations` values of (B - A), one fresh pair per draw."""
    if iterations <= 0:
        raise InvalidInput("iterations must be > 0")
    return [posterior_b.sample(rng) - posterior_a.sample(rng) for _ in range(iterations)]


def probability_b_greater_a(
    posterior_a: BetaPrior,
    posterior_b: BetaPrior,
    iterations: int = BAYES_DEFAULTS["iterations"],
    seed: Seed = None,
) -> float:
    """Monte Carlo estimate of P(B > A); standard error is about sqrt(p(1-p)/iterations)."""
    differences = sample_differences(posterior_a, posterior_b, iterations, make_rng(seed))
    return sum(1 for d in differences if d > 0) / iterations


def probability_b_greater_a_numeric(
    posterior_a: BetaPrior,
    posterior_b: BetaPrior,
    steps: int = 4000,
) -> float:
    """Deterministic P(B > A) = integral of f_A(x) * (1 - F_B(x)) dx.

    Midpoint rule on a grid spanning +-12 standard deviations of both
    posteriors, clipped to [0, 1]. Both densities are renormalised on the
    grid so truncation does not bias the result.
    """
    if steps <= 0:
        raise InvalidInput("steps must be > 0")

    spreads = [(p.mean, math.sqrt(p.variance)) for p in (posterior_a, posterior_b)]
    lo = max(0.0, min(m - 12 * s for m, s in spreads))
    hi = min(1.0, max(m + 12 * s for m, s in spreads))
    h = (hi - lo) / steps

    xs = [lo + (i + 0.5) * h for i in range(steps)]
    density_a = [beta_pdf(x, posterior_a.alpha, posterior_a.beta) for x in xs]
    density_b = [beta_pdf(x, posterior_b.alpha, posterior_b.beta) for x in xs]
    total_a = sum(density_a)
    total_b = sum(density_b)
    if total_a <= 0 or total_b <= 0:
        raise InvalidInput(
            "A posterior is too narrow for the integration grid; increase steps or use the Monte Carlo estimate"
        )

    prob = 0.0
    cdf_b = 0.0
    for fa, fb in zip(density_a, density_b):
        # F_B at the cell midpoint: everything to the left plus half this cell.
        below = (cdf_b + 0.5 * fb) / total_b
        prob += fa * (1.0 - below)
        cdf_b += fb
    return min(1.0, max(0.0, prob / total_a))


def expected_lift(posterior_a: BetaPrior, posterior_b: BetaPrior) -> float:
    return posterior_b.mean / posterior_a.mean - 1


def credible_interval(sorted_differences: List[float], percentile: float) -> float:
    """Order statistic at floor(percentile * N) of the sorted (B - A) draws.

    This is an equal-tailed percentile bound, reported under the HDI name.
    """
    if not sorted_differences:
        raise InvalidInput("No samples to take a percentile from")
    if not (0.0 <= percentile <= 1.0):
        raise InvalidInput("percentile must be in [0, 1]")
    index = min(int(math.floor(percentile * len(sorted_differences))), len(sorted_differences) - 1)
    return sorted_differences[index]


def analyze(
    comparison: TestComparison,
    prior: Optional[BetaPrior] = None,
    iterations: Optional[int] = None,
    seed: Seed = None,
) -> BayesianResult:
    """Posterior comparison of the two arms.

    A single set of `iterations` paired draws feeds both P(B > A) and the
    interval bounds. Pass `seed` (int, str or random.Random) for
    reproducible output.
    """
    prior = prior or BetaPrior()
    if iterations is None:
        iterations = BAYES_DEFAULTS["iterations"]
    validate_comparison(comparison)
    validate_prior(prior)

    pair = posteriors(comparison, prior)
    rng = make_rng(seed)
    differences = sample_differences(pair.posterior_a, pair.posterior_b, iterations, rng)
    prob = sum(1 for d in differences if d > 0) / iterations
    differences.sort()

    result = BayesianResult(
        probability_b_greater_a=prob,
        expected_lift=expected_lift(pair.posterior_a, pair.posterior_b),
        hdi_lower=credible_interval(differences, BAYES_DEFAULTS["interval_lower"]),
        hdi_upper=credible_interval(differences, BAYES_DEFAULTS["interval_upper"]),
        posterior_a=pair.posterior_a,
        posterior_b=pair.posterior_b,
        iterations=iterations,
    )
    logger.debug(
        "Bayesian test with %d draws: P(B>A)=%.4f interval=[%.5f, %.5f]",
        iterations,
        prob,
        result.hdi_lower,
        result.hdi_upper,
    )
    return result


def posterior_density_curve(dist: BetaPrior, step: float = 0.01) -> List[Tuple[float, float]]:
    """(x, density) pairs on [0, 1) for charting; points with infinite density are skipped."""
    points = []
    for i in range(int(round(1 / step))):
        x = i * step
        y = beta_pdf(x, dist.alpha, dist.beta)
        if math.isfinite(y):
            points.append((x, y))
    return points


def generate_recommendation(
    result: BayesianResult,
    strong_evidence: float = BAYES_DEFAULTS["strong_evidence"],
) -> str:
    prob = result.probability_b_greater_a
    interval = f"[{result.hdi_lower * 100:.2f}%, {result.hdi_upper * 100:.2f}%]"
    lift_pct = result.expected_lift * 100

    if prob > strong_evidence:
        return (
            f"There is strong evidence ({prob * 100:.2f}% probability) that Variation B outperforms "
            f"Variation A. The expected lift is {lift_pct:.2f}%, with a 95% HDI of {interval}."
        )
    if prob < 1 - strong_evidence:
        return (
            f"There is strong evidence ({(1 - prob) * 100:.2f}% probability) that Variation A "
            f"outperforms Variation B. The expected lift for B is {lift_pct:.2f}%, with a 95% HDI "
            f"of {interval}."
        )
    return (
        f"The results are inconclusive. There is a {prob * 100:.2f}% probability that Variation B "
        f"outperforms Variation A. The expected lift is {lift_pct:.2f}%, with a 95% HDI of "
        f"{interval}. Consider running the test for longer or with a larger sample size."
    )
