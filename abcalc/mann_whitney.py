from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Dict, List, Sequence

from .distributions import normal_cdf, normal_quantile
from .errors import InvalidInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MannWhitneyResult:
    u: float
    critical_u: float
    z: float
    p: float
    significant: bool
    u1: float
    u2: float

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class AOVComparison:
    control_mean: float
    variant_mean: float
    percent_difference: float
    test: MannWhitneyResult

    def to_dict(self) -> Dict[str, object]:
        out = {
            "control_mean": self.control_mean,
            "variant_mean": self.variant_mean,
            "percent_difference": self.percent_difference,
        }
        out.update(self.test.to_dict())
        return out


def average_ranks(values: Sequence[float]) -> Dict[float, float]:
    """Map each distinct value to its rank in the sorted data (ties share the mean rank)."""
    ordered = sorted(values)
    ranks: Dict[float, float] = {}
    i = 0
    while i < len(ordered):
        j = i
        while j + 1 < len(ordered) and ordered[j + 1] == ordered[i]:
            j += 1
        # positions i..j (0-based) hold ranks i+1..j+1
        ranks[ordered[i]] = (i + 1 + j + 1) / 2
        i = j + 1
    return ranks


def mann_whitney_u(group1: Sequence[float], group2: Sequence[float]) -> MannWhitneyResult:
    """Two-sided Mann-Whitney U test using the normal approximation.

    The variance of U is not corrected for ties, so p and critical_u drift
    from the exact test when many values are tied.
    """
    n1 = len(group1)
    n2 = len(group2)
    if n1 == 0 or n2 == 0:
        raise InvalidInput("Both groups must have at least one value.")

    ranks = average_ranks(list(group1) + list(group2))
    rank_sum1 = sum(ranks[v] for v in group1)
    rank_sum2 = sum(ranks[v] for v in group2)

    u1 = rank_sum1 - n1 * (n1 + 1) / 2
    u2 = rank_sum2 - n2 * (n2 + 1) / 2
    u = min(u1, u2)

    mean_u = n1 * n2 / 2
    std_dev_u = math.sqrt(n1 * n2 * (n1 + n2 + 1) / 12)
    z = (u - mean_u) / std_dev_u
    p = 2 * (1 - normal_cdf(abs(z)))

    critical_z = normal_quantile(0.975)
    critical_u = mean_u - critical_z * std_dev_u

    logger.debug("Mann-Whitney n1=%d n2=%d U=%.1f z=%.4f p=%.4f", n1, n2, u, z, p)
    return MannWhitneyResult(
        u=u,
        critical_u=critical_u,
        z=z,
        p=p,
        significant=u <= critical_u,
        u1=u1,
        u2=u2,
    )


def compare_aov(control: List[float], variant: List[float]) -> AOVComparison:
    """Average order values of both groups plus the rank test between them."""
    test = mann_whitney_u(control, variant)
    control_mean = sum(control) / len(control)
    variant_mean = sum(variant) / len(variant)
    if control_mean == 0:
        raise InvalidInput("Control group mean is zero; percent difference is undefined.")
    return AOVComparison(
        control_mean=control_mean,
        variant_mean=variant_mean,
        percent_difference=(variant_mean - control_mean) / control_mean * 100,
        test=test,
    )
