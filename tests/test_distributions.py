import math

import pytest

from abcalc.distributions import (
    beta_pdf,
    chi_square_sf,
    normal_cdf,
    normal_distribution_curve,
    normal_pdf,
    normal_quantile,
)
from abcalc.errors import DomainError


def test_normal_cdf_known_values():
    assert normal_cdf(0) == pytest.approx(0.5)
    assert normal_cdf(1.96) == pytest.approx(0.9750021, abs=1e-6)
    assert normal_cdf(-1.0) == pytest.approx(0.1586553, abs=1e-6)


def test_normal_cdf_saturates_outside_practical_range():
    assert normal_cdf(9) == 1.0
    assert normal_cdf(-9) == 0.0
    assert normal_cdf(math.inf) == 1.0


def test_normal_quantile_matches_textbook_values():
    assert normal_quantile(0.975) == pytest.approx(1.959964, abs=1e-4)
    assert normal_quantile(0.8) == pytest.approx(0.841621, abs=1e-4)
    assert normal_quantile(0.01) == pytest.approx(-2.326348, abs=1e-4)
    assert normal_quantile(0.995) == pytest.approx(2.575829, abs=1e-4)
    assert normal_quantile(0.5) == pytest.approx(0.0, abs=1e-12)


def test_normal_quantile_inverts_cdf():
    for p in (0.001, 0.2, 0.6, 0.999):
        assert normal_cdf(normal_quantile(p)) == pytest.approx(p, abs=1e-6)


@pytest.mark.parametrize("p", [0.0, 1.0, -0.1, 1.5])
def test_normal_quantile_rejects_out_of_domain(p):
    with pytest.raises(DomainError):
        normal_quantile(p)


def test_domain_error_is_a_value_error():
    with pytest.raises(ValueError):
        normal_quantile(0)


def test_normal_pdf():
    assert normal_pdf(0) == pytest.approx(1 / math.sqrt(2 * math.pi))
    assert normal_pdf(12, mean=10, std_dev=2) == pytest.approx(normal_pdf(1) / 2)
    with pytest.raises(DomainError):
        normal_pdf(0, std_dev=0)


def test_beta_pdf_values():
    assert beta_pdf(0.5, 1, 1) == pytest.approx(1.0)
    assert beta_pdf(0.5, 2, 2) == pytest.approx(1.5)
    assert beta_pdf(0.25, 2, 1) == pytest.approx(0.5)


def test_beta_pdf_edges():
    assert beta_pdf(0.0, 1, 3) == pytest.approx(3.0)
    assert beta_pdf(0.0, 2, 2) == 0.0
    assert beta_pdf(1.0, 2, 2) == 0.0
    assert math.isinf(beta_pdf(0.0, 0.5, 0.5))


@pytest.mark.parametrize(
    "x, alpha, beta",
    [(0.5, 0, 1), (0.5, 1, -1), (1.5, 1, 1), (-0.01, 2, 2)],
)
def test_beta_pdf_rejects_invalid_arguments(x, alpha, beta):
    with pytest.raises(DomainError):
        beta_pdf(x, alpha, beta)


def test_chi_square_sf_one_degree_of_freedom():
    assert chi_square_sf(0) == pytest.approx(1.0)
    assert chi_square_sf(3.841458820694124) == pytest.approx(0.05, abs=1e-7)
    with pytest.raises(DomainError):
        chi_square_sf(1.0, df=2)
    with pytest.raises(DomainError):
        chi_square_sf(-1.0)


def test_normal_distribution_curve_spans_range():
    curve = normal_distribution_curve(0.1, 0.01, 0.06, 0.14, 100)
    assert len(curve) == 101
    assert curve[0][0] == pytest.approx(0.06)
    assert curve[-1][0] == pytest.approx(0.14)
    peak = max(curve, key=lambda point: point[1])
    assert peak[0] == pytest.approx(0.1)
