"""A/B test calculators: frequentist, Bayesian, Mann-Whitney, duration and revenue."""

from .errors import CalculatorError, DomainError, InvalidInput, ValidationError
from .distributions import beta_pdf, chi_square_sf, normal_cdf, normal_pdf, normal_quantile
from .statistics import (
    FrequentistResult,
    ProportionSample,
    TestComparison,
    analyze as analyze_frequentist,
    generate_recommendation,
)
from .bayesian import BayesianResult, BetaPrior, analyze as analyze_bayesian
from .mann_whitney import MannWhitneyResult, compare_aov, mann_whitney_u
from .duration import SampleSizePlan, WeeklyMDE, calculate_test_metrics
from .capacity import CapacityPlan, calculate_max_experiments
from .revenue import RevenueMonthRecord, RevenueProjectionInput, calculate as calculate_revenue, project_revenue
from .data_generator import generate_ab_test_demo_data, generate_duration_demo_data
