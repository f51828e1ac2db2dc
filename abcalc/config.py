"""
Default parameters for the calculators.

Values here are the defaults the dashboard starts from; every function also
accepts them as explicit arguments.
"""
from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


def env_int(name: str, default: int) -> int:
    """Positive integer from the environment; a bad value logs a warning and keeps the default."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be > 0, using %d", name, raw, default)
        return default
    return value


STATS_DEFAULTS = {
    "alpha": 0.05,                  # two-sided significance level
    "power": 0.8,                   # target power for required sample size
    "significance_threshold": 0.95, # confidence needed to call a winner
    "srm_alpha": 0.05,              # sample ratio mismatch threshold
    "observed_power_z": 1.96,
}

BAYES_DEFAULTS = {
    "iterations": env_int("ABCALC_MC_ITERATIONS", 100000),
    "prior_alpha": 1.0,
    "prior_beta": 1.0,
    "interval_lower": 0.025,
    "interval_upper": 0.975,
    "strong_evidence": 0.95,
}

PLANNER_DEFAULTS = {
    "weeks": 12,
    "custom_mde": 0.10,
    "derisk_delta": 0.001,
    "significance_level": 0.95,
    "statistical_power": 0.8,
    "number_of_variations": 2,
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for an entry point (the library itself never does)."""
    level_name = (level or os.environ.get("ABCALC_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
