"""
Twelve-month revenue projection for a winning variation.

Takes the JSON-style record the revenue form posts (camelCase keys),
adjusts traffic and conversion rate per month for seasonality, applies the
uplift and a three-tier decay, and accumulates incremental revenue in
calendar order.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from .errors import ValidationError

logger = logging.getLogger(__name__)

MONTHS: Sequence[str] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

REQUIRED_FIELDS: Sequence[str] = (
    "monthlyTraffic",
    "conversionRate",
    "aov",
    "upliftPercentage",
    "trafficAdjustments",
    "monthlyConversionRates",
    "decay",
)

DECAY_FIELDS: Sequence[str] = ("threeMonths", "sixMonths", "twelveMonths")

HORIZONS = {"threeMonths": 3, "sixMonths": 6, "twelveMonths": 12}


@dataclass(frozen=True)
class Decay:
    """Percent of the uplift lost in months 1-3, 4-6 and 7-12."""

    three_months: float = 0.0
    six_months: float = 0.0
    twelve_months: float = 0.0

    def factor(self, month_index: int) -> float:
        if month_index < 3:
            return 1 - self.three_months / 100
        if month_index < 6:
            return 1 - self.six_months / 100
        return 1 - self.twelve_months / 100


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"Field {name} must be a number", field=name)
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Field {name} must be a number", field=name) from exc


def _month_numbers(values: Mapping[str, Any], name: str) -> Dict[str, float]:
    # Null months are dropped and behave like an absent override.
    return {month: _number(v, f"{name}.{month}") for month, v in values.items() if v is not None}


@dataclass(frozen=True)
class RevenueProjectionInput:
    monthly_traffic: float
    conversion_rate: float  # percent
    aov: float
    uplift_percentage: float
    traffic_adjustments: Mapping[str, float] = field(default_factory=dict)
    monthly_conversion_rates: Mapping[str, float] = field(default_factory=dict)
    decay: Decay = field(default_factory=Decay)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "RevenueProjectionInput":
        """Validate and convert the posted record; nothing is computed on failure."""
        if not data:
            raise ValidationError("No data provided")
        # A JSON null counts as missing.
        for name in REQUIRED_FIELDS:
            if data.get(name) is None:
                raise ValidationError(f"Missing required field: {name}", field=name)

        decay = data["decay"]
        if not isinstance(decay, Mapping):
            raise ValidationError("Field decay must be an object", field="decay")
        for name in DECAY_FIELDS:
            if decay.get(name) is None:
                raise ValidationError(f"Missing required field: decay.{name}", field=f"decay.{name}")

        for name in ("trafficAdjustments", "monthlyConversionRates"):
            if not isinstance(data[name], Mapping):
                raise ValidationError(f"Field {name} must be an object keyed by month", field=name)

        return cls(
            monthly_traffic=_number(data["monthlyTraffic"], "monthlyTraffic"),
            conversion_rate=_number(data["conversionRate"], "conversionRate"),
            aov=_number(data["aov"], "aov"),
            uplift_percentage=_number(data["upliftPercentage"], "upliftPercentage"),
            traffic_adjustments=_month_numbers(data["trafficAdjustments"], "trafficAdjustments"),
            monthly_conversion_rates=_month_numbers(data["monthlyConversionRates"], "monthlyConversionRates"),
            decay=Decay(
                three_months=_number(decay["threeMonths"], "decay.threeMonths"),
                six_months=_number(decay["sixMonths"], "decay.sixMonths"),
                twelve_months=_number(decay["twelveMonths"], "decay.twelveMonths"),
            ),
        )

    def adjusted_traffic(self, month: str) -> float:
        return self.monthly_traffic * (1 + (self.traffic_adjustments.get(month) or 0) / 100)

    def month_conversion_rate(self, month: str) -> float:
        # A blank or zero monthly override falls back to the baseline rate.
        return self.monthly_conversion_rates.get(month) or self.conversion_rate


@dataclass(frozen=True)
class RevenueMonthRecord:
    month: str
    adjusted_traffic: float
    conversion_rate: float
    incremental_conversions: float
    incremental_revenue: float
    cumulative_revenue: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "adjustedTraffic": self.adjusted_traffic,
            "conversionRate": self.conversion_rate,
            "incrementalConversions": self.incremental_conversions,
            "incrementalRevenue": self.incremental_revenue,
            "cumulativeRevenue": self.cumulative_revenue,
        }


def project_revenue(inputs: RevenueProjectionInput) -> List[RevenueMonthRecord]:
    """Month-by-month projection, January to December."""
    records: List[RevenueMonthRecord] = []
    cumulative = 0.0
    for index, month in enumerate(MONTHS):
        traffic = inputs.adjusted_traffic(month)
        rate = inputs.month_conversion_rate(month)
        baseline_conversions = traffic * (rate / 100)
        uplifted_conversions = baseline_conversions * (1 + inputs.uplift_percentage / 100)
        incremental_conversions = uplifted_conversions - baseline_conversions

        incremental = incremental_conversions * inputs.aov * inputs.decay.factor(index)
        cumulative += incremental

        records.append(
            RevenueMonthRecord(
                month=month,
                adjusted_traffic=traffic,
                conversion_rate=rate,
                incremental_conversions=incremental_conversions,
                incremental_revenue=incremental,
                cumulative_revenue=cumulative,
            )
        )
    return records


def incremental_revenue(records: Sequence[RevenueMonthRecord], months: int) -> float:
    return sum(r.incremental_revenue for r in records[:months])


def incremental_conversions(records: Sequence[RevenueMonthRecord], months: int) -> float:
    return sum(r.incremental_conversions for r in records[:months])


def adjusted_traffic(inputs: RevenueProjectionInput) -> List[Dict[str, Any]]:
    return [
        {"month": month, "baseline": inputs.monthly_traffic, "adjusted": inputs.adjusted_traffic(month)}
        for month in MONTHS
    ]


def calculate(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Full response for the revenue form, as plain JSON-serialisable data."""
    inputs = RevenueProjectionInput.from_dict(payload)
    records = project_revenue(inputs)

    result = {
        "incrementalRevenue": {k: incremental_revenue(records, n) for k, n in HORIZONS.items()},
        "incrementalConversions": {k: incremental_conversions(records, n) for k, n in HORIZONS.items()},
        "adjustedTraffic": adjusted_traffic(inputs),
        "revenueOverTime": [r.to_dict() for r in records],
    }
    logger.info(
        "Projected incremental revenue: 3m=%.2f 6m=%.2f 12m=%.2f",
        result["incrementalRevenue"]["threeMonths"],
        result["incrementalRevenue"]["sixMonths"],
        result["incrementalRevenue"]["twelveMonths"],
    )
    return result


def revenue_frame(records: Sequence[RevenueMonthRecord]) -> pd.DataFrame:
    cols = [
        "month",
        "adjusted_traffic",
        "conversion_rate",
        "incremental_conversions",
        "incremental_revenue",
        "cumulative_revenue",
    ]
    if not records:
        return pd.DataFrame(columns=cols)
    return pd.DataFrame([asdict(r) for r in records])[cols]
