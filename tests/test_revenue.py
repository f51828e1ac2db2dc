import json

import pytest

from abcalc.errors import CalculatorError, ValidationError
from abcalc.revenue import (
    MONTHS,
    RevenueProjectionInput,
    adjusted_traffic,
    calculate,
    incremental_conversions,
    incremental_revenue,
    project_revenue,
    revenue_frame,
)


def make_payload(**overrides):
    payload = {
        "monthlyTraffic": 10000,
        "conversionRate": 2,
        "aov": 50,
        "upliftPercentage": 10,
        "trafficAdjustments": {month: 0 for month in MONTHS},
        "monthlyConversionRates": {},
        "decay": {"threeMonths": 20, "sixMonths": 40, "twelveMonths": 60},
    }
    payload.update(overrides)
    return payload


def test_decay_tiers():
    records = project_revenue(RevenueProjectionInput.from_dict(make_payload()))
    # 10000 visitors * 2% * 10% uplift = 20 extra orders of 50
    assert records[0].incremental_conversions == pytest.approx(20)
    assert records[0].incremental_revenue == pytest.approx(20 * 50 * 0.8)
    assert records[5].incremental_revenue == pytest.approx(20 * 50 * 0.6)
    assert records[11].incremental_revenue == pytest.approx(20 * 50 * 0.4)


def test_months_in_calendar_order_and_cumulative():
    records = project_revenue(RevenueProjectionInput.from_dict(make_payload()))

    assert [r.month for r in records] == list(MONTHS)
    assert records[0].cumulative_revenue == records[0].incremental_revenue
    for prev, cur in zip(records, records[1:]):
        assert cur.cumulative_revenue == pytest.approx(prev.cumulative_revenue + cur.incremental_revenue)


def test_seasonal_adjustments():
    payload = make_payload(
        trafficAdjustments={"July": 50, "December": -20},
        monthlyConversionRates={"March": 4},
    )
    inputs = RevenueProjectionInput.from_dict(payload)
    records = {r.month: r for r in project_revenue(inputs)}

    assert records["July"].adjusted_traffic == pytest.approx(15000)
    assert records["December"].adjusted_traffic == pytest.approx(8000)
    assert records["January"].adjusted_traffic == pytest.approx(10000)
    assert records["March"].conversion_rate == 4
    assert records["April"].conversion_rate == 2
    assert records["March"].incremental_conversions == pytest.approx(2 * records["February"].incremental_conversions)


def test_aggregates():
    records = project_revenue(RevenueProjectionInput.from_dict(make_payload()))
    assert incremental_revenue(records, 3) == pytest.approx(2400)
    assert incremental_revenue(records, 6) == pytest.approx(4200)
    assert incremental_revenue(records, 12) == pytest.approx(6600)
    assert incremental_conversions(records, 12) == pytest.approx(240)


def test_calculate_response_is_json_ready():
    result = calculate(make_payload())

    assert result["incrementalRevenue"] == pytest.approx(
        {"threeMonths": 2400, "sixMonths": 4200, "twelveMonths": 6600}
    )
    assert result["incrementalConversions"]["threeMonths"] == pytest.approx(60)
    assert len(result["revenueOverTime"]) == 12
    assert result["revenueOverTime"][11]["cumulativeRevenue"] == pytest.approx(6600)
    assert result["adjustedTraffic"][0] == {"month": "January", "baseline": 10000.0, "adjusted": 10000.0}
    json.dumps(result)


@pytest.mark.parametrize(
    "missing",
    ["monthlyTraffic", "conversionRate", "aov", "upliftPercentage", "trafficAdjustments", "monthlyConversionRates", "decay"],
)
def test_missing_field_is_named(missing):
    payload = make_payload()
    del payload[missing]
    with pytest.raises(ValidationError, match=f"Missing required field: {missing}") as exc_info:
        calculate(payload)
    assert exc_info.value.field == missing


@pytest.mark.parametrize("name", ["monthlyTraffic", "conversionRate", "aov", "upliftPercentage", "trafficAdjustments", "monthlyConversionRates", "decay"])
def test_null_field_counts_as_missing(name):
    with pytest.raises(ValidationError, match=f"Missing required field: {name}") as exc_info:
        calculate(make_payload(**{name: None}))
    assert exc_info.value.field == name


@pytest.mark.parametrize("tier", ["threeMonths", "sixMonths", "twelveMonths"])
def test_null_decay_tier_counts_as_missing(tier):
    decay = {"threeMonths": 20, "sixMonths": 40, "twelveMonths": 60}
    decay[tier] = None
    with pytest.raises(CalculatorError) as exc_info:
        calculate(make_payload(decay=decay))
    assert exc_info.value.field == f"decay.{tier}"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"aov": "lots"}, "aov"),
        ({"monthlyTraffic": True}, "monthlyTraffic"),
        ({"decay": {"threeMonths": [], "sixMonths": 0, "twelveMonths": 0}}, "decay.threeMonths"),
        ({"trafficAdjustments": {"May": "up"}}, "trafficAdjustments.May"),
    ],
)
def test_non_numeric_values_are_rejected(overrides, field):
    with pytest.raises(ValidationError, match="must be a number") as exc_info:
        calculate(make_payload(**overrides))
    assert exc_info.value.field == field


def test_null_month_overrides_fall_back_to_baseline():
    payload = make_payload(trafficAdjustments={"May": None}, monthlyConversionRates={"May": None})
    records = {r.month: r for r in project_revenue(RevenueProjectionInput.from_dict(payload))}
    assert records["May"].adjusted_traffic == pytest.approx(10000)
    assert records["May"].conversion_rate == 2


def test_missing_decay_tier():
    with pytest.raises(ValidationError, match="decay.sixMonths"):
        calculate(make_payload(decay={"threeMonths": 0, "twelveMonths": 0}))


def test_empty_payload():
    with pytest.raises(ValidationError, match="No data provided"):
        calculate({})


def test_adjusted_traffic_table():
    rows = adjusted_traffic(RevenueProjectionInput.from_dict(make_payload(trafficAdjustments={"May": 10})))
    assert len(rows) == 12
    assert rows[4] == {"month": "May", "baseline": 10000.0, "adjusted": pytest.approx(11000)}


def test_revenue_frame():
    df = revenue_frame(project_revenue(RevenueProjectionInput.from_dict(make_payload())))
    assert len(df) == 12
    assert df["cumulative_revenue"].iloc[-1] == pytest.approx(6600)
