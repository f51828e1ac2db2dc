from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from abcalc import (
    BetaPrior,
    CalculatorError,
    TestComparison,
    analyze_bayesian,
    analyze_frequentist,
    calculate_max_experiments,
    calculate_test_metrics,
    compare_aov,
    generate_ab_test_demo_data,
    generate_recommendation,
)
from abcalc import bayesian
from abcalc.config import BAYES_DEFAULTS, configure_logging
from abcalc.data_generator import generate_aov_demo_data
from abcalc.duration import SampleSizePlan, weekly_mde_frame
from abcalc.revenue import (
    HORIZONS,
    MONTHS,
    RevenueProjectionInput,
    incremental_conversions,
    incremental_revenue,
    project_revenue,
    revenue_frame,
)
from abcalc.statistics import conversion_rate_curves

configure_logging()

st.set_page_config(page_title="A/B Test Calculators", layout="wide")

st.title("A/B Test Calculators")
st.caption("Significance, Bayesian, AOV, duration, capacity and revenue calculators, built with Streamlit.")


def _parse_values(text: str) -> list[float]:
    out = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            out.append(float(part))
        except ValueError:
            continue
    return out


def render_frequentist() -> None:
    st.subheader("Frequentist significance")

    if st.button("Try demo data"):
        demo = generate_ab_test_demo_data()
        st.session_state["freq_inputs"] = (
            demo.control.participants,
            demo.control.conversions,
            demo.variant.participants,
            demo.variant.conversions,
        )
    pa, ca, pb, cb = st.session_state.get("freq_inputs", (1000, 100, 1000, 120))

    left, right = st.columns(2)
    participants_a = left.number_input("Participants A", min_value=0, value=int(pa), step=1)
    conversions_a = left.number_input("Conversions A", min_value=0, value=int(ca), step=1)
    participants_b = right.number_input("Participants B", min_value=0, value=int(pb), step=1)
    conversions_b = right.number_input("Conversions B", min_value=0, value=int(cb), step=1)

    comparison = TestComparison.from_counts(
        int(participants_a), int(conversions_a), int(participants_b), int(conversions_b)
    )
    try:
        res = analyze_frequentist(comparison)
    except CalculatorError as exc:
        st.error(str(exc))
        return

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Conversion A", f"{res.rate_a*100:.2f}%")
    c2.metric("Conversion B", f"{res.rate_b*100:.2f}%")
    c3.metric("Lift", f"{res.lift*100:+.2f}%")
    c4.metric("Confidence", f"{res.confidence*100:.2f}%")

    c5, c6, c7, c8 = st.columns(4)
    c5.metric("p-value", f"{res.p_value:.4f}")
    c6.metric("z-score", f"{res.z_score:.3f}")
    c7.metric("Observed power", f"{res.observed_power*100:.1f}%")
    c8.metric(
        "Required sample size",
        "n/a" if res.required_sample_size == float("inf") else f"{res.required_sample_size:,}",
    )

    st.success(generate_recommendation(res)) if res.confidence > 0.95 else st.warning(generate_recommendation(res))

    if res.srm_detected:
        st.error(
            f"Sample ratio mismatch: SRM p-value {res.srm_p_value:.4f}. The traffic split is "
            "significantly different from expected."
        )
    else:
        st.info(f"SRM p-value {res.srm_p_value:.4f}. No significant SRM detected.")

    curves = conversion_rate_curves(res)
    fig = go.Figure()
    for name, key in (("A", "distribution_a"), ("B", "distribution_b")):
        pts = curves[key]
        if pts:
            fig.add_trace(go.Scatter(x=[p[0] for p in pts], y=[p[1] for p in pts], mode="lines", name=name))
    fig.update_layout(xaxis_title="Conversion rate", height=360)
    fig.update_xaxes(tickformat=",.1%")

    improvement = curves["improvement"]
    if improvement:
        left, right = st.columns(2)
        left.plotly_chart(fig, use_container_width=True)
        lift_fig = go.Figure(
            go.Scatter(
                x=[p[0] for p in improvement],
                y=[p[1] for p in improvement],
                mode="lines",
                fill="tozeroy",
                name="Improvement",
            )
        )
        lift_fig.add_vline(x=0, line_dash="dash")
        lift_fig.update_layout(xaxis_title="Relative improvement", height=360)
        lift_fig.update_xaxes(tickformat=",.1%")
        right.plotly_chart(lift_fig, use_container_width=True)
    else:
        st.plotly_chart(fig, use_container_width=True)


def render_bayesian() -> None:
    st.subheader("Bayesian A/B test")

    left, right = st.columns(2)
    participants_a = left.number_input("Participants A", min_value=0, value=1000, step=1, key="bay_pa")
    conversions_a = left.number_input("Conversions A", min_value=0, value=100, step=1, key="bay_ca")
    participants_b = right.number_input("Participants B", min_value=0, value=1000, step=1, key="bay_pb")
    conversions_b = right.number_input("Conversions B", min_value=0, value=120, step=1, key="bay_cb")

    p1, p2, p3 = st.columns(3)
    prior_alpha = p1.slider("Prior alpha", 0.1, 10.0, float(BAYES_DEFAULTS["prior_alpha"]), 0.1)
    prior_beta = p2.slider("Prior beta", 0.1, 10.0, float(BAYES_DEFAULTS["prior_beta"]), 0.1)
    seed = p3.text_input("Seed (optional)", value="")

    comparison = TestComparison.from_counts(
        int(participants_a), int(conversions_a), int(participants_b), int(conversions_b)
    )
    try:
        res = analyze_bayesian(
            comparison,
            prior=BetaPrior(prior_alpha, prior_beta),
            seed=seed.strip() or None,
        )
    except CalculatorError as exc:
        st.error(str(exc))
        return

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("P(B > A)", f"{res.probability_b_greater_a*100:.2f}%")
    c2.metric("Expected lift", f"{res.expected_lift*100:+.2f}%")
    c3.metric("HDI lower", f"{res.hdi_lower*100:.2f}%")
    c4.metric("HDI upper", f"{res.hdi_upper*100:.2f}%")

    st.write(bayesian.generate_recommendation(res))

    fig = go.Figure()
    for name, dist in (("A", res.posterior_a), ("B", res.posterior_b)):
        pts = bayesian.posterior_density_curve(dist)
        fig.add_trace(go.Scatter(x=[p[0] for p in pts], y=[p[1] for p in pts], mode="lines", name=name))
    fig.update_layout(xaxis_title="Conversion rate", yaxis_title="Density", height=360)
    st.plotly_chart(fig, use_container_width=True)


def render_aov() -> None:
    st.subheader("AOV comparison (Mann-Whitney U)")

    demo_control, demo_variant = generate_aov_demo_data()
    control_text = st.text_input("Control AOV values", value=",".join(f"{v:g}" for v in demo_control))
    variant_text = st.text_input("Variant AOV values", value=",".join(f"{v:g}" for v in demo_variant))

    try:
        res = compare_aov(_parse_values(control_text), _parse_values(variant_text))
    except CalculatorError as exc:
        st.error(str(exc))
        return

    c1, c2, c3 = st.columns(3)
    c1.metric("Control mean", f"{res.control_mean:.2f}")
    c2.metric("Variant mean", f"{res.variant_mean:.2f}")
    c3.metric("Difference", f"{res.percent_difference:+.2f}%")

    c4, c5, c6, c7 = st.columns(4)
    c4.metric("U", f"{res.test.u:.1f}")
    c5.metric("Critical U", f"{res.test.critical_u:.2f}")
    c6.metric("z", f"{res.test.z:.3f}")
    c7.metric("p-value", f"{res.test.p:.4f}")
    st.write("**Significant?**", "Yes" if res.test.significant else "No")


def render_duration() -> None:
    st.subheader("Test duration")

    daily_visitors = st.number_input("Daily visitors", min_value=1, value=5000, step=100)
    conversion_pct = st.number_input("Baseline conversion rate (%)", min_value=0.01, max_value=99.99, value=2.5)
    objective = st.radio("Test objective", ["derisk", "increase", "decrease", "custom", "unknown"], index=1)
    custom_mde = None
    if objective == "custom":
        custom_mde = st.number_input("Custom MDE (%)", min_value=0.1, value=10.0) / 100
    significance = st.selectbox("Significance level", [0.9, 0.95, 0.99], index=1)
    power = st.selectbox("Statistical power", [0.8, 0.85, 0.9], index=0)
    variations = st.number_input("Number of variations", min_value=2, value=2, step=1)

    try:
        res = calculate_test_metrics(
            daily_visitors=float(daily_visitors),
            conversion_rate=float(conversion_pct) / 100,
            test_objective=objective,
            custom_mde=custom_mde,
            significance_level=significance,
            statistical_power=power,
            number_of_variations=int(variations),
        )
    except CalculatorError as exc:
        st.error(str(exc))
        return

    if isinstance(res, SampleSizePlan):
        c1, c2, c3 = st.columns(3)
        c1.metric("Sample size per variation", f"{res.sample_size_per_variation:,}")
        c2.metric("Total sample size", f"{res.total_sample_size:,}")
        c3.metric("Duration", f"{res.duration_in_days} days")
        return

    df = weekly_mde_frame(res)
    fig = px.line(df, x="week", y="mde", markers=True)
    fig.update_layout(yaxis_title="MDE (% of baseline)", height=340)
    st.plotly_chart(fig, use_container_width=True)
    show = df.copy()
    show["mde"] = show["mde"].map(lambda v: f"{v:.2f}%")
    st.dataframe(show, use_container_width=True, hide_index=True)


def render_capacity() -> None:
    st.subheader("Experiment capacity")

    left, right = st.columns(2)
    daily_visitors = left.number_input("Daily visitors", min_value=1, value=10000, step=100, key="cap_dv")
    conversion_pct = left.number_input("Conversion rate (%)", min_value=0.01, max_value=99.0, value=3.0)
    mde = left.number_input("MDE (%)", min_value=0.1, value=10.0)
    confidence_level = right.slider("Confidence level (%)", 80, 99, 95)
    target_power = right.slider("Target power (%)", 50, 95, 80)
    parallel = right.slider("Parallel tests (%)", 0, 100, 0)

    try:
        res = calculate_max_experiments(
            daily_visitors, conversion_pct, mde, confidence_level, target_power, parallel
        )
    except CalculatorError as exc:
        st.error(str(exc))
        return

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Sample size per variant", f"{res.sample_size_per_variant:,}")
    c2.metric("Max experiments / year", f"{res.max_experiments:,}")
    c3.metric("With parallel tests", f"{res.max_parallel_experiments:,}")
    c4.metric("Expected false positives", f"{res.annual_false_positives:.1f}")

    df = pd.DataFrame([{"mde": r.mde, "false_negative_risk": r.false_negative_risk} for r in res.mde_risk])
    fig = px.line(df, x="mde", y="false_negative_risk", markers=True)
    fig.update_layout(xaxis_title="MDE (%)", yaxis_title="False negative risk (%)", height=340)
    st.plotly_chart(fig, use_container_width=True)


def render_revenue() -> None:
    st.subheader("Revenue projection")

    left, right = st.columns(2)
    monthly_traffic = left.number_input("Monthly traffic", min_value=0, value=100000, step=1000)
    conversion_rate = left.number_input("Conversion rate (%)", min_value=0.0, value=2.0)
    aov = left.number_input("Average order value", min_value=0.0, value=80.0)
    uplift = left.number_input("Uplift (%)", value=5.0)
    decay_3 = right.slider("Decay months 1-3 (%)", 0, 100, 0)
    decay_6 = right.slider("Decay months 4-6 (%)", 0, 100, 10)
    decay_12 = right.slider("Decay months 7-12 (%)", 0, 100, 20)

    with st.expander("Seasonality"):
        adjustments = {}
        rates = {}
        for month in MONTHS:
            a, b = st.columns(2)
            adjustments[month] = a.number_input(f"{month} traffic change (%)", value=0.0, key=f"adj_{month}")
            rates[month] = b.number_input(f"{month} conversion rate (%)", min_value=0.0, value=0.0, key=f"cr_{month}")

    payload = {
        "monthlyTraffic": monthly_traffic,
        "conversionRate": conversion_rate,
        "aov": aov,
        "upliftPercentage": uplift,
        "trafficAdjustments": adjustments,
        "monthlyConversionRates": rates,
        "decay": {"threeMonths": decay_3, "sixMonths": decay_6, "twelveMonths": decay_12},
    }
    try:
        inputs = RevenueProjectionInput.from_dict(payload)
    except CalculatorError as exc:
        st.error(str(exc))
        return
    records = project_revenue(inputs)

    c1, c2, c3 = st.columns(3)
    for col, months in zip((c1, c2, c3), HORIZONS.values()):
        col.metric(
            f"Incremental revenue ({months} months)",
            f"{incremental_revenue(records, months):,.0f}",
            f"{incremental_conversions(records, months):,.0f} conversions",
        )

    df = revenue_frame(records)
    fig = go.Figure()
    fig.add_trace(go.Bar(x=df["month"], y=df["incremental_revenue"], name="Incremental revenue"))
    fig.add_trace(go.Scatter(x=df["month"], y=df["cumulative_revenue"], mode="lines+markers", name="Cumulative"))
    fig.update_layout(height=380)
    st.plotly_chart(fig, use_container_width=True)
    st.dataframe(df, use_container_width=True, hide_index=True)


PAGES = {
    "Significance": render_frequentist,
    "Bayesian": render_bayesian,
    "AOV": render_aov,
    "Duration": render_duration,
    "Capacity": render_capacity,
    "Revenue": render_revenue,
}

with st.sidebar:
    st.header("Calculators")
    page = st.radio("Calculator", list(PAGES.keys()), index=0)

PAGES[page]()
