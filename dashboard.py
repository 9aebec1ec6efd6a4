import calendar
import logging
import tempfile
from datetime import date

import pandas as pd
import streamlit as st
import plotly.graph_objects as go

from target_config import (
    LOG_LEVEL,
    MULTIPLIER_SLIDER_MAX,
    MULTIPLIER_SLIDER_MIN,
    MULTIPLIER_SLIDER_STEP,
    SALES_FILE_TYPES,
    SPECIAL_DAY_CATEGORIES,
    SPECIAL_DAY_COLORS,
    WEEKDAY_BAR_COLOR,
    WEEKDAY_NAMES,
    WEIGHT_SLIDER_MAX,
    WEIGHT_SLIDER_MIN,
    WEIGHT_SLIDER_STEP,
)
from target_distribution import (
    SpecialDay,
    TargetSpecification,
    WeekdayWeights,
    compute_daily_targets,
    distribution_frame,
    month_options,
    summarize,
    validate_specification,
    with_special_day,
    without_special_day,
)
from target_client import MonthlyTargetClient, TargetApiError
from target_achievement import (
    compare_to_targets,
    format_currency,
    load_daily_sales,
    month_achievement,
)

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("dashboard")

# -----------------------------
# Page config
# -----------------------------
st.set_page_config(page_title="Monthly Targets", layout="wide", initial_sidebar_state="expanded")
st.title("🎯 Monthly Target Planner")

client = MonthlyTargetClient()

if "special_days" not in st.session_state:
    st.session_state.special_days = ()

# Notice set before the rerun that follows a save
if st.session_state.get("saved_notice"):
    st.toast(st.session_state.pop("saved_notice"))

# -----------------------------
# Helpers
# -----------------------------
@st.cache_data(ttl=300)
def fetch_branches() -> list:
    try:
        return client.list_branches()
    except TargetApiError as exc:
        logger.warning("Branch list unavailable: %s", exc)
        return []


def month_label(month: int, year: int) -> str:
    return f"{calendar.month_name[month]} {year}"


def preview_chart(df: pd.DataFrame) -> go.Figure:
    colors = [
        SPECIAL_DAY_COLORS.get(cat, WEEKDAY_BAR_COLOR) if special else WEEKDAY_BAR_COLOR
        for special, cat in zip(df["Is_Special"], df["Category"])
    ]
    hover = [
        f"{name} ({cat})" if special else day_name
        for special, name, cat, day_name in zip(df["Is_Special"], df["Special_Name"], df["Category"], df["Day_Name"])
    ]

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=df["Day"],
        y=df["Target"],
        marker_color=colors,
        customdata=hover,
        hovertemplate="Day %{x} — %{customdata}<br>%{y:,.2f}<extra></extra>",
    ))
    fig.update_layout(
        title="Daily Target Distribution",
        xaxis_title="Day of month",
        yaxis_title="Daily target",
        height=400,
    )
    return fig


# -----------------------------
# Sidebar: basic info
# -----------------------------
st.sidebar.header("⚙️ Target Settings")

branches = fetch_branches()
branch_names = {int(b["id"]): b.get("name", f"Branch {b['id']}") for b in branches if "id" in b}
if branch_names:
    branch_id = st.sidebar.selectbox(
        "Branch", list(branch_names.keys()), format_func=lambda b: branch_names[b]
    )
else:
    st.sidebar.caption("⚠️ Branch list unavailable, enter the branch ID")
    branch_id = int(st.sidebar.number_input("Branch ID", min_value=0, value=0, step=1))

months = month_options()
month, year = st.sidebar.selectbox(
    "Month", months, format_func=lambda my: month_label(my[0], my[1])
)

target_amount = st.sidebar.number_input(
    "Monthly target", min_value=0.0, value=0.0, step=1000.0, format="%.2f"
)

# -----------------------------
# Sidebar: weekday weights
# -----------------------------
st.sidebar.subheader("Weekday Weights")
st.sidebar.caption("💡 Higher weight = bigger share of the monthly target")

default_weights = WeekdayWeights()
weights = default_weights
for weekday, name in enumerate(WEEKDAY_NAMES):
    weight = st.sidebar.slider(
        name,
        min_value=WEIGHT_SLIDER_MIN,
        max_value=WEIGHT_SLIDER_MAX,
        value=default_weights[weekday],
        step=WEIGHT_SLIDER_STEP,
        key=f"weight_{weekday}",
    )
    weights = weights.replace(weekday, weight)

# -----------------------------
# Special days
# -----------------------------
spec = TargetSpecification(
    branch_id=branch_id,
    month=month,
    year=year,
    target_amount=target_amount,
    weekday_weights=weights,
    special_days=st.session_state.special_days,
)

st.subheader("📅 Special Days")
st.caption("A special day's multiplier replaces its weekday weight.")

first_day = date(year, month, 1)
last_day = date(year, month, spec.days_in_month)

with st.form("add_special_day", clear_on_submit=True):
    c1, c2, c3, c4 = st.columns([1, 1.5, 1, 1])
    sd_date = c1.date_input("Date", value=first_day, min_value=first_day, max_value=last_day)
    sd_name = c2.text_input("Name", placeholder="e.g. National Day")
    sd_category = c3.selectbox("Type", SPECIAL_DAY_CATEGORIES)
    sd_multiplier = c4.slider(
        "Multiplier",
        min_value=MULTIPLIER_SLIDER_MIN,
        max_value=MULTIPLIER_SLIDER_MAX,
        value=1.5,
        step=MULTIPLIER_SLIDER_STEP,
    )
    if st.form_submit_button("➕ Add special day"):
        if not sd_name.strip():
            st.warning("⚠️ Give the special day a name.")
        else:
            spec = with_special_day(spec, SpecialDay(sd_date, sd_name.strip(), sd_multiplier, sd_category))
            st.session_state.special_days = spec.special_days

if spec.special_days:
    for i, sd in enumerate(spec.special_days):
        a, b, c, d, e = st.columns([1, 1.5, 1, 1, 0.5])
        a.write(sd.date.strftime("%a %d %b"))
        b.write(f"**{sd.name}**")
        c.write(sd.category.title())
        d.write(f"× {sd.multiplier:.1f}")
        if e.button("🗑️", key=f"remove_sd_{i}"):
            st.session_state.special_days = without_special_day(spec, i).special_days
            st.rerun()
else:
    st.info("💡 No special days for this month.")

# -----------------------------
# Preview
# -----------------------------
st.divider()
st.subheader(f"📈 Preview — {month_label(month, year)}")

df = distribution_frame(spec)
if df.empty:
    st.info("💡 Enter a monthly target above zero to see the daily breakdown.")
    st.stop()

daily_targets = compute_daily_targets(spec)
stats = summarize(daily_targets)

k1, k2, k3, k4 = st.columns(4)
k1.metric("Total Monthly Target", format_currency(stats["total"]))
k2.metric("Avg Daily Target", format_currency(stats["average"]))
k3.metric("Max Daily Target", format_currency(stats["max"]))
k4.metric("Min Daily Target", format_currency(stats["min"]))

left, right = st.columns([1.5, 1])
with left:
    st.plotly_chart(preview_chart(df), use_container_width=True)
with right:
    table = df[["Date", "Day_Name", "Multiplier", "Special_Name", "Target"]].copy()
    table.columns = ["Date", "Day", "Weight", "Special Day", "Target"]
    st.dataframe(
        table.style.format({"Weight": "{:.2f}", "Target": "{:,.2f}"}),
        height=400,
        use_container_width=True,
    )

# -----------------------------
# Submit
# -----------------------------
errors = validate_specification(spec)
if errors:
    for err in errors:
        st.warning(f"⚠️ {err.field}: {err.message}")

if st.button("💾 Save monthly target", type="primary", disabled=bool(errors)):
    try:
        client.submit(spec, daily_targets)
    except TargetApiError as exc:
        st.toast("❌ Could not save the target. Please try again.")
        st.error(f"❌ {exc}")
    else:
        st.session_state.special_days = ()
        st.session_state.saved_notice = "✅ Monthly target saved"
        st.rerun()

# -----------------------------
# Actual vs target
# -----------------------------
st.divider()
st.subheader("🏁 Actual vs Target")

upload = st.file_uploader("Daily sales export (Excel or CSV)", type=[t.lstrip(".") for t in SALES_FILE_TYPES])
if upload is None:
    st.caption("Upload a daily sales file to compare it against these targets.")
    st.stop()

suffix = "." + upload.name.rsplit(".", 1)[-1]
with tempfile.NamedTemporaryFile(suffix=suffix) as tmp:
    tmp.write(upload.getbuffer())
    tmp.flush()
    try:
        actuals = load_daily_sales(tmp.name)
    except ValueError as exc:
        st.error(f"❌ {exc}")
        st.stop()
if actuals.empty:
    st.error("❌ No date/sales columns found in the uploaded file.")
    st.stop()

comparison = compare_to_targets(daily_targets, actuals)
overall = month_achievement(comparison)

m1, m2, m3, m4 = st.columns(4)
m1.metric("Target", format_currency(overall["target"]))
m2.metric("Achieved", format_currency(overall["achieved"]))
m3.metric("Achievement", f"{overall['percentage']:.1f}%" if pd.notna(overall["percentage"]) else "—")
m4.metric("Status", overall["status"])

fig_cum = go.Figure()
fig_cum.add_trace(go.Scatter(
    x=comparison["Date"], y=comparison["Cumulative_Target"],
    name="Cumulative Target", mode="lines", line=dict(color="lightblue", width=2, dash="dash"),
))
fig_cum.add_trace(go.Scatter(
    x=comparison["Date"], y=comparison["Cumulative_Actual"],
    name="Cumulative Actual", mode="lines+markers", line=dict(color="steelblue", width=2),
))
fig_cum.update_layout(title="Cumulative Sales vs Target", hovermode="x unified", height=400)
st.plotly_chart(fig_cum, use_container_width=True)

st.dataframe(
    comparison.style.format({
        "Target": "{:,.2f}",
        "Actual": "{:,.2f}",
        "Variance": "{:+,.2f}",
        "Achievement_Pct": "{:.1f}%",
        "Cumulative_Target": "{:,.2f}",
        "Cumulative_Actual": "{:,.2f}",
    }, na_rep="—").background_gradient(subset=["Achievement_Pct"], cmap="RdYlGn", vmin=50, vmax=110),
    height=450,
    use_container_width=True,
)
