"""
Actual sales vs. daily targets.

Daily sales exports are matched to the daily target map by date, and each day
(and the month as a whole) gets an achievement % and a status label.
"""
import logging
import math
import zipfile
from pathlib import Path

import numpy as np
import pandas as pd

from target_config import (
    ACHIEVEMENT_THRESHOLDS,
    BELOW_THRESHOLD_STATUS,
    CURRENCY,
    SALES_FILE_TYPES,
    UNKNOWN_STATUS,
)

logger = logging.getLogger(__name__)

COMPARISON_COLUMNS = [
    "Date", "Target", "Actual", "Variance", "Achievement_Pct",
    "Cumulative_Target", "Cumulative_Actual", "Status",
]


def to_num(x):
    return pd.to_numeric(x, errors="coerce")


def format_currency(amount, show_symbol: bool = True) -> str:
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        amount = 0.0
    if math.isnan(amount):
        amount = 0.0

    prefix = "-" if amount < 0 else ""
    number = f"{prefix}{abs(amount):,.2f}"
    return f"{CURRENCY} {number}" if show_symbol else number


def achievement_status(percentage) -> str:
    if isinstance(percentage, bool) or not isinstance(percentage, (int, float)):
        return UNKNOWN_STATUS
    if math.isnan(percentage):
        return UNKNOWN_STATUS
    for minimum, label in ACHIEVEMENT_THRESHOLDS:
        if percentage >= minimum:
            return label
    return BELOW_THRESHOLD_STATUS


# -----------------------------
# Loading daily sales
# -----------------------------
def clean_daily_sales(raw: pd.DataFrame) -> pd.DataFrame:
    """
    Pick the date and sales columns out of a raw export by header name and
    return one row per date: Date (YYYY-MM-DD), Sales.
    """
    empty = pd.DataFrame(columns=["Date", "Sales"])
    if raw is None or raw.empty:
        return empty

    cols = {str(c).strip().lower(): c for c in raw.columns}

    date_col = None
    sales_col = None
    for k, original in cols.items():
        if date_col is None and ("date" in k or k == "day"):
            date_col = original
        elif sales_col is None and ("sales" in k or "amount" in k or k == "total"):
            sales_col = original

    if date_col is None or sales_col is None:
        logger.warning("Could not find date/sales columns in %s", list(raw.columns))
        return empty

    out = pd.DataFrame()
    out["Date"] = pd.to_datetime(raw[date_col], errors="coerce")
    out["Sales"] = to_num(raw[sales_col]).fillna(0)
    out = out.dropna(subset=["Date"])
    out["Date"] = out["Date"].dt.strftime("%Y-%m-%d")

    return (
        out.groupby("Date", as_index=False)["Sales"]
        .sum()
        .sort_values("Date")
        .reset_index(drop=True)
    )


def load_daily_sales(path) -> pd.DataFrame:
    """Read an .xlsx or .csv export; ValueError when the file can't be read."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SALES_FILE_TYPES:
        raise ValueError(f"Unsupported file type '{suffix}', use {', '.join(SALES_FILE_TYPES)}")

    try:
        if suffix == ".xlsx":
            raw = pd.read_excel(path)
        else:
            raw = pd.read_csv(path)
    except (ValueError, OSError, zipfile.BadZipFile) as exc:
        raise ValueError(f"Could not read {path.name}: {exc}") from exc
    logger.info("Loaded %d rows of daily sales from %s", len(raw), path.name)
    return clean_daily_sales(raw)


# -----------------------------
# Comparison
# -----------------------------
def compare_to_targets(daily_targets: dict, actuals: pd.DataFrame | None) -> pd.DataFrame:
    targets = pd.DataFrame({
        "Date": pd.Series(list(daily_targets.keys()), dtype=str),
        "Target": pd.Series(list(daily_targets.values()), dtype=float),
    }).sort_values("Date")

    if actuals is None or actuals.empty:
        sales = pd.DataFrame({"Date": pd.Series(dtype=str), "Sales": pd.Series(dtype=float)})
    else:
        sales = pd.DataFrame({
            "Date": pd.to_datetime(actuals["Date"], errors="coerce").dt.strftime("%Y-%m-%d"),
            "Sales": to_num(actuals["Sales"]).fillna(0),
        }).dropna(subset=["Date"])
        sales = sales.groupby("Date", as_index=False)["Sales"].sum()

    df = targets.merge(sales, on="Date", how="left")
    # Days with no sales recorded count as zero
    df["Actual"] = df["Sales"].fillna(0.0).astype(float)
    df["Variance"] = df["Actual"] - df["Target"]
    df["Achievement_Pct"] = df["Actual"] / df["Target"].replace(0, np.nan) * 100
    df["Cumulative_Target"] = df["Target"].cumsum()
    df["Cumulative_Actual"] = df["Actual"].cumsum()
    df["Status"] = df["Achievement_Pct"].apply(achievement_status)

    return df[COMPARISON_COLUMNS].reset_index(drop=True)


def month_achievement(comparison: pd.DataFrame) -> dict:
    """Month-level target / achieved / percentage / status."""
    target = float(comparison["Target"].sum()) if not comparison.empty else 0.0
    achieved = float(comparison["Actual"].sum()) if not comparison.empty else 0.0
    percentage = achieved / target * 100 if target > 0 else float("nan")
    return {
        "target": target,
        "achieved": achieved,
        "percentage": percentage,
        "status": achievement_status(percentage),
    }
