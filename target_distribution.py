"""
Monthly target distribution.

Spreads a single monthly sales goal over every calendar day of the month.
Each day gets a share proportional to its multiplier: the special-day
multiplier when the date is marked as a holiday/promotion/event, otherwise the
weight of its weekday. The shares always add back up to the monthly goal
(up to float rounding; no cent rounding is applied).
"""
import calendar
import dataclasses
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime

import numpy as np
import pandas as pd

from target_config import (
    DEFAULT_WEEKDAY_WEIGHTS,
    MISSING_WEIGHT,
    MONTH_OPTIONS_COUNT,
    SPECIAL_DAY_CATEGORIES,
    WEEKDAY_NAMES,
)

logger = logging.getLogger(__name__)

FRAME_COLUMNS = [
    "Date", "Day", "Weekday", "Day_Name", "Multiplier",
    "Is_Special", "Special_Name", "Category", "Target",
]


# -----------------------------
# Data model
# -----------------------------
@dataclass(frozen=True)
class WeekdayWeights:
    """Seven non-negative multipliers, index 0 = Sunday ... 6 = Saturday."""

    values: tuple = tuple(DEFAULT_WEEKDAY_WEIGHTS[i] for i in range(7))

    def __post_init__(self):
        values = tuple(float(v) for v in self.values)
        if len(values) != 7:
            raise ValueError(f"Expected 7 weekday weights, got {len(values)}")
        object.__setattr__(self, "values", values)

    @classmethod
    def from_mapping(cls, mapping) -> "WeekdayWeights":
        """
        Build from {weekday: weight}. Keys may be ints or digit strings (as they
        come back from JSON). A weekday with no weight falls back to 1.0.
        """
        lookup = {int(k): v for k, v in (mapping or {}).items()}
        values = []
        for weekday in range(7):
            weight = lookup.get(weekday)
            values.append(MISSING_WEIGHT if weight is None else float(weight))
        return cls(tuple(values))

    def __getitem__(self, weekday: int) -> float:
        return self.values[weekday]

    def replace(self, weekday: int, weight: float) -> "WeekdayWeights":
        values = list(self.values)
        values[weekday] = float(weight)
        return WeekdayWeights(tuple(values))

    def to_dict(self) -> dict:
        return {str(i): w for i, w in enumerate(self.values)}


@dataclass(frozen=True)
class SpecialDay:
    date: date
    name: str
    multiplier: float
    category: str = "holiday"

    def to_dict(self) -> dict:
        day = to_date(self.date)
        return {
            "date": day.isoformat() if day else str(self.date),
            "name": self.name,
            "multiplier": float(self.multiplier),
            "type": self.category,
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "SpecialDay":
        day = to_date(payload.get("date"))
        if day is None:
            raise ValueError(f"Invalid special day date: {payload.get('date')!r}")
        return cls(
            date=day,
            name=str(payload.get("name", "")),
            multiplier=float(payload.get("multiplier", 1.0)),
            category=payload.get("type", payload.get("category", "holiday")),
        )


@dataclass(frozen=True)
class TargetSpecification:
    branch_id: int
    month: int
    year: int
    target_amount: float
    weekday_weights: WeekdayWeights = field(default_factory=WeekdayWeights)
    special_days: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "special_days", tuple(self.special_days))

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @classmethod
    def from_dict(cls, payload: dict) -> "TargetSpecification":
        """Parse a stored monthly target (the same shape `to_request_body` sends)."""
        try:
            return cls(
                branch_id=int(payload["branchId"]),
                month=int(payload["month"]),
                year=int(payload["year"]),
                target_amount=float(payload["targetAmount"]),
                weekday_weights=WeekdayWeights.from_mapping(payload.get("weekdayWeights")),
                special_days=tuple(SpecialDay.from_dict(sd) for sd in payload.get("specialDays") or []),
            )
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            raise ValueError(f"Invalid monthly target payload: {exc}") from exc


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


# -----------------------------
# Helpers
# -----------------------------
def to_date(value) -> date | None:
    """Normalise a date/datetime/ISO string to a date; None if it can't be read."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def sunday_based_weekday(day: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


def _is_positive(amount) -> bool:
    try:
        amount = float(amount)
        return math.isfinite(amount) and amount > 0
    except (TypeError, ValueError):
        return False


def _override_lookup(special_days) -> dict:
    # First entry wins when a date is listed twice
    lookup = {}
    for special in special_days:
        day = to_date(special.date)
        if day is not None:
            lookup.setdefault(day, special)
    return lookup


def with_special_day(spec: TargetSpecification, special: SpecialDay) -> TargetSpecification:
    """Add a special day, replacing any existing entry for the same date."""
    day = to_date(special.date)
    kept = tuple(sd for sd in spec.special_days if to_date(sd.date) != day)
    return dataclasses.replace(spec, special_days=kept + (special,))


def without_special_day(spec: TargetSpecification, index: int) -> TargetSpecification:
    special_days = list(spec.special_days)
    special_days.pop(index)
    return dataclasses.replace(spec, special_days=tuple(special_days))


def month_options(today: date | None = None, count: int = MONTH_OPTIONS_COUNT) -> list[tuple[int, int]]:
    """Current month plus the following months as (month, year), rolling over the year."""
    today = today or date.today()
    options = []
    for i in range(count):
        month = today.month + i
        year = today.year + (month - 1) // 12
        month = (month - 1) % 12 + 1
        options.append((month, year))
    return options


# -----------------------------
# Distribution
# -----------------------------
def distribution_frame(spec: TargetSpecification) -> pd.DataFrame:
    """
    One row per calendar day with its effective multiplier and daily target.
    Empty when there is no positive target to distribute yet.
    """
    if not _is_positive(spec.target_amount):
        return pd.DataFrame(columns=FRAME_COLUMNS)

    overrides = _override_lookup(spec.special_days)

    rows = []
    for day_num in range(1, spec.days_in_month + 1):
        day = date(spec.year, spec.month, day_num)
        weekday = sunday_based_weekday(day)
        special = overrides.get(day)

        rows.append({
            "Date": day.isoformat(),
            "Day": day_num,
            "Weekday": weekday,
            "Day_Name": WEEKDAY_NAMES[weekday],
            # Special day multiplier replaces the weekday weight
            "Multiplier": float(special.multiplier) if special else spec.weekday_weights[weekday],
            "Is_Special": special is not None,
            "Special_Name": special.name if special else "",
            "Category": special.category if special else "",
        })

    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)

    total_weight = float(df["Multiplier"].sum())
    if np.isfinite(total_weight) and total_weight > 0:
        df["Target"] = float(spec.target_amount) * df["Multiplier"] / total_weight
    else:
        logger.warning(
            "Total weight is %s for branch %s %02d/%d, daily targets set to 0",
            total_weight, spec.branch_id, spec.month, spec.year,
        )
        df["Target"] = 0.0

    logger.debug(
        "Distributed %.2f over %d days for branch %s (total weight %.3f)",
        float(spec.target_amount), len(df), spec.branch_id, total_weight,
    )
    return df


def compute_daily_targets(spec: TargetSpecification) -> dict[str, float]:
    """Map of ISO date -> daily target for every day of the month."""
    df = distribution_frame(spec)
    return dict(zip(df["Date"].tolist(), df["Target"].astype(float).tolist()))


def summarize(daily_targets: dict) -> dict:
    values = list(daily_targets.values())
    if not values:
        return {"total": 0.0, "average": 0.0, "max": 0.0, "min": 0.0}

    total = float(sum(values))
    return {
        "total": total,
        "average": total / len(values),
        "max": float(max(values)),
        "min": float(min(values)),
    }


# -----------------------------
# Validation
# -----------------------------
def _is_valid_weight(value) -> bool:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value >= 0


def validate_specification(spec: TargetSpecification) -> list[FieldError]:
    errors = []

    if not spec.branch_id or spec.branch_id <= 0:
        errors.append(FieldError("branch_id", "Select a branch"))

    month_ok = isinstance(spec.month, int) and 1 <= spec.month <= 12
    if not month_ok:
        errors.append(FieldError("month", "Month must be between 1 and 12"))

    if not isinstance(spec.year, int) or spec.year <= 0:
        errors.append(FieldError("year", "Year must be a positive number"))

    if not _is_positive(spec.target_amount):
        errors.append(FieldError("target_amount", "Target amount must be positive"))

    for weekday, weight in enumerate(spec.weekday_weights.values):
        if not _is_valid_weight(weight):
            errors.append(FieldError(
                f"weekday_weights.{weekday}",
                f"{WEEKDAY_NAMES[weekday]} weight must be zero or more",
            ))

    seen = {}
    for i, special in enumerate(spec.special_days):
        prefix = f"special_days[{i}]"
        day = to_date(special.date)
        if day is None:
            errors.append(FieldError(f"{prefix}.date", "Enter a valid date"))
        elif month_ok and (day.year, day.month) != (spec.year, spec.month):
            errors.append(FieldError(f"{prefix}.date", f"{day.isoformat()} is outside the selected month"))
        elif day in seen:
            errors.append(FieldError(
                f"{prefix}.date",
                f"{day.isoformat()} is already marked as '{seen[day]}'",
            ))
        else:
            seen[day] = special.name

        if not str(special.name or "").strip():
            errors.append(FieldError(f"{prefix}.name", "Name is required"))

        if not _is_valid_weight(special.multiplier):
            errors.append(FieldError(f"{prefix}.multiplier", "Multiplier must be non-negative"))

        if special.category not in SPECIAL_DAY_CATEGORIES:
            errors.append(FieldError(
                f"{prefix}.category",
                f"Type must be one of: {', '.join(SPECIAL_DAY_CATEGORIES)}",
            ))

    return errors


# -----------------------------
# Serialization
# -----------------------------
def to_request_body(spec: TargetSpecification, daily_targets: dict | None = None) -> dict:
    """JSON body for POST /api/monthly-targets."""
    if daily_targets is None:
        daily_targets = compute_daily_targets(spec)

    return {
        "branchId": int(spec.branch_id),
        "month": int(spec.month),
        "year": int(spec.year),
        "targetAmount": float(spec.target_amount),
        "weekdayWeights": spec.weekday_weights.to_dict(),
        "specialDays": [sd.to_dict() for sd in spec.special_days],
        "dailyTargets": dict(daily_targets),
        "distributionPattern": {},
    }
