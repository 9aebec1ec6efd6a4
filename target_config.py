import os

# -----------------------------
# API
# -----------------------------
API_BASE_URL = os.environ.get("TARGETS_API_URL", "http://localhost:5000").rstrip("/")
API_TIMEOUT = float(os.environ.get("TARGETS_API_TIMEOUT", "10"))
MONTHLY_TARGETS_PATH = "/api/monthly-targets"
BRANCHES_PATH = "/api/branches"

LOG_LEVEL = os.environ.get("TARGETS_LOG_LEVEL", "INFO").upper()

# -----------------------------
# Weekday weights (0 = Sunday ... 6 = Saturday)
# -----------------------------
WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

DEFAULT_WEEKDAY_WEIGHTS = {
    0: 1.0,  # Sunday
    1: 0.8,  # Monday
    2: 0.8,  # Tuesday
    3: 0.9,  # Wednesday
    4: 1.0,  # Thursday
    5: 1.5,  # Friday
    6: 1.2,  # Saturday
}

# Fallback for a weekday with no weight supplied
MISSING_WEIGHT = 1.0

WEIGHT_SLIDER_MIN = 0.5
WEIGHT_SLIDER_MAX = 2.5
WEIGHT_SLIDER_STEP = 0.1

# -----------------------------
# Special days
# -----------------------------
SPECIAL_DAY_CATEGORIES = ("holiday", "promotion", "event")

SPECIAL_DAY_COLORS = {
    "holiday": "indianred",
    "promotion": "mediumpurple",
    "event": "orange",
}
WEEKDAY_BAR_COLOR = "steelblue"

MULTIPLIER_SLIDER_MIN = 0.5
MULTIPLIER_SLIDER_MAX = 3.0
MULTIPLIER_SLIDER_STEP = 0.1

# -----------------------------
# Reporting
# -----------------------------
CURRENCY = "SAR"

# Minimum achievement % for each status, checked top-down
ACHIEVEMENT_THRESHOLDS = [
    (90.0, "Excellent"),
    (75.0, "Very Good"),
    (60.0, "Good"),
]
BELOW_THRESHOLD_STATUS = "Needs Improvement"
UNKNOWN_STATUS = "Not Set"

MONTH_OPTIONS_COUNT = 12

# Daily sales uploads (.xls would need xlrd)
SALES_FILE_TYPES = (".xlsx", ".csv")
