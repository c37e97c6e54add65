"""
Configuration: fine-field registry, fallback columns, placeholder names,
shift bands, and alert thresholds.

FINE_FIELD_REGISTRY maps each canonical amount field to its export column
label and whether it counts as a fine (as opposed to an amount due).
"""

import re
from pathlib import Path

# ---------------------------------------------------------------------------
# File paths — adjust these if source files move
# ---------------------------------------------------------------------------
DATA_DIR = Path(__file__).resolve().parent.parent

WEIGHBRIDGE_EXPORT_FILE = DATA_DIR / "weighbridge_export.xlsx"
ASSIGNMENTS_FILE = DATA_DIR / "assignments.json"

# ---------------------------------------------------------------------------
# Bucket labels
# ---------------------------------------------------------------------------
UNKNOWN_PERSON = "Unknown"
UNASSIGNED = "Unassigned"
UNKNOWN_DATE = "Unknown Date"
UNKNOWN_SHIFT = "Unknown"
UNKNOWN_SITE = "Unknown"

# ---------------------------------------------------------------------------
# Person-name resolution
# ---------------------------------------------------------------------------
# Raw export columns tried, in order, after the canonical `person` field
PERSON_FALLBACK_COLUMNS = [
    "User Full Name",
    "Driver Name",
    "Name",
    "Driver",
    "Owner Name",
]

# Compared case-insensitively after trimming
PLACEHOLDER_NAMES = {"n/a", "na", "none", "unknown", "-"}
PLACEHOLDER_PATTERN = re.compile(r"^n\.?a\.?$", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Date resolution
# ---------------------------------------------------------------------------
DATE_FALLBACK_COLUMNS = ["date", "Date", "datetime", "Datetime"]

# Column holding the weigh timestamp in HTML/Excel exports of the bridge software
WEIGH_TIME_COLUMN = "W Date Time"
SITE_COLUMN = "Site Name"
USER_COLUMN = "User Full Name"

EXCEL_EPOCH = "1899-12-30"

# ---------------------------------------------------------------------------
# Fine-field registry
# ---------------------------------------------------------------------------
# label: export column label used as raw fallback
# is_fine: True for penalty fines, False for amounts due
FINE_FIELD_REGISTRY: dict[str, dict] = {
    "amount_due": {"label": "Amount Due", "is_fine": False},
    "gvm_fine": {"label": "GVM Fine", "is_fine": True},
    "d1_fine": {"label": "D1 Fine", "is_fine": True},
    "d2_fine": {"label": "D2 Fine", "is_fine": True},
    "d3_fine": {"label": "D3 Fine", "is_fine": True},
    "d4_fine": {"label": "D4 Fine", "is_fine": True},
    "awkward_load_fine": {"label": "Awkward Load Fine", "is_fine": True},
    "amount_due_driver": {"label": "Amount Due Driver", "is_fine": False},
}

# ---------------------------------------------------------------------------
# Shift inference (local hour bands, start inclusive, end exclusive)
# ---------------------------------------------------------------------------
SHIFT_BANDS = [
    ("Morning", 6, 14),
    ("Afternoon", 14, 22),
]
NIGHT_SHIFT = "Night"

# ---------------------------------------------------------------------------
# Alert thresholds
# ---------------------------------------------------------------------------
# impound rates are percentages; underperformance_factor multiplies the
# average records per person
ALERT_THRESHOLDS: dict[str, float] = {
    "impound_danger_rate": 15.0,
    "impound_warning_rate": 10.0,
    "underperformance_factor": 0.5,
}

# ---------------------------------------------------------------------------
# Assignment store
# ---------------------------------------------------------------------------
EXPORT_FORMAT_VERSION = "1.0"
