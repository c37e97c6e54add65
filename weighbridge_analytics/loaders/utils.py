"""
Shared utilities for data ingestion: date normalisation, numeric and
boolean coercion, first-non-empty selection.
"""

import logging
import numbers
from datetime import date, datetime
from typing import Any

import pandas as pd

from ..config import EXCEL_EPOCH

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"yes", "true", "1", "y"}


def normalise_date(val: Any) -> pd.Timestamp | None:
    """Convert Excel serial number, datetime, or date string to pd.Timestamp.

    Excel serial numbers use the 1899-12-30 epoch; the fractional part is
    kept as time of day. Returns None for empty or unparseable values,
    never NaT. Text without any digit ("now", "today") is unparseable.
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, (pd.Timestamp, datetime, date)):
        ts = pd.Timestamp(val)
        return None if pd.isna(ts) else ts
    if isinstance(val, numbers.Real):
        if pd.isna(val):
            return None
        try:
            return pd.Timestamp(EXCEL_EPOCH) + pd.Timedelta(days=float(val))
        except (ValueError, OverflowError):
            logger.debug("Could not convert serial number %s to date", val)
            return None
    text = str(val).strip()
    # pandas reads "now"/"today" as the current clock time
    if not any(ch.isdigit() for ch in text):
        if text:
            logger.debug("Rejected date value without digits: %s", val)
        return None
    try:
        ts = pd.Timestamp(text)
    except (ValueError, TypeError, OverflowError):
        logger.debug("Could not parse date value: %s", val)
        return None
    return None if pd.isna(ts) else ts


def safe_float(val: Any) -> float | None:
    """Coerce a value to float, returning None for non-numeric values.

    Thousands separators and surrounding whitespace are tolerated
    ("1,250.00" -> 1250.0). NaN and infinities are treated as non-numeric.
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str):
        val = val.strip().replace(",", "")
        # Skip formula strings and text labels
        if val.startswith("=") or not val:
            return None
    try:
        result = float(val)
    except (ValueError, TypeError):
        return None
    if pd.isna(result) or result in (float("inf"), float("-inf")):
        return None
    return result


def normalise_bool(val: Any) -> bool:
    """Interpret an impound/detention cell as a boolean.

    Booleans pass through, numbers are True when non-zero, and strings are
    True only for yes/true/1/y (case-insensitive).
    """
    if isinstance(val, bool):
        return val
    if isinstance(val, numbers.Real):
        return not pd.isna(val) and val != 0
    if val is None:
        return False
    return str(val).strip().lower() in _TRUE_STRINGS


def pick_first_non_empty(*values: Any) -> Any:
    """Return the first value that is not None and not blank, else ''."""
    for val in values:
        if val is None:
            continue
        if isinstance(val, float) and pd.isna(val):
            continue
        if str(val).strip():
            return val
    return ""
