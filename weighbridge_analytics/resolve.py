"""
Per-record field resolution — pure functions with no side effects.

Resolves the person name, assignment bucket, day bucket, and revenue of a
single transaction record, falling back to the raw export columns kept
under record["raw"] when the canonical fields are absent.
"""

import logging
from collections.abc import Mapping
from typing import Any

import pandas as pd

from .config import (
    DATE_FALLBACK_COLUMNS,
    FINE_FIELD_REGISTRY,
    NIGHT_SHIFT,
    PERSON_FALLBACK_COLUMNS,
    PLACEHOLDER_NAMES,
    PLACEHOLDER_PATTERN,
    SHIFT_BANDS,
    UNASSIGNED,
    UNKNOWN_DATE,
    UNKNOWN_PERSON,
    UNKNOWN_SHIFT,
)
from .loaders.utils import normalise_date, safe_float

logger = logging.getLogger(__name__)


def _raw(record: Mapping) -> Mapping:
    raw = record.get("raw")
    return raw if isinstance(raw, Mapping) else {}


def _is_blank(val: Any) -> bool:
    if val is None:
        return True
    if isinstance(val, float) and pd.isna(val):
        return True
    return not str(val).strip()


def is_placeholder_name(value: Any) -> bool:
    """True if a candidate name is blank or a known placeholder token.

    Placeholders are matched case-insensitively after trimming: n/a, na,
    none, unknown, '-', and the n.a. family (n.a, na., n.a.).
    """
    if _is_blank(value):
        return True
    text = str(value).strip()
    return text.lower() in PLACEHOLDER_NAMES or bool(PLACEHOLDER_PATTERN.match(text))


def resolve_person(record: Mapping) -> str:
    """Return the first acceptable person name for a record, trimmed.

    Candidate order: canonical `person`, then the raw export columns in
    PERSON_FALLBACK_COLUMNS order. Returns "Unknown" if none is acceptable.
    """
    raw = _raw(record)
    candidates = [record.get("person")]
    candidates.extend(raw.get(col) for col in PERSON_FALLBACK_COLUMNS)

    for candidate in candidates:
        if not is_placeholder_name(candidate):
            return str(candidate).strip()
    return UNKNOWN_PERSON


def is_identified(name: str) -> bool:
    """True for resolved names that count as real people."""
    return name != UNKNOWN_PERSON and not is_placeholder_name(name)


def resolve_assignment(name: str, mapping: Mapping) -> str:
    """Look up a person's group or shift; blank or missing -> "Unassigned"."""
    value = mapping.get(name)
    if _is_blank(value):
        return UNASSIGNED
    return str(value).strip()


def parse_record_date(record: Mapping) -> pd.Timestamp | None:
    """Parse the record's date, trying canonical `date` then raw columns.

    The first candidate that parses wins; None if nothing parses.
    """
    raw = _raw(record)
    candidates = [record.get("date")]
    candidates.extend(raw.get(col) for col in DATE_FALLBACK_COLUMNS)

    for candidate in candidates:
        ts = normalise_date(candidate)
        if ts is not None:
            return ts
    return None


def day_key(record: Mapping) -> str:
    """Return the record's calendar day as YYYY-MM-DD, or "Unknown Date"."""
    ts = parse_record_date(record)
    if ts is None:
        return UNKNOWN_DATE
    # Wall-clock date of the timestamp as recorded, no timezone conversion
    return ts.strftime("%Y-%m-%d")


def coerce_amount(val: Any) -> float:
    """Coerce a fine/amount cell to float; anything unusable becomes 0.0."""
    result = safe_float(val)
    return 0.0 if result is None else result


def fine_amounts(record: Mapping) -> dict[str, float]:
    """Return the eight amount fields of a record, keyed by canonical name.

    A canonical field that is missing or blank falls back to the raw export
    column of the same meaning (e.g. gvm_fine -> "GVM Fine").
    """
    raw = _raw(record)
    amounts = {}
    for field, meta in FINE_FIELD_REGISTRY.items():
        val = record.get(field)
        if _is_blank(val):
            val = raw.get(meta["label"])
        amounts[field] = coerce_amount(val)
    return amounts


def row_revenue(record: Mapping) -> float:
    """Sum of the eight fine/amount fields of a record."""
    return sum(fine_amounts(record).values())


def infer_shift(timestamp: Any) -> str:
    """Map a timestamp's local hour to Morning, Afternoon, or Night.

    Morning is 06:00-13:59, Afternoon 14:00-21:59, Night otherwise.
    Unparseable timestamps give "Unknown".
    """
    ts = normalise_date(timestamp)
    if ts is None:
        return UNKNOWN_SHIFT
    for shift, start, end in SHIFT_BANDS:
        if start <= ts.hour < end:
            return shift
    return NIGHT_SHIFT
