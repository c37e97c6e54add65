"""
Analytics engine — folds weighbridge transaction records into a report.

compute_report() is a pure function: a single ordered pass over the records
builds per-person, per-group, per-shift and per-day aggregates, from which the
summary statistics, trend series and alerts are derived. The returned report
is a plain dict of built-in types, safe to serialise to JSON.
"""

import logging
from collections.abc import Mapping, Sequence

import pandas as pd

from .config import ALERT_THRESHOLDS, UNASSIGNED, UNKNOWN_DATE
from .errors import InvalidInput
from .loaders.utils import normalise_bool
from .resolve import (
    day_key,
    is_identified,
    resolve_assignment,
    resolve_person,
    row_revenue,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def validate_records(records) -> list:
    if isinstance(records, pd.DataFrame):
        return records.to_dict("records")
    if (
        records is None
        or isinstance(records, (str, bytes, Mapping))
        or not isinstance(records, Sequence)
    ):
        raise InvalidInput(
            f"records must be a sequence of mappings, got {type(records).__name__}"
        )
    for idx, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise InvalidInput(
                f"record {idx} must be a mapping, got {type(record).__name__}"
            )
    return list(records)


def validate_mapping(mapping, name: str) -> Mapping:
    if not isinstance(mapping, Mapping):
        raise InvalidInput(f"{name} must be a mapping, got {type(mapping).__name__}")
    return mapping


def _resolve_thresholds(overrides: Mapping | None) -> dict[str, float]:
    limits = dict(ALERT_THRESHOLDS)
    if overrides is None:
        return limits
    validate_mapping(overrides, "thresholds")
    unknown = set(overrides) - set(ALERT_THRESHOLDS)
    if unknown:
        raise InvalidInput(f"Unknown alert thresholds: {sorted(unknown)}")
    for key, val in overrides.items():
        try:
            limits[key] = float(val)
        except (TypeError, ValueError):
            raise InvalidInput(f"Threshold {key!r} must be numeric, got {val!r}") from None
    return limits


# ---------------------------------------------------------------------------
# Aggregation helpers
# ---------------------------------------------------------------------------

def _accumulate(bucket: dict, key: str, impounded: bool, revenue: float) -> None:
    entry = bucket.setdefault(key, {"count": 0, "impounded": 0, "revenue": 0.0})
    entry["count"] += 1
    entry["revenue"] += revenue
    if impounded:
        entry["impounded"] += 1


def _top_entry(bucket: dict, names: list[str], field: str) -> dict | None:
    """Entry with the largest `field`; ties go to the first name seen."""
    best_name = None
    best_value = None
    for name in names:
        value = bucket[name][field]
        if best_value is None or value > best_value:
            best_name, best_value = name, value
    if best_name is None:
        return None
    return {"name": best_name, field: best_value}


def _people(n: int) -> str:
    return "1 person" if n == 1 else f"{n} people"


def build_alerts(
    impounded_rate: float,
    avg_records_per_person: float,
    per_person: dict,
    identified: list[str],
    person_to_group: Mapping,
    person_to_shift: Mapping,
    thresholds: Mapping | None = None,
) -> list[dict]:
    """Return advisory alerts in evaluation order.

    Rules
    -----
    - impound rate above impound_danger_rate -> one "danger" alert,
      otherwise above impound_warning_rate -> one "warning" alert.
    - identified people with fewer records than
      avg_records_per_person * underperformance_factor -> one "warning".
    - identified people missing a group or a shift -> one "info".
    """
    limits = _resolve_thresholds(thresholds)
    alerts = []

    if impounded_rate > limits["impound_danger_rate"]:
        alerts.append({
            "severity": "danger",
            "message": f"High impound rate: {impounded_rate:.1f}% of weighed trucks were impounded",
        })
    elif impounded_rate > limits["impound_warning_rate"]:
        alerts.append({
            "severity": "warning",
            "message": f"Elevated impound rate: {impounded_rate:.1f}% of weighed trucks were impounded",
        })

    factor = limits["underperformance_factor"]
    cutoff = avg_records_per_person * factor
    underperformers = [name for name in identified if per_person[name]["count"] < cutoff]
    if underperformers:
        alerts.append({
            "severity": "warning",
            "message": (
                f"{_people(len(underperformers))} below {factor:.0%} of the average "
                f"of {avg_records_per_person:.1f} records per person"
            ),
        })

    unassigned = [
        name for name in identified
        if resolve_assignment(name, person_to_group) == UNASSIGNED
        or resolve_assignment(name, person_to_shift) == UNASSIGNED
    ]
    if unassigned:
        alerts.append({
            "severity": "info",
            "message": f"{_people(len(unassigned))} without a group or shift assignment",
        })

    return alerts


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

def compute_report(
    records,
    person_to_group: Mapping,
    person_to_shift: Mapping,
    thresholds: Mapping | None = None,
) -> dict:
    """Aggregate transaction records into an analytics report.

    Parameters
    ----------
    records : Sequence of record mappings (or a DataFrame of records), in
              upload order.
    person_to_group : Person name -> group name. Missing means "Unassigned".
    person_to_shift : Person name -> shift name. Missing means "Unassigned".
    thresholds : Optional overrides for config.ALERT_THRESHOLDS.

    Returns
    -------
    Dict with structure:
    {
        "total_records": 3, "total_impounded": 1, "total_revenue": 175.0,
        "per_person": {"John": {"count": 2, "impounded": 0, "revenue": 150.0}, ...},
        "per_group": {...}, "per_shift": {...}, "per_day": {...},
        "trend": [{"date": "2024-01-01", "count": 2, "impounded": 1, "revenue": 125.0}, ...],
        "people_rows": [{"person": ..., "group": ..., "shift": ..., "count": ...,
                         "impounded": ..., "revenue": ...}, ...],
        "stats": {"unique_people": 2, "avg_records_per_person": 1.5,
                  "impounded_rate": 33.3, "top_performer": {"name", "count"},
                  "top_revenue_performer": {"name", "revenue"},
                  "top_group": {"name", "count", "percentage"}},
        "alerts": [{"severity": "warning", "message": "..."}],
    }

    Raises
    ------
    InvalidInput if records is not a sequence of mappings or an assignment
    argument is not a mapping.
    """
    rows = validate_records(records)
    validate_mapping(person_to_group, "person_to_group")
    validate_mapping(person_to_shift, "person_to_shift")
    limits = _resolve_thresholds(thresholds)

    per_person: dict[str, dict] = {}
    per_group: dict[str, dict] = {}
    per_shift: dict[str, dict] = {}
    per_day: dict[str, dict] = {}
    total_impounded = 0
    total_revenue = 0.0

    for record in rows:
        person = resolve_person(record)
        group = resolve_assignment(person, person_to_group)
        shift = resolve_assignment(person, person_to_shift)
        day = day_key(record)
        impounded = normalise_bool(record.get("impounded"))
        revenue = row_revenue(record)

        _accumulate(per_person, person, impounded, revenue)
        _accumulate(per_group, group, impounded, revenue)
        _accumulate(per_shift, shift, impounded, revenue)
        _accumulate(per_day, day, impounded, revenue)

        total_revenue += revenue
        if impounded:
            total_impounded += 1

    total = len(rows)

    # YYYY-MM-DD sorts chronologically
    trend = [
        {"date": day, **entry}
        for day, entry in sorted(per_day.items())
        if day != UNKNOWN_DATE
    ]
    if UNKNOWN_DATE in per_day:
        logger.warning(
            "%d records have no parseable date and are excluded from the trend",
            per_day[UNKNOWN_DATE]["count"],
        )

    identified = [name for name in per_person if is_identified(name)]
    unique_people = len(identified)
    avg_records = total / unique_people if unique_people else 0.0
    impounded_rate = total_impounded / total * 100 if total else 0.0

    top_group = _top_entry(per_group, list(per_group), "count")
    if top_group is not None:
        top_group["percentage"] = top_group["count"] / total * 100

    stats = {
        "unique_people": unique_people,
        "avg_records_per_person": avg_records,
        "impounded_rate": impounded_rate,
        "top_performer": _top_entry(per_person, identified, "count"),
        "top_revenue_performer": _top_entry(per_person, identified, "revenue"),
        "top_group": top_group,
    }

    people_rows = [
        {
            "person": name,
            "group": resolve_assignment(name, person_to_group),
            "shift": resolve_assignment(name, person_to_shift),
            **per_person[name],
        }
        for name in sorted(per_person)
    ]

    alerts = build_alerts(
        impounded_rate,
        avg_records,
        per_person,
        identified,
        person_to_group,
        person_to_shift,
        limits,
    )

    logger.info(
        "Computed report over %d records: %d people, %d groups, %d shifts, %d alerts",
        total, unique_people, len(per_group), len(per_shift), len(alerts),
    )

    return {
        "total_records": total,
        "total_impounded": total_impounded,
        "total_revenue": total_revenue,
        "per_person": per_person,
        "per_group": per_group,
        "per_shift": per_shift,
        "per_day": per_day,
        "trend": trend,
        "people_rows": people_rows,
        "stats": stats,
        "alerts": alerts,
    }
