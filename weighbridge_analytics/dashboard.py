"""
Dashboard-ready output functions.

These are the entry points for the Streamlit front end. Each function takes
a report from compute_report() (or a revenue summary) and returns plain
dicts or DataFrames suitable for rendering cards, charts, and tables.
"""

import logging

import pandas as pd

logger = logging.getLogger(__name__)

_ENTITY_KEYS = {
    "person": "per_person",
    "group": "per_group",
    "shift": "per_shift",
}

_PEOPLE_COLUMNS = ["person", "group", "shift", "count", "impounded", "revenue"]
_TREND_COLUMNS = ["date", "count", "impounded", "revenue"]


def get_summary_cards(report: dict) -> dict:
    """Flat dict of headline numbers for the metric cards.

    Top performer fields are None when no identified person exists.
    """
    stats = report["stats"]
    top = stats["top_performer"] or {}
    top_revenue = stats["top_revenue_performer"] or {}
    top_group = stats["top_group"] or {}

    return {
        "total_trucks": report["total_records"],
        "total_impounded": report["total_impounded"],
        "total_revenue": report["total_revenue"],
        "unique_people": stats["unique_people"],
        "avg_records_per_person": round(stats["avg_records_per_person"], 2),
        "impounded_rate": round(stats["impounded_rate"], 2),
        "top_performer": top.get("name"),
        "top_performer_count": top.get("count"),
        "top_revenue_performer": top_revenue.get("name"),
        "top_revenue": top_revenue.get("revenue"),
        "top_group": top_group.get("name"),
        "top_group_pct": round(top_group["percentage"], 2) if top_group else None,
    }


def get_entity_table(report: dict, entity: str) -> pd.DataFrame:
    """Per-person, per-group, or per-shift aggregates, busiest first.

    Returns
    -------
    DataFrame with columns: <entity>, count, impounded, revenue, share_pct
    """
    if entity not in _ENTITY_KEYS:
        raise ValueError(f"entity must be one of {sorted(_ENTITY_KEYS)}, got {entity!r}")

    bucket = report[_ENTITY_KEYS[entity]]
    if not bucket:
        return pd.DataFrame(columns=[entity, "count", "impounded", "revenue", "share_pct"])

    df = pd.DataFrame(
        [{entity: name, **entry} for name, entry in bucket.items()]
    )
    total = report["total_records"]
    df["share_pct"] = df["count"] / total * 100 if total else 0.0

    # stable sort keeps first-seen order among equal counts
    return df.sort_values("count", ascending=False, kind="stable").reset_index(drop=True)


def get_people_table(report: dict) -> pd.DataFrame:
    """Summary table: one row per person with group, shift and totals."""
    if not report["people_rows"]:
        return pd.DataFrame(columns=_PEOPLE_COLUMNS)
    return pd.DataFrame(report["people_rows"], columns=_PEOPLE_COLUMNS)


def get_trend_frame(report: dict) -> pd.DataFrame:
    """Daily trend with a datetime 'date' column for time-axis charts."""
    if not report["trend"]:
        logger.warning("No dated records — trend is empty")
        return pd.DataFrame(columns=_TREND_COLUMNS)

    df = pd.DataFrame(report["trend"], columns=_TREND_COLUMNS)
    df["date"] = pd.to_datetime(df["date"], format="%Y-%m-%d")
    return df


def get_alerts_frame(report: dict) -> pd.DataFrame:
    """Alerts as a two-column table: severity, message."""
    return pd.DataFrame(report["alerts"], columns=["severity", "message"])


def get_revenue_breakdown(revenue_summary: dict) -> pd.DataFrame:
    """Fine-type breakdown from compute_revenue_summary(), largest first."""
    df = pd.DataFrame(revenue_summary["fine_breakdown"], columns=["type", "amount"])
    if df.empty:
        return df
    return df.sort_values("amount", ascending=False, kind="stable").reset_index(drop=True)
