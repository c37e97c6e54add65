"""
Revenue computation — totals, fine-type breakdown, and revenue rankings by
person, group, shift and month.
"""

import logging
from collections.abc import Mapping

from .analytics import validate_mapping, validate_records
from .config import FINE_FIELD_REGISTRY
from .resolve import fine_amounts, parse_record_date, resolve_assignment, resolve_person

logger = logging.getLogger(__name__)


def _ranked(totals: dict[str, float]) -> list[dict]:
    # sorted() is stable, so equal revenue keeps first-seen order
    return [
        {"name": name, "revenue": revenue}
        for name, revenue in sorted(totals.items(), key=lambda item: item[1], reverse=True)
    ]


def compute_revenue_summary(
    records,
    person_to_group: Mapping,
    person_to_shift: Mapping,
) -> dict:
    """Summarise fine and amount-due revenue.

    total_fines covers the six penalty fines only; the two amount-due fields
    count towards total_revenue but not total_fines. Records without a
    parseable date are left out of monthly_revenue.

    Returns
    -------
    Dict with structure:
    {
        "total_revenue": 175.0,
        "total_transactions": 3,
        "average_revenue": 58.33,
        "total_fines": 75.0,
        "fine_breakdown": [{"type": "Amount Due", "amount": 100.0}, ...],
        "revenue_by_person": [{"name": "John", "revenue": 150.0}, ...],
        "revenue_by_group": [...],
        "revenue_by_shift": [...],
        "monthly_revenue": [{"month": "2024-01", "revenue": 175.0}, ...],
    }
    """
    rows = validate_records(records)
    validate_mapping(person_to_group, "person_to_group")
    validate_mapping(person_to_shift, "person_to_shift")

    total_revenue = 0.0
    total_fines = 0.0
    by_field = {field: 0.0 for field in FINE_FIELD_REGISTRY}
    by_person: dict[str, float] = {}
    by_group: dict[str, float] = {}
    by_shift: dict[str, float] = {}
    by_month: dict[str, float] = {}

    for record in rows:
        amounts = fine_amounts(record)
        revenue = sum(amounts.values())
        total_revenue += revenue

        for field, amount in amounts.items():
            by_field[field] += amount
            if FINE_FIELD_REGISTRY[field]["is_fine"]:
                total_fines += amount

        person = resolve_person(record)
        group = resolve_assignment(person, person_to_group)
        shift = resolve_assignment(person, person_to_shift)
        by_person[person] = by_person.get(person, 0.0) + revenue
        by_group[group] = by_group.get(group, 0.0) + revenue
        by_shift[shift] = by_shift.get(shift, 0.0) + revenue

        ts = parse_record_date(record)
        if ts is not None:
            month = ts.strftime("%Y-%m")
            by_month[month] = by_month.get(month, 0.0) + revenue

    count = len(rows)
    summary = {
        "total_revenue": total_revenue,
        "total_transactions": count,
        "average_revenue": total_revenue / count if count else 0.0,
        "total_fines": total_fines,
        "fine_breakdown": [
            {"type": FINE_FIELD_REGISTRY[field]["label"], "amount": amount}
            for field, amount in by_field.items()
            if amount > 0
        ],
        "revenue_by_person": _ranked(by_person),
        "revenue_by_group": _ranked(by_group),
        "revenue_by_shift": _ranked(by_shift),
        "monthly_revenue": [
            {"month": month, "revenue": by_month[month]} for month in sorted(by_month)
        ],
    }

    logger.info(
        "Summarised revenue over %d transactions: total %.2f, fines %.2f",
        count, total_revenue, total_fines,
    )
    return summary
