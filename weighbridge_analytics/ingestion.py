"""
Standalone export aggregation with timestamp-inferred shifts.

Unlike compute_report(), which takes shifts from the user's assignment
mapping, this summarises a raw weighbridge export on its own: the shift of
each transaction is inferred from the hour of its weigh timestamp, and
revenue is grouped by operator, site, and inferred shift.
"""

import logging
from collections.abc import Mapping

from .analytics import validate_records
from .config import SITE_COLUMN, UNKNOWN_SITE, USER_COLUMN, WEIGH_TIME_COLUMN
from .loaders.utils import pick_first_non_empty
from .resolve import infer_shift, is_placeholder_name, resolve_person, row_revenue

logger = logging.getLogger(__name__)


def _add(groups: dict, key: str, revenue: float) -> None:
    entry = groups.setdefault(key, {"total": 0.0, "count": 0})
    entry["total"] += revenue
    entry["count"] += 1


def _sorted_desc(groups: dict) -> list[dict]:
    return [
        {"key": key, "total": entry["total"], "count": entry["count"]}
        for key, entry in sorted(groups.items(), key=lambda item: item[1]["total"], reverse=True)
    ]


def aggregate_export(records) -> dict:
    """Aggregate an export's revenue by person, site and inferred shift.

    Assumptions
    -----------
    - Person is the raw "User Full Name" (who operated the bridge); other
      name columns are only used when it is blank or a placeholder.
    - Weigh timestamp is in the raw "W Date Time" column; the record's
      canonical date is used when that column is absent.
    - Site is in the raw "Site Name" column, "Unknown" otherwise.

    Returns
    -------
    Dict with keys rows_processed, overall_total, by_person, by_site and
    by_shift; each grouping is a list of {key, total, count} sorted by total
    descending.
    """
    rows = validate_records(records)

    by_person: dict[str, dict] = {}
    by_site: dict[str, dict] = {}
    by_shift: dict[str, dict] = {}
    overall_total = 0.0

    for record in rows:
        raw = record.get("raw")
        if not isinstance(raw, Mapping):
            raw = {}
        revenue = row_revenue(record)
        overall_total += revenue

        weighed_at = pick_first_non_empty(raw.get(WEIGH_TIME_COLUMN), record.get("date"))
        site = pick_first_non_empty(raw.get(SITE_COLUMN)) or UNKNOWN_SITE
        user = raw.get(USER_COLUMN)
        person = resolve_person(record) if is_placeholder_name(user) else str(user).strip()

        _add(by_person, person, revenue)
        _add(by_site, str(site).strip(), revenue)
        _add(by_shift, infer_shift(weighed_at), revenue)

    logger.info(
        "Aggregated %d export rows: overall total %.2f across %d sites",
        len(rows), overall_total, len(by_site),
    )

    return {
        "rows_processed": len(rows),
        "overall_total": overall_total,
        "by_person": _sorted_desc(by_person),
        "by_site": _sorted_desc(by_site),
        "by_shift": _sorted_desc(by_shift),
    }
