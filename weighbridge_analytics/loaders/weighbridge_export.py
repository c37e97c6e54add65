"""
Loader for weighbridge transaction exports (one row per weighed truck).

The export is a single-sheet workbook whose first row holds column headers.
Header names vary between bridge software versions and are frequently
renamed by operators, so columns are located by exact label first and then
by case-insensitive substring candidates.
"""

import logging
from datetime import date, datetime
from typing import Any

import openpyxl

from ..config import FINE_FIELD_REGISTRY
from .utils import normalise_bool, pick_first_non_empty, safe_float

logger = logging.getLogger(__name__)

# Candidate substrings per canonical field, most specific first
_HEADER_CANDIDATES: dict[str, list[str]] = {
    "person": ["user full name", "full name", "operator", "person", "name", "weighed by", "user"],
    "impounded": ["in detention", "detention", "impound", "seized", "held"],
    "date": ["date", "time"],
    "truck_id": ["truck", "vehicle", "plate"],
    "amount_due": ["amount due", "total due", "amount owed", "total owed"],
    "gvm_fine": ["gvm fine", "gross vehicle mass fine"],
    "d1_fine": ["d1 fine", "d1fine"],
    "d2_fine": ["d2 fine", "d2fine"],
    "d3_fine": ["d3 fine", "d3fine"],
    "d4_fine": ["d4 fine", "d4fine"],
    "awkward_load_fine": ["awkward load fine", "awkward fine"],
    "amount_due_driver": ["amount due driver", "driver amount", "driver fine"],
}

# Exact labels checked before the fuzzy header map
_PERSON_LABELS = ["User Full Name", "Operator", "Person", "Name"]
_IMPOUND_LABELS = ["In Detention", "Impounded"]
_DATE_LABELS = ["Date", "Datetime"]
_TRUCK_LABELS = ["Truck", "Truck No", "Truck ID"]


def build_header_map(headers: list[str]) -> dict[str, str | None]:
    """Map each canonical field to the first header matching its candidates.

    An exact (case-insensitive) match on a fine field's export label wins
    over substring matching, so "Amount Due" is not mistaken for
    "Amount Due Driver" or vice versa.
    """
    lowered = [str(h).strip().lower() for h in headers]
    header_map: dict[str, str | None] = {}

    for field, candidates in _HEADER_CANDIDATES.items():
        header_map[field] = None

        label = FINE_FIELD_REGISTRY.get(field, {}).get("label")
        if label and label.lower() in lowered:
            header_map[field] = headers[lowered.index(label.lower())]
            continue

        for candidate in candidates:
            idx = next((i for i, h in enumerate(lowered) if candidate in h), None)
            if idx is not None:
                header_map[field] = headers[idx]
                break

    return header_map


def _cell(row: dict, *keys: str | None) -> list[Any]:
    return [row.get(key) for key in keys if key is not None]


def _as_date_string(val: Any) -> str:
    if isinstance(val, (datetime, date)):
        return val.isoformat()
    return "" if val is None else val


def parse_export_rows(rows: list[dict]) -> list[dict]:
    """Convert header-keyed export rows into transaction records.

    Returns
    -------
    List of dicts with keys:
        person, group, shift, impounded, date, truck_id, the eight amount
        fields, total_revenue, raw (the original row)
    """
    if not rows:
        return []

    header_map = build_header_map(list(rows[0].keys()))
    logger.debug("Header map: %s", header_map)

    records = []
    for row in rows:
        person = pick_first_non_empty(*_cell(row, _PERSON_LABELS[0], header_map["person"], *_PERSON_LABELS[1:]))
        impound_values = [v for v in _cell(row, _IMPOUND_LABELS[0], header_map["impounded"], _IMPOUND_LABELS[1]) if v is not None]

        record = {
            "person": str(person).strip(),
            "group": "",
            "shift": "",
            "impounded": normalise_bool(impound_values[0] if impound_values else None),
            "date": _as_date_string(pick_first_non_empty(*_cell(row, header_map["date"], *_DATE_LABELS))),
            "truck_id": str(pick_first_non_empty(*_cell(row, header_map["truck_id"], *_TRUCK_LABELS))).strip(),
        }

        total = 0.0
        for field, meta in FINE_FIELD_REGISTRY.items():
            amount = safe_float(pick_first_non_empty(*_cell(row, meta["label"], header_map[field])))
            record[field] = amount if amount is not None else 0.0
            total += record[field]

        record["total_revenue"] = total
        record["raw"] = row
        records.append(record)

    return records


def load_weighbridge_export(path: str, sheet_name: str | None = None) -> list[dict]:
    """Load transaction records from a weighbridge Excel export.

    Assumptions
    -----------
    - Row 1 holds column headers; data starts at row 2.
    - The first sheet is used unless sheet_name is given and present.
    - Blank rows are skipped; blank cells become ''.

    Returns
    -------
    List of transaction record dicts (see parse_export_rows).
    """
    try:
        wb = openpyxl.load_workbook(path, data_only=True, read_only=True)
    except Exception:
        logger.exception("Failed to open weighbridge export: %s", path)
        raise

    if sheet_name is None or sheet_name not in wb.sheetnames:
        if sheet_name is not None:
            logger.warning("Sheet '%s' not found, using '%s'", sheet_name, wb.sheetnames[0])
        sheet_name = wb.sheetnames[0]

    ws = wb[sheet_name]
    row_iter = ws.iter_rows(values_only=True)
    header_row = next(row_iter, None)

    rows = []
    if header_row is not None:
        headers = [str(h).strip() if h is not None else None for h in header_row]
        for values in row_iter:
            if all(v is None or str(v).strip() == "" for v in values):
                continue
            rows.append({
                header: ("" if val is None else val)
                for header, val in zip(headers, values)
                if header
            })

    wb.close()

    if not rows:
        logger.warning("No transaction rows found in %s [%s]", path, sheet_name)

    records = parse_export_rows(rows)
    logger.info("Loaded %d transaction records from %s [%s]", len(records), path, sheet_name)
    return records
