"""
Simulated data generator for the weighbridge analytics dashboard.

Generates realistic transaction records based on typical weighbridge export
contents: a handful of operators, a share of placeholder names, impounds,
and overload fines. All values are synthetic.
"""

import numpy as np
import pandas as pd

from .config import FINE_FIELD_REGISTRY

# Seed for reproducibility
_SEED = 42

# ---------------------------------------------------------------------------
# Typical bridge parameters
# ---------------------------------------------------------------------------
_OPERATORS = [
    ("Chanda Mwale", "Alpha", "Morning"),
    ("Bwalya Phiri", "Alpha", "Afternoon"),
    ("Mutale Banda", "Bravo", "Morning"),
    ("Natasha Zulu", "Bravo", "Night"),
    ("Kelvin Tembo", "Charlie", "Afternoon"),
    ("Grace Mumba", "", ""),
]

# Relative weighing volume per operator, same order as _OPERATORS
_VOLUME_WEIGHTS = [0.24, 0.22, 0.18, 0.16, 0.14, 0.06]

_PLACEHOLDERS = ["N/A", "", "-", "none"]
_PLACEHOLDER_SHARE = 0.05

_SITES = ["Kafulafuta", "Kapiri Mposhi", "Mpika"]

# field -> (probability of being charged, mean amount in ZMW)
_FINE_PARAMS = {
    "amount_due": (0.35, 450.0),
    "gvm_fine": (0.12, 1_800.0),
    "d1_fine": (0.05, 600.0),
    "d2_fine": (0.05, 600.0),
    "d3_fine": (0.03, 750.0),
    "d4_fine": (0.02, 750.0),
    "awkward_load_fine": (0.02, 1_200.0),
    "amount_due_driver": (0.08, 300.0),
}

_IMPOUND_RATE = 0.08


def generate_records(
    start_date: str = "2025-06-30",
    days: int = 31,
    per_day: int = 40,
    seed: int = _SEED,
) -> list[dict]:
    """Generate simulated transaction records in upload order.

    Each record carries canonical fields plus a `raw` row with the export
    column labels, as parse_export_rows() would produce.
    """
    rng = np.random.default_rng(seed)
    names = [name for name, _, _ in _OPERATORS]
    start = pd.Timestamp(start_date)
    records = []

    for day in range(days):
        for _ in range(per_day):
            weighed_at = start + pd.Timedelta(days=day, seconds=int(rng.integers(0, 86_400)))

            if rng.random() < _PLACEHOLDER_SHARE:
                person = str(rng.choice(_PLACEHOLDERS))
            else:
                person = str(rng.choice(names, p=_VOLUME_WEIGHTS))

            record = {
                "person": person,
                "group": "",
                "shift": "",
                "impounded": bool(rng.random() < _IMPOUND_RATE),
                "date": weighed_at.isoformat(),
                "truck_id": f"AB{int(rng.integers(1000, 9999))}",
            }
            for field, (probability, mean) in _FINE_PARAMS.items():
                charged = rng.random() < probability
                record[field] = round(float(rng.exponential(mean)), 2) if charged else 0.0

            record["total_revenue"] = sum(record[f] for f in FINE_FIELD_REGISTRY)
            record["raw"] = {
                "User Full Name": person,
                "W Date Time": weighed_at.strftime("%m/%d/%Y %I:%M:%S %p"),
                "Site Name": str(rng.choice(_SITES)),
                "Truck No": record["truck_id"],
                "In Detention": "Yes" if record["impounded"] else "No",
                **{meta["label"]: record[f] for f, meta in FINE_FIELD_REGISTRY.items()},
            }
            records.append(record)

    return records


def generate_assignments() -> tuple[dict[str, str], dict[str, str]]:
    """Return (person_to_group, person_to_shift) for the simulated operators.

    One operator is deliberately left unassigned.
    """
    person_to_group = {name: group for name, group, _ in _OPERATORS if group}
    person_to_shift = {name: shift for name, _, shift in _OPERATORS if shift}
    return person_to_group, person_to_shift
