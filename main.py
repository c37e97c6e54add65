"""
Weighbridge Analytics — End-to-end analytics pipeline.

Runs the full pipeline from a weighbridge export (or simulated records) to
dashboard-ready outputs and prints smoke-test summaries.

Usage:
    python main.py [--file export.xlsx] [--assignments assignments.json]
                   [--inferred-shifts]
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from weighbridge_analytics.analytics import compute_report
from weighbridge_analytics.assignments import AssignmentStore
from weighbridge_analytics.config import ASSIGNMENTS_FILE, WEIGHBRIDGE_EXPORT_FILE
from weighbridge_analytics.dashboard import (
    get_alerts_frame,
    get_entity_table,
    get_people_table,
    get_revenue_breakdown,
    get_summary_cards,
    get_trend_frame,
)
from weighbridge_analytics.ingestion import aggregate_export
from weighbridge_analytics.loaders import load_weighbridge_export
from weighbridge_analytics.revenue import compute_revenue_summary
from weighbridge_analytics.simulator import generate_assignments, generate_records

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Weighbridge analytics smoke pipeline")
    parser.add_argument("--file", type=Path, default=WEIGHBRIDGE_EXPORT_FILE,
                        help="Weighbridge Excel export (simulated data if missing)")
    parser.add_argument("--assignments", type=Path, default=ASSIGNMENTS_FILE,
                        help="Assignments JSON saved by the dashboard")
    parser.add_argument("--inferred-shifts", action="store_true",
                        help="Also print the export aggregation with timestamp-inferred shifts")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    """Run the full analytics pipeline and print smoke-test outputs."""
    args = _parse_args(argv)

    print("=" * 70)
    print("  WEIGHBRIDGE ANALYTICS")
    print("  Analytics Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Load source data
    # ------------------------------------------------------------------
    print("[ 1 ] LOADING SOURCE DATA")
    print("-" * 40)

    if args.file.exists():
        records = load_weighbridge_export(str(args.file))
        store = AssignmentStore.load(args.assignments)
    else:
        logger.warning("Export %s not found, using simulated records", args.file)
        records = generate_records()
        store = AssignmentStore()
        person_to_group, person_to_shift = generate_assignments()
        for name in set(person_to_group) | set(person_to_shift):
            store.add_person(name, person_to_group.get(name, ""), person_to_shift.get(name, ""))

    added = store.register_people(records)
    person_to_group, person_to_shift = store.to_mappings()
    print(f"\nRecords: {len(records)} loaded")
    print(f"People on register: {len(store.people)} ({added} new from this export)")

    duplicates = store.duplicate_names_summary(records)
    print(f"Unique names in export: {duplicates['total_unique_names']}")

    # ------------------------------------------------------------------
    # 2. Analytics report
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] ANALYTICS REPORT")
    print("-" * 40)

    report = compute_report(records, person_to_group, person_to_shift)

    cards = get_summary_cards(report)
    for key, value in cards.items():
        print(f"  {key:24s} | {value}")

    for entity in ("person", "group", "shift"):
        print(f"\nTrucks per {entity}:")
        print(get_entity_table(report, entity).to_string(index=False))

    print("\nSummary table:")
    print(get_people_table(report).to_string(index=False))

    trend = get_trend_frame(report)
    print(f"\nDaily trend: {len(trend)} days")
    if not trend.empty:
        print(trend.head(10).to_string(index=False))

    alerts = get_alerts_frame(report)
    print("\nAlerts:")
    print(alerts.to_string(index=False) if not alerts.empty else "  none")

    # ------------------------------------------------------------------
    # 3. Revenue
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] REVENUE")
    print("-" * 40)

    revenue = compute_revenue_summary(records, person_to_group, person_to_shift)
    print(f"\nTotal revenue: {revenue['total_revenue']:,.2f}")
    print(f"Total fines:   {revenue['total_fines']:,.2f}")
    print(f"Average/truck: {revenue['average_revenue']:,.2f}")
    breakdown = get_revenue_breakdown(revenue)
    if not breakdown.empty:
        print(breakdown.to_string(index=False))

    if args.inferred_shifts:
        summary = aggregate_export(records)
        print("\nRevenue by inferred shift:")
        for entry in summary["by_shift"]:
            print(f"  {entry['key']:10s} | {entry['total']:,.2f} ({entry['count']} rows)")
        print("\nTop 10 persons by revenue:")
        for i, entry in enumerate(summary["by_person"][:10], start=1):
            print(f"  {i}. {entry['key']} | {entry['total']:,.2f} ({entry['count']} rows)")

    # ------------------------------------------------------------------
    # 4. Reconciliation checks
    # ------------------------------------------------------------------
    print("\n")
    print("[ 4 ] RECONCILIATION CHECKS")
    print("-" * 40)

    total = report["total_records"]
    for key in ("per_person", "per_group", "per_shift", "per_day"):
        bucket_total = sum(entry["count"] for entry in report[key].values())
        ok = bucket_total == total
        print(f"  [{'PASS' if ok else 'FAIL'}] {key} counts sum to {bucket_total} (records: {total})")

    rate = report["stats"]["impounded_rate"]
    ok = 0 <= rate <= 100
    print(f"  [{'PASS' if ok else 'FAIL'}] Impound rate {rate:.2f}% within [0, 100]")

    ok = abs(report["total_revenue"] - revenue["total_revenue"]) < 1e-6
    print(f"  [{'PASS' if ok else 'FAIL'}] Report and revenue summary totals agree")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
