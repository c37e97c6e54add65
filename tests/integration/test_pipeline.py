import json

import pandas as pd
import pytest

from weighbridge_analytics.analytics import compute_report
from weighbridge_analytics.assignments import AssignmentStore
from weighbridge_analytics.ingestion import aggregate_export
from weighbridge_analytics.loaders import load_weighbridge_export
from weighbridge_analytics.revenue import compute_revenue_summary
from weighbridge_analytics.simulator import generate_assignments, generate_records


def _assert_reconciles(report):
    total = report["total_records"]
    for key in ("per_person", "per_group", "per_shift", "per_day"):
        assert sum(entry["count"] for entry in report[key].values()) == total
        assert sum(entry["impounded"] for entry in report[key].values()) == report["total_impounded"]


def test_export_to_report(export_workbook, tmp_path):
    records = load_weighbridge_export(str(export_workbook))

    store = AssignmentStore()
    assert store.register_people(records) == 2
    store.assign_group("Chanda Mwale", "Alpha")
    store.assign_shift("Chanda Mwale", "Morning")
    store.save(tmp_path / "assignments.json")

    person_to_group, person_to_shift = AssignmentStore.load(tmp_path / "assignments.json").to_mappings()
    report = compute_report(records, person_to_group, person_to_shift)

    assert report["total_records"] == 3
    assert report["total_impounded"] == 1
    assert report["total_revenue"] == pytest.approx(2200.5)
    assert set(report["per_person"]) == {"Chanda Mwale", "Bwalya Phiri", "Unknown"}
    assert report["per_group"]["Alpha"]["count"] == 1
    assert report["per_group"]["Unassigned"]["count"] == 2
    assert [t["date"] for t in report["trend"]] == ["2025-06-30", "2025-07-01"]
    assert report["stats"]["unique_people"] == 2
    assert report["stats"]["top_revenue_performer"]["name"] == "Bwalya Phiri"
    _assert_reconciles(report)

    revenue = compute_revenue_summary(records, person_to_group, person_to_shift)
    assert revenue["total_revenue"] == pytest.approx(report["total_revenue"])


def test_export_inferred_shift_aggregation(export_workbook):
    summary = aggregate_export(load_weighbridge_export(str(export_workbook)))

    shifts = {entry["key"]: entry["count"] for entry in summary["by_shift"]}
    assert shifts == {"Morning": 1, "Afternoon": 1, "Night": 1}
    assert summary["overall_total"] == pytest.approx(2200.5)


def test_simulated_pipeline_reconciles():
    records = generate_records(days=7, per_day=30)
    person_to_group, person_to_shift = generate_assignments()

    report = compute_report(records, person_to_group, person_to_shift)

    assert report["total_records"] == 210
    assert len(report["trend"]) == 7
    assert "Unknown Date" not in [t["date"] for t in report["trend"]]
    assert 0 <= report["stats"]["impounded_rate"] <= 100
    _assert_reconciles(report)

    revenue = compute_revenue_summary(records, person_to_group, person_to_shift)
    assert revenue["total_revenue"] == pytest.approx(report["total_revenue"])

    # report is plain data
    json.dumps(report)


def test_simulated_records_are_deterministic():
    assert generate_records(days=2, per_day=5, seed=7) == generate_records(days=2, per_day=5, seed=7)
    assert generate_records(days=2, per_day=5, seed=7) != generate_records(days=2, per_day=5, seed=8)


def test_report_accepts_dataframe():
    records = generate_records(days=2, per_day=10)
    person_to_group, person_to_shift = generate_assignments()

    from_list = compute_report(records, person_to_group, person_to_shift)
    from_frame = compute_report(pd.DataFrame(records), person_to_group, person_to_shift)

    assert from_frame["total_records"] == from_list["total_records"]
    assert from_frame["per_person"] == from_list["per_person"]
    assert from_frame["total_revenue"] == pytest.approx(from_list["total_revenue"])


def test_main_runs_on_simulated_data(tmp_path, capsys):
    import main

    main.main(["--file", str(tmp_path / "missing.xlsx"), "--inferred-shifts"])

    out = capsys.readouterr().out
    assert "Pipeline complete." in out
    assert "[PASS]" in out
    assert "[FAIL]" not in out
