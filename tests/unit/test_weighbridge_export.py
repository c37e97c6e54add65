import openpyxl
import pytest

from weighbridge_analytics.loaders import (
    build_header_map,
    load_weighbridge_export,
    parse_export_rows,
)


def test_header_map_prefers_exact_fine_labels():
    headers = ["Amount Due Driver", "Amount Due", "GVM Fine", "User Full Name", "W Date Time"]
    header_map = build_header_map(headers)

    assert header_map["amount_due"] == "Amount Due"
    assert header_map["amount_due_driver"] == "Amount Due Driver"
    assert header_map["gvm_fine"] == "GVM Fine"
    assert header_map["person"] == "User Full Name"
    assert header_map["date"] == "W Date Time"
    assert header_map["d1_fine"] is None


def test_header_map_fuzzy_matches_renamed_columns():
    headers = ["Weighed By", "Detention Status", "Vehicle Plate", "Total Owed", "Timestamp"]
    header_map = build_header_map(headers)

    assert header_map["person"] == "Weighed By"
    assert header_map["impounded"] == "Detention Status"
    assert header_map["truck_id"] == "Vehicle Plate"
    assert header_map["amount_due"] == "Total Owed"
    assert header_map["date"] == "Timestamp"


def test_parse_export_rows_builds_records():
    rows = [
        {"User Full Name": " Chanda ", "In Detention": "Yes", "W Date Time": "2025-06-30 07:15",
         "Truck No": "AB1", "Amount Due": "100", "GVM Fine": "n/a", "D1 Fine": 25},
    ]
    [record] = parse_export_rows(rows)

    assert record["person"] == "Chanda"
    assert record["impounded"] is True
    assert record["date"] == "2025-06-30 07:15"
    assert record["truck_id"] == "AB1"
    assert record["amount_due"] == 100.0
    assert record["gvm_fine"] == 0.0
    assert record["d1_fine"] == 25.0
    assert record["d4_fine"] == 0.0
    assert record["total_revenue"] == 125.0
    assert record["raw"] is rows[0]
    assert record["group"] == "" and record["shift"] == ""


def test_parse_export_rows_empty():
    assert parse_export_rows([]) == []


def test_load_weighbridge_export(export_workbook):
    records = load_weighbridge_export(str(export_workbook))

    assert len(records) == 3
    assert [r["person"] for r in records] == ["Chanda Mwale", "Bwalya Phiri", "N/A"]
    assert [r["impounded"] for r in records] == [False, True, False]
    assert records[1]["amount_due"] == 1250.5
    assert records[1]["total_revenue"] == pytest.approx(2100.5)
    assert records[0]["raw"]["Site Name"] == "Kafulafuta"
    assert records[0]["date"] == "6/30/2025 7:15:00 AM"


def test_load_weighbridge_export_converts_datetime_cells(tmp_path):
    from datetime import datetime

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(["Date", "Name", "Amount Due"])
    ws.append([datetime(2024, 1, 2, 9, 0), "Mary", 10])
    path = tmp_path / "dated.xlsx"
    wb.save(path)

    [record] = load_weighbridge_export(str(path))
    assert record["date"] == "2024-01-02T09:00:00"
    assert record["person"] == "Mary"


def test_load_weighbridge_export_missing_sheet_falls_back(export_workbook):
    records = load_weighbridge_export(str(export_workbook), sheet_name="Nope")
    assert len(records) == 3


def test_load_weighbridge_export_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_weighbridge_export(str(tmp_path / "missing.xlsx"))
