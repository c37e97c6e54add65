import pytest

from weighbridge_analytics import InvalidInput
from weighbridge_analytics.ingestion import aggregate_export


def _row(user, weighed_at, site, amount_due=0.0, gvm_fine=0.0):
    return {
        "person": user,
        "amount_due": amount_due,
        "gvm_fine": gvm_fine,
        "raw": {"User Full Name": user, "W Date Time": weighed_at, "Site Name": site},
    }


def test_aggregate_export_groups_by_inferred_shift():
    records = [
        _row("Chanda", "6/30/2025 7:15:00 AM", "Kafulafuta", amount_due=100),
        _row("Chanda", "6/30/2025 3:40:00 PM", "Kafulafuta", gvm_fine=300),
        _row("Bwalya", "7/1/2025 11:05:00 PM", "Mpika", amount_due=50),
        _row("Bwalya", "garbage", "Mpika", amount_due=1),
    ]
    summary = aggregate_export(records)

    assert summary["rows_processed"] == 4
    assert summary["overall_total"] == 451
    assert summary["by_shift"] == [
        {"key": "Afternoon", "total": 300.0, "count": 1},
        {"key": "Morning", "total": 100.0, "count": 1},
        {"key": "Night", "total": 50.0, "count": 1},
        {"key": "Unknown", "total": 1.0, "count": 1},
    ]


def test_aggregate_export_sites_and_people_sorted_by_total():
    records = [
        _row("Chanda", "6/30/2025 7:15:00 AM", "Kafulafuta", amount_due=100),
        _row("Bwalya", "6/30/2025 8:00:00 AM", "Mpika", amount_due=400),
        _row("Bwalya", "6/30/2025 9:00:00 AM", "", amount_due=5),
    ]
    summary = aggregate_export(records)

    assert [p["key"] for p in summary["by_person"]] == ["Bwalya", "Chanda"]
    assert summary["by_person"][0] == {"key": "Bwalya", "total": 405.0, "count": 2}
    assert [s["key"] for s in summary["by_site"]] == ["Mpika", "Kafulafuta", "Unknown"]


def test_aggregate_export_person_prefers_raw_user_column():
    records = [
        {"person": "Driver Bob", "amount_due": 10,
         "raw": {"User Full Name": " Chanda ", "W Date Time": "6/30/2025 7:15:00 AM"}},
        {"person": "Driver Bob", "amount_due": 5,
         "raw": {"User Full Name": "N/A", "W Date Time": "6/30/2025 7:20:00 AM"}},
    ]
    summary = aggregate_export(records)

    assert summary["by_person"] == [
        {"key": "Chanda", "total": 10.0, "count": 1},
        {"key": "Driver Bob", "total": 5.0, "count": 1},
    ]


def test_aggregate_export_falls_back_to_record_date():
    summary = aggregate_export([{"person": "A", "date": "2025-06-30 15:00", "amount_due": 1}])
    assert summary["by_shift"][0]["key"] == "Afternoon"


def test_aggregate_export_empty():
    summary = aggregate_export([])
    assert summary == {
        "rows_processed": 0,
        "overall_total": 0.0,
        "by_person": [],
        "by_site": [],
        "by_shift": [],
    }


def test_aggregate_export_rejects_non_sequence():
    with pytest.raises(InvalidInput):
        aggregate_export("export.html")
