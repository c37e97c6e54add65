# Shared pytest fixtures
from __future__ import annotations

from pathlib import Path

import openpyxl
import pytest


@pytest.fixture()
def example_records() -> list[dict]:
    """Three-record scenario: John twice, Jane once (impounded)."""
    return [
        {"person": "John", "amount_due": 100, "date": "2024-01-01"},
        {"person": "John", "gvm_fine": 50, "date": "2024-01-02"},
        {"person": "Jane", "d1_fine": 25, "date": "2024-01-01", "impounded": True},
    ]


@pytest.fixture()
def export_headers() -> list[str]:
    return [
        "W Date Time", "Site Name", "User Full Name", "Truck No", "In Detention",
        "Amount Due", "GVM Fine", "D1 Fine", "D2 Fine", "D3 Fine", "D4 Fine",
        "Awkward Load Fine", "Amount Due Driver",
    ]


@pytest.fixture()
def export_rows(export_headers) -> list[list]:
    return [
        ["6/30/2025 7:15:00 AM", "Kafulafuta", "Chanda Mwale", "AB1234", "No",
         100, 0, 0, 0, 0, 0, 0, 0],
        ["6/30/2025 3:40:00 PM", "Kafulafuta", "Bwalya Phiri", "AB2222", "Yes",
         "1,250.50", 800, "", None, 0, 0, 0, 50],
        ["7/1/2025 11:05:00 PM", "Mpika", "N/A", "AB3333", "no",
         0, 0, 0, 0, 0, 0, 0, 0],
    ]


@pytest.fixture()
def export_workbook(tmp_path: Path, export_headers, export_rows) -> Path:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Report"
    ws.append(export_headers)
    for row in export_rows:
        ws.append(row)
    # trailing blank row, as bridge exports often have
    ws.append([None] * len(export_headers))
    path = tmp_path / "export.xlsx"
    wb.save(path)
    return path
