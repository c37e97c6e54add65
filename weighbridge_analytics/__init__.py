"""
Weighbridge Analytics — operator and revenue reporting for truck weighbridges

Analytics backend that turns weighbridge spreadsheet exports into per-person,
per-group, per-shift and per-day summaries, revenue rankings, and alerts.

To load an export:
    records = loaders.load_weighbridge_export("export.xlsx")

To connect to Streamlit:
    Call analytics.compute_report(records, person_to_group, person_to_shift)
    and hand the resulting dict to the dashboard module for DataFrames
    suitable for cards, Plotly charts, and tables.

To change alert thresholds:
    Edit config.ALERT_THRESHOLDS, or pass a `thresholds` mapping to
    compute_report() for a single call.
"""

from .analytics import compute_report
from .errors import InvalidInput

__all__ = ["compute_report", "InvalidInput"]
