"""Data ingestion loaders for weighbridge export files."""

from .weighbridge_export import build_header_map, load_weighbridge_export, parse_export_rows

__all__ = [
    "build_header_map",
    "load_weighbridge_export",
    "parse_export_rows",
]
