"""
Reporting Module.

Renders micro-unit amounts exactly and writes the CSV artifacts
of a supply run.
"""

from .csv_report import (
    ReportBatch,
    write_placeholder_csv,
    write_placeholder_summary_csv,
    write_rows_atomic,
    write_supply_csv,
)
from .formatters import format_timestamp, format_whole_units, render_decimal

__all__ = [
    "render_decimal",
    "format_whole_units",
    "format_timestamp",
    "ReportBatch",
    "write_rows_atomic",
    "write_supply_csv",
    "write_placeholder_csv",
    "write_placeholder_summary_csv",
]
