"""Reporting package — aggregation and JSON output."""

from .aggregator import ComplianceReport, EmptyInputError, aggregate
from .json_export import build_report_document, export_json, render_json

__all__ = [
    "ComplianceReport",
    "EmptyInputError",
    "aggregate",
    "build_report_document",
    "export_json",
    "render_json",
]
