"""
JSON exporter — Produces the compliance report document and delivers it to a
file or to standard output.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional, TextIO

from ..config import AuditConfig, REPORT_TYPE
from .aggregator import ComplianceReport


def build_report_document(report: ComplianceReport, config: AuditConfig) -> dict:
    """Render the report as the machine-readable document."""
    return {
        "report_type": REPORT_TYPE,
        "generated_at": config.generated_at,
        "organization": config.organization,
        "standards_assessed": [a.standard.value for a in report.assessments],
        "compliance_reports": [a.to_dict() for a in report.assessments],
        "summary": report.summary(),
    }


def render_json(document: dict) -> str:
    return json.dumps(document, indent=2, default=str, ensure_ascii=False)


def export_json(
    document: dict,
    output_path: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> Optional[Path]:
    """
    Write the document to ``output_path``, or to ``stream`` (stdout by default).

    Returns:
        Path to the created JSON file, or None when written to a stream.
    """
    payload = render_json(document)

    if output_path is None:
        out = stream or sys.stdout
        out.write(payload + "\n")
        out.flush()
        return None

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as fh:
        fh.write(payload + "\n")
    return output_path
