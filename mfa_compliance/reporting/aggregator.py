"""
Report aggregation — Combines per-standard assessments into one report.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..scoring.models import ComplianceAssessment, ComplianceStatus


class EmptyInputError(ValueError):
    """Raised when there is nothing to aggregate."""
    pass


@dataclass(frozen=True)
class ComplianceReport:
    """Assessments in canonical order plus summary statistics."""
    assessments: tuple[ComplianceAssessment, ...]
    total_standards: int
    compliant_standards: int
    average_score: float

    @property
    def all_compliant(self) -> bool:
        return self.compliant_standards == self.total_standards

    @property
    def exit_code(self) -> int:
        return 0 if self.all_compliant else 1

    def summary(self) -> dict:
        return {
            "total_standards": self.total_standards,
            "compliant_standards": self.compliant_standards,
            "average_score": self.average_score,
        }


def aggregate(assessments: Sequence[ComplianceAssessment]) -> ComplianceReport:
    """
    Build a report from a non-empty sequence of assessments.

    The average is the unweighted mean of the standards' scores.
    """
    items = tuple(assessments)
    if not items:
        raise EmptyInputError("Cannot aggregate zero assessments")

    compliant = sum(1 for a in items if a.status is ComplianceStatus.COMPLIANT)
    return ComplianceReport(
        assessments=items,
        total_standards=len(items),
        compliant_standards=compliant,
        average_score=sum(a.score for a in items) / len(items),
    )
