"""
Scoring data models — Structured types for per-standard assessment output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from ..collectors.models import PostureSnapshot


class ComplianceStandard(str, Enum):
    """Supported standards, in canonical report order."""
    HITRUST = "hitrust"
    FEDRAMP = "fedramp"
    HIPAA = "hipaa"


class ComplianceStatus(str, Enum):
    COMPLIANT = "compliant"
    MOSTLY_COMPLIANT = "mostly-compliant"
    PARTIALLY_COMPLIANT = "partially-compliant"
    NON_COMPLIANT = "non-compliant"


BASELINE_SOURCE = "baseline"


@dataclass(frozen=True)
class Recommendation:
    """One remediation hint and the rule that produced it."""
    text: str
    source: str = BASELINE_SOURCE


class RecommendationBuilder:
    """Accumulates recommendations in insertion order."""

    def __init__(self, existing: Iterable[Recommendation] = ()):
        self._items: list[Recommendation] = list(existing)

    def add(self, text: str, source: str = BASELINE_SOURCE) -> "RecommendationBuilder":
        self._items.append(Recommendation(text=text, source=source))
        return self

    def __len__(self) -> int:
        return len(self._items)

    def build(self) -> tuple[Recommendation, ...]:
        return tuple(self._items)


@dataclass(frozen=True)
class ComplianceAssessment:
    """Assessment of one standard against one posture snapshot."""
    standard: ComplianceStandard
    requirement: str
    status: ComplianceStatus
    score: int
    recommendations: tuple[Recommendation, ...] = ()
    snapshot: Optional[PostureSnapshot] = field(default=None, repr=False)
    organization: str = ""
    generated_at: str = ""
    tool_version: str = ""

    @property
    def is_compliant(self) -> bool:
        return self.status is ComplianceStatus.COMPLIANT

    @property
    def recommendation_texts(self) -> list[str]:
        return [r.text for r in self.recommendations]

    def to_dict(self) -> dict:
        return {
            "standard": self.standard.value,
            "requirement": self.requirement,
            "assessment": {
                "overall_status": self.status.value,
                "compliance_score": self.score,
                "recommendations": self.recommendation_texts,
            },
            "findings": self.snapshot.findings() if self.snapshot else {},
            "metadata": {
                "generated_at": self.generated_at,
                "script_version": self.tool_version,
                "organization": self.organization,
            },
        }
