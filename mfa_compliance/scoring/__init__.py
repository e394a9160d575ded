"""Scoring package — MFA compliance scoring and the standard catalog."""

from .engine import determine_status, score_posture
from .models import (
    ComplianceAssessment,
    ComplianceStandard,
    ComplianceStatus,
    Recommendation,
    RecommendationBuilder,
)
from .standards import STANDARD_CATALOG, StandardRule, get_rule

__all__ = [
    "score_posture",
    "determine_status",
    "ComplianceAssessment",
    "ComplianceStandard",
    "ComplianceStatus",
    "Recommendation",
    "RecommendationBuilder",
    "STANDARD_CATALOG",
    "StandardRule",
    "get_rule",
]
