"""
Scoring Engine — Computes a 0-100 MFA compliance score for one standard.

Scoring model (a step function, not proportional):
  - 50 points when the organization requires MFA.
  - 50 points when every member has MFA enabled (rate exactly 100%).
  - The total maps to a status through STATUS_THRESHOLDS.

The 75 threshold is unreachable with two 50-point gates; it is kept so the
status table matches earlier reports.
"""

from __future__ import annotations

import logging

from ..collectors.models import PostureSnapshot
from .models import (
    ComplianceAssessment,
    ComplianceStandard,
    ComplianceStatus,
    RecommendationBuilder,
)
from .standards import get_rule

logger = logging.getLogger("mfa_compliance.scoring")

ORG_MFA_POINTS = 50
USER_MFA_POINTS = 50

# Status thresholds, checked top-down
STATUS_THRESHOLDS = [
    (100, ComplianceStatus.COMPLIANT),
    ( 75, ComplianceStatus.MOSTLY_COMPLIANT),
    ( 50, ComplianceStatus.PARTIALLY_COMPLIANT),
    (  0, ComplianceStatus.NON_COMPLIANT),
]


def determine_status(score: int) -> ComplianceStatus:
    for threshold, status in STATUS_THRESHOLDS:
        if score >= threshold:
            return status
    return ComplianceStatus.NON_COMPLIANT


def score_posture(
    snapshot: PostureSnapshot,
    standard: ComplianceStandard,
    *,
    organization: str = "",
    generated_at: str = "",
    tool_version: str = "",
) -> ComplianceAssessment:
    """
    Score one standard against a snapshot.

    Pure: reads only the snapshot. Teams and the SSO indicator never
    contribute. Standard-specific recommendations are not applied here;
    see StandardRule.augment().
    """
    score = 0
    recommendations = RecommendationBuilder()

    if snapshot.organization.mfa_required:
        score += ORG_MFA_POINTS
    else:
        recommendations.add("Enable organization-wide MFA requirement")

    if snapshot.all_users_have_mfa:
        score += USER_MFA_POINTS
    else:
        recommendations.add("Ensure all users enable MFA")

    status = determine_status(score)
    logger.info(f"[{standard.value}] score {score}/100 — {status.value}")

    return ComplianceAssessment(
        standard=standard,
        requirement=get_rule(standard).requirement,
        status=status,
        score=score,
        recommendations=recommendations.build(),
        snapshot=snapshot,
        organization=organization or snapshot.organization.login,
        generated_at=generated_at,
        tool_version=tool_version,
    )
