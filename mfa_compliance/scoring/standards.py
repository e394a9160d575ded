"""
Standard catalog — Maps each compliance standard to its MFA control text and
the recommendations it adds on top of the baseline assessment.

Standards differ in messaging only; no rule may change a score or status.
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod

from .models import ComplianceAssessment, ComplianceStandard, RecommendationBuilder


class StandardRule(ABC):
    """Requirement text plus the augmentation a standard applies."""

    standard: ComplianceStandard
    display_name: str
    requirement: str

    def augment(self, assessment: ComplianceAssessment) -> ComplianceAssessment:
        """Return a copy of the assessment with this standard's recommendations appended."""
        builder = RecommendationBuilder(assessment.recommendations)
        self._add_recommendations(assessment, builder)
        return dataclasses.replace(assessment, recommendations=builder.build())

    @abstractmethod
    def _add_recommendations(
        self, assessment: ComplianceAssessment, builder: RecommendationBuilder
    ) -> None:
        raise NotImplementedError


class HitrustRule(StandardRule):
    # HITRUST requires comprehensive MFA for all access
    standard = ComplianceStandard.HITRUST
    display_name = "HITRUST"
    requirement = "AC.1.007 - Multi-factor authentication required for all users"

    def _add_recommendations(self, assessment, builder):
        if not assessment.is_compliant:
            builder.add(
                "HITRUST AC.1.007 requires MFA for all users accessing sensitive data",
                source=self.standard.value,
            )


class FedrampRule(StandardRule):
    # FedRAMP requires MFA for privileged accounts
    standard = ComplianceStandard.FEDRAMP
    display_name = "FedRAMP"
    requirement = (
        "IA-2(1) - Identification and Authentication (Organizational Users) | "
        "Network Access to Privileged Accounts"
    )

    def _add_recommendations(self, assessment, builder):
        builder.add("Verify privileged accounts have MFA enabled", source=self.standard.value)
        builder.add("Configure session timeout for enhanced security", source=self.standard.value)


class HipaaRule(StandardRule):
    standard = ComplianceStandard.HIPAA
    display_name = "HIPAA"
    requirement = "164.312(d) - Person or Entity Authentication"

    def _add_recommendations(self, assessment, builder):
        if not assessment.is_compliant:
            builder.add(
                "HIPAA 164.312(d) requires unique user identification and authentication",
                source=self.standard.value,
            )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
STANDARD_CATALOG: dict[ComplianceStandard, StandardRule] = {
    rule.standard: rule
    for rule in (HitrustRule(), FedrampRule(), HipaaRule())
}


def get_rule(standard: ComplianceStandard) -> StandardRule:
    """Look up the rule for a standard; every enum member is registered."""
    return STANDARD_CATALOG[standard]


__all__ = [
    "ComplianceStandard",
    "StandardRule",
    "HitrustRule",
    "FedrampRule",
    "HipaaRule",
    "STANDARD_CATALOG",
    "get_rule",
]
