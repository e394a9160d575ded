"""
Audit orchestrator — collect one snapshot, score each requested standard
against it, apply the standard's catalog rule, and aggregate.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from .collectors import PostureCollector, PostureSnapshot
from .config import AuditConfig, TOOL_VERSION
from .github.client import GitHubClient
from .reporting import ComplianceReport, aggregate
from .safety.guardian import SafetyGuardian
from .scoring import ComplianceAssessment, ComplianceStandard, get_rule, score_posture

logger = logging.getLogger("mfa_compliance.orchestrator")


@dataclass(frozen=True)
class AuditOutcome:
    report: ComplianceReport
    snapshot: PostureSnapshot

    @property
    def exit_code(self) -> int:
        return self.report.exit_code


def assess_standards(
    snapshot: PostureSnapshot,
    standards: tuple[ComplianceStandard, ...],
    config: AuditConfig,
) -> list[ComplianceAssessment]:
    """Score and augment each standard, in the order given."""
    assessments = []
    for standard in standards:
        rule = get_rule(standard)
        logger.info(f"Generating {rule.display_name} compliance assessment...")
        base = score_posture(
            snapshot,
            standard,
            organization=config.organization,
            generated_at=config.generated_at,
            tool_version=TOOL_VERSION,
        )
        assessments.append(rule.augment(base))
    return assessments


async def collect_snapshot(client: GitHubClient, config: AuditConfig) -> PostureSnapshot:
    collector = PostureCollector(client, config)
    collection = collector.execute(config.organization)
    if config.timeout_seconds:
        return await asyncio.wait_for(collection, timeout=config.timeout_seconds)
    return await collection


async def run_audit(
    config: AuditConfig,
    client: Optional[GitHubClient] = None,
) -> AuditOutcome:
    """
    Run one audit end to end.

    Configuration is validated before any network call. When no client is
    supplied, one is opened from the config and closed afterwards.
    """
    config.validate()
    standards = config.standards()
    logger.info(f"Starting MFA compliance validation for organization: {config.organization}")
    logger.info(f"Standard(s): {', '.join(s.value for s in standards)}")

    if client is None:
        guardian = SafetyGuardian()
        async with GitHubClient(config.token, guardian, config.client) as owned:
            snapshot = await collect_snapshot(owned, config)
            logger.debug(f"API stats: {owned.get_stats()}")
        logger.debug(f"Safety audit: {guardian.get_audit_record()}")
    else:
        snapshot = await collect_snapshot(client, config)

    report = aggregate(assess_standards(snapshot, standards, config))
    if report.all_compliant:
        logger.info("All standards are compliant")
    else:
        logger.warning(
            f"Some standards are not fully compliant "
            f"({report.compliant_standards}/{report.total_standards})"
        )
    return AuditOutcome(report=report, snapshot=snapshot)
