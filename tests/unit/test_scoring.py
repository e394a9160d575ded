"""Tests for scoring/engine.py."""

from __future__ import annotations

import pytest

from mfa_compliance.collectors.models import Team, truncated_percentage
from mfa_compliance.scoring import (
    ComplianceStandard,
    ComplianceStatus,
    determine_status,
    score_posture,
)


class TestDetermineStatus:
    @pytest.mark.parametrize(
        "score, expected",
        [
            (100, ComplianceStatus.COMPLIANT),
            (99, ComplianceStatus.MOSTLY_COMPLIANT),
            (75, ComplianceStatus.MOSTLY_COMPLIANT),
            (74, ComplianceStatus.PARTIALLY_COMPLIANT),
            (50, ComplianceStatus.PARTIALLY_COMPLIANT),
            (49, ComplianceStatus.NON_COMPLIANT),
            (0, ComplianceStatus.NON_COMPLIANT),
        ],
    )
    def test_threshold_table(self, score, expected):
        assert determine_status(score) == expected


class TestScorePosture:
    def test_fully_compliant(self, snapshot_factory):
        a = score_posture(snapshot_factory(), ComplianceStandard.HITRUST)
        assert a.score == 100
        assert a.status == ComplianceStatus.COMPLIANT
        assert a.recommendations == ()

    def test_org_requirement_missing(self, snapshot_factory):
        a = score_posture(snapshot_factory(mfa_required=False), ComplianceStandard.HITRUST)
        assert a.score == 50
        assert a.status == ComplianceStatus.PARTIALLY_COMPLIANT
        assert a.recommendation_texts == ["Enable organization-wide MFA requirement"]

    def test_one_user_without_mfa_loses_user_points(self, snapshot_factory):
        # 999/1000 = 99.9% still earns nothing for the user gate
        snapshot = snapshot_factory(user_mfa=(True,) * 999 + (False,))
        a = score_posture(snapshot, ComplianceStandard.HIPAA)
        assert snapshot.mfa_compliance_rate == 99.9
        assert a.score == 50
        assert a.recommendation_texts == ["Ensure all users enable MFA"]

    def test_nothing_satisfied(self, snapshot_factory):
        a = score_posture(
            snapshot_factory(mfa_required=False, user_mfa=(False, True)),
            ComplianceStandard.FEDRAMP,
        )
        assert a.score == 0
        assert a.status == ComplianceStatus.NON_COMPLIANT
        assert a.recommendation_texts == [
            "Enable organization-wide MFA requirement",
            "Ensure all users enable MFA",
        ]

    def test_zero_members_is_never_compliant(self, snapshot_factory):
        snapshot = snapshot_factory(user_mfa=())
        a = score_posture(snapshot, ComplianceStandard.HITRUST)
        assert snapshot.mfa_compliance_rate == 0
        assert a.score == 50
        assert a.status == ComplianceStatus.PARTIALLY_COMPLIANT

    @pytest.mark.parametrize("mfa_required", [True, False])
    @pytest.mark.parametrize("user_mfa", [(), (True,), (False,), (True, False), (True, True)])
    def test_score_is_a_step_function(self, snapshot_factory, mfa_required, user_mfa):
        a = score_posture(snapshot_factory(mfa_required, user_mfa), ComplianceStandard.HITRUST)
        assert a.score in {0, 50, 100}
        assert (a.status == ComplianceStatus.COMPLIANT) == (a.score == 100)

    def test_teams_and_sso_do_not_affect_score(self, snapshot_factory):
        plain = snapshot_factory(sso_indicator=False, sso_count=None)
        decorated = snapshot_factory(
            teams=(Team(name="Ops", slug="ops", privacy="secret"),),
            sso_indicator=True,
            sso_count=12,
        )
        for standard in ComplianceStandard:
            assert score_posture(plain, standard).score == score_posture(decorated, standard).score

    def test_scoring_does_not_apply_standard_rules(self, snapshot_factory):
        a = score_posture(snapshot_factory(), ComplianceStandard.FEDRAMP)
        assert a.recommendations == ()
        assert a.requirement.startswith("IA-2(1)")

    def test_recommendations_are_baseline_records(self, snapshot_factory):
        a = score_posture(snapshot_factory(mfa_required=False), ComplianceStandard.HIPAA)
        assert [r.source for r in a.recommendations] == ["baseline"]

    def test_metadata_is_carried(self, snapshot_factory):
        a = score_posture(
            snapshot_factory(),
            ComplianceStandard.HIPAA,
            organization="acme",
            generated_at="2026-01-01T00:00:00Z",
            tool_version="1.0.0",
        )
        meta = a.to_dict()["metadata"]
        assert meta == {
            "generated_at": "2026-01-01T00:00:00Z",
            "script_version": "1.0.0",
            "organization": "acme",
        }

    def test_deterministic(self, snapshot_factory):
        snapshot = snapshot_factory(user_mfa=(True, False, True))
        first = score_posture(snapshot, ComplianceStandard.HITRUST)
        second = score_posture(snapshot, ComplianceStandard.HITRUST)
        assert first == second
        assert first.to_dict() == second.to_dict()


class TestFindings:
    def test_user_findings(self, snapshot_factory):
        snapshot = snapshot_factory(user_mfa=(True, False, True))
        findings = score_posture(snapshot, ComplianceStandard.HITRUST).to_dict()["findings"]
        users = findings["user_mfa_status"]
        assert users["total_users"] == 3
        assert users["users_with_mfa"] == 2
        assert [u["login"] for u in users["users_without_mfa"]] == ["user2"]
        assert users["compliance_rate"] == 66.66
        assert users["status"] == "non-compliant"
        assert len(users["users"]) == 3

    def test_org_and_team_findings(self, snapshot_factory):
        teams = (
            Team(name="A", slug="a", privacy="closed"),
            Team(name="B", slug="b", privacy="secret"),
            Team(name="C", slug="c", privacy="closed"),
        )
        findings = score_posture(
            snapshot_factory(mfa_required=False, teams=teams), ComplianceStandard.HITRUST
        ).to_dict()["findings"]
        assert findings["organization_mfa"]["status"] == "non-compliant"
        assert findings["organization_mfa"]["two_factor_requirement_enabled"] is False
        assert findings["team_access_controls"]["total_teams"] == 3
        assert findings["team_access_controls"]["private_teams"] == 2

    def test_sso_findings_manual_review(self, snapshot_factory):
        findings = score_posture(
            snapshot_factory(sso_count=None), ComplianceStandard.HITRUST
        ).to_dict()["findings"]
        sso = findings["saml_configuration"]
        assert sso["saml_authorizations"] == "unknown"
        assert sso["status"] == "manual-review"
        assert "manual verification" in sso["message"]

    def test_sso_findings_with_count(self, snapshot_factory):
        findings = score_posture(
            snapshot_factory(sso_count=4), ComplianceStandard.HITRUST
        ).to_dict()["findings"]
        assert findings["saml_configuration"]["saml_authorizations"] == 4
        assert findings["saml_configuration"]["status"] == "info"

    def test_team_without_privacy_is_not_private(self, snapshot_factory):
        teams = (Team(name="A", slug="a"), Team(name="B", slug="b", privacy="closed"))
        findings = score_posture(
            snapshot_factory(teams=teams), ComplianceStandard.HITRUST
        ).to_dict()["findings"]
        assert findings["team_access_controls"]["private_teams"] == 1
        assert findings["team_access_controls"]["teams"][0]["privacy"] is None


class TestTruncatedPercentage:
    @pytest.mark.parametrize(
        "part, whole, expected",
        [(0, 0, 0.0), (2, 3, 66.66), (1, 3, 33.33), (999, 1000, 99.9), (7, 7, 100.0)],
    )
    def test_truncates_to_two_decimals(self, part, whole, expected):
        assert truncated_percentage(part, whole) == expected

    def test_exact_for_large_counts(self):
        # float division would round this up to 100.0
        whole = 10 ** 17
        assert truncated_percentage(whole - 1, whole) == 99.99
