"""
Posture data models — Immutable facts collected in one assessment run,
plus their JSON renderings used as audit findings in the report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


def truncated_percentage(part: int, whole: int) -> float:
    """part/whole as a percentage truncated (not rounded) to two decimals."""
    if not whole:
        return 0.0
    return (part * 10000 // whole) / 100


@dataclass(frozen=True)
class OrganizationPosture:
    """Organization-level authentication settings from a single API read."""
    login: str
    name: str = ""
    mfa_required: bool = False
    sso_indicator: bool = False     # Best effort; full SSO config is not exposed
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_finding(self) -> dict:
        return {
            "two_factor_requirement_enabled": self.mfa_required,
            "saml_enabled": self.sso_indicator,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "status": "compliant" if self.mfa_required else "non-compliant",
            "message": (
                "Organization MFA requirement enabled"
                if self.mfa_required
                else "Organization MFA requirement disabled"
            ),
        }


@dataclass(frozen=True)
class UserAccount:
    """A single organization member."""
    login: str
    id: int
    account_type: str = "User"
    site_admin: bool = False
    mfa_enabled: bool = False

    def to_dict(self) -> dict:
        return {
            "login": self.login,
            "id": self.id,
            "site_admin": self.site_admin,
            "type": self.account_type,
            "two_factor_authentication": self.mfa_enabled,
        }


@dataclass(frozen=True)
class Team:
    name: str
    slug: str
    privacy: Optional[str] = None
    members_count: Optional[int] = None
    repos_count: Optional[int] = None
    created_at: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "slug": self.slug,
            "privacy": self.privacy,
            "members_count": self.members_count,
            "repos_count": self.repos_count,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class SsoPosture:
    """
    Best-effort SAML SSO posture.

    ``authorization_count`` is None when credential authorizations could not
    be read (usually a permission gap); the finding is then flagged for
    manual review instead of failing the run.
    """
    saml_enabled: bool
    organization_name: str = ""
    organization_login: str = ""
    authorization_count: Optional[int] = None
    unavailable_reason: Optional[str] = None

    @property
    def manual_review_required(self) -> bool:
        return self.authorization_count is None

    def to_finding(self) -> dict:
        message = "SAML SSO status requires manual verification"
        if self.manual_review_required and self.unavailable_reason:
            message += f" (credential authorizations unavailable: {self.unavailable_reason})"
        return {
            "saml_enabled": self.saml_enabled,
            "name": self.organization_name,
            "login": self.organization_login,
            "saml_authorizations": (
                "unknown" if self.manual_review_required else self.authorization_count
            ),
            "status": "manual-review" if self.manual_review_required else "info",
            "message": message,
        }


@dataclass(frozen=True)
class PostureSnapshot:
    """
    The single source of truth for one run.
    Every standard is scored against the same snapshot instance.
    """
    organization: OrganizationPosture
    users: tuple[UserAccount, ...] = ()
    teams: tuple[Team, ...] = ()
    sso: Optional[SsoPosture] = None
    warnings: tuple[str, ...] = field(default=(), compare=False)

    @property
    def total_users(self) -> int:
        return len(self.users)

    @property
    def users_with_mfa(self) -> int:
        return sum(1 for u in self.users if u.mfa_enabled)

    @property
    def users_without_mfa(self) -> tuple[UserAccount, ...]:
        return tuple(u for u in self.users if not u.mfa_enabled)

    @property
    def all_users_have_mfa(self) -> bool:
        """Exact integer check; an organization with no members never passes."""
        return self.total_users > 0 and self.users_with_mfa == self.total_users

    @property
    def mfa_compliance_rate(self) -> float:
        """Percentage of members with MFA, truncated to two decimals; 0 when empty."""
        return truncated_percentage(self.users_with_mfa, self.total_users)

    def user_finding(self) -> dict:
        return {
            "total_users": self.total_users,
            "users_with_mfa": self.users_with_mfa,
            "users_without_mfa": [u.to_dict() for u in self.users_without_mfa],
            "compliance_rate": self.mfa_compliance_rate,
            "status": "compliant" if self.all_users_have_mfa else "non-compliant",
            "users": [u.to_dict() for u in self.users],
        }

    def team_finding(self) -> dict:
        return {
            "total_teams": len(self.teams),
            "private_teams": sum(1 for t in self.teams if t.privacy == "closed"),
            "teams": [t.to_dict() for t in self.teams],
            "status": "info",
            "message": "Team access controls configured",
        }

    def findings(self) -> dict:
        """Raw findings embedded in every assessment for audit traceability."""
        sso = self.sso or SsoPosture(
            saml_enabled=self.organization.sso_indicator,
            organization_name=self.organization.name,
            organization_login=self.organization.login,
        )
        return {
            "organization_mfa": self.organization.to_finding(),
            "user_mfa_status": self.user_finding(),
            "saml_configuration": sso.to_finding(),
            "team_access_controls": self.team_finding(),
        }
