"""
Posture Collector
Enumerates: organization MFA settings, members and their 2FA status, teams,
and SAML credential authorizations. Produces one immutable PostureSnapshot.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..github.client import UpstreamError
from .base import BaseCollector
from .models import OrganizationPosture, PostureSnapshot, SsoPosture, Team, UserAccount

logger = logging.getLogger("mfa_compliance.collectors.posture")


class PostureCollector(BaseCollector):
    name = "posture"
    description = "Authentication posture: org MFA, member 2FA, teams, SAML SSO"

    async def collect(self, org_name: str) -> PostureSnapshot:
        # The org read doubles as the access check for everything below
        organization = await self._collect_organization(org_name)

        gather_results = await asyncio.gather(
            self._collect_users(org_name),
            self._collect_teams(org_name),
            self._collect_sso(org_name, organization),
            return_exceptions=True,
        )
        for res in gather_results:
            if isinstance(res, BaseException):
                raise res
        users, teams, sso = gather_results

        without_mfa = [u for u in users if not u.mfa_enabled]
        logger.info(
            f"MFA status: {len(users)} users, {len(users) - len(without_mfa)} with MFA, "
            f"{len(without_mfa)} without"
        )
        for user in without_mfa:
            logger.warning(f"User without MFA: {user.login} ({user.account_type})")
        logger.info(
            f"Teams: {len(teams)} total, "
            f"{sum(1 for t in teams if t.privacy == 'closed')} private"
        )

        return PostureSnapshot(
            organization=organization,
            users=users,
            teams=teams,
            sso=sso,
            warnings=tuple(self.metadata.warnings),
        )

    # ── Organization ────────────────────────────────────────────────────────

    async def _collect_organization(self, org_name: str) -> OrganizationPosture:
        data = await self.required_get(f"orgs/{org_name}")
        if not isinstance(data, dict):
            raise UpstreamError(200, "organization payload is not an object", f"orgs/{org_name}")

        posture = OrganizationPosture(
            login=str(data.get("login") or org_name),
            name=data.get("name") or "",
            mfa_required=data.get("two_factor_requirement_enabled") is True,
            sso_indicator=bool(data.get("has_organization_projects")),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
        if posture.mfa_required:
            logger.info("Organization MFA requirement is enabled")
        else:
            logger.warning("Organization MFA requirement is NOT enabled")
        return posture

    # ── Users ───────────────────────────────────────────────────────────────

    async def _collect_users(self, org_name: str) -> tuple[UserAccount, ...]:
        """Accumulate every page of members, deduplicated by id."""
        endpoint = f"orgs/{org_name}/members"
        users: dict[int, UserAccount] = {}
        duplicates = 0

        async for page in self.client.iter_pages(
            endpoint, per_page=self.config.page_size, max_pages=self.config.max_pages
        ):
            for record in page:
                user = _parse_user(record, endpoint)
                if user.id in users:
                    duplicates += 1
                    continue
                users[user.id] = user

        self.metadata.endpoints_queried += 1
        self.metadata.items_collected += len(users)
        if duplicates:
            logger.debug(f"Dropped {duplicates} duplicate member records")
        return tuple(users.values())

    # ── Teams ───────────────────────────────────────────────────────────────

    async def _collect_teams(self, org_name: str) -> tuple[Team, ...]:
        endpoint = f"orgs/{org_name}/teams"
        records = await self.required_get_all(endpoint)
        return tuple(_parse_team(r, endpoint) for r in records)

    # ── SAML SSO ────────────────────────────────────────────────────────────

    async def _collect_sso(self, org_name: str, organization: OrganizationPosture) -> SsoPosture:
        """Credential authorizations need owner access; failure is not fatal."""
        data, reason = await self.optional_get(f"orgs/{org_name}/credential-authorizations")
        if data is not None and not isinstance(data, list):
            self.metadata.add_warning(
                "Credential authorizations payload is not an array; SSO marked for manual review"
            )
            data, reason = None, "unexpected payload"

        return SsoPosture(
            saml_enabled=organization.sso_indicator,
            organization_name=organization.name,
            organization_login=organization.login,
            authorization_count=len(data) if data is not None else None,
            unavailable_reason=reason,
        )


def _parse_user(record: Any, endpoint: str) -> UserAccount:
    if not isinstance(record, dict):
        raise UpstreamError(200, "member record is not an object", endpoint)
    user_id = record.get("id")
    login = record.get("login")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(login, str):
        raise UpstreamError(200, f"member record missing id/login: {record!r:.120}", endpoint)
    return UserAccount(
        login=login,
        id=user_id,
        account_type=record.get("type") or "User",
        site_admin=record.get("site_admin") is True,
        # Absent flag means no evidence of MFA
        mfa_enabled=record.get("two_factor_authentication") is True,
    )


def _parse_team(record: Any, endpoint: str) -> Team:
    if not isinstance(record, dict) or not record.get("slug"):
        raise UpstreamError(200, f"unexpected team record: {record!r:.120}", endpoint)
    return Team(
        name=record.get("name") or record["slug"],
        slug=record["slug"],
        privacy=record.get("privacy"),
        members_count=record.get("members_count"),
        repos_count=record.get("repos_count"),
        created_at=record.get("created_at"),
    )
