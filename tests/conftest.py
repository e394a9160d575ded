"""Shared fixtures for MFA compliance tests."""

from __future__ import annotations

from collections import Counter
from typing import Optional, Union

import httpx
import pytest

from mfa_compliance.collectors.models import (
    OrganizationPosture,
    PostureSnapshot,
    SsoPosture,
    Team,
    UserAccount,
)
from mfa_compliance.config import AuditConfig, ClientConfig
from mfa_compliance.github.client import GitHubClient
from mfa_compliance.safety.guardian import SafetyGuardian

API_URL = "https://api.github.test"
ORG = "acme"


def make_members(count: int, with_mfa: Optional[int] = None, start_id: int = 1) -> list[dict]:
    """Synthetic member records; the first ``with_mfa`` have 2FA enabled."""
    with_mfa = count if with_mfa is None else with_mfa
    return [
        {
            "login": f"user{i}",
            "id": i,
            "site_admin": False,
            "type": "User",
            "two_factor_authentication": (i - start_id) < with_mfa,
        }
        for i in range(start_id, start_id + count)
    ]


class FakeGitHub:
    """
    In-memory GitHub organization served through httpx.MockTransport.

    List endpoints are paged by ``page``/``per_page`` and advertise
    rel="next" only while records remain, like the real API. Set
    ``always_next`` to advertise a next page on every non-empty page.
    """

    def __init__(
        self,
        org: Optional[dict] = None,
        members: Optional[list] = None,
        teams: Optional[list] = None,
        credential_authorizations: Union[list, int, None] = None,
        always_next: bool = False,
    ):
        self.org = org if org is not None else {
            "login": ORG,
            "name": "Acme Corp",
            "two_factor_requirement_enabled": True,
            "has_organization_projects": True,
            "created_at": "2020-01-01T00:00:00Z",
            "updated_at": "2024-06-01T00:00:00Z",
        }
        self.members = members if members is not None else make_members(3)
        self.teams = teams if teams is not None else [
            {
                "name": "Platform",
                "slug": "platform",
                "privacy": "closed",
                "members_count": 3,
                "repos_count": 12,
                "created_at": "2021-01-01T00:00:00Z",
            },
            {
                "name": "Security",
                "slug": "security",
                "privacy": "secret",
                "members_count": 2,
                "repos_count": 4,
                "created_at": "2022-01-01T00:00:00Z",
            },
        ]
        # A list is served as-is; an int is returned as that HTTP status
        self.credential_authorizations = (
            credential_authorizations if credential_authorizations is not None else 403
        )
        self.always_next = always_next
        self.overrides: dict[str, list[httpx.Response]] = {}
        self.requests: list[httpx.Request] = []
        self.calls: Counter = Counter()

    def queue(self, path: str, *responses: httpx.Response):
        """Serve these responses, in order, before falling back to normal data."""
        self.overrides.setdefault(path, []).extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.lstrip("/")
        self.calls[path] += 1

        if self.overrides.get(path):
            return self.overrides[path].pop(0)

        if path == f"orgs/{ORG}":
            return httpx.Response(200, json=self.org)
        if path == f"orgs/{ORG}/members":
            return self._paged(request, self.members)
        if path == f"orgs/{ORG}/teams":
            return self._paged(request, self.teams)
        if path == f"orgs/{ORG}/credential-authorizations":
            if isinstance(self.credential_authorizations, int):
                return httpx.Response(
                    self.credential_authorizations,
                    json={"message": "Must be an organization owner"},
                )
            return httpx.Response(200, json=self.credential_authorizations)
        return httpx.Response(404, json={"message": "Not Found"})

    def _paged(self, request: httpx.Request, records: list) -> httpx.Response:
        page = int(request.url.params.get("page", 1))
        per_page = int(request.url.params.get("per_page", 30))
        chunk = records[(page - 1) * per_page: page * per_page]
        headers = {}
        has_more = page * per_page < len(records)
        if has_more or (self.always_next and chunk):
            next_url = request.url.copy_set_param("page", str(page + 1))
            headers["Link"] = f'<{next_url}>; rel="next"'
        return httpx.Response(200, json=chunk, headers=headers)

    def page_fetches(self, resource: str) -> int:
        return self.calls[f"orgs/{ORG}/{resource}"]


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def make_client():
    """Factory for a GitHubClient wired to a FakeGitHub (use with ``async with``)."""
    def _make(fake: FakeGitHub, guardian: Optional[SafetyGuardian] = None) -> GitHubClient:
        return GitHubClient(
            token="test-token",
            guardian=guardian or SafetyGuardian(),
            config=ClientConfig(api_url=API_URL, max_retries=2, initial_backoff=0),
            transport=httpx.MockTransport(fake.handler),
        )
    return _make


@pytest.fixture
def audit_config() -> AuditConfig:
    return AuditConfig(
        organization=ORG,
        token="test-token",
        generated_at="2026-01-01T00:00:00Z",
    )


def build_snapshot(
    mfa_required: bool = True,
    user_mfa: tuple[bool, ...] = (True, True),
    teams: tuple[Team, ...] = (),
    sso_indicator: bool = False,
    sso_count: Optional[int] = 0,
) -> PostureSnapshot:
    org = OrganizationPosture(
        login=ORG,
        name="Acme Corp",
        mfa_required=mfa_required,
        sso_indicator=sso_indicator,
    )
    users = tuple(
        UserAccount(login=f"user{i}", id=i, mfa_enabled=enabled)
        for i, enabled in enumerate(user_mfa, start=1)
    )
    return PostureSnapshot(
        organization=org,
        users=users,
        teams=teams,
        sso=SsoPosture(
            saml_enabled=sso_indicator,
            organization_name=org.name,
            organization_login=org.login,
            authorization_count=sso_count,
            unavailable_reason=None if sso_count is not None else "permission denied (403)",
        ),
    )


@pytest.fixture
def snapshot_factory():
    return build_snapshot


@pytest.fixture
def github_factory():
    """Build a FakeGitHub with custom data."""
    return FakeGitHub


@pytest.fixture
def members_factory():
    return make_members
