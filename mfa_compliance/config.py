"""
Configuration module for the MFA Compliance Validator.
Defines tunable parameters, API endpoints, and the per-run audit configuration.
"""

from __future__ import annotations

import os
import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from . import __version__


class ConfigurationError(ValueError):
    """Raised when the run configuration is missing or invalid."""
    pass


# ─── GitHub API Settings ────────────────────────────────────────────────────

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_ACCEPT = "application/vnd.github+json"
USER_AGENT = f"mfa-compliance-validator/{__version__}"

# Rate limiting / throttling
MAX_CONCURRENT_REQUESTS = 4       # Parallel requests to the API
MAX_RETRIES = 5                   # Retry count for throttled requests
INITIAL_BACKOFF_SECONDS = 2.0     # First retry delay
MAX_BACKOFF_SECONDS = 120.0       # Cap on exponential backoff
BACKOFF_MULTIPLIER = 2.0          # Exponential factor
REQUEST_TIMEOUT_SECONDS = 60.0

# Pagination
DEFAULT_PAGE_SIZE = 100           # Maximum items per page (per_page)
MAX_PAGES_PER_ENDPOINT = 1000     # Safety cap on pagination loops


# ─── Report Settings ────────────────────────────────────────────────────────

REPORT_TYPE = "mfa_compliance_validation"
TOOL_VERSION = __version__
STANDARD_SELECTORS = ("hitrust", "fedramp", "hipaa", "all")

# GitHub organization logins: alphanumerics and single hyphens, max 39 chars
_ORG_LOGIN_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$")


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """Format a moment as ISO-8601 UTC with second precision."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# ─── Config File Schema ─────────────────────────────────────────────────────

# key → (accepted types, nullable)
NUMBER = (int, float)
AUDIT_FILE_FIELDS = {
    "organization": (str, False),
    "standard": (str, False),
    "token": (str, False),
    "verbose": (bool, False),
    "timeout_seconds": (NUMBER, True),
    "page_size": (int, False),
    "max_pages": (int, False),
    "output_path": (str, True),
}
CLIENT_FILE_FIELDS = {
    "api_url": (str, False),
    "timeout_seconds": (NUMBER, False),
    "max_retries": (int, False),
    "initial_backoff": (NUMBER, False),
}


def _check_fields(data: dict, schema: dict, path, prefix: str = "") -> dict:
    """Return the known keys of ``data`` after checking their JSON types."""
    checked = {}
    for key, value in data.items():
        if key not in schema:
            continue
        expected, nullable = schema[key]
        if value is None and nullable:
            checked[key] = None
            continue
        # JSON booleans are Python ints; only accept them where bool is expected
        wrong_bool = isinstance(value, bool) and expected is not bool
        if wrong_bool or not isinstance(value, expected):
            raise ConfigurationError(
                f"Config file {path}: {prefix}{key} has invalid type "
                f"{type(value).__name__}"
            )
        checked[key] = value
    return checked


# ─── Client Settings ────────────────────────────────────────────────────────

@dataclass
class ClientConfig:
    """HTTP client behaviour for the GitHub API."""
    api_url: str = GITHUB_API_URL
    timeout_seconds: float = REQUEST_TIMEOUT_SECONDS
    max_retries: int = MAX_RETRIES
    initial_backoff: float = INITIAL_BACKOFF_SECONDS


# ─── Master Configuration ───────────────────────────────────────────────────

@dataclass
class AuditConfig:
    """
    Explicit run context for one audit.

    Carries the organization, the standard selector, credentials and the run
    timestamp so nothing downstream reads ambient state.
    """
    organization: str = ""
    standard: str = "all"
    token: str = ""
    output_path: Optional[Path] = None
    verbose: bool = False
    timeout_seconds: Optional[float] = None   # Overall collection deadline
    page_size: int = DEFAULT_PAGE_SIZE
    max_pages: int = MAX_PAGES_PER_ENDPOINT
    generated_at: str = ""
    client: ClientConfig = field(default_factory=ClientConfig)

    def __post_init__(self):
        if not self.generated_at:
            self.generated_at = utc_timestamp()

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "AuditConfig":
        """Build a configuration from ORG_NAME / GITHUB_TOKEN / GITHUB_API_URL."""
        env = os.environ if environ is None else environ
        config = cls(
            organization=env.get("ORG_NAME", ""),
            token=env.get("GITHUB_TOKEN") or env.get("GH_TOKEN", ""),
        )
        if env.get("GITHUB_API_URL"):
            config.client.api_url = env["GITHUB_API_URL"]
        return config

    @classmethod
    def from_file(cls, path: str | Path, base: Optional["AuditConfig"] = None) -> "AuditConfig":
        """Load configuration from a JSON file, layered over ``base``."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"Config file not found: {path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Config file {path} is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a JSON object")

        fields = _check_fields(data, AUDIT_FILE_FIELDS, path)
        client_data = data.get("client", {})
        if not isinstance(client_data, dict):
            raise ConfigurationError(f"Config file {path}: client must be a JSON object")
        client_fields = _check_fields(client_data, CLIENT_FILE_FIELDS, path, prefix="client.")

        config = base or cls()
        output_path = fields.pop("output_path", None)
        if output_path:
            config.output_path = Path(output_path)
        for key, value in fields.items():
            setattr(config, key, value)
        for key, value in client_fields.items():
            setattr(config.client, key, value)
        return config

    def standards(self) -> tuple:
        """Resolve the selector to standards in canonical order."""
        from .scoring.standards import ComplianceStandard

        selector = (self.standard or "").strip().lower()
        if selector == "all":
            return tuple(ComplianceStandard)
        try:
            return (ComplianceStandard(selector),)
        except ValueError:
            raise ConfigurationError(
                f"Invalid standard: {self.standard!r}. "
                f"Must be one of: {', '.join(STANDARD_SELECTORS)}"
            )

    def validate(self) -> None:
        """Check prerequisites; raises ConfigurationError before any network call."""
        if not self.organization:
            raise ConfigurationError(
                "Organization name not provided. Set ORG_NAME or pass --org."
            )
        if not isinstance(self.organization, str) or not _ORG_LOGIN_RE.match(self.organization):
            raise ConfigurationError(f"Invalid organization name: {self.organization!r}")
        if not self.token:
            raise ConfigurationError(
                "GitHub token not provided. Set GITHUB_TOKEN in the environment."
            )
        self.standards()
        if not 1 <= self.page_size <= DEFAULT_PAGE_SIZE:
            raise ConfigurationError(
                f"page_size must be between 1 and {DEFAULT_PAGE_SIZE}, got {self.page_size}"
            )
        if self.max_pages < 1:
            raise ConfigurationError(f"max_pages must be positive, got {self.max_pages}")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ConfigurationError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}"
            )


# ─── Required token scopes (read-only) ──────────────────────────────────────

REQUIRED_SCOPES = {
    "read:org": "Read organization settings, members, and teams",
    "admin:org": "Optional: read credential authorizations for SAML SSO",
}
