"""
Safety Guardian — Enforces strict read-only operation against the GitHub API.
Validates all HTTP methods, blocks write attempts, and logs safety events.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

logger = logging.getLogger("mfa_compliance.safety")

# ─── Allowed HTTP Methods ────────────────────────────────────────────────────

READ_METHODS = {"GET", "HEAD"}


class SafetyViolation(Exception):
    """Raised when a write operation is attempted."""
    pass


class SafetyGuardian:
    """
    Validates every outbound HTTP request to ensure read-only operation.
    Maintains an audit log of all safety checks and violations.
    """

    def __init__(self):
        self.violations: list[dict] = []
        self.checks_performed: int = 0
        self.started_at: str = _now()

    def validate_request(self, method: str, url: str) -> bool:
        """
        Validate that a request is read-only.
        Returns True if safe, raises SafetyViolation if not.
        """
        self.checks_performed += 1
        method_upper = method.upper()

        if method_upper in READ_METHODS:
            return True

        self._record_violation(method_upper, url, "Write HTTP method blocked")
        raise SafetyViolation(
            f"SAFETY VIOLATION: Write method blocked: {method_upper} {url}"
        )

    def _record_violation(self, method: str, url: str, reason: str):
        violation = {
            "timestamp": _now(),
            "method": method,
            "url": url,
            "reason": reason,
        }
        self.violations.append(violation)
        logger.critical(f"SAFETY VIOLATION: {reason} — {method} {url}")

    def get_audit_record(self) -> dict:
        """Return the full safety audit record."""
        return {
            "mode": "READ-ONLY",
            "started_at": self.started_at,
            "checks_performed": self.checks_performed,
            "violations_detected": len(self.violations),
            "violations": self.violations,
            "status": "CLEAN" if not self.violations else "VIOLATIONS_DETECTED",
        }


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
