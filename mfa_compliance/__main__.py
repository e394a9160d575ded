"""
MFA Compliance Validator — Command-line entry point

Usage:
    python -m mfa_compliance --standard hitrust --output hitrust-mfa-report.json
    python -m mfa_compliance --standard all --verbose
    ORG_NAME=myorg python -m mfa_compliance --standard fedramp
    python -m mfa_compliance --config audit.json

Environment:
    ORG_NAME        GitHub organization name
    GITHUB_TOKEN    GitHub token with read:org (admin:org for SAML details)
    GITHUB_API_URL  API root for GitHub Enterprise Server (optional)

Exit codes: 0 when every assessed standard is compliant, 1 otherwise or on
any configuration, access, or upstream failure.

This tool is STRICTLY READ-ONLY. It will NEVER modify the organization.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .config import AuditConfig, ConfigurationError, REQUIRED_SCOPES, STANDARD_SELECTORS
from .github.client import AccessError, UpstreamError
from .orchestrator import run_audit
from .reporting import EmptyInputError, build_report_document, export_json
from .safety.guardian import SafetyViolation

logger = logging.getLogger("mfa_compliance")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mfa-compliance",
        description="Validate multi-factor authentication compliance across security standards (READ-ONLY)",
    )
    parser.add_argument(
        "--standard", "-s",
        type=str.lower,
        choices=STANDARD_SELECTORS,
        default=None,
        help="Compliance standard to validate (default: all)",
    )
    parser.add_argument(
        "--org",
        type=str,
        default=None,
        help="GitHub organization name (overrides ORG_NAME)",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output file for the compliance report (JSON); stdout when omitted",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to JSON configuration file",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Abort collection after this many seconds",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace, environ: Optional[dict] = None) -> AuditConfig:
    """Environment first, then the config file, then CLI flags."""
    config = AuditConfig.from_env(environ)
    if args.config:
        config = AuditConfig.from_file(args.config, base=config)

    if args.org:
        config.organization = args.org
    if args.standard:
        config.standard = args.standard
    if args.output:
        config.output_path = args.output
    if args.timeout is not None:
        config.timeout_seconds = args.timeout
    if args.verbose:
        config.verbose = True
    return config


def configure_logging(verbose: bool) -> None:
    # stdout is reserved for the report
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main(argv: Optional[list[str]] = None, environ: Optional[dict] = None) -> int:
    args = parse_args(argv)
    try:
        config = build_config(args, environ)
    except ConfigurationError as e:
        configure_logging(False)
        logger.error(str(e))
        return 1
    configure_logging(config.verbose)

    print("=" * 70, file=sys.stderr)
    print(f" MFA Compliance Validator v{__version__}", file=sys.stderr)
    print(" Mode: READ-ONLY — No organization settings will be modified", file=sys.stderr)
    print("=" * 70, file=sys.stderr)

    try:
        outcome = asyncio.run(run_audit(config))
    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    except AccessError as e:
        logger.error(
            f"Cannot access organization '{config.organization}'. "
            f"Check permissions and organization name. ({e})"
        )
        logger.error(f"Token scopes needed: {', '.join(REQUIRED_SCOPES)}")
        return 1
    except UpstreamError as e:
        logger.error(f"Unexpected response from GitHub: {e}")
        return 1
    except asyncio.TimeoutError:
        logger.error(f"Collection timed out after {config.timeout_seconds}s; no report emitted")
        return 1
    except (EmptyInputError, SafetyViolation) as e:
        logger.critical(f"Internal invariant violated: {e}")
        return 1

    document = build_report_document(outcome.report, config)
    path = export_json(document, config.output_path)
    if path:
        logger.info(f"Compliance report saved to: {path}")

    summary = outcome.report.summary()
    print(
        f"\n  Standards compliant: {summary['compliant_standards']}/{summary['total_standards']}"
        f"  (average score {summary['average_score']:.1f})",
        file=sys.stderr,
    )
    return outcome.exit_code


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
