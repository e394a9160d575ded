"""
Base collector class — Shared plumbing for posture collectors.
Tracks timing and query metadata, and degrades optional queries to warnings.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..config import AuditConfig
from ..github.client import GitHubClient, AccessError, UpstreamError

logger = logging.getLogger("mfa_compliance.collectors")


class CollectionMetadata:
    """Bookkeeping for one collection pass."""

    def __init__(self, collector_name: str):
        self.collector_name = collector_name
        self.started_at: Optional[float] = None
        self.completed_at: Optional[float] = None
        self.endpoints_queried = 0
        self.items_collected = 0
        self.warnings: list[str] = []
        self.permission_gaps: list[str] = []

    @property
    def duration_seconds(self) -> float:
        if self.started_at is None or self.completed_at is None:
            return 0.0
        return round(self.completed_at - self.started_at, 2)

    def add_warning(self, warning: str):
        self.warnings.append(warning)
        logger.warning(f"[{self.collector_name}] {warning}")

    def to_dict(self) -> dict:
        return {
            "collector": self.collector_name,
            "duration_seconds": self.duration_seconds,
            "endpoints_queried": self.endpoints_queried,
            "items_collected": self.items_collected,
            "warnings": list(self.warnings),
            "permission_gaps": list(self.permission_gaps),
        }


class BaseCollector(ABC):
    """
    Abstract base class for collectors.

    Subclasses implement collect(). Errors from required queries propagate
    unchanged; only optional_get() converts failures into warnings.
    """

    name: str = "base"
    description: str = "Base collector"

    def __init__(self, client: GitHubClient, config: AuditConfig):
        self.client = client
        self.config = config
        self.metadata = CollectionMetadata(self.name)

    async def execute(self, org_name: str) -> Any:
        """Run collect() with timing and progress logging."""
        self.metadata = CollectionMetadata(self.name)
        self.metadata.started_at = time.time()
        logger.info(f"[{self.name}] Starting collection for {org_name}...")
        try:
            return await self.collect(org_name)
        finally:
            self.metadata.completed_at = time.time()
            logger.info(
                f"[{self.name}] Finished in {self.metadata.duration_seconds}s — "
                f"{self.metadata.items_collected} items, "
                f"{self.metadata.endpoints_queried} endpoints"
            )

    @abstractmethod
    async def collect(self, org_name: str) -> Any:
        raise NotImplementedError

    async def required_get(self, endpoint: str) -> Any:
        data = await self.client.get(endpoint)
        self.metadata.endpoints_queried += 1
        return data

    async def required_get_all(self, endpoint: str) -> list:
        items = await self.client.get_all_pages(
            endpoint,
            per_page=self.config.page_size,
            max_pages=self.config.max_pages,
        )
        self.metadata.endpoints_queried += 1
        self.metadata.items_collected += len(items)
        return items

    async def optional_get(self, endpoint: str) -> tuple[Any, Optional[str]]:
        """
        GET an endpoint the caller may not be authorized for.
        Returns (data, None) on success or (None, reason) on failure.
        """
        try:
            data = await self.client.get(endpoint)
        except AccessError as e:
            self.metadata.permission_gaps.append(endpoint)
            self.metadata.add_warning(f"Permission denied: {endpoint} — {e}")
            return None, f"permission denied ({e.status_code})"
        except UpstreamError as e:
            self.metadata.add_warning(f"Optional query failed: {endpoint} — {e}")
            return None, "upstream error"
        self.metadata.endpoints_queried += 1
        return data, None
