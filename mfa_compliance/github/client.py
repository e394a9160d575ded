"""
Async GitHub REST client with page-numbered pagination, throttling, retry,
and safety enforcement. Exposes only the narrow read-only query surface the
posture collector needs.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, AsyncGenerator, Optional

import httpx

from ..config import (
    ClientConfig,
    GITHUB_ACCEPT,
    GITHUB_API_VERSION,
    USER_AGENT,
    MAX_BACKOFF_SECONDS,
    BACKOFF_MULTIPLIER,
    DEFAULT_PAGE_SIZE,
    MAX_PAGES_PER_ENDPOINT,
    MAX_CONCURRENT_REQUESTS,
)
from ..safety.guardian import SafetyGuardian

logger = logging.getLogger("mfa_compliance.github")

RETRYABLE_STATUSES = (429, 500, 502, 503, 504)


class GitHubAPIError(Exception):
    """Base class for GitHub API failures."""
    def __init__(self, status_code: int, message: str, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(f"GitHub API Error {status_code} for {url}: {message}")


class AccessError(GitHubAPIError):
    """Authentication or authorization failure, or an inaccessible resource."""


class UpstreamError(GitHubAPIError):
    """Malformed payload, unexpected status, or exhausted retries."""


class GitHubClient:
    """
    Async GitHub REST API client.
    Features:
      - Safety-validated requests (read-only enforcement)
      - Page-numbered pagination terminated by an empty page or a missing
        rel="next" Link header
      - Exponential backoff on 429/5xx and secondary rate limits
      - Concurrent request semaphore
    """

    def __init__(
        self,
        token: str,
        guardian: SafetyGuardian,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.guardian = guardian
        self.config = config or ClientConfig()
        self._transport = transport
        self._semaphore = asyncio.Semaphore(MAX_CONCURRENT_REQUESTS)
        self._request_count = 0
        self._throttle_count = 0
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self.config.api_url.rstrip("/") + "/",
            timeout=httpx.Timeout(self.config.timeout_seconds, connect=30.0),
            limits=httpx.Limits(
                max_connections=MAX_CONCURRENT_REQUESTS * 2,
                max_keepalive_connections=MAX_CONCURRENT_REQUESTS,
            ),
            headers={
                "Authorization": f"Bearer {self.token}",
                "Accept": GITHUB_ACCEPT,
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
                "User-Agent": USER_AGENT,
            },
            transport=self._transport,
            event_hooks={"request": [self._enforce_read_only]},
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        """Execute a single GET request and return the decoded JSON body."""
        response = await self._request(endpoint, params)
        return _decode(response)

    async def iter_pages(
        self,
        endpoint: str,
        per_page: int = DEFAULT_PAGE_SIZE,
        max_pages: int = MAX_PAGES_PER_ENDPOINT,
    ) -> AsyncGenerator[list, None]:
        """
        Yield each non-empty page of a list endpoint.

        Stops on an empty page or when GitHub stops advertising rel="next".
        Reaching max_pages while more pages remain raises UpstreamError.
        """
        page = 1
        while page <= max_pages:
            response = await self._request(
                endpoint, {"page": page, "per_page": per_page}
            )
            items = _decode(response)
            if not isinstance(items, list):
                raise UpstreamError(
                    response.status_code,
                    f"expected a JSON array, got {type(items).__name__}",
                    str(response.url),
                )
            logger.debug(f"{endpoint} page {page}: {len(items)} items")
            if not items:
                return
            yield items
            if "next" not in response.links:
                return
            page += 1

        logger.warning(
            f"Pagination safety cap reached ({max_pages} pages) for endpoint: {endpoint}"
        )
        raise UpstreamError(
            0, f"pagination safety cap of {max_pages} pages reached with pages remaining", endpoint
        )

    async def get_all_pages(
        self,
        endpoint: str,
        per_page: int = DEFAULT_PAGE_SIZE,
        max_pages: int = MAX_PAGES_PER_ENDPOINT,
    ) -> list:
        """Fetch every page of a list endpoint into a single list."""
        items = []
        async for page in self.iter_pages(endpoint, per_page, max_pages):
            items.extend(page)
        return items

    async def _request(self, endpoint: str, params: Optional[dict]) -> httpx.Response:
        if not self._client:
            raise RuntimeError("GitHubClient not initialized. Use 'async with' context.")
        endpoint = endpoint.lstrip("/")

        async with self._semaphore:
            return await self._execute_with_retry(endpoint, params)

    async def _enforce_read_only(self, request: httpx.Request):
        # Runs on every outgoing request, retries included
        self.guardian.validate_request(request.method, str(request.url))

    async def _execute_with_retry(
        self,
        endpoint: str,
        params: Optional[dict],
    ) -> httpx.Response:
        """Execute request with exponential backoff on throttling."""
        backoff = self.config.initial_backoff
        max_retries = self.config.max_retries
        last_error = "no attempt made"

        for attempt in range(max_retries + 1):
            try:
                response = await self._client.get(endpoint, params=params)
                self._request_count += 1
            except (httpx.TimeoutException, httpx.TransportError) as e:
                last_error = f"{type(e).__name__}: {e}"
                logger.warning(
                    f"Transport error on {endpoint}, attempt {attempt + 1}/{max_retries + 1}: {e}"
                )
                if attempt < max_retries:
                    await asyncio.sleep(backoff)
                    backoff = min(backoff * BACKOFF_MULTIPLIER, MAX_BACKOFF_SECONDS)
                continue

            status = response.status_code
            url = str(response.url)

            if status == 200:
                return response

            if status in RETRYABLE_STATUSES or _is_rate_limited(response):
                self._throttle_count += 1
                last_error = _error_message(response)
                if attempt == max_retries:
                    break
                wait_time = max(_retry_after(response, backoff), backoff)
                logger.warning(
                    f"Throttled ({status}) on {endpoint}. "
                    f"Retry {attempt + 1}/{max_retries} in {wait_time:.1f}s"
                )
                await asyncio.sleep(wait_time)
                backoff = min(backoff * BACKOFF_MULTIPLIER, MAX_BACKOFF_SECONDS)
                continue

            if status in (401, 403, 404):
                raise AccessError(status, _error_message(response), url)

            raise UpstreamError(status, _error_message(response), url)

        raise UpstreamError(0, f"retries exhausted ({last_error})", endpoint)

    def get_stats(self) -> dict:
        """Return client statistics."""
        return {
            "total_requests": self._request_count,
            "throttle_events": self._throttle_count,
        }


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        raise UpstreamError(
            response.status_code, "response body is not valid JSON", str(response.url)
        )


def _is_rate_limited(response: httpx.Response) -> bool:
    # Primary limits: 403 + X-RateLimit-Remaining: 0.
    # Secondary limits: 403 + Retry-After, or a "rate limit" message.
    if response.status_code != 403:
        return False
    if response.headers.get("X-RateLimit-Remaining") == "0":
        return True
    if "Retry-After" in response.headers:
        return True
    return "rate limit" in _error_message(response).lower()


def _retry_after(response: httpx.Response, default: float) -> float:
    if "Retry-After" in response.headers:
        try:
            return float(response.headers["Retry-After"])
        except ValueError:
            return default
    reset = response.headers.get("X-RateLimit-Reset")
    if reset and reset.isdigit():
        return min(max(int(reset) - time.time(), 0.0), MAX_BACKOFF_SECONDS)
    return default


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase
