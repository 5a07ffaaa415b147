"""Rate limiting implementation for Riot API using response headers."""

import asyncio
import time
from typing import Dict, Optional

import structlog

from .endpoints import parse_rate_limit_header

logger = structlog.get_logger(__name__)


class RateLimiter:
    """Header-based rate limiter that trusts Riot API response headers."""

    def __init__(self, request_spacing: float = 0.05):
        """Initialize rate limiter."""
        self.app_remaining: Optional[int] = None
        self.app_reset_time: Optional[float] = None
        self.method_remaining: Dict[str, Optional[int]] = {}
        self.method_reset_time: Dict[str, Optional[float]] = {}

        # Request spacing to avoid bursts
        self.last_request_time = 0.0
        self.request_spacing = request_spacing

        self.lock = asyncio.Lock()

    async def wait_if_needed(self, endpoint: str, method: str = "GET") -> None:
        """
        Wait if rate limits would be exceeded based on headers.

        Args:
            endpoint: API endpoint being called
            method: HTTP method being used
        """
        async with self.lock:
            now = time.time()

            if await self._check_and_wait_for_limit(
                self.app_remaining, self.app_reset_time, now, "App"
            ):
                self.app_remaining = None
                self.app_reset_time = None

            endpoint_key = self._get_endpoint_key(endpoint, method)
            if endpoint_key in self.method_remaining:
                if await self._check_and_wait_for_limit(
                    self.method_remaining[endpoint_key],
                    self.method_reset_time.get(endpoint_key),
                    now,
                    "Method",
                    endpoint_key,
                ):
                    self.method_remaining[endpoint_key] = None
                    self.method_reset_time[endpoint_key] = None

            time_since_last = now - self.last_request_time
            if time_since_last < self.request_spacing:
                await asyncio.sleep(self.request_spacing - time_since_last)

            self.last_request_time = time.time()

    async def _check_and_wait_for_limit(
        self,
        remaining: Optional[int],
        reset_time: Optional[float],
        now: float,
        scope_name: str,
        endpoint_key: Optional[str] = None,
    ) -> bool:
        """
        Check if rate limit is exceeded and wait if needed.

        Returns:
            True if limit was reset, False otherwise
        """
        if remaining is not None and remaining <= 0:
            if reset_time and reset_time > now:
                wait_time = reset_time - now
                logger.info(
                    f"{scope_name} rate limit reached, waiting",
                    wait_time=wait_time,
                    remaining=remaining,
                    endpoint=endpoint_key,
                )
                await asyncio.sleep(wait_time)
                return False
            return True
        return False

    def _get_endpoint_key(self, endpoint: str, method: str) -> str:
        """Generate a key for the endpoint from its first path segments."""
        stripped = endpoint.replace("https://", "").replace("http://", "")
        path = stripped.split("/", 1)[1] if "/" in stripped else stripped
        segments = [segment for segment in path.split("/") if segment]
        service_key = "-".join(segments[:4]) if segments else path
        return f"{method}:{service_key}"

    def _update_app_limit(self, remaining: int, reset_time: float) -> None:
        if self.app_remaining is None or remaining < self.app_remaining:
            self.app_remaining = remaining
            self.app_reset_time = reset_time

    def _update_method_limit(
        self, endpoint_key: str, remaining: int, reset_time: float
    ) -> None:
        current = self.method_remaining.get(endpoint_key)
        if current is None or remaining < current:
            self.method_remaining[endpoint_key] = remaining
            self.method_reset_time[endpoint_key] = reset_time

    def _process_rate_limit_pair(
        self,
        limit_header: str,
        count_header: str,
        scope: str,
        endpoint_key: str | None = None,
    ) -> None:
        """Process a pair of rate limit headers and update internal state."""
        if not limit_header or not count_header:
            return

        limits = parse_rate_limit_header(limit_header)
        counts = parse_rate_limit_header(count_header)

        for limit, count in zip(limits, counts):
            remaining = limit["requests"] - count["requests"]
            reset_time = time.time() + limit["window"]

            if scope == "app":
                self._update_app_limit(remaining, reset_time)
            elif endpoint_key:
                self._update_method_limit(endpoint_key, remaining, reset_time)

            logger.debug(
                f"Updated {scope} rate limit",
                endpoint=endpoint_key if scope == "method" else None,
                limit=limit["requests"],
                used=count["requests"],
                remaining=remaining,
                window=limit["window"],
            )

    def update_limits(
        self, headers: Dict[str, str], endpoint: str, method: str = "GET"
    ) -> None:
        """
        Update rate limits from Riot API response headers.

        Args:
            headers: Response headers containing rate limit info
            endpoint: API endpoint that was called
            method: HTTP method used
        """
        # httpx lower-cases header names
        normalized = {k.lower(): v for k, v in headers.items()}
        self._process_rate_limit_pair(
            normalized.get("x-app-rate-limit", ""),
            normalized.get("x-app-rate-limit-count", ""),
            scope="app",
        )
        self._process_rate_limit_pair(
            normalized.get("x-method-rate-limit", ""),
            normalized.get("x-method-rate-limit-count", ""),
            scope="method",
            endpoint_key=self._get_endpoint_key(endpoint, method),
        )
