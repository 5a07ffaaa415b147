"""Riot API HTTP client with header-based rate limiting, error mapping and authentication."""

import asyncio
from typing import Any, Dict, List, Optional, Union

import httpx
import structlog

from ..config import get_global_settings
from .constants import Platform, QueueType, Region, resolve_region
from .endpoints import RiotAPIEndpoints
from .errors import (
    AuthenticationError,
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    RiotAPIError,
    ServiceUnavailableError,
)
from .models import AccountDTO
from .rate_limiter import RateLimiter

logger = structlog.get_logger(__name__)

RoutingHint = Optional[Union[str, Region, Platform]]


class RiotAPIClient:
    """Riot API client for the account and match-v5 endpoints."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        region: Optional[Region] = None,
        timeout: Optional[float] = None,
        max_rate_limit_retries: Optional[int] = None,
        max_match_count: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Riot API client.

        Args:
            api_key: Riot API key (uses config if None)
            region: Default region for regional endpoints
            timeout: Per-call timeout in seconds
            max_rate_limit_retries: How many times a 429 is retried
            max_match_count: Upper bound for match ID listings
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        settings = get_global_settings()
        self.api_key = api_key or settings.riot_api_key
        self.region = region or resolve_region(settings.riot_default_region)
        self.timeout = timeout if timeout is not None else settings.riot_request_timeout
        self.max_rate_limit_retries = (
            max_rate_limit_retries
            if max_rate_limit_retries is not None
            else settings.riot_rate_limit_retries
        )
        self.max_match_count = max_match_count or settings.riot_max_match_count
        self.transport = transport

        self.rate_limiter = RateLimiter()
        self.endpoints = RiotAPIEndpoints(self.region)

        self.session: Optional[httpx.AsyncClient] = None
        self._session_lock = asyncio.Lock()

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start_session()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    async def start_session(self) -> None:
        """Start the httpx session."""
        if self.session is None or self.session.is_closed:
            async with self._session_lock:
                if self.session is None or self.session.is_closed:
                    headers = {
                        "X-Riot-Token": self.api_key,
                        "Content-Type": "application/json",
                        "User-Agent": "RiftReviewer/1.0",
                    }
                    limits = httpx.Limits(
                        max_keepalive_connections=20, max_connections=20
                    )

                    self.session = httpx.AsyncClient(
                        headers=headers,
                        timeout=httpx.Timeout(self.timeout),
                        limits=limits,
                        transport=self.transport,
                    )

                    logger.info(
                        "Riot API client session started",
                        region=self.region.value,
                        timeout=self.timeout,
                        api_key_prefix="[REDACTED]" if self.api_key else "None",
                    )

    async def close(self) -> None:
        """Close the httpx session."""
        if self.session and not self.session.is_closed:
            await self.session.aclose()
            logger.info("Riot API client session closed")

    def _raise_client_error_if_needed(self, status: int, url: str) -> None:
        """Raise specific RiotAPIError subclass for client errors."""
        if status == 400:
            raise BadRequestError("Invalid request parameters", status_code=status)
        elif status == 401:
            raise AuthenticationError("Invalid API key", status_code=status)
        elif status == 403:
            raise ForbiddenError("Access forbidden", status_code=status)
        elif status == 404:
            raise NotFoundError(f"Resource not found: {url}", status_code=status)

    @staticmethod
    def _retry_after(headers: httpx.Headers) -> float:
        try:
            return float(headers.get("Retry-After", 1))
        except (TypeError, ValueError):
            return 1.0

    async def _make_request(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make a GET request with rate limiting.

        Only 429 responses are retried. Timeouts, transport errors and 5xx
        responses are reported immediately as ServiceUnavailableError.

        Raises:
            RiotAPIError: For API errors
        """
        await self.start_session()
        if self.session is None:
            raise RiotAPIError("Session not initialized")

        endpoint_path = self._extract_endpoint_path(url)

        for attempt in range(self.max_rate_limit_retries + 1):
            await self.rate_limiter.wait_if_needed(endpoint_path)

            try:
                response = await self.session.get(url, params=params)
            except httpx.TimeoutException as e:
                logger.warning("Riot API request timed out", url=url, timeout=self.timeout)
                raise ServiceUnavailableError(f"Request timed out: {url}") from e
            except httpx.RequestError as e:
                logger.warning("Riot API transport error", url=url, error=str(e))
                raise ServiceUnavailableError(f"Request failed: {e}") from e

            self.rate_limiter.update_limits(dict(response.headers), endpoint_path)
            status = response.status_code

            if 200 <= status < 300:
                try:
                    return response.json()
                except ValueError as e:
                    raise RiotAPIError(
                        "Response body is not valid JSON", status_code=status
                    ) from e

            self._raise_client_error_if_needed(status, url)

            if status == 429:
                retry_after = self._retry_after(response.headers)
                if attempt < self.max_rate_limit_retries:
                    logger.info(
                        "Rate limited by Riot API, retrying",
                        url=url,
                        attempt=attempt + 1,
                        retry_after=retry_after,
                    )
                    await asyncio.sleep(retry_after)
                    continue
                raise RateLimitError(
                    "Rate limit exceeded",
                    status_code=status,
                    retry_after=retry_after,
                )

            if status >= 500:
                raise ServiceUnavailableError(
                    f"Server error {status}", status_code=status
                )

            raise RiotAPIError(f"Unexpected status {status}", status_code=status)

        raise RateLimitError("Rate limit exceeded", status_code=429)

    def _extract_endpoint_path(self, url: str) -> str:
        """Extract endpoint path from URL for rate limiting."""
        stripped = url.replace("https://", "").replace("http://", "")
        parts = stripped.split("/", 1)
        if len(parts) == 2:
            return parts[1]
        return stripped

    def _region(self, hint: RoutingHint) -> Region:
        return resolve_region(hint, fallback=self.region)

    # Account endpoints
    async def get_account_by_riot_id(
        self, game_name: str, tag_line: str, region: RoutingHint = None
    ) -> AccountDTO:
        """Get account by Riot ID (gameName#tagLine)."""
        url = self.endpoints.account_by_riot_id(
            game_name, tag_line, self._region(region)
        )
        response = await self._make_request(url)
        return AccountDTO(**response)

    async def get_account_by_puuid(
        self, puuid: str, region: RoutingHint = None
    ) -> AccountDTO:
        """Get account by PUUID."""
        url = self.endpoints.account_by_puuid(puuid, self._region(region))
        response = await self._make_request(url)
        return AccountDTO(**response)

    # Match endpoints
    async def get_match_ids_by_puuid(
        self,
        puuid: str,
        start: int = 0,
        count: int = 20,
        start_time: Optional[int] = None,
        end_time: Optional[int] = None,
        queue: Optional[Union[int, QueueType]] = None,
        region: RoutingHint = None,
    ) -> List[str]:
        """Get match IDs for a player, most recent first."""
        params: Dict[str, Any] = {
            "start": max(start, 0),
            "count": max(1, min(count, self.max_match_count)),
        }
        if start_time is not None:
            params["startTime"] = start_time
        if end_time is not None:
            params["endTime"] = end_time
        if queue is not None:
            params["queue"] = int(queue)

        url = self.endpoints.match_ids_by_puuid(puuid, self._region(region))
        response = await self._make_request(url, params=params)

        if not isinstance(response, list):
            raise RiotAPIError(
                f"Expected list response for match IDs, got {type(response).__name__}"
            )
        return [str(match_id) for match_id in response]

    async def get_match(
        self, match_id: str, region: RoutingHint = None
    ) -> Dict[str, Any]:
        """Get the raw match blob by match ID."""
        url = self.endpoints.match_by_id(match_id, self._region(region))
        return await self._make_request(url)

    async def get_match_timeline(
        self, match_id: str, region: RoutingHint = None
    ) -> Dict[str, Any]:
        """Get the raw match timeline blob by match ID."""
        url = self.endpoints.match_timeline_by_id(match_id, self._region(region))
        return await self._make_request(url)
