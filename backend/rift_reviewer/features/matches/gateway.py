"""Anti-Corruption Layer (Gateway) for the Riot Match API.

Hides the HTTP client's error hierarchy from the rest of the feature: Riot
404s become ``MatchNotFoundError`` and every other client failure becomes
``UpstreamUnavailableError``. Nothing here retries; the caller decides.
"""

import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog

from rift_reviewer.core.exceptions import MatchNotFoundError, UpstreamUnavailableError
from rift_reviewer.core.riot_api.errors import NotFoundError, RiotAPIError

if TYPE_CHECKING:
    from rift_reviewer.core.riot_api.client import RiotAPIClient

logger = structlog.get_logger(__name__)

SECONDS_PER_DAY = 86400


class RiotMatchGateway:
    """Gateway to Riot Match API - Anti-Corruption Layer."""

    def __init__(
        self,
        riot_client: "RiotAPIClient",
        history_days: int = 365,
        default_count: int = 20,
    ):
        """Initialize gateway with Riot API client.

        :param riot_client: Riot API client instance
        :param history_days: How far back match ID listings reach
        :param default_count: Listing size when the caller gives none
        """
        self.riot_client = riot_client
        self.history_days = history_days
        self.default_count = default_count

    def _translate(self, error: RiotAPIError, what: str, **context: Any) -> Exception:
        if isinstance(error, NotFoundError):
            logger.info("upstream_not_found", what=what, **context)
            return MatchNotFoundError(f"{what} not found", details=context)

        logger.warning(
            "upstream_request_failed",
            what=what,
            status_code=error.status_code,
            error=str(error),
            **context,
        )
        return UpstreamUnavailableError(
            f"Upstream failed while fetching {what}: {error.message}",
            status_code=error.status_code,
            details=context,
        )

    async def fetch_match(
        self, match_id: str, routing_hint: Optional[str] = None
    ) -> Dict[str, Any]:
        """Fetch a raw match blob.

        :param match_id: Riot match identifier
        :param routing_hint: Platform or region code
        :returns: Raw match blob, unvalidated
        :raises MatchNotFoundError: Upstream reported 404
        :raises UpstreamUnavailableError: Any other upstream failure
        """
        try:
            blob = await self.riot_client.get_match(match_id, region=routing_hint)
        except RiotAPIError as e:
            raise self._translate(e, "match", match_id=match_id) from e

        logger.debug("match_fetched_from_riot_api", match_id=match_id)
        return blob

    async def fetch_timeline(
        self, match_id: str, routing_hint: Optional[str] = None
    ) -> Dict[str, Any]:
        """Fetch a raw match timeline blob."""
        try:
            blob = await self.riot_client.get_match_timeline(
                match_id, region=routing_hint
            )
        except RiotAPIError as e:
            raise self._translate(e, "timeline", match_id=match_id) from e

        logger.debug("timeline_fetched_from_riot_api", match_id=match_id)
        return blob

    async def fetch_player_match_ids(
        self,
        puuid: str,
        count: Optional[int] = None,
        routing_hint: Optional[str] = None,
        now: Optional[float] = None,
    ) -> List[str]:
        """List a player's most recent match IDs within the history window.

        :param puuid: Player PUUID
        :param count: Number of match IDs to list
        :param routing_hint: Platform or region code
        :returns: Match IDs, newest first
        """
        current = time.time() if now is None else now
        start_time = int(current) - self.history_days * SECONDS_PER_DAY
        count = count or self.default_count

        try:
            match_ids = await self.riot_client.get_match_ids_by_puuid(
                puuid=puuid,
                start=0,
                count=count,
                start_time=start_time,
                region=routing_hint,
            )
        except RiotAPIError as e:
            raise self._translate(e, "match history", puuid=puuid) from e

        logger.debug(
            "match_history_fetched",
            puuid=puuid,
            count=len(match_ids),
            requested=count,
        )
        return match_ids
