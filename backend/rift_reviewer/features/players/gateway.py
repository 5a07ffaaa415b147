"""
Riot API Gateway - Anti-Corruption Layer for the players feature.

Resolves Riot IDs to PUUIDs and PUUIDs back to display identity, translating
the client's errors into the service taxonomy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import structlog

from rift_reviewer.core.exceptions import PlayerNotFoundError, UpstreamUnavailableError
from rift_reviewer.core.riot_api.errors import NotFoundError, RiotAPIError

from .schemas import AccountResponse

if TYPE_CHECKING:
    from rift_reviewer.core.riot_api.client import RiotAPIClient

logger = structlog.get_logger(__name__)


class RiotAccountGateway:
    """Anti-Corruption Layer for Riot account lookups."""

    def __init__(self, riot_api_client: "RiotAPIClient"):
        """
        Initialize gateway with Riot API client.

        :param riot_api_client: Low-level Riot API client
        """
        self._client = riot_api_client

    async def find_by_riot_id(
        self, game_name: str, tag_line: str, routing_hint: Optional[str] = None
    ) -> AccountResponse:
        """
        Resolve a Riot ID (gameName#tagLine) to an account.

        Raises:
            PlayerNotFoundError: No such Riot ID
            UpstreamUnavailableError: Any other upstream failure
        """
        try:
            account = await self._client.get_account_by_riot_id(
                game_name, tag_line, region=routing_hint
            )
        except NotFoundError as e:
            raise PlayerNotFoundError(
                f"Player not found: {game_name}#{tag_line}",
                details={"game_name": game_name, "tag_line": tag_line},
            ) from e
        except RiotAPIError as e:
            logger.warning(
                "account_lookup_failed",
                game_name=game_name,
                tag_line=tag_line,
                status_code=e.status_code,
            )
            raise UpstreamUnavailableError(
                f"Account lookup failed: {e.message}", status_code=e.status_code
            ) from e

        return AccountResponse(
            puuid=account.puuid,
            game_name=account.game_name,
            tag_line=account.tag_line,
        )

    async def fetch_identity(
        self, puuid: str, routing_hint: Optional[str] = None
    ) -> Optional[AccountResponse]:
        """
        Look up a player's display identity.

        Returns None instead of raising; identity is optional enrichment.
        """
        try:
            account = await self._client.get_account_by_puuid(puuid, region=routing_hint)
        except RiotAPIError as e:
            logger.warning(
                "identity_lookup_failed",
                puuid=puuid,
                status_code=e.status_code,
                error=str(e),
            )
            return None

        return AccountResponse(
            puuid=account.puuid,
            game_name=account.game_name,
            tag_line=account.tag_line,
        )
