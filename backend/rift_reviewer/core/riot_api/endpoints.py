"""Riot API endpoint definitions and rate limit header parsing."""

from typing import Dict, List, Optional
from urllib.parse import quote

import structlog

from .constants import Region

logger = structlog.get_logger(__name__)


class RiotAPIEndpoints:
    """Riot API endpoint definitions (regional routing only)."""

    def __init__(self, region: Region = Region.AMERICAS):
        """
        Initialize endpoint configuration.

        Args:
            region: Default region for regional endpoints
        """
        self.region = region

    def get_base_url(self, region: Optional[Region] = None) -> str:
        """Get base URL for regional endpoints."""
        region = region or self.region
        region_str = region.value if isinstance(region, Region) else region
        return f"https://{region_str}.api.riotgames.com"

    # Account endpoints
    def account_by_riot_id(
        self, game_name: str, tag_line: str, region: Optional[Region] = None
    ) -> str:
        """Get account by Riot ID endpoint."""
        base_url = self.get_base_url(region)
        return (
            f"{base_url}/riot/account/v1/accounts/by-riot-id/"
            f"{quote(game_name, safe='')}/{quote(tag_line, safe='')}"
        )

    def account_by_puuid(self, puuid: str, region: Optional[Region] = None) -> str:
        """Get account by PUUID endpoint."""
        base_url = self.get_base_url(region)
        return f"{base_url}/riot/account/v1/accounts/by-puuid/{puuid}"

    # Match endpoints
    def match_ids_by_puuid(self, puuid: str, region: Optional[Region] = None) -> str:
        """Get match ID list endpoint. Filters are sent as query parameters."""
        base_url = self.get_base_url(region)
        return f"{base_url}/lol/match/v5/matches/by-puuid/{puuid}/ids"

    def match_by_id(self, match_id: str, region: Optional[Region] = None) -> str:
        """Get match by ID endpoint."""
        base_url = self.get_base_url(region)
        return f"{base_url}/lol/match/v5/matches/{match_id}"

    def match_timeline_by_id(
        self, match_id: str, region: Optional[Region] = None
    ) -> str:
        """Get match timeline endpoint."""
        return f"{self.match_by_id(match_id, region)}/timeline"


def parse_rate_limit_header(header_value: str) -> List[Dict[str, int]]:
    """
    Parse rate limit header value.

    Example: "20:1,100:120" -> [{"requests": 20, "window": 1}, {"requests": 100, "window": 120}]

    Args:
        header_value: Rate limit header value

    Returns:
        List of rate limit dictionaries
    """
    if not header_value:
        return []

    limits: list[dict[str, int]] = []
    for part in header_value.split(","):
        try:
            requests, window = map(int, part.strip().split(":"))
            limits.append({"requests": requests, "window": window})
        except (ValueError, AttributeError):
            logger.warning(
                "Failed to parse rate limit part", part=part, header=header_value
            )
            continue

    return limits
