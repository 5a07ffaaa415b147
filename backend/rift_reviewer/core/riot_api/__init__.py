"""
Riot API client package for League of Legends API integration.

This package provides the HTTP client used to reach the account and match-v5
endpoints, with header-based rate limiting, error mapping and regional routing.
"""

from .client import RiotAPIClient
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
from .models import AccountDTO, MatchInfoDTO, ParticipantDTO
from .rate_limiter import RateLimiter

__all__ = [
    "RiotAPIClient",
    "RateLimiter",
    "RiotAPIEndpoints",
    "Region",
    "Platform",
    "QueueType",
    "resolve_region",
    "RiotAPIError",
    "RateLimitError",
    "AuthenticationError",
    "ForbiddenError",
    "NotFoundError",
    "BadRequestError",
    "ServiceUnavailableError",
    "AccountDTO",
    "MatchInfoDTO",
    "ParticipantDTO",
]
