"""Core infrastructure module.

This module exports core utilities used across features.
Never imports from features - only from external libraries.
"""

from .config import Settings, get_settings, get_global_settings
from .database import Base, DatabaseManager, JSONType, get_db_manager
from .exceptions import (
    ServiceException,
    MatchNotFoundError,
    PlayerNotFoundError,
    InvalidUpstreamPayloadError,
    InvalidMatchDataError,
    UpstreamUnavailableError,
    AggregationError,
    InsightGenerationError,
    StoreError,
)
from .enums import (
    ErrorCode,
    StoreErrorKind,
    CacheTier,
    PlayerViewState,
    InsightSeverity,
)
from .validation import (
    is_valid_riot_payload,
    extract_match_id,
    extract_game_creation,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "get_global_settings",
    # Database
    "Base",
    "DatabaseManager",
    "JSONType",
    "get_db_manager",
    # Exceptions
    "ServiceException",
    "MatchNotFoundError",
    "PlayerNotFoundError",
    "InvalidUpstreamPayloadError",
    "InvalidMatchDataError",
    "UpstreamUnavailableError",
    "AggregationError",
    "InsightGenerationError",
    "StoreError",
    # Enums
    "ErrorCode",
    "StoreErrorKind",
    "CacheTier",
    "PlayerViewState",
    "InsightSeverity",
    # Validation
    "is_valid_riot_payload",
    "extract_match_id",
    "extract_game_creation",
]
