"""Shared enums used across features.

This module provides a single source of truth for enums used in both models and schemas.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable failure codes reported in structured results."""

    NOT_FOUND = "NOT_FOUND"
    INVALID_UPSTREAM_PAYLOAD = "INVALID_UPSTREAM_PAYLOAD"
    INVALID_MATCH_DATA = "INVALID_MATCH_DATA"
    DUPLICATE_WRITE = "DUPLICATE_WRITE"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    AGGREGATION_FAILURE = "AGGREGATION_FAILURE"
    STORE_FAILURE = "STORE_FAILURE"
    INSIGHT_FAILURE = "INSIGHT_FAILURE"


class StoreErrorKind(str, Enum):
    """Kinds of failures raised by the storage layer."""

    DUPLICATE_KEY = "DUPLICATE_KEY"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    UNAVAILABLE = "UNAVAILABLE"


class CacheTier(str, Enum):
    """Tier that served a match or timeline resolution."""

    MATCH_STORE = "match_store"
    OBJECT_CACHE = "object_cache"
    UPSTREAM = "upstream"


class PlayerViewState(str, Enum):
    """Materialization state of a player's history view."""

    NO_DATA = "NO_DATA"
    INGESTING = "INGESTING"
    READY = "READY"


class InsightSeverity(str, Enum):
    """Severity attached to generated coaching insights."""

    NO_ISSUE = "no-issue"
    INFO = "info"
    WARNING = "warning"
