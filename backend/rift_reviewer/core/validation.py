"""Validation utility functions for untrusted upstream and client payloads."""

from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)


def is_valid_riot_payload(payload: Any) -> bool:
    """
    Check the coarse shape shared by match and timeline blobs.

    A payload is usable when it is a non-empty mapping carrying either a
    ``metadata`` or an ``info`` section.

    Args:
        payload: Decoded JSON from any cache tier or the upstream API

    Returns:
        True if the payload can be served, False if it must be treated as a miss
    """
    if not isinstance(payload, dict) or not payload:
        return False
    return isinstance(payload.get("metadata"), dict) or isinstance(
        payload.get("info"), dict
    )


def extract_match_id(payload: Dict[str, Any]) -> Optional[str]:
    """Read the match ID from either the Riot or the flattened blob shape."""
    metadata = payload.get("metadata")
    if isinstance(metadata, dict) and metadata.get("matchId"):
        return str(metadata["matchId"])
    if payload.get("matchId"):
        return str(payload["matchId"])
    return None


def extract_game_creation(payload: Dict[str, Any]) -> Optional[int]:
    """Read gameCreation (epoch millis) from either blob shape."""
    info = payload.get("info")
    value = info.get("gameCreation") if isinstance(info, dict) else None
    if value is None:
        value = payload.get("gameCreation")
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Unparseable gameCreation", value=value)
        return None
