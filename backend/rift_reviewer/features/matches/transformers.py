"""Transform raw match blobs into typed store records.

``process_match_data`` is pure: it reads one blob and returns the match
record payload plus one participant entry per identifiable participant.
Both the Riot shape (``metadata``/``info``) and the flattened shape (the
same fields at the top level) are accepted; the record always stores the
Riot shape.
"""

import time
from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError

from rift_reviewer.core.exceptions import InvalidMatchDataError
from rift_reviewer.core.riot_api.models import MatchInfoDTO, ParticipantDTO
from rift_reviewer.core.validation import extract_game_creation, extract_match_id

from .schemas import MatchRecordCreate, ParticipantIndexCreate, ProcessedMatch

logger = structlog.get_logger(__name__)

SECONDS_PER_DAY = 86400


def calculate_kda(kills: int, deaths: int, assists: int) -> float:
    """(kills + assists) / deaths, or kills + assists when deaths is zero."""
    if deaths > 0:
        return (kills + assists) / deaths
    return float(kills + assists)


def _info_section(blob: Dict[str, Any]) -> Dict[str, Any]:
    info = blob.get("info")
    return info if isinstance(info, dict) else blob


def _riot_shape(
    blob: Dict[str, Any], match_id: str, raw_participants: List[Dict[str, Any]]
) -> Dict[str, Any]:
    """Rebuild a flattened blob as ``{"metadata": ..., "info": ...}``.

    Stored match records must pass the same shape check as upstream payloads.
    """
    if isinstance(blob.get("info"), dict):
        return blob

    metadata = blob.get("metadata")
    metadata = dict(metadata) if isinstance(metadata, dict) else {}
    metadata["matchId"] = match_id
    metadata.setdefault(
        "participants", [p["puuid"] for p in raw_participants if p.get("puuid")]
    )
    info = {k: v for k, v in blob.items() if k not in ("metadata", "matchId")}
    return {"metadata": metadata, "info": info}


def _participant_entry(
    participant: ParticipantDTO,
    match_id: str,
    info: MatchInfoDTO,
    game_creation: int,
    processed_at: int,
) -> ParticipantIndexCreate:
    return ParticipantIndexCreate(
        puuid=participant.puuid,
        match_id=match_id,
        game_creation=game_creation,
        game_duration=info.game_duration,
        queue_id=info.queue_id,
        game_mode=info.game_mode,
        win=participant.win,
        kills=participant.kills,
        deaths=participant.deaths,
        assists=participant.assists,
        kda=calculate_kda(participant.kills, participant.deaths, participant.assists),
        champion_id=participant.champion_id,
        champion_name=participant.champion_name,
        lane=participant.lane,
        role=participant.role,
        team_position=participant.team_position or None,
        individual_position=participant.individual_position,
        team_id=participant.team_id,
        total_damage_dealt=participant.total_damage_dealt,
        total_damage_dealt_to_champions=participant.total_damage_dealt_to_champions,
        total_minions_killed=participant.total_minions_killed,
        neutral_minions_killed=participant.neutral_minions_killed,
        cs=participant.cs,
        vision_score=participant.vision_score,
        gold_earned=participant.gold_earned,
        gold_spent=participant.gold_spent,
        time_played=participant.time_played,
        total_time_spent_dead=participant.total_time_spent_dead,
        riot_id_game_name=participant.riot_id_game_name,
        riot_id_tagline=participant.riot_id_tagline,
        processed_at=processed_at,
    )


def process_match_data(
    blob: Any,
    ttl_days: int = 30,
    now: Optional[float] = None,
) -> ProcessedMatch:
    """
    Normalize one raw match blob.

    Args:
        blob: Raw match blob in either supported shape
        ttl_days: Freshness window of the produced match record
        now: Current time in epoch seconds (defaults to the wall clock)

    Returns:
        ProcessedMatch with one record and N participant entries

    Raises:
        InvalidMatchDataError: matchId, gameCreation or participants missing,
            or an ID too long for the stores
    """
    if not isinstance(blob, dict) or not blob:
        raise InvalidMatchDataError("Match data must be a non-empty object")

    match_id = extract_match_id(blob)
    if not match_id:
        raise InvalidMatchDataError("Match data is missing matchId")

    game_creation = extract_game_creation(blob)
    if game_creation is None:
        raise InvalidMatchDataError(
            f"Match {match_id} is missing gameCreation", details={"match_id": match_id}
        )

    raw_info = _info_section(blob)
    raw_participants = raw_info.get("participants")
    if not isinstance(raw_participants, list) or not raw_participants:
        raise InvalidMatchDataError(
            f"Match {match_id} has no participants", details={"match_id": match_id}
        )
    if not all(isinstance(p, dict) for p in raw_participants):
        raise InvalidMatchDataError(
            f"Match {match_id} has malformed participants",
            details={"match_id": match_id},
        )

    try:
        info = MatchInfoDTO.model_validate(raw_info)
    except ValidationError as e:
        raise InvalidMatchDataError(
            f"Match {match_id} failed validation: {e.error_count()} errors",
            details={"match_id": match_id},
        ) from e

    current = time.time() if now is None else now
    processed_at = int(current * 1000)

    participants: List[ParticipantIndexCreate] = []
    missing_id = 0
    try:
        for participant in info.participants:
            if not participant.puuid:
                missing_id += 1
                continue
            participants.append(
                _participant_entry(participant, match_id, info, game_creation, processed_at)
            )

        record = MatchRecordCreate(
            match_id=match_id,
            game_creation=game_creation,
            match_data=_riot_shape(blob, match_id, raw_participants),
            expires_at=int(current) + ttl_days * SECONDS_PER_DAY,
            processed_at=processed_at,
        )
    except ValidationError as e:
        raise InvalidMatchDataError(
            f"Match {match_id} has out-of-range fields: {e.error_count()} errors",
            details={"match_id": match_id},
        ) from e

    if missing_id:
        logger.debug(
            "participants_without_puuid", match_id=match_id, count=missing_id
        )

    return ProcessedMatch(
        match_id=match_id,
        game_creation=game_creation,
        record=record,
        participants=participants,
        participants_missing_id=missing_id,
    )
