"""Pydantic schemas for match records, participant entries and ingestion results."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from rift_reviewer.core.enums import CacheTier, ErrorCode


class MatchRecordCreate(BaseModel):
    """Schema for creating a Match Record Store row."""

    match_id: str = Field(..., max_length=64, description="Unique match identifier")
    game_creation: Optional[int] = Field(
        None, description="Game creation timestamp in milliseconds since epoch"
    )
    match_data: Dict[str, Any] = Field(..., description="Raw match blob")
    timeline_data: Optional[Dict[str, Any]] = Field(
        None, description="Raw timeline blob"
    )
    expires_at: int = Field(..., description="Freshness marker, epoch seconds")
    processed_at: int = Field(..., description="Write time, epoch millis")


class ParticipantIndexBase(BaseModel):
    """Denormalized participant statistics shared by create and response schemas."""

    puuid: str = Field(..., max_length=78, description="Player PUUID")
    match_id: str = Field(..., max_length=64, description="Match ID")
    game_creation: int = Field(..., description="Game creation epoch millis")
    game_duration: Optional[int] = Field(None, ge=0, description="Seconds")
    queue_id: Optional[int] = None
    game_mode: Optional[str] = None

    win: bool = False
    kills: int = Field(0, ge=0)
    deaths: int = Field(0, ge=0)
    assists: int = Field(0, ge=0)
    kda: float = Field(0.0, description="(kills + assists) / deaths, or k + a")

    champion_id: Optional[int] = None
    champion_name: Optional[str] = None
    lane: Optional[str] = None
    role: Optional[str] = None
    team_position: Optional[str] = None
    individual_position: Optional[str] = None
    team_id: Optional[int] = None

    total_damage_dealt: int = 0
    total_damage_dealt_to_champions: int = 0
    total_minions_killed: int = 0
    neutral_minions_killed: int = 0
    cs: int = 0
    vision_score: int = 0
    gold_earned: int = 0
    gold_spent: int = 0
    time_played: Optional[int] = None
    total_time_spent_dead: Optional[int] = None

    riot_id_game_name: Optional[str] = None
    riot_id_tagline: Optional[str] = None


class ParticipantIndexCreate(ParticipantIndexBase):
    """Schema for creating a Participant Index Store row."""

    processed_at: int = Field(..., description="Write time, epoch millis")


class ParticipantIndexResponse(ParticipantIndexBase):
    """Schema for Participant Index entry response."""

    processed_at: int
    ai_insights: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(from_attributes=True)


class ProcessedMatch(BaseModel):
    """Typed result of normalizing one raw match blob."""

    match_id: str
    game_creation: int
    record: MatchRecordCreate
    participants: List[ParticipantIndexCreate] = Field(default_factory=list)
    participants_missing_id: int = 0


class MatchOutcome(BaseModel):
    """Per-match result inside an ingestion batch."""

    match_id: Optional[str] = None
    success: bool
    record_created: bool = False
    participants_processed: int = 0
    participants_skipped: int = 0
    participants_missing_id: int = 0
    error_code: Optional[ErrorCode] = None
    error: Optional[str] = None
    retriable: bool = False


class AggregationStatus(BaseModel):
    """How the rollup refresh that follows an ingestion batch ended."""

    status: Literal["success", "no_data", "failed", "skipped"]
    message: Optional[str] = None
    total_matches: Optional[int] = None
    error_code: Optional[ErrorCode] = None


class IngestionSummary(BaseModel):
    """Structured result of one ingestion run."""

    success: bool
    puuid: Optional[str] = None
    processed: int = 0
    failed: int = 0
    total_matches: int = 0
    participants_processed: int = 0
    participants_skipped: int = 0
    participants_missing_id: int = 0
    results: List[MatchOutcome] = Field(default_factory=list)
    aggregation: Optional[AggregationStatus] = None
    message: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    retriable: bool = False


class IngestRequest(BaseModel):
    """Request body for a player ingestion run."""

    matches: Optional[List[Dict[str, Any]]] = Field(
        None, description="Explicit match blobs; nothing is fetched when given"
    )
    match_ids: Optional[List[str]] = Field(
        None, description="Explicit match IDs resolved through the cache tiers"
    )
    count: Optional[int] = Field(None, ge=1, le=100)
    platform: Optional[str] = Field(None, description="Routing hint")


class ResolvedMatchResponse(BaseModel):
    """A resolved match or timeline blob and the tier that served it."""

    match_id: str
    source: CacheTier
    data: Dict[str, Any]
