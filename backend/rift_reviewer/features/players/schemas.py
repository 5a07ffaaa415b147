"""Pydantic schemas for player aggregates, history views and accounts."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from rift_reviewer.core.enums import ErrorCode, PlayerViewState
from rift_reviewer.features.matches.schemas import (
    IngestionSummary,
    ParticipantIndexResponse,
)


class AvgKDA(BaseModel):
    """Average kills, deaths and assists per game plus the derived ratio."""

    kills: float = 0.0
    deaths: float = 0.0
    assists: float = 0.0
    ratio: float = 0.0


class ChampionStats(BaseModel):
    """Per-champion bucket."""

    champion_name: Optional[str] = None
    games: int = 0
    wins: int = 0
    losses: int = 0
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    kda: float = 0.0


class RoleStats(BaseModel):
    """Per-role bucket."""

    games: int = 0
    wins: int = 0
    losses: int = 0


class PlayerAggregate(BaseModel):
    """Computed rollup for one player."""

    puuid: str = Field(..., max_length=78)
    game_name: Optional[str] = None
    tag_line: Optional[str] = None
    total_matches: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    avg_kda: AvgKDA = Field(default_factory=AvgKDA)
    avg_cs: float = 0.0
    avg_damage: float = 0.0
    avg_vision_score: float = 0.0
    champion_stats: Dict[str, ChampionStats] = Field(default_factory=dict)
    role_stats: Dict[str, RoleStats] = Field(default_factory=dict)
    last_updated: int = Field(..., description="Recompute time, epoch millis")
    last_match_fetched: Optional[int] = Field(
        None, description="gameCreation of the newest folded match"
    )
    ai_insights: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(from_attributes=True)


class AggregationResult(BaseModel):
    """Result of one aggregation run."""

    puuid: str
    status: Literal["success", "no_data"]
    message: Optional[str] = None
    aggregate: Optional[PlayerAggregate] = None


class AccountResponse(BaseModel):
    """Resolved Riot account."""

    puuid: str
    game_name: Optional[str] = None
    tag_line: Optional[str] = None


class PlayerHistoryResponse(BaseModel):
    """A player's history page together with its materialization state."""

    puuid: str
    state: PlayerViewState
    matches: List[ParticipantIndexResponse] = Field(default_factory=list)
    total: int = 0
    limit: int = 20
    offset: int = 0
    aggregate: Optional[PlayerAggregate] = None
    ingestion: Optional[IngestionSummary] = None
    message: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    retriable: bool = False
