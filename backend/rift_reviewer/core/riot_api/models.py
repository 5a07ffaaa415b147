"""Pydantic models for Riot API response data.

Match and timeline blobs are stored verbatim; these models are the typed
view the ingestion pipeline reads participants through. Counters default to
zero because older matches and non-classic queues omit some of them.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AccountDTO(BaseModel):
    """Riot Account information."""

    puuid: str
    game_name: Optional[str] = Field(None, alias="gameName")
    tag_line: Optional[str] = Field(None, alias="tagLine")

    model_config = ConfigDict(populate_by_name=True)


class ParticipantDTO(BaseModel):
    """Match participant statistics."""

    puuid: Optional[str] = None
    riot_id_game_name: Optional[str] = Field(None, alias="riotIdGameName")
    riot_id_tagline: Optional[str] = Field(None, alias="riotIdTagline")

    team_id: Optional[int] = Field(None, alias="teamId")
    win: bool = False
    champion_id: Optional[int] = Field(None, alias="championId")
    champion_name: Optional[str] = Field(None, alias="championName")
    kills: int = 0
    deaths: int = 0
    assists: int = 0

    lane: Optional[str] = None
    role: Optional[str] = None
    team_position: Optional[str] = Field(None, alias="teamPosition")
    individual_position: Optional[str] = Field(None, alias="individualPosition")

    total_damage_dealt: int = Field(0, alias="totalDamageDealt")
    total_damage_dealt_to_champions: int = Field(
        0, alias="totalDamageDealtToChampions"
    )
    total_minions_killed: int = Field(0, alias="totalMinionsKilled")
    neutral_minions_killed: int = Field(0, alias="neutralMinionsKilled")
    vision_score: int = Field(0, alias="visionScore")
    gold_earned: int = Field(0, alias="goldEarned")
    gold_spent: int = Field(0, alias="goldSpent")
    time_played: Optional[int] = Field(None, alias="timePlayed")
    total_time_spent_dead: Optional[int] = Field(None, alias="totalTimeSpentDead")

    @property
    def kda(self) -> float:
        """Calculate KDA (kills + assists) / deaths, or kills + assists when deathless."""
        if self.deaths > 0:
            return (self.kills + self.assists) / self.deaths
        return float(self.kills + self.assists)

    @property
    def cs(self) -> int:
        """Lane minions plus jungle monsters."""
        return self.total_minions_killed + self.neutral_minions_killed

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class MatchInfoDTO(BaseModel):
    """Match information section."""

    game_creation: Optional[int] = Field(None, alias="gameCreation")
    game_duration: Optional[int] = Field(None, alias="gameDuration")
    queue_id: Optional[int] = Field(None, alias="queueId")
    game_mode: Optional[str] = Field(None, alias="gameMode")
    platform_id: Optional[str] = Field(None, alias="platformId")
    participants: List[ParticipantDTO] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")
