"""SQLAlchemy 2.0 ORM model for the Participant Index Store.

One row per (player, match) pair. Rows are written once through a
put-if-absent insert and are never mutated afterwards, except for attaching
generated insights.
"""

from typing import Any, Dict, Optional

from sqlalchemy import BigInteger, Boolean, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from rift_reviewer.core.database import Base, JSONType


class ParticipantIndexORM(Base):
    """A player's performance in one match."""

    __tablename__ = "participant_index"
    __table_args__ = (
        Index(
            "idx_participant_index_puuid_creation",
            "puuid",
            "game_creation",
        ),
    )

    # Composite primary key
    puuid: Mapped[str] = mapped_column(
        String(78), primary_key=True, comment="Player PUUID"
    )
    match_id: Mapped[str] = mapped_column(
        String(64), primary_key=True, comment="Match identifier"
    )

    # Game context
    game_creation: Mapped[int] = mapped_column(BigInteger, nullable=False)
    game_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    queue_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    game_mode: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    # Outcome and combat
    win: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    kills: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deaths: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    assists: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    kda: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Champion and position
    champion_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    champion_name: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    lane: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    role: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    team_position: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    individual_position: Mapped[Optional[str]] = mapped_column(
        String(16), nullable=True
    )
    team_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Economy, farming and damage
    total_damage_dealt: Mapped[int] = mapped_column(Integer, default=0)
    total_damage_dealt_to_champions: Mapped[int] = mapped_column(Integer, default=0)
    total_minions_killed: Mapped[int] = mapped_column(Integer, default=0)
    neutral_minions_killed: Mapped[int] = mapped_column(Integer, default=0)
    cs: Mapped[int] = mapped_column(Integer, default=0)
    vision_score: Mapped[int] = mapped_column(Integer, default=0)
    gold_earned: Mapped[int] = mapped_column(Integer, default=0)
    gold_spent: Mapped[int] = mapped_column(Integer, default=0)
    time_played: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    total_time_spent_dead: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )

    # Identity snapshot at match time
    riot_id_game_name: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True
    )
    riot_id_tagline: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    processed_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, comment="Write time, epoch millis"
    )
    ai_insights: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSONType, nullable=True
    )

    @property
    def role_key(self) -> str:
        """Bucket key for role statistics."""
        return self.team_position or self.role or "UNKNOWN"

    def __repr__(self) -> str:
        """Return string representation of the participant entry."""
        return (
            f"<ParticipantIndexORM(puuid='{self.puuid}', match_id='{self.match_id}', "
            f"win={self.win})>"
        )
