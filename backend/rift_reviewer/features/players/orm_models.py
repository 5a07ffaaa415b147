"""SQLAlchemy 2.0 ORM model for the Player Aggregate Store."""

from typing import Any, Dict, Optional

from sqlalchemy import BigInteger, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from rift_reviewer.core.database import Base, JSONType


class PlayerAggregateORM(Base):
    """Per-player rollup, replaced wholesale on every aggregation run."""

    __tablename__ = "player_aggregates"

    puuid: Mapped[str] = mapped_column(
        String(78), primary_key=True, comment="Player PUUID"
    )

    # Cached identity
    game_name: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    tag_line: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    # Totals
    total_matches: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    win_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Averages
    avg_kda: Mapped[Dict[str, Any]] = mapped_column(
        JSONType, nullable=False, comment="kills / deaths / assists / ratio"
    )
    avg_cs: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    avg_damage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    avg_vision_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Breakdowns
    champion_stats: Mapped[Dict[str, Any]] = mapped_column(
        JSONType, nullable=False, comment="Keyed by champion ID"
    )
    role_stats: Mapped[Dict[str, Any]] = mapped_column(
        JSONType, nullable=False, comment="Keyed by team position"
    )

    last_updated: Mapped[int] = mapped_column(
        BigInteger, nullable=False, comment="Recompute time, epoch millis"
    )
    last_match_fetched: Mapped[Optional[int]] = mapped_column(
        BigInteger, nullable=True, comment="gameCreation of the newest folded match"
    )

    ai_insights: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSONType, nullable=True
    )

    def __repr__(self) -> str:
        """Return string representation of the aggregate."""
        return (
            f"<PlayerAggregateORM(puuid='{self.puuid}', "
            f"total_matches={self.total_matches}, win_rate={self.win_rate})>"
        )
