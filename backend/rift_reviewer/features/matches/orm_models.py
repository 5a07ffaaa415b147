"""SQLAlchemy 2.0 ORM model for the Match Record Store.

A match record holds the authoritative match blob (and optionally its
timeline) exactly as the upstream API returned it. The blob is written once
and never rewritten; ``expires_at`` is a freshness marker only.
"""

import time
from typing import Any, Dict, Optional

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from rift_reviewer.core.database import Base, JSONType


class MatchRecordORM(Base):
    """Cached match blob keyed by match ID."""

    __tablename__ = "match_records"

    match_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Unique match identifier from Riot API",
    )

    game_creation: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        nullable=True,
        index=True,
        comment="Game creation timestamp in milliseconds since epoch",
    )

    match_data: Mapped[Dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        comment="Raw match blob",
    )

    timeline_data: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSONType,
        nullable=True,
        comment="Raw timeline blob",
    )

    expires_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Freshness marker in epoch seconds",
    )

    processed_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Last time the record was written or refreshed, epoch millis",
    )

    ai_insights: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSONType,
        nullable=True,
        comment="Generated insights attached after the fact",
    )

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check whether the freshness marker is past due."""
        current = time.time() if now is None else now
        return self.expires_at <= current

    def __repr__(self) -> str:
        """Return string representation of the match record."""
        return f"<MatchRecordORM(match_id='{self.match_id}', expires_at={self.expires_at})>"
