"""Insight service.

Builds generator payloads from stored statistics and attaches the answers to
the aggregate, the participant entry or the match record. Every failure is
logged and turned into ``None``; insights never block caching or
aggregation.
"""

from typing import Any, Dict, List, Optional

import structlog

from rift_reviewer.core.exceptions import ServiceException
from rift_reviewer.features.matches.repository import (
    MatchRecordRepositoryInterface,
    ParticipantIndexRepositoryInterface,
)
from rift_reviewer.features.matches.resolver import CacheResolutionOrchestrator
from rift_reviewer.features.players.repository import (
    PlayerAggregateRepositoryInterface,
)
from rift_reviewer.features.players.schemas import PlayerAggregate

from .generator import InsightGenerator
from .schemas import Insight, TimelineInsight

logger = structlog.get_logger(__name__)

RECENT_MATCHES = 20

# Timeline events worth commenting on
KEY_EVENT_TYPES = {
    "CHAMPION_KILL",
    "ELITE_MONSTER_KILL",
    "BUILDING_KILL",
    "TURRET_PLATE_DESTROYED",
}

_MATCH_FIELDS = (
    "match_id",
    "win",
    "kda",
    "kills",
    "deaths",
    "assists",
    "champion_name",
    "team_position",
    "queue_id",
    "game_mode",
    "game_creation",
    "game_duration",
    "cs",
    "vision_score",
    "total_damage_dealt_to_champions",
    "gold_earned",
)


def _entry_payload(entry: Any) -> Dict[str, Any]:
    return {field: getattr(entry, field, None) for field in _MATCH_FIELDS}


def summarize_timeline(timeline: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the key events of a timeline blob."""
    info = timeline.get("info") or {}
    events = []
    for frame in info.get("frames") or []:
        for event in frame.get("events") or []:
            if event.get("type") in KEY_EVENT_TYPES:
                events.append(event)
    return {
        "matchId": (timeline.get("metadata") or {}).get("matchId"),
        "participants": info.get("participants") or [],
        "events": events,
    }


class InsightService:
    """Generate and attach coaching insights."""

    def __init__(
        self,
        generator: Optional[InsightGenerator],
        participant_store: ParticipantIndexRepositoryInterface,
        aggregate_store: PlayerAggregateRepositoryInterface,
        match_store: MatchRecordRepositoryInterface,
        resolver: CacheResolutionOrchestrator,
        enabled: bool = True,
    ):
        self.generator = generator
        self.participant_store = participant_store
        self.aggregate_store = aggregate_store
        self.match_store = match_store
        self.resolver = resolver
        self.enabled = enabled and generator is not None

    async def player_insights(self, puuid: str) -> Optional[Insight]:
        """Comment on a player's aggregate and recent matches."""
        if not self.enabled:
            return None

        try:
            entries = await self.participant_store.list_for_player(
                puuid, limit=RECENT_MATCHES
            )
            if not entries:
                logger.info("player_insights_no_history", puuid=puuid)
                return None

            stored = await self.aggregate_store.get(puuid)
            payload: Dict[str, Any] = {
                "recentMatches": [_entry_payload(e) for e in entries],
            }
            if stored is not None:
                payload["aggregate"] = PlayerAggregate.model_validate(stored).model_dump(
                    mode="json", exclude={"ai_insights"}
                )

            insight = await self.generator.generate_player_insights(payload)
            if stored is not None:
                await self.aggregate_store.attach_insights(puuid, insight.model_dump())
        except ServiceException as e:
            logger.warning(
                "player_insights_failed", puuid=puuid, code=e.code.value, error=e.message
            )
            return None

        logger.info("player_insights_generated", puuid=puuid, severity=insight.severity)
        return insight

    async def match_insights(self, puuid: str, match_id: str) -> Optional[Insight]:
        """Comment on one player's performance in one match."""
        if not self.enabled:
            return None

        try:
            entry = await self.participant_store.get(puuid, match_id)
            if entry is None:
                logger.info("match_insights_no_entry", puuid=puuid, match_id=match_id)
                return None

            insight = await self.generator.generate_match_insights(_entry_payload(entry))
            await self.participant_store.attach_insights(
                puuid, match_id, insight.model_dump()
            )
        except ServiceException as e:
            logger.warning(
                "match_insights_failed",
                puuid=puuid,
                match_id=match_id,
                code=e.code.value,
                error=e.message,
            )
            return None

        return insight

    async def timeline_insights(
        self, match_id: str, routing_hint: Optional[str] = None
    ) -> Optional[List[TimelineInsight]]:
        """Point out the key moments of a match timeline."""
        if not self.enabled:
            return None

        try:
            timeline = await self.resolver.resolve_timeline(match_id, routing_hint)
            insights = await self.generator.generate_timeline_insights(
                summarize_timeline(timeline)
            )
        except ServiceException as e:
            logger.warning(
                "timeline_insights_failed",
                match_id=match_id,
                code=e.code.value,
                error=e.message,
            )
            return None

        try:
            await self.match_store.attach_insights(
                match_id, {"timeline": [i.model_dump() for i in insights]}
            )
        except ServiceException as e:
            # The record may not exist yet; the answer is still returned
            logger.warning(
                "timeline_insights_not_attached", match_id=match_id, error=e.message
            )

        return insights
