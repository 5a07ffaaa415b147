"""Aggregation engine.

A player's aggregate is a pure function of their complete participant
history. Every run recomputes it from scratch and replaces the stored row in
one conditional write, so overlapping runs converge on the same value.
"""

import time
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

import structlog

from rift_reviewer.core.exceptions import AggregationError, StoreError
from rift_reviewer.features.matches.repository import (
    ParticipantIndexRepositoryInterface,
)

from .gateway import RiotAccountGateway
from .repository import PlayerAggregateRepositoryInterface
from .schemas import (
    AccountResponse,
    AggregationResult,
    AvgKDA,
    ChampionStats,
    PlayerAggregate,
    RoleStats,
)

logger = structlog.get_logger(__name__)

NO_PARTICIPANTS_MESSAGE = "No participants found"


def _ratio(kills: float, deaths: float, assists: float) -> float:
    if deaths > 0:
        return (kills + assists) / deaths
    return float(kills + assists)


def _safe_avg(total: float, games: int) -> float:
    return total / games if games else 0.0


def role_key(entry: Any) -> str:
    """teamPosition, then role, then UNKNOWN."""
    return (
        getattr(entry, "team_position", None)
        or getattr(entry, "role", None)
        or "UNKNOWN"
    )


def compute_player_aggregate(
    puuid: str,
    entries: Iterable[Any],
    now_ms: Optional[int] = None,
    identity: Optional[AccountResponse] = None,
) -> Optional[PlayerAggregate]:
    """
    Fold participant entries into a player aggregate.

    Entries without a match ID or gameCreation are skipped. Returns None when
    no valid entry remains.
    """
    valid = [
        e
        for e in entries
        if getattr(e, "match_id", None) and getattr(e, "game_creation", None) is not None
    ]
    if not valid:
        return None

    # Fixed fold order keeps float sums identical across runs
    valid.sort(key=lambda e: (e.game_creation, e.match_id))

    wins = 0
    kills = deaths = assists = 0
    cs = damage = vision = 0
    champions: Dict[str, Dict[str, Any]] = defaultdict(
        lambda: {
            "champion_name": None,
            "games": 0,
            "wins": 0,
            "losses": 0,
            "kills": 0,
            "deaths": 0,
            "assists": 0,
        }
    )
    roles: Dict[str, Dict[str, int]] = defaultdict(
        lambda: {"games": 0, "wins": 0, "losses": 0}
    )

    for entry in valid:
        won = bool(entry.win)
        wins += int(won)
        kills += entry.kills or 0
        deaths += entry.deaths or 0
        assists += entry.assists or 0
        cs += entry.cs or 0
        damage += entry.total_damage_dealt_to_champions or 0
        vision += entry.vision_score or 0

        if entry.champion_id is not None:
            bucket = champions[str(entry.champion_id)]
            bucket["games"] += 1
            bucket["wins" if won else "losses"] += 1
            bucket["kills"] += entry.kills or 0
            bucket["deaths"] += entry.deaths or 0
            bucket["assists"] += entry.assists or 0
            if entry.champion_name:
                bucket["champion_name"] = entry.champion_name

        role = roles[role_key(entry)]
        role["games"] += 1
        role["wins" if won else "losses"] += 1

    total = len(valid)
    avg_kills = _safe_avg(kills, total)
    avg_deaths = _safe_avg(deaths, total)
    avg_assists = _safe_avg(assists, total)

    champion_stats = {}
    for key in sorted(champions):
        bucket = champions[key]
        games = bucket["games"]
        champion_stats[key] = ChampionStats(
            **bucket,
            kda=_ratio(
                _safe_avg(bucket["kills"], games),
                _safe_avg(bucket["deaths"], games),
                _safe_avg(bucket["assists"], games),
            ),
        )

    return PlayerAggregate(
        puuid=puuid,
        game_name=identity.game_name if identity else None,
        tag_line=identity.tag_line if identity else None,
        total_matches=total,
        wins=wins,
        losses=total - wins,
        win_rate=_safe_avg(wins, total),
        avg_kda=AvgKDA(
            kills=avg_kills,
            deaths=avg_deaths,
            assists=avg_assists,
            ratio=_ratio(avg_kills, avg_deaths, avg_assists),
        ),
        avg_cs=_safe_avg(cs, total),
        avg_damage=_safe_avg(damage, total),
        avg_vision_score=_safe_avg(vision, total),
        champion_stats=champion_stats,
        role_stats={key: RoleStats(**roles[key]) for key in sorted(roles)},
        last_updated=now_ms if now_ms is not None else int(time.time() * 1000),
        last_match_fetched=max(e.game_creation for e in valid),
    )


class AggregationEngine:
    """Recompute and store player aggregates."""

    def __init__(
        self,
        participant_store: ParticipantIndexRepositoryInterface,
        aggregate_store: PlayerAggregateRepositoryInterface,
        identity_gateway: Optional[RiotAccountGateway] = None,
    ):
        self.participant_store = participant_store
        self.aggregate_store = aggregate_store
        self.identity_gateway = identity_gateway

    async def aggregate(
        self, puuid: str, routing_hint: Optional[str] = None
    ) -> AggregationResult:
        """
        Recompute a player's aggregate from their full history.

        Raises:
            AggregationError: Reading history or writing the aggregate failed
        """
        try:
            entries: List[Any] = await self.participant_store.list_for_player(puuid)
        except StoreError as e:
            raise AggregationError(
                f"Reading participant history failed: {e.message}",
                details={"puuid": puuid},
            ) from e

        if not entries:
            logger.info("aggregation_no_data", puuid=puuid)
            return AggregationResult(
                puuid=puuid, status="no_data", message=NO_PARTICIPANTS_MESSAGE
            )

        identity = await self._resolve_identity(puuid, routing_hint)
        aggregate = compute_player_aggregate(puuid, entries, identity=identity)
        if aggregate is None:
            logger.warning("aggregation_no_valid_entries", puuid=puuid, entries=len(entries))
            return AggregationResult(
                puuid=puuid, status="no_data", message=NO_PARTICIPANTS_MESSAGE
            )

        try:
            await self.aggregate_store.upsert(aggregate)
        except StoreError as e:
            raise AggregationError(
                f"Writing aggregate failed: {e.message}", details={"puuid": puuid}
            ) from e

        logger.info(
            "aggregation_completed",
            puuid=puuid,
            total_matches=aggregate.total_matches,
            win_rate=aggregate.win_rate,
        )
        return AggregationResult(
            puuid=puuid,
            status="success",
            message=f"Aggregated {aggregate.total_matches} matches",
            aggregate=aggregate,
        )

    async def _resolve_identity(
        self, puuid: str, routing_hint: Optional[str]
    ) -> Optional[AccountResponse]:
        """Fresh identity if the lookup works, else whatever is cached."""
        identity = None
        if self.identity_gateway is not None:
            identity = await self.identity_gateway.fetch_identity(puuid, routing_hint)
        if identity is not None and identity.game_name:
            return identity

        try:
            cached = await self.aggregate_store.get(puuid)
        except StoreError as e:
            logger.warning("cached_identity_read_failed", puuid=puuid, error=e.message)
            return identity
        if cached is not None and cached.game_name:
            return AccountResponse(
                puuid=puuid, game_name=cached.game_name, tag_line=cached.tag_line
            )
        return identity
