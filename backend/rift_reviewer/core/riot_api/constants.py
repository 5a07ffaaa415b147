"""Riot API constants, enum definitions and regional routing."""

from enum import Enum
from typing import Dict, Optional, Union

import structlog

logger = structlog.get_logger(__name__)


class Region(str, Enum):
    """Riot API regions for regional routing."""

    AMERICAS = "americas"
    ASIA = "asia"
    EUROPE = "europe"
    SEA = "sea"


class Platform(str, Enum):
    """Riot API platforms for platform routing."""

    BR1 = "br1"
    EUN1 = "eun1"
    EUW1 = "euw1"
    JP1 = "jp1"
    KR = "kr"
    LA1 = "la1"
    LA2 = "la2"
    ME1 = "me1"
    NA1 = "na1"
    OC1 = "oc1"
    PH2 = "ph2"
    RU = "ru"
    SG2 = "sg2"
    TH2 = "th2"
    TR1 = "tr1"
    TW2 = "tw2"
    VN2 = "vn2"


# Match-V5 and Account-V1 use regional routing, several platforms share one region
PLATFORM_TO_REGION: Dict[Platform, Region] = {
    Platform.BR1: Region.AMERICAS,
    Platform.LA1: Region.AMERICAS,
    Platform.LA2: Region.AMERICAS,
    Platform.NA1: Region.AMERICAS,
    Platform.OC1: Region.AMERICAS,
    Platform.JP1: Region.ASIA,
    Platform.KR: Region.ASIA,
    Platform.PH2: Region.ASIA,
    Platform.SG2: Region.ASIA,
    Platform.TH2: Region.ASIA,
    Platform.TW2: Region.ASIA,
    Platform.VN2: Region.ASIA,
    Platform.EUN1: Region.EUROPE,
    Platform.EUW1: Region.EUROPE,
    Platform.ME1: Region.EUROPE,
    Platform.RU: Region.EUROPE,
    Platform.TR1: Region.EUROPE,
}


def resolve_region(
    hint: Optional[Union[str, Region, Platform]],
    fallback: Union[str, Region] = Region.AMERICAS,
) -> Region:
    """
    Map a routing hint to one regional routing value.

    Accepts a platform code ("na1", "EUW1"), a region code ("europe") or the
    matching enums. Unknown and missing hints resolve to ``fallback``.
    """
    fallback_region = Region(fallback.value if isinstance(fallback, Region) else fallback.lower())

    if hint is None:
        return fallback_region
    if isinstance(hint, Region):
        return hint
    if isinstance(hint, Platform):
        return PLATFORM_TO_REGION[hint]

    normalized = hint.strip().lower()
    if not normalized:
        return fallback_region

    try:
        return Region(normalized)
    except ValueError:
        pass

    try:
        return PLATFORM_TO_REGION[Platform(normalized)]
    except ValueError:
        logger.warning(
            "Unknown routing hint, using fallback region",
            hint=hint,
            fallback=fallback_region.value,
        )
        return fallback_region


class QueueType(int, Enum):
    """Riot API queue types for match filtering."""

    NORMAL_DRAFT_5X5 = 400
    RANKED_SOLO_5X5 = 420
    NORMAL_BLIND_PICK_5X5 = 430
    RANKED_FLEX_5X5 = 440
    ARAM = 450
    CLASH = 700
    ARURF = 900
    NORMAL_QUICKPLAY = 490
