import pytest

from rift_reviewer.core.riot_api.constants import Platform, Region, resolve_region


@pytest.mark.parametrize(
    "hint, expected",
    [
        ("na1", Region.AMERICAS),
        ("BR1", Region.AMERICAS),
        ("oc1", Region.AMERICAS),
        ("kr", Region.ASIA),
        ("jp1", Region.ASIA),
        ("vn2", Region.ASIA),
        ("euw1", Region.EUROPE),
        ("EUN1", Region.EUROPE),
        ("tr1", Region.EUROPE),
        ("europe", Region.EUROPE),
        ("Asia", Region.ASIA),
        (Platform.RU, Region.EUROPE),
        (Region.SEA, Region.SEA),
    ],
)
def test_routing_hint_maps_to_region(hint, expected):
    assert resolve_region(hint) == expected


@pytest.mark.parametrize("hint", [None, "", "   ", "moon1"])
def test_unknown_or_missing_hint_uses_fallback(hint):
    assert resolve_region(hint) == Region.AMERICAS
    assert resolve_region(hint, fallback="europe") == Region.EUROPE
