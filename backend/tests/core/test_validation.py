import pytest

from rift_reviewer.core.validation import (
    extract_game_creation,
    extract_match_id,
    is_valid_riot_payload,
)


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"metadata": {"matchId": "NA1_1"}}, True),
        ({"info": {"frames": []}}, True),
        ({"metadata": "not-a-dict"}, False),
        ({"something": 1}, False),
        ({}, False),
        (None, False),
        ([{"metadata": {}}], False),
    ],
)
def test_is_valid_riot_payload(payload, expected):
    assert is_valid_riot_payload(payload) is expected


def test_extract_match_id_from_both_shapes():
    assert extract_match_id({"metadata": {"matchId": "NA1_1"}}) == "NA1_1"
    assert extract_match_id({"matchId": "NA1_2"}) == "NA1_2"
    assert extract_match_id({"info": {}}) is None


def test_extract_game_creation_from_both_shapes():
    assert extract_game_creation({"info": {"gameCreation": 1000}}) == 1000
    assert extract_game_creation({"gameCreation": "2000"}) == 2000
    assert extract_game_creation({"info": {"gameCreation": "soon"}}) is None
    assert extract_game_creation({}) is None
