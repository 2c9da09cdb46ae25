import re

import pytest

from nameid.consts import GenderStrings
from nameid.strategies import (
    NAME_DETECT_STRATEGIES,
    ByIndex,
    ByRegex,
    FindSalutation,
    StrategyNotImplementedError,
    gender_of,
    identify_gender,
    parse_strategy_id,
    select_token,
)


def test_by_index_selects_positions():
    tokens = ("alice", "marie", "smith")
    assert select_token(ByIndex(0), tokens) == "alice"
    assert select_token(ByIndex(1), tokens) == "marie"
    assert select_token(ByIndex(-1), tokens) == "smith"
    assert select_token(ByIndex(-2), tokens) == "marie"


def test_by_index_single_token_ignores_index():
    for index in (0, 1, -1, 5):
        assert select_token(ByIndex(index), ("alice",)) == "alice"


def test_by_index_empty_record_selects_nothing():
    assert select_token(ByIndex(0), ()) is None
    assert identify_gender((), ByIndex(-1), {"alice": 0.0}) == GenderStrings.NA


@pytest.mark.parametrize("strategy", [ByRegex(re.compile(r"^\w+")), FindSalutation()])
def test_placeholder_strategies_fail_loudly(strategy):
    with pytest.raises(StrategyNotImplementedError, match="not implemented"):
        select_token(strategy, ("alice", "smith"))
    with pytest.raises(NotImplementedError):
        identify_gender(("alice",), strategy, {})


def test_gender_resolution():
    probabilities = {"jordan": 0.7, "taylor": 0.3, "sam": 0.5}
    assert gender_of("jordan", probabilities) == GenderStrings.MALE
    assert gender_of("taylor", probabilities) == GenderStrings.FEMALE
    assert gender_of("sam", probabilities) == GenderStrings.MALE
    assert gender_of("mallory", probabilities) == GenderStrings.NA
    assert gender_of(None, probabilities) == GenderStrings.NA


def test_identify_gender_uses_strategy(gender_dictionary):
    tokens = ("taylor", "jordan")
    assert identify_gender(tokens, ByIndex(0), gender_dictionary.value) == GenderStrings.FEMALE
    assert identify_gender(tokens, ByIndex(-1), gender_dictionary.value) == GenderStrings.MALE


def test_strategy_ids_round_trip():
    assert [s.strategy_id for s in NAME_DETECT_STRATEGIES] == ["ByIndex(0)", "ByIndex(-1)"]
    for strategy in (ByIndex(0), ByIndex(-1), ByIndex(3), FindSalutation()):
        assert parse_strategy_id(strategy.strategy_id) == strategy
    assert parse_strategy_id("ByRegex(^mr)").pattern.pattern == "^mr"
    with pytest.raises(ValueError):
        parse_strategy_id("ByName(first)")
