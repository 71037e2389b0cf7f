import json

import pytest
from pydantic import ValidationError

from river.rules_schema import RuleSet, load_rules


def test_defaults():
    rules = RuleSet()
    assert rules.min_players == 2
    assert rules.max_players == 6
    assert rules.trick_reveal_delay == 3.0
    assert rules.exact_bid_bonus == 10
    assert rules.seed is None


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        RuleSet(min_players=1)
    with pytest.raises(ValidationError):
        RuleSet(min_players=4, max_players=3)
    with pytest.raises(ValidationError):
        RuleSet(trick_reveal_delay=-1)
    with pytest.raises(ValidationError):
        RuleSet(max_players=60)


def test_load_from_file(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"trick_reveal_delay": 0.5, "max_players": 4, "seed": 9}), encoding="utf-8")

    rules = load_rules(path)

    assert rules.trick_reveal_delay == 0.5
    assert rules.max_players == 4
    assert rules.seed == 9
    assert load_rules() == RuleSet()
