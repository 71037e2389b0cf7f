from random import Random

import pytest

from river.bidding import (
    DealerHookViolation,
    InvalidBid,
    NotInBiddingPhase,
    build_bid_order,
    forbidden_dealer_bid,
    open_round,
    select_trick_leader,
    submit_bid,
)
from river.errors import NotYourTurn
from river.state import Player, Round

from conftest import seated_game


def table(count):
    return [Player(id=f"p{i}", display_name=f"P{i}") for i in range(count)]


def bidding_round(players, total_cards, dealer_index):
    return Round(
        round_number=1,
        total_cards=total_cards,
        dealer_index=dealer_index,
        bid_order=build_bid_order(players, dealer_index),
    )


def test_bid_order_ends_with_dealer():
    players = table(4)
    assert build_bid_order(players, 1) == ["p2", "p3", "p0", "p1"]
    assert build_bid_order(players, 3) == ["p0", "p1", "p2", "p3"]


def test_open_round_resets_and_deals():
    players = table(3)
    players[0].tricks_won = 2
    players[0].current_bid = 1
    players[0].hand = ["stale"]
    round_ = open_round(players, round_number=2, total_cards=4, dealer_index=2, rng=Random(1))

    assert round_.bid_order == ["p0", "p1", "p2"]
    assert [len(p.hand) for p in players] == [4, 4, 4]
    assert players[0].tricks_won == 0
    assert players[0].current_bid == 0
    assert round_.current_trick is None


def test_dealer_hook_rejects_exact_total():
    players = table(3)
    round_ = bidding_round(players, total_cards=5, dealer_index=2)
    submit_bid(round_, players, "p0", 2)
    submit_bid(round_, players, "p1", 1)

    assert forbidden_dealer_bid(round_) == 2
    with pytest.raises(DealerHookViolation):
        submit_bid(round_, players, "p2", 2)
    assert "p2" not in round_.bids
    assert round_.current_bid_turn == 2


@pytest.mark.parametrize("dealer_bid", [1, 3])
def test_dealer_hook_allows_other_bids(dealer_bid):
    players = table(3)
    round_ = bidding_round(players, total_cards=5, dealer_index=2)
    submit_bid(round_, players, "p0", 2)
    submit_bid(round_, players, "p1", 1)
    assert submit_bid(round_, players, "p2", dealer_bid)


def test_single_card_round_has_no_hook():
    players = table(2)
    round_ = bidding_round(players, total_cards=1, dealer_index=0)
    submit_bid(round_, players, "p1", 0)
    assert forbidden_dealer_bid(round_) is None
    assert submit_bid(round_, players, "p0", 1)


def test_bid_range_and_turn_order():
    players = table(3)
    round_ = bidding_round(players, total_cards=3, dealer_index=0)

    with pytest.raises(NotYourTurn):
        submit_bid(round_, players, "p2", 1)
    with pytest.raises(InvalidBid):
        submit_bid(round_, players, "p1", 4)
    with pytest.raises(InvalidBid):
        submit_bid(round_, players, "p1", -1)

    assert not submit_bid(round_, players, "p1", 3)
    assert players[1].current_bid == 3
    assert players[1].bid_order == 0
    with pytest.raises(NotYourTurn):
        submit_bid(round_, players, "p1", 1)


def test_highest_bid_leads():
    players = table(4)
    round_ = bidding_round(players, total_cards=4, dealer_index=3)
    for player_id, bid in (("p0", 1), ("p1", 3), ("p2", 0)):
        submit_bid(round_, players, player_id, bid)
    assert submit_bid(round_, players, "p3", 1)

    assert round_.trick_leader == 1
    assert round_.current_trick.leader_id == "p1"
    assert round_.current_trick.plays == []
    assert round_.trick_turn_index == 0


def test_tied_bids_go_to_the_earliest_bidder():
    players = table(4)
    round_ = bidding_round(players, total_cards=4, dealer_index=1)
    # bid order: p2, p3, p0, p1
    for player_id, bid in (("p2", 1), ("p3", 2), ("p0", 2)):
        submit_bid(round_, players, player_id, bid)
    submit_bid(round_, players, "p1", 0)

    assert select_trick_leader(round_, players) == 3
    assert round_.current_trick.leader_id == "p3"


def test_game_rejects_bids_outside_bidding():
    game = seated_game(2)
    with pytest.raises(NotInBiddingPhase):
        game.submit_bid("p0", 0)
