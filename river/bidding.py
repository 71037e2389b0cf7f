"""Bidding rules: round setup, turn order, the dealer hook and the trick leader."""

from __future__ import annotations

import logging
from random import Random
from typing import List, Optional, Sequence

from .deck import create_deck, deal_cards, ensure_dealable, shuffle_deck
from .errors import GameError, NotYourTurn
from .state import Player, Round
from .trick import Trick

logger = logging.getLogger(__name__)


class BiddingError(GameError):
    """Base class for bidding related errors."""


class NotInBiddingPhase(BiddingError):
    """Raised when a bid arrives outside the bidding phase."""


class InvalidBid(BiddingError):
    """Raised when a bid falls outside 0..hand size."""


class DealerHookViolation(BiddingError):
    """Raised when the dealer's bid would make the bids add up to the hand size."""


def build_bid_order(players: Sequence[Player], dealer_index: int) -> List[str]:
    """Seats after the dealer in seating order, ending with the dealer."""
    count = len(players)
    return [players[(dealer_index + offset) % count].id for offset in range(1, count + 1)]


def open_round(
    players: Sequence[Player],
    *,
    round_number: int,
    total_cards: int,
    dealer_index: int,
    rng: Optional[Random] = None,
) -> Round:
    """Reset every player, deal ``total_cards`` each and return the new Round.

    Players are left untouched when the deck cannot cover the deal.
    """
    deck = create_deck()
    ensure_dealable(deck, len(players), total_cards)
    shuffle_deck(deck, rng)

    for player in players:
        player.reset_for_round()
    deal_cards(deck, players, total_cards)

    round_ = Round(
        round_number=round_number,
        total_cards=total_cards,
        dealer_index=dealer_index,
        bid_order=build_bid_order(players, dealer_index),
    )
    logger.info(
        "Round %d opened: %d cards, dealer %s",
        round_number,
        total_cards,
        players[dealer_index].display_name,
    )
    return round_


def forbidden_dealer_bid(round_: Round) -> Optional[int]:
    """Return the one bid the dealer may not make this round, if any."""
    if round_.total_cards <= 1:
        return None
    remaining = round_.total_cards - sum(round_.bids.values())
    if 0 <= remaining <= round_.total_cards:
        return remaining
    return None


def validate_bid(round_: Round, players: Sequence[Player], player_id: str, bid: int) -> None:
    if round_.current_bidder() != player_id:
        raise NotYourTurn("Not your turn to bid.")
    if bid < 0 or bid > round_.total_cards:
        raise InvalidBid(f"Bid must be between 0 and {round_.total_cards}.")

    is_dealer = player_id == players[round_.dealer_index].id
    if is_dealer and round_.total_cards > 1:
        if sum(round_.bids.values()) + bid == round_.total_cards:
            raise DealerHookViolation("Dealer bid cannot make total bids equal total cards.")


def select_trick_leader(round_: Round, players: Sequence[Player]) -> int:
    """Seat index of the highest bidder; ties go to whoever bid first."""
    leader_id = None
    highest = -1
    for player_id in round_.bid_order:
        bid = round_.bids[player_id]
        if bid > highest:
            highest = bid
            leader_id = player_id
    for seat, player in enumerate(players):
        if player.id == leader_id:
            return seat
    raise BiddingError("Bidding produced no leader.")


def submit_bid(round_: Round, players: Sequence[Player], player_id: str, bid: int) -> bool:
    """Validate and record a bid. Returns True once every player has bid.

    When bidding completes the first trick is opened for the leader.
    """
    validate_bid(round_, players, player_id, bid)

    round_.bids[player_id] = bid
    for player in players:
        if player.id == player_id:
            player.current_bid = bid
            player.bid_order = round_.current_bid_turn
            break
    round_.current_bid_turn += 1

    if not round_.bidding_complete():
        return False

    leader = select_trick_leader(round_, players)
    round_.trick_leader = leader
    round_.trick_turn_index = 0
    round_.current_trick = Trick(leader_id=players[leader].id)
    return True
