"""Trick representation, follow-suit validation and resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .cards import Card, Suit, card_equals, compare_cards
from .errors import GameError


class InvalidPlay(GameError):
    """Base class for rejected card plays."""


class NotInPlayingPhase(InvalidPlay):
    """Raised when a card is played outside the playing phase."""


class CardNotInHand(InvalidPlay):
    """Raised when the player does not hold the card they tried to play."""


class MustFollowSuit(InvalidPlay):
    """Raised when a player holding the lead suit plays something else."""


class TrickError(RuntimeError):
    """Raised when trick play breaks ordering constraints."""


@dataclass(frozen=True)
class Play:
    player_id: str
    card: Card


@dataclass
class Trick:
    leader_id: str
    plays: List[Play] = field(default_factory=list)
    winner_id: str = ""

    def is_full(self, player_count: int) -> bool:
        return len(self.plays) >= player_count

    def add_play(self, player_id: str, card: Card) -> None:
        if self.winner_id:
            raise TrickError("Trick already complete.")
        if not self.plays and player_id != self.leader_id:
            raise TrickError("Only the leader can start the trick.")
        if any(play.player_id == player_id for play in self.plays):
            raise TrickError("A player cannot play twice in the same trick.")
        self.plays.append(Play(player_id, card))

    def led_suit(self) -> Optional[Suit]:
        return self.plays[0].card.suit if self.plays else None

    def winning_play(self) -> Play:
        """Fold the plays left to right; only a strictly better card takes over."""
        if not self.plays:
            raise TrickError("Cannot determine winner on empty trick.")
        led = self.led_suit()
        assert led is not None
        best = self.plays[0]
        for play in self.plays[1:]:
            if compare_cards(play.card, best.card, led) > 0:
                best = play
        return best


def find_in_hand(hand: Iterable[Card], card: Card) -> int:
    """Return the index of ``card`` in ``hand`` or -1."""
    for index, held in enumerate(hand):
        if card_equals(held, card):
            return index
    return -1


def holds_suit(hand: Iterable[Card], suit: Suit) -> bool:
    return any(not card.is_joker and card.suit is suit for card in hand)


def check_follow_suit(hand: Iterable[Card], trick: Trick, card: Card) -> None:
    """Raise MustFollowSuit if ``card`` abandons a lead suit the hand can follow.

    Jokers never count as following, even when spades were led.
    """
    led = trick.led_suit()
    if led is None:
        return
    if holds_suit(hand, led) and (card.is_joker or card.suit is not led):
        raise MustFollowSuit(f"You must follow suit ({led.value}).")
