"""Deck creation and dealing utilities."""

from __future__ import annotations

from random import Random
from typing import List, Optional, Protocol, Sequence

from .cards import JOKER_HIGH, JOKER_LOW, MAX_RANK, MIN_RANK, Card, Suit
from .errors import GameError

DECK_SIZE = 54


class InsufficientCards(GameError):
    """Raised when the deck cannot cover the requested deal."""


class HasHand(Protocol):
    hand: List[Card]


def create_deck() -> List[Card]:
    """Return the ordered 54-card deck: four suits of 2..Ace, then J1 and J2."""
    deck = [Card(suit, rank) for suit in Suit for rank in range(MIN_RANK, MAX_RANK + 1)]
    deck.append(Card.joker(JOKER_HIGH))
    deck.append(Card.joker(JOKER_LOW))
    return deck


def shuffle_deck(deck: List[Card], rng: Optional[Random] = None) -> None:
    (rng or Random()).shuffle(deck)


def ensure_dealable(deck: Sequence[Card], player_count: int, cards_per_player: int) -> int:
    """Return the number of cards the deal needs, or raise InsufficientCards."""
    needed = cards_per_player * player_count
    if needed > len(deck):
        raise InsufficientCards(
            f"Cannot deal {cards_per_player} cards to {player_count} players from {len(deck)} cards."
        )
    return needed


def deal_cards(deck: List[Card], players: Sequence[HasHand], cards_per_player: int) -> None:
    """Deal round-robin, one card per player per pass, from the front of ``deck``.

    Dealt cards are removed from ``deck``.
    """
    needed = ensure_dealable(deck, len(players), cards_per_player)

    position = 0
    for _ in range(cards_per_player):
        for player in players:
            player.hand.append(deck[position])
            position += 1
    del deck[:needed]
