"""Card-related data structures and helpers for Up and Down the River."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional


class Suit(Enum):
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "Suit | str") -> "Suit":
        if isinstance(value, Suit):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown suit: {value!r}") from exc


TRUMP_SUIT = Suit.SPADES

MIN_RANK = 2
MAX_RANK = 14

JOKER_HIGH = "J1"
JOKER_LOW = "J2"
JOKER_NAMES = (JOKER_HIGH, JOKER_LOW)

# Older clients encode the jokers as spades with these ranks.
LEGACY_JOKER_RANKS: dict[int, str] = {15: JOKER_LOW, 16: JOKER_HIGH}

RANK_LABELS: dict[int, str] = {11: "Jack", 12: "Queen", 13: "King", 14: "Ace"}


@dataclass(frozen=True)
class Card:
    """Immutable representation of a playing card.

    Jokers always carry the trump suit and rank 0; their strength comes from
    ``joker_name`` alone.
    """

    suit: Suit
    rank: int
    is_joker: bool = False
    joker_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.is_joker:
            if self.joker_name not in JOKER_NAMES:
                raise ValueError(f"Unknown joker: {self.joker_name!r}")
        elif not MIN_RANK <= self.rank <= MAX_RANK:
            raise ValueError(f"Rank {self.rank} outside {MIN_RANK}..{MAX_RANK}.")

    @classmethod
    def joker(cls, name: str) -> "Card":
        return cls(TRUMP_SUIT, 0, is_joker=True, joker_name=name)

    def __str__(self) -> str:
        return card_label(self)


def is_trump(card: Card) -> bool:
    return card.is_joker or card.suit is TRUMP_SUIT


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def compare_trump(a: Card, b: Card) -> int:
    """Order two trump cards: J1 > J2 > any other trump, then by rank."""
    if a.is_joker and b.is_joker:
        if a.joker_name == b.joker_name:
            return 0
        return 1 if a.joker_name == JOKER_HIGH else -1
    if a.is_joker:
        return 1
    if b.is_joker:
        return -1
    return _sign(a.rank - b.rank)


def compare_cards(a: Card, b: Card, lead_suit: Suit | str) -> int:
    """Return 1 if ``a`` beats ``b`` within a trick led in ``lead_suit``.

    Two off-suit non-trump cards compare equal, so neither displaces the
    other in a trick fold.
    """
    led = Suit.parse(lead_suit)
    a_trump = is_trump(a)
    b_trump = is_trump(b)

    if a_trump and b_trump:
        return compare_trump(a, b)
    if a_trump:
        return 1
    if b_trump:
        return -1

    if a.suit is b.suit:
        return _sign(a.rank - b.rank)
    if a.suit is led:
        return 1
    if b.suit is led:
        return -1
    return 0


def card_equals(a: Card, b: Card) -> bool:
    if a.is_joker or b.is_joker:
        return a.is_joker and b.is_joker and a.joker_name == b.joker_name
    return a.suit is b.suit and a.rank == b.rank


def serialize_card(card: Card) -> dict[str, object]:
    payload: dict[str, object] = {
        "suit": card.suit.value,
        "rank": card.rank,
        "isJoker": card.is_joker,
    }
    if card.is_joker:
        payload["jokerName"] = card.joker_name
    return payload


def deserialize_card(payload: Mapping[str, object]) -> Card:
    if payload.get("isJoker"):
        return Card.joker(str(payload.get("jokerName", "")).upper())

    suit = Suit.parse(str(payload["suit"]))
    rank = int(payload["rank"])  # type: ignore[arg-type]
    if suit is TRUMP_SUIT and rank in LEGACY_JOKER_RANKS:
        return Card.joker(LEGACY_JOKER_RANKS[rank])
    return Card(suit, rank)


def card_label(card: Card) -> str:
    if card.is_joker:
        return f"Joker {card.joker_name}"
    rank = RANK_LABELS.get(card.rank, str(card.rank))
    return f"{rank} of {card.suit.value.title()}"
