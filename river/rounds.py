"""Round sizing helpers."""

from __future__ import annotations

from typing import List, Optional

from .deck import DECK_SIZE


def compute_round_sequence(max_cards: int) -> List[int]:
    """Return hand sizes going up to ``max_cards`` and back down, e.g. [1, 2, 3, 2, 1]."""
    if max_cards < 1:
        raise ValueError("max_cards must be at least 1.")
    ascending = list(range(1, max_cards + 1))
    return ascending + ascending[-2::-1]


def max_hand_size(player_count: int) -> int:
    if player_count < 1:
        raise ValueError("player_count must be positive.")
    return DECK_SIZE // player_count


def resolve_max_cards(requested: Optional[int], player_count: int) -> int:
    """Use the creator's requested maximum when it fits the deck, else the deck maximum."""
    limit = max_hand_size(player_count)
    if requested is None or requested < 1 or requested > limit:
        return limit
    return requested


def next_dealer(dealer_index: int, player_count: int) -> int:
    return (dealer_index + 1) % player_count
