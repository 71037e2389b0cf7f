"""Game state records owned by a single Game."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .cards import Card
from .trick import Trick


class GamePhase(Enum):
    LOBBY = "lobby"
    BIDDING = "bidding"
    PLAYING = "playing"
    FINISHED = "finished"

    def __str__(self) -> str:
        return self.value


@dataclass
class Player:
    id: str
    display_name: str
    hand: List[Card] = field(default_factory=list)
    current_bid: int = 0
    bid_order: int = 0
    tricks_won: int = 0
    score: int = 0
    is_bot: bool = False
    missed_bids: int = 0

    def reset_for_round(self) -> None:
        self.hand = []
        self.current_bid = 0
        self.bid_order = 0
        self.tricks_won = 0


@dataclass
class Round:
    round_number: int
    total_cards: int
    dealer_index: int
    bids: Dict[str, int] = field(default_factory=dict)
    bid_order: List[str] = field(default_factory=list)
    current_bid_turn: int = 0
    tricks: List[Trick] = field(default_factory=list)
    current_trick: Optional[Trick] = None
    trick_turn_index: int = 0
    trick_leader: int = 0

    def bidding_complete(self) -> bool:
        return self.current_bid_turn >= len(self.bid_order)

    def current_bidder(self) -> Optional[str]:
        if self.bidding_complete():
            return None
        return self.bid_order[self.current_bid_turn]


@dataclass(frozen=True)
class PlayerRoundResult:
    player_id: str
    bid: int
    tricks_won: int
    round_score: int

    @property
    def made_bid(self) -> bool:
        return self.bid == self.tricks_won


@dataclass(frozen=True)
class RoundResult:
    round_number: int
    total_cards: int
    results: Tuple[PlayerRoundResult, ...]
