"""High-level game orchestration for Up and Down the River."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from random import Random
from typing import List, Optional, Tuple

from .bidding import NotInBiddingPhase, open_round, submit_bid
from .cards import Card, card_label
from .deck import InsufficientCards
from .errors import GameError, NotYourTurn
from .rounds import compute_round_sequence, next_dealer, resolve_max_cards
from .rules_schema import RuleSet
from .scoring import count_missed_bids, score_round
from .state import GamePhase, Player, Round, RoundResult
from .trick import CardNotInHand, NotInPlayingPhase, Trick, check_follow_suit, find_in_hand

logger = logging.getLogger(__name__)

TRICK_OVER_MESSAGE = "Trick is over"


class LobbyError(GameError):
    """Base class for errors raised while seating or starting a game."""


class GameAlreadyStarted(LobbyError):
    """Raised when joining or starting a game that has left the lobby."""


class GameFull(LobbyError):
    """Raised when every seat is taken."""


class NotEnoughPlayers(LobbyError):
    """Raised when starting a game with too few players."""


@dataclass(frozen=True)
class TrickOutcome:
    trick: Trick
    winner_id: str
    winning_card: Card


@dataclass
class Game:
    """One table: seated players, the live round and the results so far.

    Every mutation goes through a method on this class, and callers hold the
    game's registry lock while calling them.
    """

    id: str
    players: List[Player] = field(default_factory=list)
    creator_max_cards: int = 0
    rules: RuleSet = field(default_factory=RuleSet)
    rng: Random = field(default_factory=Random, repr=False)
    state: GamePhase = GamePhase.LOBBY
    current_round: Optional[Round] = None
    round_sequence: List[int] = field(default_factory=list)
    current_round_index: int = 0
    round_results: List[RoundResult] = field(default_factory=list)
    trick_over_message: str = ""
    sequence: int = 0
    revision: int = 0

    # Lobby ---------------------------------------------------------------

    def find_player(self, player_id: str) -> Tuple[Optional[Player], int]:
        for seat, player in enumerate(self.players):
            if player.id == player_id:
                return player, seat
        return None, -1

    def add_player(self, player: Player) -> None:
        if self.state is not GamePhase.LOBBY:
            raise GameAlreadyStarted("Game already started.")
        if len(self.players) >= self.rules.max_players:
            raise GameFull("Game is full.")
        self.players.append(player)

    def start(self) -> Round:
        if self.state is not GamePhase.LOBBY:
            raise GameAlreadyStarted("Game already started.")
        if len(self.players) < self.rules.min_players:
            raise NotEnoughPlayers(f"Need at least {self.rules.min_players} players to start.")

        max_cards = resolve_max_cards(self.creator_max_cards, len(self.players))
        sequence = compute_round_sequence(max_cards)
        self._open_round(self.rng.randrange(len(self.players)), round_number=1, total_cards=sequence[0])
        self.round_sequence = sequence
        self.current_round_index = 0
        self.round_results = []
        logger.info("Game %s started with %d players, rounds %s", self.id, len(self.players), self.round_sequence)
        assert self.current_round is not None
        return self.current_round

    # Bidding -------------------------------------------------------------

    def submit_bid(self, player_id: str, bid: int) -> bool:
        """Record a bid; returns True when it closed the bidding."""
        if self.state is not GamePhase.BIDDING or self.current_round is None:
            raise NotInBiddingPhase("Not in bidding phase.")
        complete = submit_bid(self.current_round, self.players, player_id, bid)
        if complete:
            self.state = GamePhase.PLAYING
            leader = self.players[self.current_round.trick_leader]
            logger.info("Game %s bidding closed, %s leads", self.id, leader.display_name)
        return complete

    # Play ----------------------------------------------------------------

    def expected_player(self) -> Optional[Player]:
        round_ = self.current_round
        if self.state is not GamePhase.PLAYING or round_ is None or round_.current_trick is None:
            return None
        if round_.current_trick.is_full(len(self.players)):
            return None
        return self.players[(round_.trick_leader + round_.trick_turn_index) % len(self.players)]

    def play_card(self, player_id: str, card: Card) -> Optional[TrickOutcome]:
        """Play ``card`` for ``player_id``; returns the outcome if it completed the trick."""
        if self.state is not GamePhase.PLAYING or self.current_round is None:
            raise NotInPlayingPhase("Not in playing phase.")
        round_ = self.current_round
        trick = round_.current_trick
        expected = self.expected_player()
        if trick is None or expected is None or expected.id != player_id:
            raise NotYourTurn("Not your turn to play.")

        index = find_in_hand(expected.hand, card)
        if index < 0:
            raise CardNotInHand("Player does not have that card.")
        check_follow_suit(expected.hand, trick, card)

        played = expected.hand.pop(index)
        trick.add_play(player_id, played)
        round_.trick_turn_index += 1

        if trick.is_full(len(self.players)):
            return self._complete_trick(trick)
        return None

    def _complete_trick(self, trick: Trick) -> TrickOutcome:
        assert self.current_round is not None
        best = trick.winning_play()
        trick.winner_id = best.player_id
        winner, _ = self.find_player(best.player_id)
        assert winner is not None
        winner.tricks_won += 1
        self.current_round.tricks.append(trick)
        self.trick_over_message = TRICK_OVER_MESSAGE
        self.sequence += 1
        logger.info(
            "Game %s: %s wins the trick with %s",
            self.id,
            winner.display_name,
            card_label(best.card),
        )
        return TrickOutcome(trick=trick, winner_id=best.player_id, winning_card=best.card)

    def awaiting_advance(self) -> bool:
        round_ = self.current_round
        return (
            self.state is GamePhase.PLAYING
            and round_ is not None
            and round_.current_trick is not None
            and bool(round_.current_trick.winner_id)
        )

    def advance_after_trick(self) -> None:
        """Open the next trick, or finish the round once every hand is empty."""
        if not self.awaiting_advance():
            logger.debug("Game %s has no completed trick to advance past", self.id)
            return
        round_ = self.current_round
        assert round_ is not None and round_.current_trick is not None
        winner_id = round_.current_trick.winner_id
        self.trick_over_message = ""

        if any(player.hand for player in self.players):
            _, seat = self.find_player(winner_id)
            round_.trick_leader = seat
            round_.current_trick = Trick(leader_id=winner_id)
            round_.trick_turn_index = 0
            return
        self.complete_round()

    # Progression ---------------------------------------------------------

    def complete_round(self) -> RoundResult:
        round_ = self.current_round
        assert round_ is not None
        result = score_round(
            self.players,
            round_number=round_.round_number,
            total_cards=round_.total_cards,
            bonus=self.rules.exact_bid_bonus,
        )
        self.round_results.append(result)
        self.current_round_index += 1
        logger.info("Game %s round %d scored", self.id, round_.round_number)

        if self.current_round_index < len(self.round_sequence):
            try:
                self._open_round(
                    next_dealer(round_.dealer_index, len(self.players)),
                    round_number=self.current_round_index + 1,
                    total_cards=self.round_sequence[self.current_round_index],
                )
            except InsufficientCards:
                self._withdraw_result(result)
                raise
            return result

        self.state = GamePhase.FINISHED
        for player in self.players:
            player.missed_bids = count_missed_bids(player.id, self.round_results)
        logger.info("Game %s finished", self.id)
        return result

    def _withdraw_result(self, result: RoundResult) -> None:
        """Undo a scored round so the pending advance can be retried."""
        for entry in result.results:
            player, _ = self.find_player(entry.player_id)
            if player is not None:
                player.score -= entry.round_score
        self.round_results.pop()
        self.current_round_index -= 1

    def _open_round(self, dealer_index: int, *, round_number: int, total_cards: int) -> None:
        try:
            self.current_round = open_round(
                self.players,
                round_number=round_number,
                total_cards=total_cards,
                dealer_index=dealer_index,
                rng=self.rng,
            )
        except InsufficientCards:
            logger.error("Game %s could not deal round %d", self.id, round_number)
            raise
        self.state = GamePhase.BIDDING

    def reset(self) -> None:
        """Return to the lobby with the same seats and a clean slate."""
        for player in self.players:
            player.reset_for_round()
            player.score = 0
            player.missed_bids = 0
        self.state = GamePhase.LOBBY
        self.current_round = None
        self.round_sequence = []
        self.current_round_index = 0
        self.round_results = []
        self.trick_over_message = ""
        self.sequence += 1
        logger.info("Game %s reset to lobby", self.id)
