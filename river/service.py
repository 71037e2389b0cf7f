"""Service layer exposing the game operations to the transport shell."""

from __future__ import annotations

import logging
import uuid
from random import Random
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Sequence, Union

from .bidding import forbidden_dealer_bid
from .cards import Card, card_label, deserialize_card, serialize_card
from .errors import GameNotFound
from .game import Game
from .registry import GameRegistry
from .rules_schema import RuleSet
from .scheduler import DelayedTaskScheduler
from .state import Player, Round, RoundResult
from .trick import Trick

logger = logging.getLogger(__name__)

Snapshot = Dict[str, Any]
Publisher = Callable[[str, Snapshot], None]
CardInput = Union[Card, Mapping[str, Any]]


class Scheduler(Protocol):
    def schedule(self, delay: float, fn: Callable[..., Any], *args: Any) -> Any: ...

    def shutdown(self) -> None: ...


def _discard_snapshot(game_id: str, snapshot: Snapshot) -> None:
    return None


def _new_id() -> str:
    return str(uuid.uuid4())


# Snapshots -----------------------------------------------------------------


def serialize_player(player: Player) -> Snapshot:
    return {
        "id": player.id,
        "displayName": player.display_name,
        "hand": [serialize_card(card) for card in player.hand],
        "currentBid": player.current_bid,
        "bidOrder": player.bid_order,
        "tricksWon": player.tricks_won,
        "score": player.score,
        "isBot": player.is_bot,
        "missedBids": player.missed_bids,
    }


def serialize_trick(trick: Trick) -> Snapshot:
    return {
        "plays": [{"playerId": play.player_id, "card": serialize_card(play.card)} for play in trick.plays],
        "leaderId": trick.leader_id,
        "winnerId": trick.winner_id,
    }


def serialize_round(round_: Round, players: Sequence[Player]) -> Snapshot:
    dealer_to_bid = round_.current_bidder() == players[round_.dealer_index].id
    return {
        "roundNumber": round_.round_number,
        "totalCards": round_.total_cards,
        "dealerIndex": round_.dealer_index,
        "bids": dict(round_.bids),
        "bidOrder": list(round_.bid_order),
        "currentBidTurn": round_.current_bid_turn,
        "tricks": [serialize_trick(trick) for trick in round_.tricks],
        "currentTrick": serialize_trick(round_.current_trick) if round_.current_trick else None,
        "trickTurnIndex": round_.trick_turn_index,
        "trickLeader": round_.trick_leader,
        "forbiddenBid": forbidden_dealer_bid(round_) if dealer_to_bid else None,
    }


def serialize_round_result(result: RoundResult) -> Snapshot:
    return {
        "roundNumber": result.round_number,
        "totalCards": result.total_cards,
        "results": [
            {
                "playerId": entry.player_id,
                "bid": entry.bid,
                "tricksWon": entry.tricks_won,
                "roundScore": entry.round_score,
            }
            for entry in result.results
        ],
    }


def serialize_game(game: Game) -> Snapshot:
    state: Snapshot = {
        "id": game.id,
        "revision": game.revision,
        "players": [serialize_player(player) for player in game.players],
        "state": game.state.value,
        "currentRound": serialize_round(game.current_round, game.players) if game.current_round else None,
        "roundSequence": list(game.round_sequence),
        "currentRoundIndex": game.current_round_index,
        "creatorMaxCards": game.creator_max_cards,
        "roundResults": [serialize_round_result(result) for result in game.round_results],
    }
    if game.trick_over_message:
        state["trickOverMessage"] = game.trick_over_message
    return state


# Service -------------------------------------------------------------------


class GameService:
    """Facade over the registry: every operation locks exactly one game."""

    def __init__(
        self,
        *,
        registry: Optional[GameRegistry] = None,
        scheduler: Optional[Scheduler] = None,
        rules: Optional[RuleSet] = None,
        publisher: Optional[Publisher] = None,
        id_factory: Optional[Callable[[], str]] = None,
        rng: Optional[Random] = None,
    ) -> None:
        self.rules = rules or RuleSet()
        self.registry = registry if registry is not None else GameRegistry()
        self.scheduler = scheduler or DelayedTaskScheduler()
        self.publisher = publisher or _discard_snapshot
        self.id_factory = id_factory or _new_id
        self.rng = rng or Random(self.rules.seed)

    def shutdown(self) -> None:
        self.scheduler.shutdown()

    # Lobby ---------------------------------------------------------------

    def create_game(self, display_name: str, creator_max_cards: int = 0) -> Snapshot:
        creator = Player(id=self.id_factory(), display_name=display_name)
        game = Game(
            id=self.id_factory(),
            players=[creator],
            creator_max_cards=creator_max_cards,
            rules=self.rules,
            rng=Random(self.rng.getrandbits(64)),
        )
        self.registry.add(game)
        logger.info("Game %s created by %s", game.id, display_name)
        with self.registry.locked(game.id) as locked:
            snapshot = self._commit(locked)
        self._publish(game.id, snapshot)
        return {"gameId": game.id, "playerId": creator.id, "game": snapshot}

    def join_game(self, game_id: str, display_name: str, *, is_bot: bool = False) -> Snapshot:
        player = Player(id=self.id_factory(), display_name=display_name, is_bot=is_bot)
        with self.registry.locked(game_id) as game:
            game.add_player(player)
            joined = serialize_player(player)
            snapshot = self._commit(game)
        logger.info("%s joined game %s", display_name, game_id)
        self._publish(game_id, snapshot)
        return joined

    def start_game(self, game_id: str) -> Snapshot:
        with self.registry.locked(game_id) as game:
            round_ = game.start()
            started = serialize_round(round_, game.players)
            snapshot = self._commit(game)
        self._publish(game_id, snapshot)
        return started

    def discard_game(self, game_id: str) -> None:
        if self.registry.remove(game_id) is None:
            raise GameNotFound("Game not found.")
        logger.info("Game %s discarded", game_id)

    def reset_game(self, game_id: str) -> Snapshot:
        with self.registry.locked(game_id) as game:
            game.reset()
            snapshot = self._commit(game)
        self._publish(game_id, snapshot)
        return snapshot

    # Turns ---------------------------------------------------------------

    def submit_bid(self, game_id: str, player_id: str, bid: int) -> Snapshot:
        with self.registry.locked(game_id) as game:
            game.submit_bid(player_id, bid)
            assert game.current_round is not None
            bids = dict(game.current_round.bids)
            snapshot = self._commit(game)
        self._publish(game_id, snapshot)
        return {"bids": bids}

    def play_card(self, game_id: str, player_id: str, card: CardInput) -> Snapshot:
        if not isinstance(card, Card):
            card = deserialize_card(card)
        with self.registry.locked(game_id) as game:
            outcome = game.play_card(player_id, card)
            player, _ = game.find_player(player_id)
            assert player is not None and game.current_round is not None
            round_ = game.current_round
            response: Snapshot = {
                "currentTrick": serialize_trick(round_.current_trick) if round_.current_trick else None,
                "tricks": [serialize_trick(trick) for trick in round_.tricks],
                "playerHand": [serialize_card(held) for held in player.hand],
            }
            if outcome is not None:
                response["winnerId"] = outcome.winner_id
                response["winningCard"] = serialize_card(outcome.winning_card)
                response["trickOverMessage"] = game.trick_over_message
                sequence = game.sequence
            snapshot = self._commit(game)
        self._publish(game_id, snapshot)

        if outcome is not None:
            logger.debug("Trick winner %s (%s)", outcome.winner_id, card_label(outcome.winning_card))
            self.scheduler.schedule(self.rules.trick_reveal_delay, self._advance, game_id, sequence)
        return response

    def _advance(self, game_id: str, sequence: int) -> None:
        try:
            with self.registry.locked(game_id) as game:
                if game.sequence != sequence:
                    logger.info("Skipping stale trick advance for game %s", game_id)
                    return
                game.advance_after_trick()
                snapshot = self._commit(game)
        except GameNotFound:
            logger.info("Game %s was discarded before its trick advanced", game_id)
            return
        self._publish(game_id, snapshot)

    # Queries -------------------------------------------------------------

    def get_game_state(self, game_id: str) -> Snapshot:
        with self.registry.locked(game_id) as game:
            return serialize_game(game)

    def _commit(self, game: Game) -> Snapshot:
        """Stamp a new revision on ``game`` and snapshot it; the caller holds its lock."""
        game.revision += 1
        return serialize_game(game)

    def _publish(self, game_id: str, snapshot: Snapshot) -> None:
        try:
            self.publisher(game_id, snapshot)
        except Exception:
            logger.exception("Failed to publish state for game %s", game_id)
