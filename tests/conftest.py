import itertools
from random import Random

import pytest

from river.cards import Card, Suit
from river.game import Game
from river.rules_schema import RuleSet
from river.service import GameService
from river.state import GamePhase, Player


class ManualScheduler:
    """Collects delayed tasks so tests decide when they fire."""

    def __init__(self):
        self.tasks = []
        self.closed = False

    def schedule(self, delay, fn, *args):
        self.tasks.append((delay, fn, args))
        return len(self.tasks)

    def run_pending(self):
        tasks, self.tasks = self.tasks, []
        for _, fn, args in tasks:
            fn(*args)
        return len(tasks)

    def shutdown(self):
        self.closed = True
        self.tasks.clear()


def seated_game(player_count, *, max_cards=0, seed=7, rules=None):
    players = [Player(id=f"p{seat}", display_name=f"Player {seat}") for seat in range(player_count)]
    return Game(
        id="g1",
        players=players,
        creator_max_cards=max_cards,
        rules=rules or RuleSet(),
        rng=Random(seed),
    )


def bid_everyone(game, bids=None):
    """Bid around the table; defaults to zero, bumping the dealer off the hook."""
    round_ = game.current_round
    for player_id in list(round_.bid_order):
        if bids is not None:
            game.submit_bid(player_id, bids[player_id])
            continue
        amount = 0
        is_dealer = player_id == game.players[round_.dealer_index].id
        if is_dealer and round_.total_cards > 1 and sum(round_.bids.values()) == round_.total_cards:
            amount = 1
        game.submit_bid(player_id, amount)


def legal_card(game, player):
    trick = game.current_round.current_trick
    led = trick.led_suit()
    if led is not None:
        for card in player.hand:
            if not card.is_joker and card.suit is led:
                return card
    return player.hand[0]


def play_trick(game):
    outcome = None
    while outcome is None:
        player = game.expected_player()
        outcome = game.play_card(player.id, legal_card(game, player))
    return outcome


def play_round(game):
    """Play and advance every trick of the live round."""
    while game.state is GamePhase.PLAYING:
        play_trick(game)
        game.advance_after_trick()


def card(rank, suit):
    return Card(Suit.parse(suit), rank)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def published():
    return []


@pytest.fixture
def service(scheduler, published):
    counter = itertools.count()
    return GameService(
        scheduler=scheduler,
        rules=RuleSet(seed=11),
        publisher=lambda game_id, snapshot: published.append((game_id, snapshot)),
        id_factory=lambda: f"id-{next(counter)}",
    )
