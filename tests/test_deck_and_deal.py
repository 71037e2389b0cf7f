from random import Random

import pytest

from river.cards import Card
from river.deck import InsufficientCards, create_deck, deal_cards, shuffle_deck
from river.state import Player


def players(count):
    return [Player(id=f"p{i}", display_name=f"P{i}") for i in range(count)]


def test_deck_integrity():
    deck = create_deck()
    assert len(deck) == 54
    jokers = [card for card in deck if card.is_joker]
    assert [card.joker_name for card in jokers] == ["J1", "J2"]
    regular = {(card.suit, card.rank) for card in deck if not card.is_joker}
    assert len(regular) == 52


def test_shuffle_is_a_permutation():
    deck = create_deck()
    shuffled = list(deck)
    shuffle_deck(shuffled, Random(3))
    assert shuffled != deck
    assert sorted(map(str, shuffled)) == sorted(map(str, deck))


def test_deal_round_robin_and_conservation():
    deck = create_deck()
    seats = players(3)
    deal_cards(deck, seats, 4)

    assert [len(p.hand) for p in seats] == [4, 4, 4]
    assert len(deck) == 54 - 12
    ordered = create_deck()
    assert seats[0].hand == [ordered[0], ordered[3], ordered[6], ordered[9]]
    assert seats[2].hand[0] == ordered[2]

    dealt = [card for p in seats for card in p.hand]
    assert len(set(dealt)) == len(dealt)
    assert not set(dealt) & set(deck)


def test_deal_rejects_oversized_request():
    deck = create_deck()
    seats = players(6)
    with pytest.raises(InsufficientCards):
        deal_cards(deck, seats, 10)
    assert all(p.hand == [] for p in seats)
    assert len(deck) == 54


def test_deal_whole_deck():
    deck = create_deck()
    seats = players(2)
    deal_cards(deck, seats, 27)
    assert deck == []
    assert Card.joker("J2") in seats[1].hand
