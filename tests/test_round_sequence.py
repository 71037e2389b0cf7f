import pytest

from river.rounds import compute_round_sequence, max_hand_size, next_dealer, resolve_max_cards


def test_sequence_goes_up_and_down():
    assert compute_round_sequence(3) == [1, 2, 3, 2, 1]
    assert compute_round_sequence(1) == [1]


@pytest.mark.parametrize("max_cards", [1, 2, 5, 9, 27])
def test_sequence_length_and_symmetry(max_cards):
    sequence = compute_round_sequence(max_cards)
    assert len(sequence) == 2 * max_cards - 1
    assert sequence == sequence[::-1]
    assert max(sequence) == max_cards


def test_sequence_needs_a_positive_maximum():
    with pytest.raises(ValueError):
        compute_round_sequence(0)


def test_max_cards_clamped_to_deck():
    assert max_hand_size(4) == 13
    assert max_hand_size(5) == 10
    assert resolve_max_cards(3, 4) == 3
    assert resolve_max_cards(13, 4) == 13
    assert resolve_max_cards(14, 4) == 13
    assert resolve_max_cards(0, 6) == 9
    assert resolve_max_cards(-2, 2) == 27


def test_dealer_rotates():
    assert next_dealer(0, 3) == 1
    assert next_dealer(2, 3) == 0
