"""Round scoring helpers."""

from __future__ import annotations

from typing import Iterable, Sequence

from .state import Player, PlayerRoundResult, RoundResult

EXACT_BID_BONUS = 10


def round_score(bid: int, tricks_won: int, *, bonus: int = EXACT_BID_BONUS) -> int:
    """Exact bids score the bonus plus the bid squared; anything else scores nothing."""
    if tricks_won != bid:
        return 0
    return bonus + bid * bid


def score_round(
    players: Sequence[Player],
    *,
    round_number: int,
    total_cards: int,
    bonus: int = EXACT_BID_BONUS,
) -> RoundResult:
    """Add each player's round score to their total and snapshot the round."""
    results = []
    for player in players:
        points = round_score(player.current_bid, player.tricks_won, bonus=bonus)
        player.score += points
        results.append(
            PlayerRoundResult(
                player_id=player.id,
                bid=player.current_bid,
                tricks_won=player.tricks_won,
                round_score=points,
            )
        )
    return RoundResult(round_number=round_number, total_cards=total_cards, results=tuple(results))


def count_missed_bids(player_id: str, round_results: Iterable[RoundResult]) -> int:
    return sum(
        1
        for round_result in round_results
        for result in round_result.results
        if result.player_id == player_id and not result.made_bid
    )
