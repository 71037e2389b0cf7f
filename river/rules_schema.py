"""Validation schema for table rules configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, model_validator

from .deck import DECK_SIZE
from .scoring import EXACT_BID_BONUS


class RuleSet(BaseModel):
    min_players: int = Field(2, ge=2, description="Players required before a game can start.")
    max_players: int = Field(6, ge=2, le=DECK_SIZE, description="Seats available in the lobby.")
    trick_reveal_delay: float = Field(
        3.0,
        ge=0,
        description="Seconds a completed trick stays on the table before play moves on.",
    )
    exact_bid_bonus: int = Field(EXACT_BID_BONUS, ge=0, description="Points for making a bid exactly, before bid squared.")
    seed: Optional[int] = Field(None, description="Seed for dealer selection and shuffling.")

    @model_validator(mode="after")
    def ensure_seat_range(self) -> "RuleSet":
        if self.max_players < self.min_players:
            raise ValueError("max_players must not be below min_players.")
        return self


def load_rules(path: Union[str, Path, None] = None) -> RuleSet:
    """Read a RuleSet from a JSON file, or return the defaults."""
    if path is None:
        return RuleSet()
    return RuleSet.model_validate_json(Path(path).read_text(encoding="utf-8"))
