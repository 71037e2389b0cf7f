"""Base error types shared across the engine."""

from __future__ import annotations


class GameError(RuntimeError):
    """Base class for every rejected game action."""


class GameNotFound(GameError):
    """Raised when no game is registered under the requested id."""


class NotYourTurn(GameError):
    """Raised when a player acts out of turn, in bidding or in play."""
