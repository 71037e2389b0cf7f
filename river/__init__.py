"""Core engine package for Up and Down the River."""

__all__ = [
    "cards",
    "deck",
    "rounds",
    "state",
    "errors",
    "bidding",
    "trick",
    "scoring",
    "game",
    "registry",
    "scheduler",
    "rules_schema",
    "service",
]
