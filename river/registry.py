"""Concurrency-safe mapping from game id to game state."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .errors import GameNotFound
from .game import Game


@dataclass
class _Entry:
    game: Game
    lock: threading.Lock = field(default_factory=threading.Lock)


class GameRegistry:
    """Registry lock for lookups, plus one exclusive lock per game."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[str, _Entry] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, game_id: object) -> bool:
        with self._lock:
            return game_id in self._entries

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def add(self, game: Game) -> None:
        with self._lock:
            if game.id in self._entries:
                raise ValueError(f"Game {game.id} already registered.")
            self._entries[game.id] = _Entry(game)

    def get(self, game_id: str) -> Optional[Game]:
        """Unlocked lookup; only safe for existence checks."""
        with self._lock:
            entry = self._entries.get(game_id)
        return entry.game if entry else None

    def remove(self, game_id: str) -> Optional[Game]:
        with self._lock:
            entry = self._entries.pop(game_id, None)
        return entry.game if entry else None

    @contextmanager
    def locked(self, game_id: str) -> Iterator[Game]:
        """Hold the game's exclusive lock for the duration of the block."""
        entry = self._entry(game_id)
        with entry.lock:
            with self._lock:
                current = self._entries.get(game_id)
            if current is not entry:
                raise GameNotFound("Game not found.")
            yield entry.game

    def _entry(self, game_id: str) -> _Entry:
        with self._lock:
            entry = self._entries.get(game_id)
        if entry is None:
            raise GameNotFound("Game not found.")
        return entry
