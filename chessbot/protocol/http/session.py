from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from typing import Optional

from ...engine.game import Game


logger = logging.getLogger(__name__)

DEFAULT_MAX_GAMES = 1024


class InMemorySessionStore:
    """Lock-protected map of ``game_id`` to ``Game`` with LRU eviction.

    The store only guards the map itself. Each ``Game`` owns one mutable board
    that a search mutates in place, so one game must not be searched from two
    requests at once. Once ``max_games`` sessions exist, creating another drops
    the least recently used one.
    """

    def __init__(self, max_games: int = DEFAULT_MAX_GAMES) -> None:
        if max_games < 1:
            raise ValueError("max_games must be >= 1")
        self.max_games = max_games
        self._lock = threading.RLock()
        self._games: "OrderedDict[str, Game]" = OrderedDict()

    def create(self, game: Optional[Game] = None) -> str:
        """Store ``game`` (default: a new game) and return its ``game_id``."""
        gid = uuid.uuid4().hex
        with self._lock:
            while len(self._games) >= self.max_games:
                evicted, _ = self._games.popitem(last=False)
                logger.info("game evicted", extra={"game_id": evicted})
            self._games[gid] = game if game is not None else Game.new()
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            game = self._games.get(game_id)
            if game is not None:
                self._games.move_to_end(game_id)
            return game

    def replace(self, game_id: str, game: Game) -> None:
        """Swap the game behind an existing id (e.g. after loading a FEN)."""
        with self._lock:
            if game_id not in self._games:
                raise KeyError(game_id)
            self._games[game_id] = game
            self._games.move_to_end(game_id)

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
