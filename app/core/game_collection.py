"""Game collection: the session's in-memory list of GameViews."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from app.models.game_view import GameView


@dataclass(frozen=True)
class CollectionStats:
    total: int
    installed: int
    not_installed: int
    filtered: int


class GameCollection:
    """
    Holds the current GameViews in load order, indexed by id.

    ``initialize`` swaps the whole collection at once; ``replace`` swaps a
    single view after an edit. The filtered count reported by ``get_stats``
    is whatever was last recorded with ``set_filtered``.
    """

    def __init__(self) -> None:
        self._games: list[GameView] = []
        self._index: dict[str, int] = {}
        self._filtered_ids: list[str] = []
        self._lock = threading.Lock()

    def initialize(self, views: list[GameView]) -> None:
        games = list(views)
        index = {view.game_id: i for i, view in enumerate(games)}
        with self._lock:
            self._games, self._index = games, index
            self._filtered_ids = [view.game_id for view in games]
        logger.info(f"Game collection initialized with {len(games)} games")

    def get_by_id(self, game_id: str) -> GameView | None:
        with self._lock:
            i = self._index.get(game_id)
            return self._games[i] if i is not None else None

    def get_all(self) -> list[GameView]:
        return list(self._games)

    def replace(self, view: GameView) -> None:
        """Swap in a rebuilt view, keeping its position; unknown ids are appended."""
        with self._lock:
            i = self._index.get(view.game_id)
            if i is None:
                self._index[view.game_id] = len(self._games)
                self._games.append(view)
            else:
                self._games[i] = view

    def set_filtered(self, views: list[GameView]) -> None:
        self._filtered_ids = [view.game_id for view in views]

    def get_stats(self) -> CollectionStats:
        installed = sum(1 for view in self._games if view.is_installed)
        return CollectionStats(
            total=len(self._games),
            installed=installed,
            not_installed=len(self._games) - installed,
            filtered=len(self._filtered_ids),
        )

    @property
    def count(self) -> int:
        return len(self._games)

    # ── Facets ──

    def genres(self) -> list[str]:
        return sorted({view.genre for view in self._games if view.genre})

    def platforms(self) -> list[str]:
        return sorted({view.platform for view in self._games if view.platform})

    def emulator_types(self) -> list[str]:
        return sorted({view.emulator_type for view in self._games if view.emulator_type})

    def year_range(self) -> tuple[int, int]:
        years = [view.year for view in self._games if view.year is not None]
        if not years:
            return 2000, datetime.now().year
        return min(years), max(years)
