"""Query engine: filter and sort a GameView collection."""

from __future__ import annotations

from typing import Any, Callable, Protocol

from app.models.filter_spec import FilterSpec, SortField, StatusFilter
from app.models.game_view import GameView

# Missing years sort after every real year in ascending order.
MISSING_YEAR = 9999


class PreferenceLookup(Protocol):
    """Read-only favourite / hidden membership."""

    def is_favorite(self, game_id: str) -> bool: ...

    def is_hidden(self, game_id: str) -> bool: ...


def matches_search(view: GameView, term: str) -> bool:
    """*term* must already be lowercased."""
    haystack = (
        view.name,
        view.internal_name,
        view.emulation_profile,
        view.metadata_genre,
        view.genre,
        view.platform,
        view.emulator_type,
        view.description,
    )
    if any(term in value.lower() for value in haystack if value):
        return True
    return any(term in tag.lower() for tag in view.tags)


def search_games(games: list[GameView], query: str) -> list[GameView]:
    """Case-insensitive substring search; a blank query returns *games* unchanged."""
    if not query or not query.strip():
        return list(games)
    term = query.lower()
    return [view for view in games if matches_search(view, term)]


_SORT_KEYS: dict[SortField, Callable[[GameView], Any]] = {
    SortField.NAME: lambda v: v.name.lower(),
    SortField.YEAR: lambda v: v.year if v.year else MISSING_YEAR,
    SortField.PLATFORM: lambda v: v.platform.lower(),
    SortField.GENRE: lambda v: v.genre.lower(),
    SortField.STATUS: lambda v: 1 if v.is_installed else 0,
}


def sort_games(games: list[GameView], sort_by: SortField = SortField.NAME, ascending: bool = True) -> list[GameView]:
    """Stable sort; ties keep their incoming order in both directions."""
    key = _SORT_KEYS.get(SortField(sort_by), _SORT_KEYS[SortField.NAME])
    return sorted(games, key=key, reverse=not ascending)


class QueryEngine:
    """
    Pure filter pipeline: ``apply_filters(games, spec)`` never mutates its
    input and depends only on the injected preference lookup.
    """

    def __init__(self, preferences: PreferenceLookup | None = None) -> None:
        self._prefs = preferences

    def apply_filters(self, games: list[GameView], spec: FilterSpec | None = None) -> list[GameView]:
        spec = spec or FilterSpec()
        prefs = self._prefs
        result = list(games)

        # 1. Hidden games
        if not spec.show_hidden_games and prefs is not None:
            result = [g for g in result if not prefs.is_hidden(g.game_id)]

        # 2. Search starts again from the full collection
        if spec.search and spec.search.strip():
            result = search_games(games, spec.search)

        # 3. Status
        if spec.status is StatusFilter.INSTALLED:
            result = [g for g in result if g.is_installed]
        elif spec.status is StatusFilter.NOT_INSTALLED:
            result = [g for g in result if not g.is_installed]

        # 4. Genre / platform / emulator sets
        if spec.genres:
            result = [g for g in result if g.genre in spec.genres]
        if spec.platforms:
            result = [g for g in result if g.platform in spec.platforms]
        if spec.emulators:
            result = [g for g in result if g.emulator_type in spec.emulators]

        # 5. Year range
        if spec.year_min is not None or spec.year_max is not None:
            low = spec.year_min if spec.year_min is not None else 0
            high = spec.year_max if spec.year_max is not None else MISSING_YEAR
            result = [g for g in result if g.year is not None and low <= g.year <= high]

        # 6. GPU confirmed; games without metadata never match
        vendors = spec.selected_gpu_vendors
        if vendors:
            result = [
                g for g in result if g.has_metadata and g.gpu.is_known and any(g.gpu.is_ok(v) for v in vendors)
            ]

        # 7. Subscription
        if spec.subscription_only:
            result = [g for g in result if g.requires_subscription]
        if spec.hide_subscription:
            result = [g for g in result if not g.requires_subscription]

        # 8. Favourites
        if spec.favorites_only and prefs is not None:
            result = [g for g in result if prefs.is_favorite(g.game_id)]

        # 9. Advanced flags
        if spec.has_test_mode:
            result = [g for g in result if g.has_separate_test_mode]
        if spec.gun_game:
            result = [g for g in result if g.gun_game]
        if spec.is_64bit:
            result = [g for g in result if g.is_64bit]
        if spec.requires_admin:
            result = [g for g in result if g.requires_admin]

        # 10. Sort
        return sort_games(result, spec.sort_by, spec.ascending)
