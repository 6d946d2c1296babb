"""Preference store: user state kept in preferences.json."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from loguru import logger


def _default_preferences() -> dict[str, Any]:
    return {
        "ui": {"grid_columns": 5, "current_view": "grid", "theme": "dark"},
        "filters": {"last_search": "", "last_sort_by": "name", "last_sort_direction": "asc"},
        "favorites": [],
        "hidden_games": [],
        "session": {"last_viewed_game_id": None},
    }


class PreferenceStore:
    """
    User preferences: reads/writes ``storage/preferences.json``.

    Loaded data is merged section by section over the defaults, so a file
    written by an older build still yields every key.
    """

    def __init__(self, storage_dir: Path) -> None:
        self._storage_dir = storage_dir
        self._path = storage_dir / "preferences.json"
        self._prefs: dict[str, Any] = _default_preferences()
        self._lock = threading.RLock()

    def load(self) -> None:
        """Load preferences from disk (defaults when missing or invalid)."""
        with self._lock:
            self._prefs = _default_preferences()
            if not self._path.exists():
                return
            try:
                with open(self._path, encoding="utf-8") as f:
                    data = json.load(f)
            except (json.JSONDecodeError, OSError) as e:
                logger.error(f"Failed to load preferences: {e}")
                return
            self._prefs = self._merge_with_defaults(data)

    def save(self) -> None:
        with self._lock:
            self._storage_dir.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            try:
                with open(tmp, "w", encoding="utf-8") as f:
                    json.dump(self._prefs, f, ensure_ascii=False, indent=2)
                tmp.replace(self._path)
            except OSError as e:
                logger.error(f"Failed to save preferences: {e}")
                if tmp.exists():
                    tmp.unlink(missing_ok=True)

    @staticmethod
    def _merge_with_defaults(loaded: Any) -> dict[str, Any]:
        prefs = _default_preferences()
        if not isinstance(loaded, dict):
            return prefs
        for section in ("ui", "filters", "session"):
            if isinstance(loaded.get(section), dict):
                prefs[section].update(loaded[section])
        for key in ("favorites", "hidden_games"):
            if isinstance(loaded.get(key), list):
                prefs[key] = [str(game_id) for game_id in loaded[key]]
        return prefs

    # ── Favorites ──

    def is_favorite(self, game_id: str) -> bool:
        return game_id in self._prefs["favorites"]

    def favorites(self) -> set[str]:
        return set(self._prefs["favorites"])

    def toggle_favorite(self, game_id: str) -> bool:
        """Flip favourite state; returns the new state."""
        return self._toggle("favorites", game_id)

    def add_favorite(self, game_id: str) -> None:
        self._add("favorites", game_id)

    def remove_favorite(self, game_id: str) -> None:
        self._remove("favorites", game_id)

    # ── Hidden games ──

    def is_hidden(self, game_id: str) -> bool:
        return game_id in self._prefs["hidden_games"]

    def hidden_games(self) -> set[str]:
        return set(self._prefs["hidden_games"])

    def toggle_hidden(self, game_id: str) -> bool:
        return self._toggle("hidden_games", game_id)

    def hide_game(self, game_id: str) -> None:
        self._add("hidden_games", game_id)

    def unhide_game(self, game_id: str) -> None:
        self._remove("hidden_games", game_id)

    def _toggle(self, key: str, game_id: str) -> bool:
        with self._lock:
            items: list[str] = self._prefs[key]
            if game_id in items:
                items.remove(game_id)
                state = False
            else:
                items.append(game_id)
                state = True
            self.save()
            return state

    def _add(self, key: str, game_id: str) -> None:
        with self._lock:
            if game_id not in self._prefs[key]:
                self._prefs[key].append(game_id)
                self.save()

    def _remove(self, key: str, game_id: str) -> None:
        with self._lock:
            if game_id in self._prefs[key]:
                self._prefs[key].remove(game_id)
                self.save()

    # ── Filter / session state ──

    def remember_query(self, search: str, sort_by: str, ascending: bool) -> None:
        """Record the last list query; writes only when something changed."""
        with self._lock:
            filters = self._prefs["filters"]
            current = {
                "last_search": search,
                "last_sort_by": str(sort_by),
                "last_sort_direction": "asc" if ascending else "desc",
            }
            if all(filters.get(key) == value for key, value in current.items()):
                return
            filters.update(current)
            self.save()

    def remember_viewed(self, game_id: str) -> None:
        with self._lock:
            session = self._prefs["session"]
            if session.get("last_viewed_game_id") == game_id:
                return
            session["last_viewed_game_id"] = game_id
            self.save()

    # ── Export / import ──

    def export_data(self) -> dict[str, Any]:
        with self._lock:
            return json.loads(json.dumps(self._prefs))

    def import_data(self, data: dict[str, Any]) -> None:
        with self._lock:
            self._prefs = self._merge_with_defaults(data)
            self.save()
