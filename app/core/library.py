"""Library service over the game collection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from app.core.game_collection import CollectionStats, GameCollection
from app.core.game_loader import GameLoader
from app.core.override_writer import OverrideWriter
from app.core.query_engine import QueryEngine
from app.models.filter_spec import FilterSpec

if TYPE_CHECKING:
    from app.data.preferences import PreferenceStore
    from app.data.profile_store import ProfileStore
    from app.models.game_view import GameView


class LibraryService:
    """
    Entry point for everything above the core pipeline.

    Owns the collection; the loader and writer share it. ``refresh``
    rebuilds every view, while install/remove and override edits rebuild
    only the affected game.
    """

    def __init__(
        self,
        store: ProfileStore,
        preferences: PreferenceStore,
        loader: GameLoader,
        collection: GameCollection | None = None,
    ) -> None:
        self._store = store
        self._prefs = preferences
        self._loader = loader
        self._collection = collection or GameCollection()
        self._query = QueryEngine(preferences)
        self._writer = OverrideWriter(store, loader, self._collection)

    @property
    def collection(self) -> GameCollection:
        return self._collection

    @property
    def writer(self) -> OverrideWriter:
        return self._writer

    @property
    def preferences(self) -> PreferenceStore:
        return self._prefs

    def refresh(self) -> CollectionStats:
        """Reload every game from disk and replace the collection."""
        views = self._loader.load_all()
        self._collection.initialize(views)
        return self._collection.get_stats()

    # ── Queries ──

    def query(self, spec: FilterSpec | None = None) -> list[GameView]:
        """Filter and sort; the result size becomes the *filtered* stat."""
        result = self._query.apply_filters(self._collection.get_all(), spec)
        self._collection.set_filtered(result)
        return result

    def get_game(self, game_id: str) -> GameView | None:
        return self._collection.get_by_id(game_id)

    def stats(self) -> CollectionStats:
        return self._collection.get_stats()

    def facets(self) -> dict[str, Any]:
        low, high = self._collection.year_range()
        return {
            "genres": self._collection.genres(),
            "platforms": self._collection.platforms(),
            "emulators": self._collection.emulator_types(),
            "year_range": [low, high],
        }

    # ── Library ──

    def install(self, game_id: str) -> GameView:
        """Copy the GameProfile into UserProfiles and rebuild the view."""
        self._store.install_game(game_id)
        logger.info(f"Installed {game_id}")
        return self._reload(game_id)

    def remove(self, game_id: str) -> GameView:
        """Delete the UserProfile and rebuild the view."""
        self._store.remove_game(game_id)
        logger.info(f"Removed {game_id} from library")
        return self._reload(game_id)

    def _reload(self, game_id: str) -> GameView:
        view = self._loader.load_game(game_id)
        self._collection.replace(view)
        return view

    # ── Preferences ──

    def toggle_favorite(self, game_id: str) -> bool:
        return self._prefs.toggle_favorite(game_id)

    def toggle_hidden(self, game_id: str) -> bool:
        return self._prefs.toggle_hidden(game_id)
