"""Game loader: gather every game's sources and merge them into views."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from loguru import logger

from app.core.merge_engine import GameSources, build_game_view
from app.core.platform_normalizer import PlatformNormalizer
from app.data.profile_store import GameProfileError
from app.models.custom_override import OverrideTier
from app.models.game_view import GameView

if TYPE_CHECKING:
    from app.data.profile_store import SourceReader


class GameLoader:
    """
    Builds GameViews from a *SourceReader*.

    A full load reads games concurrently; the result list keeps the
    profile-list order and contains only games that loaded completely.
    """

    def __init__(
        self,
        reader: SourceReader,
        normalizer: PlatformNormalizer | None = None,
        max_workers: int = 8,
    ) -> None:
        self._reader = reader
        self._normalizer = normalizer or PlatformNormalizer()
        self._max_workers = max(1, max_workers)

    @property
    def normalizer(self) -> PlatformNormalizer:
        return self._normalizer

    def gather_sources(self, game_id: str, installed: bool | None = None) -> GameSources:
        """
        Read all five sources for *game_id*.

        With *installed* unknown (``None``) it is taken from the
        UserProfiles listing, so an unreadable UserProfile still counts as
        installed; with ``False`` the UserProfile is not read at all.
        """
        if installed is None:
            installed = game_id in self._reader.list_installed_ids()
        profile = self._reader.read_game_profile(game_id)
        user_profile = self._reader.read_user_profile(game_id) if installed is not False else None
        return GameSources(
            profile=profile,
            user_profile=user_profile,
            metadata=self._reader.read_metadata(game_id),
            creator=self._reader.read_override(game_id, OverrideTier.CREATOR),
            user=self._reader.read_override(game_id, OverrideTier.USER),
            installed=bool(installed) or user_profile is not None,
        )

    def load_game(self, game_id: str, installed: bool | None = None) -> GameView:
        """Load and merge one game. Raises ``GameProfileError``."""
        return build_game_view(game_id, self.gather_sources(game_id, installed), self._normalizer)

    def _load_game_safe(self, game_id: str, installed: bool) -> GameView | None:
        try:
            return self.load_game(game_id, installed)
        except GameProfileError as e:
            logger.warning(f"Excluding {game_id}: {e}")
        except Exception as e:
            logger.error(f"Failed to load {game_id}: {e}")
        return None

    def load_all(self) -> list[GameView]:
        """Load every game with a GameProfile; failed games are dropped."""
        game_ids = self._reader.list_all_profile_ids()
        installed = set(self._reader.list_installed_ids())
        logger.info(f"Found {len(game_ids)} game profiles, {len(installed)} user profiles")

        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            futures = [pool.submit(self._load_game_safe, gid, gid in installed) for gid in game_ids]
            results = [future.result() for future in futures]

        views = [view for view in results if view is not None]
        excluded = len(game_ids) - len(views)
        logger.info(
            f"Loaded {len(views)} games "
            f"({sum(v.is_installed for v in views)} installed, "
            f"{sum(v.has_metadata for v in views)} with metadata, "
            f"{sum(v.has_custom_profile for v in views)} customized, "
            f"{excluded} excluded)"
        )
        return views
