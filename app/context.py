"""Application context: service container for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.config import Config
    from app.core.game_loader import GameLoader
    from app.core.library import LibraryService
    from app.core.platform_normalizer import PlatformNormalizer
    from app.data.preferences import PreferenceStore
    from app.data.profile_store import ProfileStore


@dataclass
class AppContext:
    """
    Central service container.

    The web layer and tools receive this at construction time; core
    components get their collaborators through their constructors.
    """

    config: Config

    # Sources
    store: ProfileStore
    normalizer: PlatformNormalizer
    preferences: PreferenceStore

    # Pipeline
    loader: GameLoader
    library: LibraryService
