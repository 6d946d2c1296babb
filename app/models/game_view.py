"""Merged, display-ready game record."""

from __future__ import annotations

from dataclasses import dataclass, field

from app.models.game_profile import ButtonBinding, ConfigField
from app.models.metadata import GpuCompatibility


class FieldSource:
    """Labels recorded in ``GameView.field_sources``."""

    PROFILE = "profile"
    METADATA = "metadata"
    CREATOR = "creator"
    USER = "user"
    INSTALLED = "installed"


@dataclass(frozen=True)
class GameView:
    """
    One game as the rest of the app sees it.

    Rebuilt from its sources on every load and after every edit; never
    persisted.
    """

    game_id: str
    name: str
    is_installed: bool = False

    # Profile-derived
    emulation_profile: str = ""
    emulator_type: str = ""
    executable_name: str = ""
    game_path: str = ""
    profile_revision: str = ""
    requires_admin: bool = False
    is_64bit: bool = False
    has_separate_test_mode: bool = False
    gun_game: bool = False
    requires_subscription: bool = False
    config_fields: tuple[ConfigField, ...] = ()
    buttons: tuple[ButtonBinding, ...] = ()

    # Installed-profile-derived
    internal_name: str = ""
    icon_name: str = ""

    # Descriptive
    has_metadata: bool = False
    metadata_genre: str = ""
    genre: str = ""
    platform: str = ""
    platform_original: str = ""
    year: int | None = None
    gpu: GpuCompatibility = GpuCompatibility()
    gpu_issues: tuple[tuple[str, str], ...] = ()  # (vendor, note)
    known_issues: str = ""

    # Custom-override-derived
    custom_name: str | None = None
    description: str = ""
    video_link: str = ""
    tags: tuple[str, ...] = ()
    has_custom_profile: bool = False

    # field name → FieldSource label of the winning source
    field_sources: dict[str, str] = field(default_factory=dict, hash=False, compare=True)

    @property
    def status_label(self) -> str:
        return "installed" if self.is_installed else "not-installed"
