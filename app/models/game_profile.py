"""Game profile models: the emulator frontend's per-game definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class FieldType(StrEnum):
    """Declared type of a configurable field."""

    BOOL = "Bool"
    TEXT = "Text"
    DROPDOWN = "Dropdown"
    SLIDER = "Slider"

    @classmethod
    def parse(cls, raw: str | None) -> FieldType:
        """Map a raw FieldType value to a member; unknown values read as Text."""
        for member in cls:
            if raw and raw.strip().lower() == member.value.lower():
                return member
        return cls.TEXT


@dataclass(frozen=True)
class ConfigField:
    """One configurable setting of a game profile."""

    category: str
    name: str
    value: str
    field_type: FieldType = FieldType.TEXT
    min_value: float | None = None  # Slider only
    max_value: float | None = None
    options: tuple[str, ...] = ()  # Dropdown only


@dataclass(frozen=True)
class ButtonBinding:
    """Control name → input-device binding (empty when unconfigured)."""

    button_name: str
    input_mapping: str = ""
    binding: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.binding)


@dataclass(frozen=True)
class GameProfile:
    """Base game definition shipped with the emulator frontend (GameProfiles/<id>.xml)."""

    game_id: str
    game_path: str = ""
    executable_name: str = ""
    emulation_profile: str = ""
    emulator_type: str = ""
    profile_revision: str = ""
    requires_admin: bool = False
    is_64bit: bool = False
    has_separate_test_mode: bool = False
    gun_game: bool = False
    requires_subscription: bool = False  # <Patreon>
    config_fields: tuple[ConfigField, ...] = ()
    buttons: tuple[ButtonBinding, ...] = ()


@dataclass
class UserProfile:
    """Installed copy of a GameProfile (UserProfiles/<id>.xml)."""

    game_id: str
    profile_name: str = ""
    game_name_internal: str = ""
    game_genre_internal: str = ""
    game_path: str = ""
    icon_name: str = ""
    config_fields: list[ConfigField] = field(default_factory=list)
    buttons: list[ButtonBinding] = field(default_factory=list)
