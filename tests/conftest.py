"""Shared fixtures: an on-disk TeknoParrot tree plus organizer directory."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from app.data.profile_store import ProfileStore
from app.data.profile_xml import dump_custom_override
from app.models.custom_override import CustomOverride, OverrideTier

_PROFILE_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<GameProfile xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
  <GameProfileRevision>2</GameProfileRevision>
  <ProfileName>{game_id}</ProfileName>
  <GameNameInternal>{internal_name}</GameNameInternal>
  <GameGenreInternal>{internal_genre}</GameGenreInternal>
  <IconName>{icon}</IconName>
  <GamePath>{game_path}</GamePath>
  <ExecutableName>{executable}</ExecutableName>
  <EmulationProfile>{emulation_profile}</EmulationProfile>
  <EmulatorType>{emulator_type}</EmulatorType>
  <HasSeparateTestMode>{test_mode}</HasSeparateTestMode>
  <Is64Bit>{is_64bit}</Is64Bit>
  <GunGame>{gun_game}</GunGame>
  <RequiresAdmin>{requires_admin}</RequiresAdmin>
  <Patreon>{patreon}</Patreon>
  <ConfigValues>
    <FieldInformation>
      <CategoryName>General</CategoryName>
      <FieldName>Windowed</FieldName>
      <FieldValue>{windowed}</FieldValue>
      <FieldType>Bool</FieldType>
    </FieldInformation>
    <FieldInformation>
      <CategoryName>Video</CategoryName>
      <FieldName>Resolution</FieldName>
      <FieldValue>1280x720</FieldValue>
      <FieldType>Dropdown</FieldType>
      <FieldOptions>
        <string>640x480</string>
        <string>1280x720</string>
      </FieldOptions>
    </FieldInformation>
    <FieldInformation>
      <CategoryName>Input</CategoryName>
      <FieldName>Sensitivity</FieldName>
      <FieldValue>50</FieldValue>
      <FieldType>Slider</FieldType>
      <FieldMin>0</FieldMin>
      <FieldMax>100</FieldMax>
    </FieldInformation>
  </ConfigValues>
  <JoystickButtons>
    <JoystickButtons>
      <ButtonName>Start</ButtonName>
      <InputMapping>P1Start</InputMapping>
      <BindNameXi>{start_binding}</BindNameXi>
    </JoystickButtons>
    <JoystickButtons>
      <ButtonName>Coin</ButtonName>
      <InputMapping>Coin1</InputMapping>
    </JoystickButtons>
  </JoystickButtons>
</GameProfile>
"""


def profile_xml(game_id: str, **values: Any) -> str:
    """Render a GameProfile/UserProfile document; booleans become true/false."""
    fields: dict[str, Any] = {
        "game_id": game_id,
        "internal_name": "",
        "internal_genre": "",
        "icon": "",
        "game_path": "",
        "executable": f"{game_id}.exe",
        "emulation_profile": "Default",
        "emulator_type": "TeknoParrot",
        "test_mode": False,
        "is_64bit": False,
        "gun_game": False,
        "requires_admin": False,
        "patreon": False,
        "windowed": "0",
        "start_binding": "",
    }
    fields.update(values)
    rendered = {k: str(v).lower() if isinstance(v, bool) else v for k, v in fields.items()}
    return _PROFILE_TEMPLATE.format(**rendered)


class LibraryTree:
    """Writes fixture files into ``<base>/teknoparrot`` and ``<base>/organizer``."""

    def __init__(self, base: Path) -> None:
        self.root = base / "teknoparrot"
        self.organizer = base / "organizer"
        for name in ("GameProfiles", "UserProfiles", "Metadata"):
            (self.root / name).mkdir(parents=True)
        self.store = ProfileStore(self.root, self.organizer)

    def add_profile(self, game_id: str, **values: Any) -> Path:
        path = self.root / "GameProfiles" / f"{game_id}.xml"
        path.write_text(profile_xml(game_id, **values), encoding="utf-8")
        return path

    def install(self, game_id: str, **values: Any) -> Path:
        path = self.root / "UserProfiles" / f"{game_id}.xml"
        path.write_text(profile_xml(game_id, **values), encoding="utf-8")
        return path

    def add_metadata(self, game_id: str, **data: Any) -> Path:
        path = self.root / "Metadata" / f"{game_id}.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def add_override(self, game_id: str, tier: OverrideTier = OverrideTier.USER, **fields: Any) -> Path:
        directory = self.store.override_dir(tier)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{game_id}.xml"
        path.write_text(dump_custom_override(CustomOverride(**fields)), encoding="utf-8")
        return path

    def override_path(self, game_id: str, tier: OverrideTier) -> Path:
        return self.store.override_dir(tier) / f"{game_id}.xml"


@pytest.fixture
def tree(tmp_path: Path) -> LibraryTree:
    return LibraryTree(tmp_path)
