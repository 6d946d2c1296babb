"""Profile store: file-backed source readers and override persistence."""

from __future__ import annotations

import json
import re
import shutil
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Protocol

from loguru import logger

from app.data.profile_xml import (
    dump_custom_override,
    parse_custom_override,
    parse_game_profile,
    parse_user_profile,
)
from app.models.custom_override import CustomOverride, OverrideTier
from app.models.game_profile import GameProfile, UserProfile
from app.models.metadata import Metadata

_GAME_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class GameProfileError(Exception):
    """The base GameProfile for a game is missing or unparseable."""


class OverrideWriteError(Exception):
    """Persisting or deleting an override file failed."""


class GameNotInstalledError(Exception):
    pass


class GameAlreadyInstalledError(Exception):
    pass


def validate_game_id(game_id: str) -> str:
    """Return *game_id* unchanged, or raise ``ValueError`` if it is not a safe file stem."""
    if not isinstance(game_id, str) or not _GAME_ID_RE.match(game_id):
        raise ValueError(f"Invalid game ID: {game_id!r}")
    return game_id


class SourceReader(Protocol):
    """Read/write boundary the merge pipeline depends on."""

    def read_game_profile(self, game_id: str) -> GameProfile: ...

    def read_user_profile(self, game_id: str) -> UserProfile | None: ...

    def read_metadata(self, game_id: str) -> Metadata | None: ...

    def read_override(self, game_id: str, tier: OverrideTier) -> CustomOverride | None: ...

    def write_override(self, game_id: str, tier: OverrideTier, override: CustomOverride) -> None: ...

    def delete_override(self, game_id: str, tier: OverrideTier) -> None: ...

    def list_installed_ids(self) -> list[str]: ...

    def list_all_profile_ids(self) -> list[str]: ...


class ProfileStore:
    """
    Reads TeknoParrot's profile folders and the organizer's override folders.

    Layout::

        <teknoparrot_root>/GameProfiles/<id>.xml     base profiles (required)
        <teknoparrot_root>/UserProfiles/<id>.xml     installed games
        <teknoparrot_root>/Metadata/<id>.json        community metadata
        <organizer_dir>/data/CustomProfiles/<id>.xml     creator tier
        <organizer_dir>/storage/CustomProfiles/<id>.xml  user tier

    Optional sources fail soft: a missing file is ``None``, a malformed one
    is logged and also ``None``. Only the GameProfile read raises.
    """

    def __init__(self, teknoparrot_root: Path, organizer_dir: Path) -> None:
        self._root = teknoparrot_root
        self._organizer_dir = organizer_dir

    # ── Paths ──

    @property
    def game_profiles_dir(self) -> Path:
        return self._root / "GameProfiles"

    @property
    def user_profiles_dir(self) -> Path:
        return self._root / "UserProfiles"

    @property
    def metadata_dir(self) -> Path:
        return self._root / "Metadata"

    def override_dir(self, tier: OverrideTier) -> Path:
        base = "data" if tier is OverrideTier.CREATOR else "storage"
        return self._organizer_dir / base / "CustomProfiles"

    def _override_path(self, game_id: str, tier: OverrideTier) -> Path:
        return self.override_dir(tier) / f"{validate_game_id(game_id)}.xml"

    # ── Listing ──

    @staticmethod
    def _list_ids(directory: Path, suffix: str) -> list[str]:
        if not directory.is_dir():
            return []
        ids: list[str] = []
        for path in directory.iterdir():
            if not path.is_file() or path.suffix.lower() != suffix:
                continue
            if _GAME_ID_RE.match(path.stem):
                ids.append(path.stem)
            else:
                logger.debug(f"Skipping profile with unsupported name: {path.name}")
        return sorted(ids)

    def list_all_profile_ids(self) -> list[str]:
        return self._list_ids(self.game_profiles_dir, ".xml")

    def list_installed_ids(self) -> list[str]:
        return self._list_ids(self.user_profiles_dir, ".xml")

    def list_override_ids(self, tier: OverrideTier) -> list[str]:
        return self._list_ids(self.override_dir(tier), ".xml")

    # ── Reads ──

    def read_game_profile(self, game_id: str) -> GameProfile:
        path = self.game_profiles_dir / f"{validate_game_id(game_id)}.xml"
        if not path.exists():
            raise GameProfileError(f"No GameProfile for '{game_id}'")
        try:
            return parse_game_profile(path.read_text(encoding="utf-8-sig"), game_id)
        except (ET.ParseError, OSError, UnicodeDecodeError) as e:
            raise GameProfileError(f"Unreadable GameProfile for '{game_id}': {e}") from e

    def read_user_profile(self, game_id: str) -> UserProfile | None:
        path = self.user_profiles_dir / f"{validate_game_id(game_id)}.xml"
        if not path.exists():
            return None
        try:
            return parse_user_profile(path.read_text(encoding="utf-8-sig"), game_id)
        except (ET.ParseError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring malformed UserProfile for {game_id}: {e}")
            return None

    def read_metadata(self, game_id: str) -> Metadata | None:
        path = self.metadata_dir / f"{validate_game_id(game_id)}.json"
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8-sig") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring malformed metadata for {game_id}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Ignoring metadata for {game_id}: expected an object")
            return None
        return Metadata.from_dict(data)

    def read_override(self, game_id: str, tier: OverrideTier) -> CustomOverride | None:
        path = self._override_path(game_id, tier)
        if not path.exists():
            return None
        try:
            return parse_custom_override(path.read_text(encoding="utf-8-sig"))
        except (ET.ParseError, OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning(f"Ignoring malformed {tier} override for {game_id}: {e}")
            return None

    # ── Override writes ──

    def write_override(self, game_id: str, tier: OverrideTier, override: CustomOverride) -> None:
        """Atomically persist *override*; raises ``OverrideWriteError``."""
        path = self._override_path(game_id, tier)
        tmp = path.with_suffix(".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(dump_custom_override(override), encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            if tmp.exists():
                tmp.unlink(missing_ok=True)
            raise OverrideWriteError(f"Failed to save {tier} override for {game_id}: {e}") from e

    def delete_override(self, game_id: str, tier: OverrideTier) -> None:
        path = self._override_path(game_id, tier)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise OverrideWriteError(f"Failed to delete {tier} override for {game_id}: {e}") from e

    def delete_all_overrides(self, tier: OverrideTier) -> int:
        """Delete every override file of *tier*; returns the count removed."""
        count = 0
        for game_id in self.list_override_ids(tier):
            self.delete_override(game_id, tier)
            count += 1
        return count

    def promote_user_overrides(self) -> int:
        """Move user-tier files into the creator tier (overwriting)."""
        target = self.override_dir(OverrideTier.CREATOR)
        target.mkdir(parents=True, exist_ok=True)
        moved = 0
        for game_id in self.list_override_ids(OverrideTier.USER):
            source = self._override_path(game_id, OverrideTier.USER)
            shutil.copyfile(source, target / source.name)
            source.unlink()
            moved += 1
        return moved

    # ── Library (install / remove) ──

    def install_game(self, game_id: str) -> Path:
        """Copy the GameProfile into UserProfiles (copy-on-install)."""
        source = self.game_profiles_dir / f"{validate_game_id(game_id)}.xml"
        dest = self.user_profiles_dir / source.name
        if not source.exists():
            raise GameProfileError(f"No GameProfile for '{game_id}'")
        if dest.exists():
            raise GameAlreadyInstalledError(f"'{game_id}' is already installed")
        self.user_profiles_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, dest)
        return dest

    def remove_game(self, game_id: str) -> None:
        """Delete the UserProfile; game files on disk are untouched."""
        path = self.user_profiles_dir / f"{validate_game_id(game_id)}.xml"
        if not path.exists():
            raise GameNotInstalledError(f"'{game_id}' is not in the library")
        path.unlink()
