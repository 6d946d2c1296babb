"""Profile merge engine: five per-game sources → one GameView."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from app.core.platform_normalizer import PlatformNormalizer
from app.data.profile_store import GameProfileError
from app.models.custom_override import CustomOverride, parse_gpu_vendors
from app.models.game_profile import GameProfile, UserProfile
from app.models.game_view import FieldSource, GameView
from app.models.metadata import GpuCompatibility, GpuStatus, Metadata


@dataclass
class GameSources:
    """Raw inputs for one game. Only *profile* is required."""

    profile: GameProfile | None
    user_profile: UserProfile | None = None
    metadata: Metadata | None = None
    creator: CustomOverride | None = None
    user: CustomOverride | None = None
    installed: bool = False


_Put = Callable[[str, Any, str], None]


def _apply_metadata(put: _Put, fields: dict[str, Any], md: Metadata, normalizer: PlatformNormalizer) -> None:
    """Descriptive fields only; capability flags are never touched here."""
    fields["has_metadata"] = True
    if md.game_name:
        put("name", md.game_name, FieldSource.METADATA)
    if md.genre:
        fields["metadata_genre"] = md.genre
        put("genre", md.genre, FieldSource.METADATA)
    if md.platform:
        fields["platform_original"] = md.platform
        put("platform", normalizer.normalize(md.platform), FieldSource.METADATA)
    if md.year is not None:
        put("year", md.year, FieldSource.METADATA)
    if md.gpu.is_known:
        put("gpu", md.gpu, FieldSource.METADATA)
    fields["gpu_issues"] = tuple(
        (vendor, note)
        for vendor, note in (("nvidia", md.nvidia_issues), ("amd", md.amd_issues), ("intel", md.intel_issues))
        if note
    )
    fields["known_issues"] = md.general_issues
    if md.icon_name:
        fields["icon_name"] = md.icon_name


def _apply_override(put: _Put, ov: CustomOverride, source: str) -> bool:
    """Overlay every explicitly set field; returns True if anything was set."""
    for name in ov.set_fields():
        value = getattr(ov, name)
        if name == "custom_name":
            put("name", value, source)
            put("custom_name", value, source)
        elif name == "lightgun":
            put("gun_game", value.as_bool(), source)
        elif name == "emulator":
            put("emulator_type", value, source)
        elif name == "gpu":
            vendors = parse_gpu_vendors(value)
            put("gpu", GpuCompatibility(**{v: GpuStatus.OK for v in vendors}), source)
        else:
            put(name, value, source)
    return not ov.is_empty


def build_game_view(
    game_id: str,
    sources: GameSources,
    normalizer: PlatformNormalizer | None = None,
) -> GameView:
    """
    Merge in ascending priority: GameProfile → Metadata → creator override
    → user override → installed UserProfile (display name and current
    settings). Deterministic for identical inputs.

    Raises ``GameProfileError`` when the GameProfile is absent.
    """
    profile = sources.profile
    if profile is None:
        raise GameProfileError(f"No GameProfile for '{game_id}'")
    normalizer = normalizer or PlatformNormalizer()

    fields: dict[str, Any] = {}
    origin: dict[str, str] = {}

    def put(name: str, value: Any, source: str) -> None:
        fields[name] = value
        origin[name] = source

    # 1. GameProfile verbatim
    put("name", game_id, FieldSource.PROFILE)
    put("emulator_type", profile.emulator_type, FieldSource.PROFILE)
    put("gun_game", profile.gun_game, FieldSource.PROFILE)
    fields.update(
        emulation_profile=profile.emulation_profile,
        executable_name=profile.executable_name,
        game_path=profile.game_path,
        profile_revision=profile.profile_revision,
        requires_admin=profile.requires_admin,
        is_64bit=profile.is_64bit,
        has_separate_test_mode=profile.has_separate_test_mode,
        requires_subscription=profile.requires_subscription,
        config_fields=profile.config_fields,
        buttons=profile.buttons,
    )

    # 2. Metadata
    if sources.metadata is not None:
        _apply_metadata(put, fields, sources.metadata, normalizer)
    user_profile = sources.user_profile
    if "genre" not in fields and user_profile is not None and user_profile.game_genre_internal:
        put("genre", user_profile.game_genre_internal, FieldSource.INSTALLED)

    # 3–5. Override tiers, field-level precedence
    has_custom = False
    if sources.creator is not None:
        has_custom |= _apply_override(put, sources.creator, FieldSource.CREATOR)
    if sources.user is not None:
        has_custom |= _apply_override(put, sources.user, FieldSource.USER)
    fields["has_custom_profile"] = has_custom

    # 6. Installed profile: display name and current settings
    if user_profile is not None:
        if user_profile.game_name_internal:
            put("name", user_profile.game_name_internal, FieldSource.INSTALLED)
            fields["internal_name"] = user_profile.game_name_internal
        if user_profile.game_path:
            fields["game_path"] = user_profile.game_path
        if user_profile.icon_name:
            fields["icon_name"] = user_profile.icon_name
        fields["config_fields"] = tuple(user_profile.config_fields)
        fields["buttons"] = tuple(user_profile.buttons)
    fields["is_installed"] = sources.installed or user_profile is not None

    return GameView(game_id=game_id, field_sources=origin, **fields)
