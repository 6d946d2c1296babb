"""XML codecs for GameProfiles, UserProfiles and CustomProfile overrides."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from app.models.custom_override import CustomOverride, TriState
from app.models.game_profile import (
    ButtonBinding,
    ConfigField,
    FieldType,
    GameProfile,
    UserProfile,
)

# Binding elements in the order they are tried for a button's display binding.
_BIND_TAGS = ("BindName", "BindNameXi", "BindNameDi", "BindNameRi")


def _text(el: ET.Element, tag: str) -> str:
    return (el.findtext(tag) or "").strip()


def _flag(el: ET.Element, tag: str) -> bool:
    return _text(el, tag).lower() == "true"


def _number(raw: str) -> float | None:
    try:
        return float(raw) if raw else None
    except ValueError:
        return None


def _parse_config_fields(root: ET.Element) -> list[ConfigField]:
    fields: list[ConfigField] = []
    for info in root.iter("FieldInformation"):
        name = _text(info, "FieldName")
        if not name:
            continue
        options = tuple(
            (opt.text or "").strip()
            for opt in info.findall("./FieldOptions/string")
            if (opt.text or "").strip()
        )
        fields.append(
            ConfigField(
                category=_text(info, "CategoryName"),
                name=name,
                value=_text(info, "FieldValue"),
                field_type=FieldType.parse(_text(info, "FieldType")),
                min_value=_number(_text(info, "FieldMin")),
                max_value=_number(_text(info, "FieldMax")),
                options=options,
            )
        )
    return fields


def _parse_buttons(root: ET.Element) -> list[ButtonBinding]:
    buttons: list[ButtonBinding] = []
    for button in root.findall("./JoystickButtons/JoystickButtons"):
        name = _text(button, "ButtonName")
        if not name:
            continue
        binding = next((b for b in (_text(button, t) for t in _BIND_TAGS) if b), "")
        buttons.append(
            ButtonBinding(
                button_name=name,
                input_mapping=_text(button, "InputMapping"),
                binding=binding,
            )
        )
    return buttons


def parse_game_profile(xml_text: str, game_id: str) -> GameProfile:
    """Parse a GameProfiles/<id>.xml document. Raises ``ET.ParseError``."""
    root = ET.fromstring(xml_text)
    return GameProfile(
        game_id=game_id,
        game_path=_text(root, "GamePath"),
        executable_name=_text(root, "ExecutableName"),
        emulation_profile=_text(root, "EmulationProfile"),
        emulator_type=_text(root, "EmulatorType"),
        profile_revision=_text(root, "GameProfileRevision"),
        requires_admin=_flag(root, "RequiresAdmin"),
        is_64bit=_flag(root, "Is64Bit"),
        has_separate_test_mode=_flag(root, "HasSeparateTestMode"),
        gun_game=_flag(root, "GunGame"),
        requires_subscription=_flag(root, "Patreon"),
        config_fields=tuple(_parse_config_fields(root)),
        buttons=tuple(_parse_buttons(root)),
    )


def parse_user_profile(xml_text: str, game_id: str) -> UserProfile:
    """Parse a UserProfiles/<id>.xml document. Raises ``ET.ParseError``."""
    root = ET.fromstring(xml_text)
    return UserProfile(
        game_id=game_id,
        profile_name=_text(root, "ProfileName"),
        game_name_internal=_text(root, "GameNameInternal"),
        game_genre_internal=_text(root, "GameGenreInternal"),
        game_path=_text(root, "GamePath"),
        icon_name=_text(root, "IconName"),
        config_fields=_parse_config_fields(root),
        buttons=_parse_buttons(root),
    )


# ── CustomProfile overrides ──

_OVERRIDE_TAGS: tuple[tuple[str, str], ...] = (
    ("custom_name", "CustomName"),
    ("description", "Description"),
    ("video_link", "YouTubeLink"),
    ("genre", "Genre"),
    ("year", "Year"),
    ("lightgun", "Lightgun"),
    ("platform", "Platform"),
    ("emulator", "Emulator"),
    ("gpu", "GPU"),
)


def parse_custom_override(xml_text: str) -> CustomOverride:
    """Parse a <CustomProfile> document. Raises ``ET.ParseError`` / ``ValueError``."""
    root = ET.fromstring(xml_text)
    kwargs: dict[str, object] = {}
    for name, tag in _OVERRIDE_TAGS:
        value = _text(root, tag)
        if value:
            kwargs[name] = value
    tags = [(t.text or "").strip() for t in root.findall("./Tags/Tag")]
    if tags:
        kwargs["tags"] = tags
    last_modified = _text(root, "LastModified")
    if last_modified:
        kwargs["last_modified"] = last_modified
    return CustomOverride(**kwargs)


def dump_custom_override(override: CustomOverride) -> str:
    """Serialize set fields (plus LastModified) to a <CustomProfile> document."""
    root = ET.Element("CustomProfile")
    for name, tag in _OVERRIDE_TAGS:
        if not override.is_set(name):
            continue
        value = getattr(override, name)
        if isinstance(value, TriState):
            value = value.value
        ET.SubElement(root, tag).text = str(value)
    if override.tags:
        tags_el = ET.SubElement(root, "Tags")
        for tag_value in override.tags:
            ET.SubElement(tags_el, "Tag").text = tag_value
    if override.last_modified:
        ET.SubElement(root, "LastModified").text = override.last_modified
    ET.indent(root, space="  ")
    return '<?xml version="1.0" encoding="utf-8"?>\n' + ET.tostring(root, encoding="unicode")
