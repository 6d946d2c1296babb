"""Custom override models: creator/user tier field-level overrides."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any, Iterable

from app.models.metadata import parse_year


class OverrideTier(StrEnum):
    """Override storage tier. USER wins over CREATOR field by field."""

    CREATOR = "creator"
    USER = "user"


class TriState(StrEnum):
    """Explicit three-valued override flag; UNSET defers to the lower tier."""

    UNSET = "unset"
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def parse(cls, raw: Any) -> TriState:
        """Accept bools, None, and the strings true/false/unset/keep."""
        if isinstance(raw, TriState):
            return raw
        if raw is None:
            return cls.UNSET
        if isinstance(raw, bool):
            return cls.TRUE if raw else cls.FALSE
        value = str(raw).strip().lower()
        if value in ("", "unset", "keep"):
            return cls.UNSET
        if value == "true":
            return cls.TRUE
        if value == "false":
            return cls.FALSE
        raise ValueError(f"Invalid tri-state value: {raw!r}")

    def as_bool(self) -> bool | None:
        if self is TriState.UNSET:
            return None
        return self is TriState.TRUE


GPU_VENDORS: tuple[str, ...] = ("nvidia", "amd", "intel")
_GPU_LABELS: dict[str, str] = {"nvidia": "Nvidia", "amd": "AMD", "intel": "Intel"}


def parse_gpu_vendors(text: str | None) -> tuple[str, ...]:
    """``"Nvidia, AMD"`` → ``("nvidia", "amd")`` (canonical vendor order)."""
    if not text:
        return ()
    named = {part.strip().lower() for part in text.split(",")}
    return tuple(v for v in GPU_VENDORS if v in named)


def format_gpu_vendors(vendors: Iterable[str]) -> str:
    """Inverse of :func:`parse_gpu_vendors`."""
    wanted = {v.lower() for v in vendors}
    return ", ".join(_GPU_LABELS[v] for v in GPU_VENDORS if v in wanted)


# Overridable fields, in serialization order.
OVERRIDE_FIELDS: tuple[str, ...] = (
    "custom_name",
    "description",
    "video_link",
    "tags",
    "genre",
    "year",
    "lightgun",
    "platform",
    "emulator",
    "gpu",
)

# Key aliases accepted by from_dict (exported JSON from older builds uses camelCase).
_DICT_ALIASES: dict[str, str] = {
    "customName": "custom_name",
    "youtubeLink": "video_link",
    "youtube_link": "video_link",
    "lastModified": "last_modified",
}


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _clean_tags(value: Any) -> tuple[str, ...] | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    seen: dict[str, None] = {}
    for tag in value:
        tag = str(tag).strip()
        if tag and tag not in seen:
            seen[tag] = None
    return tuple(seen) or None


@dataclass(frozen=True)
class CustomOverride:
    """
    One tier's overrides for one game.

    ``None`` (or ``TriState.UNSET`` for *lightgun*) means "not overridden".
    Values are normalized on construction: blank strings and empty tag
    lists collapse to unset, tags are de-duplicated keeping first order.
    """

    custom_name: str | None = None
    description: str | None = None
    video_link: str | None = None
    tags: tuple[str, ...] | None = None
    genre: str | None = None
    year: int | None = None
    lightgun: TriState = TriState.UNSET
    platform: str | None = None
    emulator: str | None = None
    gpu: str | None = None
    last_modified: str | None = None

    def __post_init__(self) -> None:
        for name in ("custom_name", "description", "video_link", "genre", "platform", "emulator", "last_modified"):
            object.__setattr__(self, name, _clean_text(getattr(self, name)))
        object.__setattr__(self, "tags", _clean_tags(self.tags))
        object.__setattr__(self, "year", parse_year(self.year))
        object.__setattr__(self, "lightgun", TriState.parse(self.lightgun))
        gpu = format_gpu_vendors(parse_gpu_vendors(_clean_text(self.gpu)))
        object.__setattr__(self, "gpu", gpu or None)

    # ── Field presence ──

    def is_set(self, name: str) -> bool:
        value = getattr(self, name)
        if name == "lightgun":
            return value is not TriState.UNSET
        return value is not None

    def set_fields(self) -> list[str]:
        return [name for name in OVERRIDE_FIELDS if self.is_set(name)]

    @property
    def is_empty(self) -> bool:
        return not self.set_fields()

    # ── Merging ──

    def merged_with(self, patch: CustomOverride, clear: Iterable[str] = ()) -> CustomOverride:
        """
        Shallow key-by-key merge: fields set in *patch* replace ours, the
        rest are kept. Fields named in *clear* are dropped first.
        """
        clear = list(clear)
        unknown = [name for name in clear if name not in OVERRIDE_FIELDS]
        if unknown:
            raise ValueError(f"Unknown override field(s): {', '.join(unknown)}")

        changes: dict[str, Any] = {}
        for name in clear:
            changes[name] = TriState.UNSET if name == "lightgun" else None
        for name in patch.set_fields():
            changes[name] = getattr(patch, name)
        return replace(self, **changes)

    # ── Serialization ──

    def to_dict(self) -> dict[str, Any]:
        """Set fields only; tags as a list, lightgun as a bool."""
        data: dict[str, Any] = {}
        for name in self.set_fields():
            value = getattr(self, name)
            if name == "tags":
                value = list(value)
            elif name == "lightgun":
                value = value.as_bool()
            data[name] = value
        if self.last_modified:
            data["last_modified"] = self.last_modified
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CustomOverride:
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _DICT_ALIASES.get(key, key)
            if name in OVERRIDE_FIELDS or name == "last_modified":
                kwargs[name] = value
        return cls(**kwargs)
