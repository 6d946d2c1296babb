"""Community metadata models (Metadata/<id>.json)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

_YEAR_RE = re.compile(r"\s*(-?\d+)")


class GpuStatus(StrEnum):
    """Per-vendor compatibility status."""

    OK = "OK"
    HAS_ISSUES = "HAS_ISSUES"

    @classmethod
    def parse(cls, raw: Any) -> GpuStatus | None:
        if not isinstance(raw, str):
            return None
        value = raw.strip().upper().replace(" ", "_")
        if value == cls.OK:
            return cls.OK
        if value == cls.HAS_ISSUES:
            return cls.HAS_ISSUES
        return None


@dataclass(frozen=True)
class GpuCompatibility:
    nvidia: GpuStatus | None = None
    amd: GpuStatus | None = None
    intel: GpuStatus | None = None

    @property
    def is_known(self) -> bool:
        return any(s is not None for s in (self.nvidia, self.amd, self.intel))

    def is_ok(self, vendor: str) -> bool:
        return getattr(self, vendor) is GpuStatus.OK


def parse_year(raw: Any) -> int | None:
    """Leading-integer year parse: ``"1999"``, ``1999`` and ``"1999 (JP)"`` all give 1999."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return raw
    m = _YEAR_RE.match(str(raw))
    return int(m.group(1)) if m else None


@dataclass(frozen=True)
class Metadata:
    """Read-only descriptive facts about a game."""

    game_name: str = ""
    genre: str = ""
    platform: str = ""
    release_year: str = ""
    gpu: GpuCompatibility = GpuCompatibility()
    nvidia_issues: str = ""
    amd_issues: str = ""
    intel_issues: str = ""
    general_issues: str = ""
    icon_name: str = ""

    @property
    def year(self) -> int | None:
        return parse_year(self.release_year)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Metadata:
        """Build from the raw metadata JSON object; unknown keys are ignored."""

        def text(key: str) -> str:
            value = data.get(key)
            return str(value).strip() if value is not None else ""

        return cls(
            game_name=text("game_name"),
            genre=text("game_genre"),
            platform=text("platform"),
            release_year=text("release_year"),
            gpu=GpuCompatibility(
                nvidia=GpuStatus.parse(data.get("nvidia")),
                amd=GpuStatus.parse(data.get("amd")),
                intel=GpuStatus.parse(data.get("intel")),
            ),
            nvidia_issues=text("nvidia_issues"),
            amd_issues=text("amd_issues"),
            intel_issues=text("intel_issues"),
            general_issues=text("general_issues"),
            icon_name=text("icon_name"),
        )
