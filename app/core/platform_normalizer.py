"""Platform normalizer: canonical platform labels from community metadata spellings."""

from __future__ import annotations

import json
import re
from pathlib import Path

from loguru import logger

# Ordered: the first matching rule wins, so more specific patterns come first
# (Type X2 before Type X).
_RULES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern), canonical)
    for pattern, canonical in (
        (r"adrenaline(amusements)?pcbased", "Adrenaline PC-Based"),
        (r"unis(pcbased)?|unisp?cbased", "UNIS PC Based"),
        (r"rawthrills(linux)?pcbased", "RAW Thrills Linux PC Based"),
        (r"namcosystem246", "Namco System 246"),
        (r"namcosystem256", "Namco System 256"),
        (r"taitotypes?x2", "Taito Type X2"),
        (r"taitotypex3?", "Taito Type X"),
        (r"lindbergh(yellow|red)?", "SEGA Lindbergh Yellow"),
        (r"nesicax?live", "Taito NESiCAxLive"),
        (r"ringedge2?", "SEGA RingEdge"),
        (r"exboard", "EX-BOARD"),
        (r"sega(nu|nu1)", "SEGA Nu"),
    )
)

_PC_BASED_RE = re.compile(r"\s*pc[- ]?based\s*", re.IGNORECASE)
_LINUX_PC_BASED_RE = re.compile(r"\s*linux\s*pc\s*based", re.IGNORECASE)
_SYSTEM_RE = re.compile(r"\s*system\s*([0-9]+)", re.IGNORECASE)
_SPACES_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def platform_key(value: str) -> str:
    """Lookup key: lowercase, alphanumerics only."""
    return _NON_ALNUM_RE.sub("", value.strip().lower())


class PlatformNormalizer:
    """
    Maps platform spellings to canonical labels.

    Resolution order: exact alias-key match (alias file plus the rule
    labels themselves) → ordered regex rules → light cleanup of the raw
    string. Pure; canonical outputs normalize to themselves.
    """

    def __init__(self, aliases: dict[str, str] | None = None) -> None:
        self._aliases: dict[str, str] = {platform_key(c): c for _, c in _RULES}
        self._aliases.update(aliases or {})

    @classmethod
    def from_file(cls, path: Path) -> PlatformNormalizer:
        """
        Load ``platformAliases.json``::

            {"aliases": [{"canonical": "SEGA RingEdge", "aliases": ["RingEdge 1"]}]}

        A missing or invalid file yields a rules-only normalizer.
        """
        if not path.exists():
            return cls()
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Platform aliases not loaded ({path.name}): {e}")
            return cls()
        return cls(cls.parse_aliases(data))

    @staticmethod
    def parse_aliases(data: object) -> dict[str, str]:
        """Flatten the alias document to ``{key: canonical}``."""
        table: dict[str, str] = {}
        items = data.get("aliases") if isinstance(data, dict) else None
        if not isinstance(items, list):
            return table
        for item in items:
            if not isinstance(item, dict):
                continue
            canonical = str(item.get("canonical") or "").strip()
            if not canonical:
                continue
            key = platform_key(canonical)
            if key:
                table[key] = canonical
            aliases = item.get("aliases")
            for alias in aliases if isinstance(aliases, list) else ():
                key = platform_key(str(alias))
                if key:
                    table[key] = canonical
        return table

    @property
    def alias_count(self) -> int:
        return len(self._aliases)

    def normalize(self, platform: str) -> str:
        if not platform:
            return platform
        raw = platform.strip()
        key = platform_key(raw)

        canonical = self._aliases.get(key)
        if canonical:
            return canonical

        for pattern, label in _RULES:
            if pattern.search(key):
                return label

        cleaned = _PC_BASED_RE.sub(" PC Based", raw, count=1)
        cleaned = _LINUX_PC_BASED_RE.sub(" Linux PC Based", cleaned, count=1)
        cleaned = _SYSTEM_RE.sub(r" System \1", cleaned, count=1)
        return _SPACES_RE.sub(" ", cleaned).strip()
